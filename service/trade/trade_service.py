"""
거래 서비스

두 계정 간 보유품 + 현금 교환 제안의 생성과 상태 전이를 담당합니다.
pending → accepted | declined | cancelled | expired (모두 종료 상태)
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from config.economy import ROLL, TRADE
from exceptions import (
    AccountBannedError,
    AccountNotFoundError,
    InsufficientFundsError,
    StaleOfferError,
    TradeActorError,
    TradeNotFoundError,
    TradeNotPendingError,
    TradeValidationError,
)
from models.account import Account
from models.holding import Holding
from models.item import ItemDefinition
from models.repos.item_repo import get_items_by_ids
from models.repos.trade_repo import TradeBox, list_trades
from models.trade_offer import TradeOffer, TradeStatus
from service.inventory_service import count_copies, find_holding, load_holdings, store_holdings
from service.ownership_service import claim_ownership, release_ownership
from service.transaction import cas_update, run_transaction

logger = logging.getLogger(__name__)


def _split_offered(holdings: List[Holding], holding_ids: List[str]) -> Tuple[List[Holding], List[Holding]]:
    """(남는 보유품, 내보낼 보유품)으로 분리"""
    offered = set(holding_ids)
    kept = [h for h in holdings if h.id not in offered]
    moved = [h for h in holdings if h.id in offered]
    return kept, moved


def _matches_snapshot(holding: Optional[Holding], entry: Dict[str, Any]) -> bool:
    """제안 당시와 같은 아이템/시리얼/수량이고 거래 가능한지"""
    if holding is None or holding.do_not_trade:
        return False
    return (
        holding.item_id == entry["item_id"]
        and holding.serial_number == entry["serial_number"]
        and holding.amount == entry["amount"]
    )


class TradeService:
    """거래 비즈니스 로직"""

    # =========================================================================
    # 생성
    # =========================================================================

    @staticmethod
    async def create_trade(
        initiator_id: int,
        recipient_id: int,
        initiator_holding_ids: List[str],
        recipient_holding_ids: List[str],
        initiator_cash: int = 0,
        recipient_cash: int = 0,
        message: str = "",
    ) -> TradeOffer:
        """
        거래 제안 생성

        Args:
            initiator_id: 제안자 계정 ID
            recipient_id: 수신자 계정 ID
            initiator_holding_ids: 제안자가 내놓는 보유품 ID
            recipient_holding_ids: 수신자에게 요구하는 보유품 ID
            initiator_cash: 제안자가 내놓는 현금
            recipient_cash: 수신자에게 요구하는 현금
            message: 메시지

        Returns:
            생성된 TradeOffer (pending)

        Raises:
            TradeValidationError: 형식 오류 (빈 목록, 개수/현금/메시지 한도, 중복, 거래 불가 보유품)
            AccountNotFoundError: 계정 없음
            AccountBannedError: 제안자 정지
            InsufficientFundsError: 제안자 현금 부족
        """
        # Guard: 형식 검증
        if initiator_id == recipient_id:
            raise TradeValidationError("자기 자신과는 거래할 수 없습니다")
        if not initiator_holding_ids or not recipient_holding_ids:
            raise TradeValidationError("양쪽 모두 한 개 이상의 아이템을 제안해야 합니다")
        if (
            len(initiator_holding_ids) > TRADE.MAX_HOLDINGS_PER_SIDE
            or len(recipient_holding_ids) > TRADE.MAX_HOLDINGS_PER_SIDE
        ):
            raise TradeValidationError(f"한쪽당 최대 {TRADE.MAX_HOLDINGS_PER_SIDE}개까지 제안할 수 있습니다")
        if (
            len(set(initiator_holding_ids)) != len(initiator_holding_ids)
            or len(set(recipient_holding_ids)) != len(recipient_holding_ids)
        ):
            raise TradeValidationError("같은 보유품을 중복으로 제안할 수 없습니다")
        if not 0 <= initiator_cash <= TRADE.MAX_INITIATOR_CASH:
            raise TradeValidationError(f"제안 현금은 0~{TRADE.MAX_INITIATOR_CASH} 사이여야 합니다")
        if not 0 <= recipient_cash <= TRADE.MAX_RECIPIENT_CASH:
            raise TradeValidationError(f"요구 현금은 0~{TRADE.MAX_RECIPIENT_CASH} 사이여야 합니다")
        if len(message or "") > TRADE.MAX_MESSAGE_LENGTH:
            raise TradeValidationError(f"메시지는 {TRADE.MAX_MESSAGE_LENGTH}자 이하여야 합니다")

        initiator = await Account.get_or_none(id=initiator_id)
        if initiator is None:
            raise AccountNotFoundError(initiator_id)
        recipient = await Account.get_or_none(id=recipient_id)
        if recipient is None:
            raise AccountNotFoundError(recipient_id)
        if initiator.is_banned:
            raise AccountBannedError(initiator.id, initiator.ban_reason)
        if initiator.cash < initiator_cash:
            raise InsufficientFundsError(initiator_cash, initiator.cash)

        initiator_items = await TradeService._snapshot_holdings(initiator, initiator_holding_ids)
        recipient_items = await TradeService._snapshot_holdings(recipient, recipient_holding_ids)

        trade = await TradeOffer.create(
            initiator_id=initiator.id,
            recipient_id=recipient.id,
            initiator_items=initiator_items,
            recipient_items=recipient_items,
            initiator_cash=initiator_cash,
            recipient_cash=recipient_cash,
            message=message or "",
            expires_at=datetime.now(timezone.utc) + timedelta(hours=TRADE.OFFER_TTL_HOURS),
        )

        logger.info(
            f"Account {initiator.id} offered trade {trade.id} to {recipient.id} "
            f"({len(initiator_items)} items + {initiator_cash} for "
            f"{len(recipient_items)} items + {recipient_cash})"
        )
        return trade

    @staticmethod
    async def _snapshot_holdings(account: Account, holding_ids: List[str]) -> List[Dict]:
        """제안 보유품 검증 및 표시용 스냅샷 생성"""
        holdings = load_holdings(account)
        selected: List[Holding] = []
        for holding_id in holding_ids:
            holding = find_holding(holdings, holding_id)
            if holding is None:
                raise TradeValidationError(f"{account.username}님이 보유하지 않은 아이템입니다 ({holding_id})")
            if holding.do_not_trade:
                raise TradeValidationError(f"거래 금지로 표시된 아이템입니다 ({holding_id})")
            if holding.serial_number == ROLL.TREASURY_SERIAL:
                raise TradeValidationError(f"0번 시리얼은 거래할 수 없습니다 ({holding_id})")
            selected.append(holding)

        items = await get_items_by_ids([h.item_id for h in selected])
        snapshots = []
        for holding in selected:
            item = items.get(holding.item_id)
            snapshots.append({
                "holding_id": holding.id,
                "item_id": holding.item_id,
                "item_name": item.name if item else "",
                "item_value": int(item.value) if item else 0,
                "serial_number": holding.serial_number,
                "amount": holding.amount,
            })
        return snapshots

    # =========================================================================
    # 상태 전이
    # =========================================================================

    @staticmethod
    async def accept_trade(account_id: int, trade_id: int) -> TradeOffer:
        """
        거래 수락 (수신자 전용)

        양쪽 계정을 새로 읽어 현금과 보유품을 확인한 뒤 한 트랜잭션으로 교환합니다.
        어느 한쪽이라도 실패하면 아무것도 바뀌지 않습니다.

        Args:
            account_id: 수락하는 계정 ID
            trade_id: 거래 ID

        Returns:
            accepted 상태의 TradeOffer

        Raises:
            TradeNotFoundError: 거래 없음
            TradeActorError: 수신자가 아님
            TradeNotPendingError: 이미 종료된 거래 (만료 포함)
            InsufficientFundsError: 어느 한쪽 현금 부족
            StaleOfferError: 제안된 보유품이 없거나 제안 이후 바뀜
        """
        async def body(conn) -> TradeOffer:
            trade = await TradeOffer.get_or_none(id=trade_id, using_db=conn)
            if trade is None:
                raise TradeNotFoundError(trade_id)
            if trade.recipient_id != account_id:
                raise TradeActorError("수락")
            if not trade.is_pending:
                raise TradeNotPendingError(trade.id, trade.status.value)
            if trade.is_expired:
                raise TradeNotPendingError(trade.id, TradeStatus.EXPIRED.value)

            initiator = await Account.get_or_none(id=trade.initiator_id, using_db=conn)
            if initiator is None:
                raise AccountNotFoundError(trade.initiator_id)
            recipient = await Account.get_or_none(id=trade.recipient_id, using_db=conn)
            if recipient is None:
                raise AccountNotFoundError(trade.recipient_id)
            for party in (initiator, recipient):
                if party.is_banned:
                    raise AccountBannedError(party.id, party.ban_reason)

            # Guard: 현금
            if initiator.cash < trade.initiator_cash:
                raise InsufficientFundsError(trade.initiator_cash, initiator.cash)
            if recipient.cash < trade.recipient_cash:
                raise InsufficientFundsError(trade.recipient_cash, recipient.cash)

            # Guard: 제안 보유품이 제안 당시 스냅샷과 같은지
            initiator_ids = [entry["holding_id"] for entry in trade.initiator_items]
            recipient_ids = [entry["holding_id"] for entry in trade.recipient_items]
            initiator_holdings = load_holdings(initiator)
            recipient_holdings = load_holdings(recipient)
            offered_sides = (
                (initiator_holdings, trade.initiator_items),
                (recipient_holdings, trade.recipient_items),
            )
            for holdings, snapshots in offered_sides:
                for entry in snapshots:
                    if not _matches_snapshot(find_holding(holdings, entry["holding_id"]), entry):
                        raise StaleOfferError(trade.id)

            # 교환 (받은 보유품은 합치지 않고 그대로 추가)
            now = datetime.now(timezone.utc)
            initiator_kept, from_initiator = _split_offered(initiator_holdings, initiator_ids)
            recipient_kept, from_recipient = _split_offered(recipient_holdings, recipient_ids)
            for holding in from_initiator + from_recipient:
                holding.acquired_at = now.isoformat()

            new_initiator_holdings = initiator_kept + from_recipient
            new_recipient_holdings = recipient_kept + from_initiator
            store_holdings(initiator, new_initiator_holdings)
            store_holdings(recipient, new_recipient_holdings)

            initiator.cash = initiator.cash - trade.initiator_cash + trade.recipient_cash
            recipient.cash = recipient.cash - trade.recipient_cash + trade.initiator_cash

            await cas_update(initiator, conn, "inventory", "cash")
            await cas_update(recipient, conn, "inventory", "cash")

            await TradeService._transfer_ownership(
                conn,
                moved_item_ids={h.item_id for h in from_initiator + from_recipient},
                parties=((initiator.id, new_initiator_holdings), (recipient.id, new_recipient_holdings)),
            )

            trade.status = TradeStatus.ACCEPTED
            trade.completed_at = now
            trade.updated_at = now
            await cas_update(trade, conn, "status", "completed_at", "updated_at")
            return trade

        trade = await run_transaction(body)

        logger.info(
            f"Trade {trade.id} accepted: {trade.initiator_id} <-> {trade.recipient_id} "
            f"(cash {trade.initiator_cash} / {trade.recipient_cash})"
        )
        return trade

    @staticmethod
    async def _transfer_ownership(conn, moved_item_ids, parties) -> None:
        """교환 후 각 계정의 보유 여부에 맞춰 소유 마커 갱신"""
        for item_id in moved_item_ids:
            item = await ItemDefinition.get_or_none(id=item_id, using_db=conn)
            if item is None or not item.is_serialized:
                continue

            changed = False
            for party_id, holdings in parties:
                if count_copies(holdings, item_id) > 0:
                    changed |= await claim_ownership(conn, item, party_id)
                else:
                    changed |= await release_ownership(conn, item, party_id)

            if changed:
                await cas_update(item, conn, "total_owners")

    @staticmethod
    async def decline_trade(account_id: int, trade_id: int) -> TradeOffer:
        """거래 거절 (수신자 전용, 보유품/현금 이동 없음)"""
        trade = await TradeService._close_trade(
            trade_id, account_id, actor_field="recipient_id", action="거절", status=TradeStatus.DECLINED
        )
        logger.info(f"Account {account_id} declined trade {trade.id}")
        return trade

    @staticmethod
    async def cancel_trade(account_id: int, trade_id: int) -> TradeOffer:
        """거래 취소 (제안자 전용, 보유품/현금 이동 없음)"""
        trade = await TradeService._close_trade(
            trade_id, account_id, actor_field="initiator_id", action="취소", status=TradeStatus.CANCELLED
        )
        logger.info(f"Account {account_id} cancelled trade {trade.id}")
        return trade

    @staticmethod
    async def _close_trade(
        trade_id: int,
        account_id: int,
        actor_field: str,
        action: str,
        status: TradeStatus,
    ) -> TradeOffer:
        async def body(conn) -> TradeOffer:
            trade = await TradeOffer.get_or_none(id=trade_id, using_db=conn)
            if trade is None:
                raise TradeNotFoundError(trade_id)
            if getattr(trade, actor_field) != account_id:
                raise TradeActorError(action)
            if not trade.is_pending:
                raise TradeNotPendingError(trade.id, trade.status.value)

            trade.status = status
            trade.updated_at = datetime.now(timezone.utc)
            await cas_update(trade, conn, "status", "updated_at")
            return trade

        return await run_transaction(body)

    # =========================================================================
    # 만료 처리 (Cron)
    # =========================================================================

    @staticmethod
    async def expire_pending_trades() -> int:
        """
        만료된 대기 거래 처리 (크론잡용)

        Returns:
            expired로 바뀐 거래 수
        """
        now = datetime.now(timezone.utc)
        candidates = await TradeOffer.filter(
            status=TradeStatus.PENDING,
            expires_at__lt=now
        ).values_list("id", flat=True)

        count = 0
        for trade_id in candidates:
            async def body(conn, trade_id=trade_id) -> bool:
                trade = await TradeOffer.get_or_none(id=trade_id, using_db=conn)
                # 그 사이 수락/거절된 거래는 건드리지 않음
                if trade is None or not trade.is_expired:
                    return False

                trade.status = TradeStatus.EXPIRED
                trade.updated_at = datetime.now(timezone.utc)
                await cas_update(trade, conn, "status", "updated_at")
                return True

            if await run_transaction(body):
                count += 1

        if count > 0:
            logger.info(f"Expired {count} pending trades")

        return count

    # =========================================================================
    # 조회 (Query)
    # =========================================================================

    @staticmethod
    async def get_trades(account_id: int, box: TradeBox) -> List[TradeOffer]:
        """거래함 목록"""
        return await list_trades(account_id, box)
