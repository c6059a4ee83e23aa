"""
판매(청산) 서비스

보유품을 아이템 가치로 팔아 현금으로 바꿉니다.
판매 대금은 플레이어 80%, 금고 계정 20%로 나눕니다 (각각 내림, 나머지는 소멸).
"""
import logging
from dataclasses import dataclass
from typing import List, Tuple

from config.economy import LIQUIDATION
from exceptions import (
    AccountBannedError,
    AccountNotFoundError,
    InvalidQuantityError,
    InvalidRequestError,
    InventoryMismatchError,
    TreasuryUnavailableError,
)
from models.account import Account
from models.item import ItemDefinition
from models.repos.treasury_cache import treasury_cache
from service.inventory_service import count_copies, find_holding, load_holdings, remove_units, store_holdings
from service.ownership_service import release_ownership
from service.transaction import cas_update, run_transaction

logger = logging.getLogger(__name__)


def split_sale_value(total_value: int) -> Tuple[int, int]:
    """
    판매 대금 분배

    Returns:
        (플레이어 몫, 금고 몫)
    """
    player_share = total_value * LIQUIDATION.PLAYER_SHARE_PERCENT // 100
    treasury_share = total_value * LIQUIDATION.TREASURY_SHARE_PERCENT // 100
    return player_share, treasury_share


@dataclass
class SellResult:
    """판매 결과"""
    sold_count: int
    player_earned: int
    admin_earned: int


class LiquidationService:
    """판매 비즈니스 로직"""

    @staticmethod
    async def sell_holdings(
        account_id: int,
        holding_ids: List[str],
        unit_value: int,
        quantity: int,
    ) -> SellResult:
        """
        보유품 판매

        holding_ids는 1개 단위로 나열합니다. 스택(amount > 1)에서 여러 개를 팔면
        같은 ID를 그 수만큼 반복하며, 앞에서부터 quantity개만 사용합니다.

        Args:
            account_id: 판매자 계정 ID
            holding_ids: 판매할 보유품 ID 목록 (1개 단위)
            unit_value: 1개당 판매 가격
            quantity: 판매 수량

        Returns:
            SellResult

        Raises:
            InvalidQuantityError: 수량이 0 이하이거나 holding_ids보다 많음
            TreasuryUnavailableError: 금고 계정 없음
            InventoryMismatchError: 실제 차감 가능한 수량이 요청과 다름
            AccountBannedError: 정지된 계정
        """
        # Guard: 입력 검증
        if quantity <= 0:
            raise InvalidQuantityError(quantity)
        if quantity > len(holding_ids):
            raise InvalidQuantityError(quantity, len(holding_ids))
        if unit_value < 0:
            raise InvalidRequestError("판매 가격은 0 이상이어야 합니다.")

        treasury_id = await treasury_cache.get_treasury_account_id()
        if treasury_id is None:
            raise TreasuryUnavailableError()

        targets = list(holding_ids[:quantity])
        total_value = unit_value * quantity
        player_share, treasury_share = split_sale_value(total_value)

        async def body(conn) -> SellResult:
            account = await Account.get_or_none(id=account_id, using_db=conn)
            if account is None:
                raise AccountNotFoundError(account_id)
            if account.is_banned:
                raise AccountBannedError(account.id, account.ban_reason)

            holdings = load_holdings(account)
            target_items = {
                holding.item_id
                for holding in (find_holding(holdings, holding_id) for holding_id in targets)
                if holding is not None
            }
            if len(target_items) > 1:
                raise InvalidRequestError("한 번에 한 종류의 아이템만 판매할 수 있습니다.")

            removed = remove_units(holdings, targets)
            sold = sum(removed.values())
            if sold != quantity:
                raise InventoryMismatchError(quantity, sold)

            if treasury_id == account.id:
                treasury = account
            else:
                treasury = await Account.get_or_none(id=treasury_id, using_db=conn)
                if treasury is None:
                    raise TreasuryUnavailableError()

            account.cash += player_share
            treasury.cash += treasury_share

            store_holdings(account, holdings)
            await cas_update(account, conn, "inventory", "cash")
            if treasury is not account:
                await cas_update(treasury, conn, "cash")

            # 소유자 수 갱신
            for item_id, units in removed.items():
                item = await ItemDefinition.get_or_none(id=item_id, using_db=conn)
                if item is None:
                    continue

                # 한정/기간 한정은 고유 소유자 수, 무제한은 보유 수량 기준
                if item.is_serialized:
                    if count_copies(holdings, item_id) > 0:
                        continue
                    if await release_ownership(conn, item, account.id):
                        await cas_update(item, conn, "total_owners")
                else:
                    item.total_owners = max(0, item.total_owners - units)
                    await cas_update(item, conn, "total_owners")

            return SellResult(
                sold_count=sold,
                player_earned=player_share,
                admin_earned=treasury_share,
            )

        result = await run_transaction(body)

        logger.info(
            f"Account {account_id} sold {result.sold_count} unit(s) "
            f"for {total_value} (player {result.player_earned}, treasury {result.admin_earned})"
        )
        return result
