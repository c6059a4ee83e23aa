"""
뽑기 서비스

판매 중인 아이템 중 하나를 가치의 역수 가중치로 골라 지급합니다.
- limited: 남은 재고에서 시리얼 발급 (1번부터, 0번은 금고 전용)
- timer: 종료 시각 전까지 next_serial 순서로 발급
- infinite: 시리얼 없이 기존 스택에 합침
자동 판매 설정된 등급이면 인벤토리에 넣지 않고 바로 80/20으로 판매합니다.
"""
import logging
import random
from dataclasses import dataclass
from typing import Optional, Sequence

from tortoise.expressions import F

from config.economy import ROLL
from config.rarity import is_auto_sellable
from exceptions import (
    AccountBannedError,
    AccountNotFoundError,
    ItemNotFoundError,
    NoItemsAvailableError,
    OffSaleConflictError,
    OutOfStockError,
    TimerExpiredError,
    TreasuryUnavailableError,
)
from models.account import Account
from models.global_roll import GlobalRoll
from models.item import ItemDefinition, StockMode
from models.repos.catalog_cache import CatalogItem, catalog_cache
from models.repos.treasury_cache import treasury_cache
from service.inventory_service import add_copy, load_holdings, store_holdings
from service.liquidation_service import split_sale_value
from service.ownership_service import claim_ownership
from service.transaction import cas_update, run_transaction

logger = logging.getLogger(__name__)


@dataclass
class RollResult:
    """뽑기 결과"""
    item: ItemDefinition
    serial_number: Optional[int] = None
    auto_sold: bool = False
    player_earned: Optional[int] = None


def select_weighted_item(candidates: Sequence[CatalogItem], rng=random) -> CatalogItem:
    """
    가치의 역수 가중치로 아이템 선택

    가치가 10배 높은 아이템은 10배 덜 나옵니다.
    부동소수점 오차로 끝까지 선택되지 않으면 첫 번째 후보를 반환합니다.
    """
    weights = [1.0 / candidate.value for candidate in candidates]
    target = rng.random() * sum(weights)

    cumulative = 0.0
    for candidate, weight in zip(candidates, weights):
        cumulative += weight
        if target < cumulative:
            return candidate
    return candidates[0]


class RollService:
    """뽑기 비즈니스 로직"""

    rng = random

    @staticmethod
    async def perform_roll(account_id: int) -> RollResult:
        """
        뽑기 1회

        Args:
            account_id: 뽑는 계정 ID

        Returns:
            RollResult

        Raises:
            NoItemsAvailableError: 뽑을 아이템 없음
            OutOfStockError: 선택된 한정 아이템 재고 소진
            TimerExpiredError: 선택된 기간 한정 아이템 판매 종료
            OffSaleConflictError: 선택된 아이템이 판매 중지됨
            TreasuryUnavailableError: 자동 판매 중 금고 계정 없음
            AccountBannedError: 정지된 계정
        """
        candidates = await catalog_cache.get_rollable_items()
        if not candidates:
            raise NoItemsAvailableError()

        selected = select_weighted_item(candidates, RollService.rng)
        treasury_id = await treasury_cache.get_treasury_account_id()

        sold_out = False

        async def body(conn) -> RollResult:
            nonlocal sold_out

            item = await ItemDefinition.get_or_none(id=selected.id, using_db=conn)
            if item is None:
                raise ItemNotFoundError(selected.id)
            if item.off_sale:
                raise OffSaleConflictError(item.id)
            if item.is_timer_expired():
                raise TimerExpiredError(item.id)

            account = await Account.get_or_none(id=account_id, using_db=conn)
            if account is None:
                raise AccountNotFoundError(account_id)
            if account.is_banned:
                raise AccountBannedError(account.id, account.ban_reason)

            # 재고 처리 + 시리얼 발급
            serial_number = None
            sold_out = False
            if item.stock_mode == StockMode.LIMITED:
                remaining = item.remaining_stock or 0
                if remaining <= 0:
                    raise OutOfStockError(item.id)
                serial_number = (item.total_stock or 0) - remaining + 1
                item.remaining_stock = remaining - 1
                sold_out = item.remaining_stock == 0
            elif item.stock_mode == StockMode.TIMER:
                serial_number = item.next_serial
                item.next_serial += 1

            if item.is_serialized:
                await claim_ownership(conn, item, account.id)
            else:
                item.total_owners += 1
            await cas_update(item, conn, "remaining_stock", "next_serial", "total_owners")

            account.roll_count += 1
            rarity = getattr(item.rarity, "value", item.rarity)
            auto_sell = is_auto_sellable(item.rarity) and rarity in (account.auto_sell_rarities or [])

            if not auto_sell:
                holdings = load_holdings(account)
                add_copy(holdings, item.id, serial_number)
                store_holdings(account, holdings)
                await cas_update(account, conn, "inventory", "roll_count")
                return RollResult(item=item, serial_number=serial_number)

            # 자동 판매
            if treasury_id is None:
                raise TreasuryUnavailableError()
            player_share, treasury_share = split_sale_value(int(item.value))

            account.cash += player_share
            if treasury_id == account.id:
                account.cash += treasury_share
            else:
                treasury = await Account.get_or_none(id=treasury_id, using_db=conn)
                if treasury is None:
                    raise TreasuryUnavailableError()
                treasury.cash += treasury_share
                await cas_update(treasury, conn, "cash")
            await cas_update(account, conn, "cash", "roll_count")

            return RollResult(
                item=item,
                serial_number=serial_number,
                auto_sold=True,
                player_earned=player_share,
            )

        try:
            result = await run_transaction(body)
        except TimerExpiredError:
            catalog_cache.remove_item(selected.id)
            await RollService._close_expired_item(selected.id)
            raise
        except (OutOfStockError, OffSaleConflictError, ItemNotFoundError):
            catalog_cache.remove_item(selected.id)
            raise

        # 마지막 재고를 가져갔으면 다음 갱신 전까지 후보에서 제외
        if sold_out:
            catalog_cache.remove_item(selected.id)

        logger.info(
            f"Account {account_id} rolled item {result.item.id} "
            f"(serial={result.serial_number}, auto_sold={result.auto_sold})"
        )

        # Post: 고가 뽑기 기록 (실패해도 뽑기 결과에는 영향 없음)
        if result.item.value >= ROLL.GLOBAL_ROLL_THRESHOLD:
            await RollService._record_global_roll(account_id, result)

        return result

    @staticmethod
    async def _close_expired_item(item_id: int) -> None:
        """판매 기간이 끝난 아이템을 판매 중지로 표시"""
        try:
            await ItemDefinition.filter(id=item_id, off_sale=False).update(
                off_sale=True, version=F("version") + 1
            )
            logger.info(f"Item {item_id} timer ended, marked off sale")
        except Exception as e:
            logger.error(f"Failed to mark expired item {item_id} off sale: {e}", exc_info=True)

    @staticmethod
    async def _record_global_roll(account_id: int, result: RollResult) -> None:
        try:
            account = await Account.get_or_none(id=account_id)
            item = result.item
            await GlobalRoll.create(
                username=account.username if account else str(account_id),
                item_id=item.id,
                item_name=item.name,
                item_image_url=item.image_url or "",
                item_value=item.value,
                rarity=item.rarity,
                serial_number=result.serial_number,
            )
        except Exception as e:
            logger.error(f"Failed to record global roll for item {result.item.id}: {e}", exc_info=True)
