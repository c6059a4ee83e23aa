"""
뽑기 서비스 테스트
"""
import asyncio
import random
from collections import Counter
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from exceptions import (
    AccountBannedError,
    NoItemsAvailableError,
    OffSaleConflictError,
    OutOfStockError,
    TimerExpiredError,
    TreasuryUnavailableError,
)
from models.account import Account, BanStatus
from models.global_roll import GlobalRoll
from models.item import ItemDefinition, StockMode
from models.ownership_marker import OwnershipMarker
from models.repos.catalog_cache import CatalogItem, catalog_cache
from service.roll_service import RollService, select_weighted_item


def _candidate(item_id: int, value: int) -> CatalogItem:
    return CatalogItem(id=item_id, name=f"item-{item_id}", value=value, rarity="COMMON", stock_mode="infinite")


class TestSelectWeightedItem:
    """가치 역수 가중치 선택 테스트"""

    def test_ten_times_value_is_ten_times_rarer(self):
        rng = random.Random(1234)
        cheap, pricey = _candidate(1, 100), _candidate(2, 1_000)

        counts = Counter(select_weighted_item([cheap, pricey], rng).id for _ in range(20_000))

        ratio = counts[1] / counts[2]
        assert 9.0 <= ratio <= 11.0

    def test_boundary_draw_falls_back_to_first(self):
        candidates = [_candidate(1, 100), _candidate(2, 200)]
        rng = SimpleNamespace(random=lambda: 1.0)

        assert select_weighted_item(candidates, rng).id == 1

    def test_low_draw_picks_first(self):
        candidates = [_candidate(1, 100), _candidate(2, 200)]
        rng = SimpleNamespace(random=lambda: 0.0)

        assert select_weighted_item(candidates, rng).id == 1


class TestLimitedStock:
    """한정 재고 테스트"""

    async def test_serials_unique_until_sold_out(self, treasury, account_factory, item_factory):
        player = await account_factory("Player")
        item = await item_factory("한정판", value=100, stock_mode=StockMode.LIMITED, stock=10)

        results = [await RollService.perform_roll(player.id) for _ in range(10)]

        assert sorted(r.serial_number for r in results) == list(range(1, 11))
        stored = await ItemDefinition.get(id=item.id)
        assert stored.remaining_stock == 0
        assert stored.total_owners == 1
        assert await OwnershipMarker.filter(item_id=item.id, account_id=player.id).count() == 1

        with pytest.raises(NoItemsAvailableError):
            await RollService.perform_roll(player.id)

    async def test_stale_snapshot_hits_out_of_stock(self, treasury, account_factory, item_factory):
        player = await account_factory("Player")
        item = await item_factory("한정판", value=100, stock_mode=StockMode.LIMITED, stock=1)
        await catalog_cache.get_rollable_items()
        await ItemDefinition.filter(id=item.id).update(remaining_stock=0)

        with pytest.raises(OutOfStockError):
            await RollService.perform_roll(player.id)

        assert catalog_cache._items == []
        assert (await Account.get(id=player.id)).inventory == []

    async def test_concurrent_rolls_never_oversell(self, treasury, account_factory, item_factory):
        players = [await account_factory(f"Player{i}") for i in range(3)]
        item = await item_factory("한정판", value=100, stock_mode=StockMode.LIMITED, stock=2)

        results = await asyncio.gather(
            *(RollService.perform_roll(p.id) for p in players),
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, Exception)]
        failed = [r for r in results if isinstance(r, Exception)]
        assert sorted(r.serial_number for r in succeeded) == [1, 2]
        assert len(failed) == 1
        assert isinstance(failed[0], (OutOfStockError, NoItemsAvailableError))
        assert (await ItemDefinition.get(id=item.id)).remaining_stock == 0


class TestInfiniteItems:
    """무제한 아이템 테스트"""

    async def test_unserialized_copies_stack(self, treasury, account_factory, item_factory):
        player = await account_factory("Player")
        item = await item_factory("돌멩이", value=100)

        await RollService.perform_roll(player.id)
        result = await RollService.perform_roll(player.id)

        assert result.serial_number is None
        stored = await Account.get(id=player.id)
        assert len(stored.inventory) == 1
        assert stored.inventory[0]["amount"] == 2
        assert stored.roll_count == 2
        assert (await ItemDefinition.get(id=item.id)).total_owners == 2


class TestTimerItems:
    """기간 한정 아이템 테스트"""

    async def test_timer_serials_increment(self, treasury, account_factory, item_factory):
        player = await account_factory("Player")
        await item_factory(
            "이벤트", value=100, stock_mode=StockMode.TIMER,
            timer_ends_at=datetime.now(timezone.utc) + timedelta(hours=1),
        )

        first = await RollService.perform_roll(player.id)
        second = await RollService.perform_roll(player.id)

        assert (first.serial_number, second.serial_number) == (1, 2)

    async def test_expired_timer_marks_off_sale(self, treasury, account_factory, item_factory):
        player = await account_factory("Player")
        item = await item_factory(
            "이벤트", value=100, stock_mode=StockMode.TIMER,
            timer_ends_at=datetime.now(timezone.utc) + timedelta(hours=1),
        )
        await catalog_cache.get_rollable_items()
        await ItemDefinition.filter(id=item.id).update(
            timer_ends_at=datetime.now(timezone.utc) - timedelta(seconds=1)
        )

        with pytest.raises(TimerExpiredError):
            await RollService.perform_roll(player.id)

        assert (await ItemDefinition.get(id=item.id)).off_sale is True
        assert catalog_cache._items == []


class TestOffSale:
    """판매 중지 테스트"""

    async def test_off_sale_after_snapshot(self, treasury, account_factory, item_factory):
        player = await account_factory("Player")
        item = await item_factory("단종", value=100)
        await catalog_cache.get_rollable_items()
        await ItemDefinition.filter(id=item.id).update(off_sale=True)

        with pytest.raises(OffSaleConflictError):
            await RollService.perform_roll(player.id)

    async def test_no_items(self, treasury, account_factory):
        player = await account_factory("Player")

        with pytest.raises(NoItemsAvailableError):
            await RollService.perform_roll(player.id)


class TestAutoSell:
    """자동 판매 테스트"""

    async def test_auto_sell_splits_value(self, treasury, account_factory, item_factory):
        player = await account_factory("Player", cash=0, auto_sell_rarities=["COMMON"])
        await item_factory("잡템", value=1_001)

        result = await RollService.perform_roll(player.id)

        assert result.auto_sold is True
        assert result.player_earned == 800
        stored = await Account.get(id=player.id)
        assert stored.cash == 800
        assert stored.inventory == []
        assert stored.roll_count == 1
        assert (await Account.get(id=treasury.id)).cash == 200

    async def test_protected_rarity_never_auto_sold(self, treasury, account_factory, item_factory):
        player = await account_factory("Player", cash=0, auto_sell_rarities=["MYTHIC"])
        item = await item_factory("전설", value=3_000_000)

        result = await RollService.perform_roll(player.id)

        assert result.auto_sold is False
        assert (await Account.get(id=player.id)).cash == 0
        record = await GlobalRoll.get(item_id=item.id)
        assert record.username == "Player"

    async def test_missing_treasury_fails_without_changes(self, account_factory, item_factory, monkeypatch):
        player = await account_factory("Player", cash=0, auto_sell_rarities=["COMMON"])
        item = await item_factory("잡템", value=100)
        monkeypatch.setattr(
            "service.roll_service.treasury_cache.get_treasury_account_id",
            AsyncMock(return_value=None),
        )

        with pytest.raises(TreasuryUnavailableError):
            await RollService.perform_roll(player.id)

        assert (await Account.get(id=player.id)).roll_count == 0
        assert (await ItemDefinition.get(id=item.id)).total_owners == 0

    async def test_treasury_rolling_keeps_full_value(self, treasury, item_factory):
        treasury.auto_sell_rarities = ["COMMON"]
        await treasury.save()
        await item_factory("잡템", value=1_000)

        await RollService.perform_roll(treasury.id)

        assert (await Account.get(id=treasury.id)).cash == 1_000


class TestBannedAccount:
    """정지 계정 테스트"""

    async def test_banned_account_cannot_roll(self, treasury, account_factory, item_factory):
        player = await account_factory("Player", ban_status=BanStatus.PERMANENT)
        await item_factory("돌멩이", value=100)

        with pytest.raises(AccountBannedError):
            await RollService.perform_roll(player.id)
