"""
뽑기 목록 캐시 테스트
"""
import asyncio
import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from models.item import StockMode
from models.repos.catalog_cache import CatalogCache, CatalogItem


def _item(item_id, value=100, stock_mode=StockMode.INFINITE, remaining=None, ends_at=None, off_sale=False):
    return SimpleNamespace(
        id=item_id,
        name=f"item-{item_id}",
        value=value,
        rarity="COMMON",
        stock_mode=stock_mode,
        image_url="",
        total_stock=remaining,
        remaining_stock=remaining,
        timer_ends_at=ends_at,
        off_sale=off_sale,
    )


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class CountingFetcher:
    def __init__(self, items, delay: float = 0.0):
        self.items = items
        self.delay = delay
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return list(self.items)


@pytest.fixture
def clock():
    return FakeClock()


class TestCatalogCacheFreshness:
    """캐시 유효 시간 테스트"""

    async def test_second_call_within_ttl_uses_cache(self, tmp_path, clock):
        fetcher = CountingFetcher([_item(1), _item(2)])
        cache = CatalogCache(fetcher, tmp_path / "c.json", ttl_seconds=300, clock=clock)

        first = await cache.get_rollable_items()
        clock.now += 299
        second = await cache.get_rollable_items()

        assert fetcher.calls == 1
        assert [i.id for i in first] == [i.id for i in second] == [1, 2]

    async def test_refetch_after_ttl(self, tmp_path, clock):
        fetcher = CountingFetcher([_item(1)])
        cache = CatalogCache(fetcher, tmp_path / "c.json", ttl_seconds=300, clock=clock)

        await cache.get_rollable_items()
        clock.now += 301
        await cache.get_rollable_items()

        assert fetcher.calls == 2

    async def test_empty_snapshot_is_not_cached(self, tmp_path, clock):
        fetcher = CountingFetcher([])
        cache = CatalogCache(fetcher, tmp_path / "c.json", ttl_seconds=300, clock=clock)

        assert await cache.get_rollable_items() == []
        assert await cache.get_rollable_items() == []
        assert fetcher.calls == 2


class TestCatalogCacheSingleFlight:
    """동시 조회 병합 테스트"""

    async def test_concurrent_callers_share_one_fetch(self, tmp_path, clock):
        fetcher = CountingFetcher([_item(1), _item(2), _item(3)], delay=0.01)
        cache = CatalogCache(fetcher, tmp_path / "c.json", ttl_seconds=300, clock=clock)

        results = await asyncio.gather(*(cache.get_rollable_items() for _ in range(10)))

        assert fetcher.calls == 1
        assert all(len(result) == 3 for result in results)

    async def test_fetch_failure_propagates_and_allows_retry(self, tmp_path, clock):
        calls = {"count": 0}

        async def flaky_fetcher():
            calls["count"] += 1
            if calls["count"] == 1:
                raise RuntimeError("store unavailable")
            return [_item(1)]

        cache = CatalogCache(flaky_fetcher, tmp_path / "c.json", ttl_seconds=300, clock=clock)

        with pytest.raises(RuntimeError):
            await cache.get_rollable_items()

        items = await cache.get_rollable_items()
        assert [i.id for i in items] == [1]


class TestCatalogCacheFiltering:
    """뽑기 가능 여부 필터 테스트"""

    async def test_unrollable_items_filtered(self, tmp_path, clock):
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        future = datetime.now(timezone.utc) + timedelta(hours=1)
        fetcher = CountingFetcher([
            _item(1),
            _item(2, stock_mode=StockMode.LIMITED, remaining=0),
            _item(3, stock_mode=StockMode.LIMITED, remaining=5),
            _item(4, stock_mode=StockMode.TIMER, ends_at=past),
            _item(5, stock_mode=StockMode.TIMER, ends_at=future),
            _item(6, off_sale=True),
        ])
        cache = CatalogCache(fetcher, tmp_path / "c.json", ttl_seconds=300, clock=clock)

        items = await cache.get_rollable_items()

        assert [i.id for i in items] == [1, 3, 5]

    async def test_remove_item(self, tmp_path, clock):
        fetcher = CountingFetcher([_item(1), _item(2)])
        cache = CatalogCache(fetcher, tmp_path / "c.json", ttl_seconds=300, clock=clock)
        await cache.get_rollable_items()

        cache.remove_item(2)

        items = await cache.get_rollable_items()
        assert [i.id for i in items] == [1]
        assert fetcher.calls == 1


class TestCatalogCachePersistence:
    """로컬 파일 저장/복원 테스트"""

    async def test_snapshot_written_to_file(self, tmp_path, clock):
        path = tmp_path / "c.json"
        cache = CatalogCache(CountingFetcher([_item(1)]), path, ttl_seconds=300, clock=clock)

        await cache.get_rollable_items()

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["timestamp"] == clock.now
        assert data["items"][0]["id"] == 1

    async def test_fresh_file_reused_after_restart(self, tmp_path, clock):
        path = tmp_path / "c.json"
        await CatalogCache(CountingFetcher([_item(1)]), path, ttl_seconds=300, clock=clock).get_rollable_items()

        clock.now += 60
        fetcher = CountingFetcher([_item(9)])
        restarted = CatalogCache(fetcher, path, ttl_seconds=300, clock=clock)
        items = await restarted.get_rollable_items()

        assert fetcher.calls == 0
        assert [i.id for i in items] == [1]

    async def test_stale_file_ignored(self, tmp_path, clock):
        path = tmp_path / "c.json"
        await CatalogCache(CountingFetcher([_item(1)]), path, ttl_seconds=300, clock=clock).get_rollable_items()

        clock.now += 600
        fetcher = CountingFetcher([_item(9)])
        items = await CatalogCache(fetcher, path, ttl_seconds=300, clock=clock).get_rollable_items()

        assert fetcher.calls == 1
        assert [i.id for i in items] == [9]

    async def test_corrupt_file_is_ignored(self, tmp_path, clock):
        path = tmp_path / "c.json"
        path.write_text("{not json", encoding="utf-8")
        fetcher = CountingFetcher([_item(1)])

        items = await CatalogCache(fetcher, path, ttl_seconds=300, clock=clock).get_rollable_items()

        assert [i.id for i in items] == [1]


class TestCatalogItem:
    """스냅샷 변환 테스트"""

    def test_round_trip_dict(self):
        item = CatalogItem.from_model(_item(1, stock_mode=StockMode.LIMITED, remaining=3))
        assert CatalogItem.from_dict(item.to_dict()) == item
        assert item.stock_mode == "limited"
