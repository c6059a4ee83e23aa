"""
뽑기 목록 캐시

뽑기 1회마다 전체 아이템을 읽지 않도록 판매 중인 아이템 스냅샷을 보관합니다.
- 5분 이내의 비어있지 않은 스냅샷은 그대로 반환
- 동시에 여러 요청이 와도 DB 조회는 한 번만 수행 (진행 중인 조회를 공유)
- 조회 결과는 로컬 파일에도 저장해 재시작 직후에도 재사용
"""
import asyncio
import json
import logging
import os
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from config.economy import CACHE
from models.item import ItemDefinition, StockMode
from models.repos.item_repo import get_rollable_items

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogItem:
    """캐시에 보관하는 아이템 스냅샷"""
    id: int
    name: str
    value: int
    rarity: str
    stock_mode: str
    image_url: str = ""
    total_stock: Optional[int] = None
    remaining_stock: Optional[int] = None
    timer_ends_at: Optional[str] = None
    off_sale: bool = False

    @classmethod
    def from_model(cls, item: ItemDefinition) -> "CatalogItem":
        return cls(
            id=item.id,
            name=item.name,
            value=int(item.value),
            rarity=str(getattr(item.rarity, "value", item.rarity)),
            stock_mode=str(getattr(item.stock_mode, "value", item.stock_mode)),
            image_url=item.image_url or "",
            total_stock=item.total_stock,
            remaining_stock=item.remaining_stock,
            timer_ends_at=item.timer_ends_at.isoformat() if item.timer_ends_at else None,
            off_sale=bool(item.off_sale),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "CatalogItem":
        return cls(**data)

    def to_dict(self) -> dict:
        return asdict(self)

    def is_rollable(self, now: Optional[datetime] = None) -> bool:
        """판매 중이고 재고(또는 기간)가 남아 있는지"""
        if self.off_sale:
            return False
        if self.stock_mode == StockMode.INFINITE.value:
            return True
        if self.stock_mode == StockMode.LIMITED.value:
            return (self.remaining_stock or 0) > 0
        if self.stock_mode == StockMode.TIMER.value:
            if self.timer_ends_at is None:
                return False
            ends_at = datetime.fromisoformat(self.timer_ends_at)
            return ends_at > (now or datetime.now(timezone.utc))
        return False


class CatalogCache:
    """뽑기 가능 아이템 캐시"""

    def __init__(
        self,
        fetcher: Callable[[], Awaitable[List[ItemDefinition]]] = get_rollable_items,
        storage_path: Optional[Path] = None,
        ttl_seconds: float = CACHE.CATALOG_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self._fetcher = fetcher
        self._storage_path = storage_path
        self._ttl = ttl_seconds
        self._clock = clock

        self._items: List[CatalogItem] = []
        self._last_fetch: float = 0.0
        self._initialized = False
        self._storage_checked = False
        self._fetch_task: Optional[asyncio.Task] = None

    @property
    def storage_path(self) -> Path:
        if self._storage_path is None:
            self._storage_path = Path(os.getenv("CATALOG_CACHE_PATH") or CACHE.CATALOG_CACHE_FILE)
        return self._storage_path

    # =========================================================================
    # 조회
    # =========================================================================

    async def get_rollable_items(self) -> List[CatalogItem]:
        """
        뽑기 가능 아이템 목록

        Returns:
            CatalogItem 목록 (캐시가 유효하면 DB 조회 없음)
        """
        if not self._storage_checked:
            self._storage_checked = True
            self._load_from_storage()

        if self._is_fresh():
            logger.debug(f"Catalog cache hit ({len(self._items)} items)")
            return list(self._items)

        task = self._fetch_task
        if task is None:
            task = asyncio.ensure_future(self._fetch_items())
            self._fetch_task = task
            task.add_done_callback(self._clear_fetch_task)

        await asyncio.shield(task)
        return list(self._items)

    async def refresh(self) -> List[CatalogItem]:
        """캐시를 무시하고 다시 조회"""
        self._last_fetch = 0.0
        return await self.get_rollable_items()

    def remove_item(self, item_id: int) -> None:
        """
        아이템을 캐시에서 즉시 제외

        트랜잭션에서 품절/기간 만료가 확인된 아이템이
        다음 갱신 전까지 다시 선택되지 않게 합니다.
        """
        before = len(self._items)
        self._items = [item for item in self._items if item.id != item_id]
        if len(self._items) != before:
            logger.info(f"Evicted item {item_id} from catalog cache")
            self._save_to_storage()

    def clear(self) -> None:
        """캐시 및 로컬 파일 삭제"""
        self._items = []
        self._last_fetch = 0.0
        self._initialized = False
        try:
            self.storage_path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove catalog cache file: {e}", exc_info=True)
        logger.info("Catalog cache cleared")

    # =========================================================================
    # 내부 헬퍼
    # =========================================================================

    def _is_fresh(self) -> bool:
        age = self._clock() - self._last_fetch
        return self._initialized and age < self._ttl and len(self._items) > 0

    def _clear_fetch_task(self, task: asyncio.Task) -> None:
        if self._fetch_task is task:
            self._fetch_task = None

    async def _fetch_items(self) -> None:
        logger.debug("Fetching rollable items from store")
        items = await self._fetcher()
        now = datetime.now(timezone.utc)

        snapshot = [CatalogItem.from_model(item) for item in items]
        self._items = [item for item in snapshot if item.is_rollable(now)]
        self._last_fetch = self._clock()
        self._initialized = True
        self._save_to_storage()

        logger.info(f"Cached {len(self._items)} rollable items (valid for {int(self._ttl)}s)")

    def _load_from_storage(self) -> None:
        path = self.storage_path
        if not path.exists():
            return
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            timestamp = float(data["timestamp"])
            if self._clock() - timestamp < self._ttl:
                self._items = [CatalogItem.from_dict(entry) for entry in data["items"]]
                self._last_fetch = timestamp
                self._initialized = True
                logger.info(f"Loaded {len(self._items)} rollable items from {path}")
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to load catalog cache file: {e}", exc_info=True)

    def _save_to_storage(self) -> None:
        path = self.storage_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            payload = {
                "timestamp": self._last_fetch,
                "items": [item.to_dict() for item in self._items],
            }
            path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to save catalog cache file: {e}", exc_info=True)


catalog_cache = CatalogCache()
