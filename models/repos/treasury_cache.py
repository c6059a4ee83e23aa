"""
금고 계정 ID 캐시

자동 판매/판매 대금의 금고 몫을 받을 계정(순차 번호 1번)의 ID를 보관합니다.
찾지 못하면 초기화 완료로 표시하지 않고, 30초가 지난 뒤 다시 조회합니다.
"""
import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from config.economy import CACHE
from models.repos.account_repo import get_account_by_user_number

logger = logging.getLogger(__name__)


async def _resolve_treasury_id() -> Optional[int]:
    account = await get_account_by_user_number(CACHE.TREASURY_USER_NUMBER)
    return account.id if account else None


class TreasuryCache:
    """금고 계정 ID 캐시"""

    def __init__(
        self,
        resolver: Callable[[], Awaitable[Optional[int]]] = _resolve_treasury_id,
        retry_delay: float = CACHE.TREASURY_RETRY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._resolver = resolver
        self._retry_delay = retry_delay
        self._clock = clock

        self._account_id: Optional[int] = None
        self._initialized = False
        self._last_fetch_time: Optional[float] = None
        self._fetch_task: Optional[asyncio.Task] = None

    async def get_treasury_account_id(self) -> Optional[int]:
        """
        금고 계정 ID 조회

        Returns:
            금고 계정 ID (없으면 None)
        """
        if self._initialized and self._account_id is not None:
            return self._account_id

        # 최근에 조회했는데 없었으면 재시도 대기
        if (
            self._account_id is None
            and self._last_fetch_time is not None
            and self._clock() - self._last_fetch_time < self._retry_delay
        ):
            return None

        task = self._fetch_task
        if task is None:
            task = asyncio.ensure_future(self._fetch_account_id())
            self._fetch_task = task
            task.add_done_callback(self._clear_fetch_task)

        await asyncio.shield(task)
        return self._account_id

    def invalidate(self) -> None:
        self._initialized = False
        self._account_id = None
        self._last_fetch_time = None

    def _clear_fetch_task(self, task: asyncio.Task) -> None:
        if self._fetch_task is task:
            self._fetch_task = None

    async def _fetch_account_id(self) -> None:
        self._account_id = await self._resolver()
        self._last_fetch_time = self._clock()

        if self._account_id is not None:
            self._initialized = True
            logger.debug(f"Treasury account resolved: {self._account_id}")
        else:
            logger.warning(
                f"Treasury account (user_number={CACHE.TREASURY_USER_NUMBER}) not found"
            )


treasury_cache = TreasuryCache()
