"""
지연 쓰기 배처

접속 상태처럼 급하지 않은 필드 갱신을 모아 두었다가 주기적으로 한 번에 기록합니다.
- 같은 키에 대한 갱신은 필드 단위로 병합 (나중 값 우선)
- 저장은 동시에 한 번만 수행
- 실패한 키는 다시 대기열에 넣어 다음 주기에 재시도
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Type

from tortoise.models import Model

from models.account import Account

logger = logging.getLogger(__name__)

COLLECTIONS: Dict[str, Type[Model]] = {
    "accounts": Account,
}


async def apply_document_update(key: str, fields: Dict[str, Any]) -> None:
    """
    "컬렉션/ID" 키를 해당 모델 행 갱신으로 변환

    Raises:
        ValueError: 알 수 없는 키 형식 또는 컬렉션
    """
    collection, _, doc_id = key.partition("/")
    model = COLLECTIONS.get(collection)
    if model is None or not doc_id:
        raise ValueError(f"Unknown batch key: {key}")
    await model.filter(id=int(doc_id)).update(**fields)


class DeferredWriteBatcher:
    """필드 갱신 병합 대기열"""

    def __init__(self, applier: Callable[[str, Dict[str, Any]], Awaitable[None]] = apply_document_update):
        self._applier = applier
        self._pending: Dict[str, Dict[str, Any]] = {}
        self._is_saving = False

    def queue_update(self, key: str, fields: Dict[str, Any]) -> None:
        """
        갱신 예약

        Args:
            key: "컬렉션/ID" 형식의 문서 키
            fields: 갱신할 필드 (같은 키에 이미 예약된 필드는 덮어씀)
        """
        merged = self._pending.setdefault(key, {})
        merged.update(fields)

    def has_pending_updates(self) -> bool:
        return bool(self._pending)

    async def flush(self) -> int:
        """
        예약된 갱신 일괄 기록

        저장 중에 다시 호출되면 아무것도 하지 않습니다.
        스냅샷을 뜬 직후 대기열을 비우므로, 저장 중 들어온 갱신은 다음 주기에 기록됩니다.

        Returns:
            성공한 키 수
        """
        if self._is_saving or not self._pending:
            return 0

        self._is_saving = True
        snapshot = self._pending
        self._pending = {}

        try:
            keys = list(snapshot)
            results = await asyncio.gather(
                *(self._applier(key, snapshot[key]) for key in keys),
                return_exceptions=True,
            )

            succeeded = 0
            for key, result in zip(keys, results):
                if isinstance(result, Exception):
                    logger.error(f"Batched write failed for {key}: {result}", exc_info=result)
                    # 저장 중 새로 들어온 필드가 우선
                    self._pending[key] = {**snapshot[key], **self._pending.get(key, {})}
                else:
                    succeeded += 1

            if succeeded:
                logger.debug(f"Flushed {succeeded} batched writes")
            return succeeded
        finally:
            self._is_saving = False


write_batcher = DeferredWriteBatcher()
