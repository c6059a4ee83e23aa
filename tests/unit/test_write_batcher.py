"""
지연 쓰기 배처 테스트
"""
import asyncio
from datetime import datetime, timezone

import pytest

from models.account import Account
from service.write_batcher import DeferredWriteBatcher, apply_document_update


class RecordingApplier:
    def __init__(self, fail_keys=(), delay: float = 0.0):
        self.fail_keys = set(fail_keys)
        self.delay = delay
        self.applied = []

    async def __call__(self, key, fields):
        if self.delay:
            await asyncio.sleep(self.delay)
        if key in self.fail_keys:
            raise RuntimeError(f"write failed: {key}")
        self.applied.append((key, dict(fields)))


class TestQueueUpdate:
    """갱신 병합 테스트"""

    async def test_fields_merge_per_key(self):
        applier = RecordingApplier()
        batcher = DeferredWriteBatcher(applier)

        batcher.queue_update("accounts/1", {"custom_status": "a", "last_active": 1})
        batcher.queue_update("accounts/1", {"custom_status": "b"})
        batcher.queue_update("accounts/2", {"last_active": 5})

        assert await batcher.flush() == 2
        assert dict(applier.applied) == {
            "accounts/1": {"custom_status": "b", "last_active": 1},
            "accounts/2": {"last_active": 5},
        }
        assert not batcher.has_pending_updates()

    async def test_flush_without_pending_is_noop(self):
        applier = RecordingApplier()
        assert await DeferredWriteBatcher(applier).flush() == 0
        assert applier.applied == []


class TestFlushFailures:
    """실패 재시도 테스트"""

    async def test_failed_key_requeued(self):
        applier = RecordingApplier(fail_keys={"accounts/2"})
        batcher = DeferredWriteBatcher(applier)
        batcher.queue_update("accounts/1", {"last_active": 1})
        batcher.queue_update("accounts/2", {"last_active": 2})

        assert await batcher.flush() == 1
        assert batcher.has_pending_updates()
        assert batcher._pending == {"accounts/2": {"last_active": 2}}

        applier.fail_keys.clear()
        assert await batcher.flush() == 1
        assert not batcher.has_pending_updates()

    async def test_newer_fields_win_over_requeued(self):
        applier = RecordingApplier(fail_keys={"accounts/1"}, delay=0.01)
        batcher = DeferredWriteBatcher(applier)
        batcher.queue_update("accounts/1", {"custom_status": "old", "last_active": 1})

        flushing = asyncio.ensure_future(batcher.flush())
        await asyncio.sleep(0)
        batcher.queue_update("accounts/1", {"custom_status": "new"})
        await flushing

        assert batcher._pending["accounts/1"] == {"custom_status": "new", "last_active": 1}


class TestSingleFlight:
    """동시 저장 방지 테스트"""

    async def test_concurrent_flush_is_skipped(self):
        applier = RecordingApplier(delay=0.01)
        batcher = DeferredWriteBatcher(applier)
        batcher.queue_update("accounts/1", {"last_active": 1})

        results = await asyncio.gather(batcher.flush(), batcher.flush())

        assert sorted(results) == [0, 1]
        assert len(applier.applied) == 1


class TestApplyDocumentUpdate:
    """문서 키 → 모델 갱신 테스트"""

    async def test_account_fields_written(self, account_factory):
        account = await account_factory("Player")
        now = datetime.now(timezone.utc)

        await apply_document_update(f"accounts/{account.id}", {"custom_status": "afk", "last_active": now})

        stored = await Account.get(id=account.id)
        assert stored.custom_status == "afk"
        assert stored.last_active is not None

    async def test_unknown_collection(self):
        with pytest.raises(ValueError):
            await apply_document_update("guilds/1", {"name": "x"})
