"""배경 작업 - 주기적 일괄 저장 및 거래 만료 처리"""
import logging

from discord.ext import tasks

from config.economy import BATCH, TRADE
from service.trade.trade_service import TradeService
from service.write_batcher import DeferredWriteBatcher, write_batcher

logger = logging.getLogger(__name__)


class BackgroundTasks:
    """주기적 배경 작업 관리"""

    def __init__(self, batcher: DeferredWriteBatcher = write_batcher):
        self.batcher = batcher

    def start(self) -> None:
        self.flush_pending_writes.start()
        self.expire_trades.start()
        logger.info("Background tasks started")

    async def stop(self) -> None:
        """작업 정지 후 남은 지연 쓰기 저장"""
        self.flush_pending_writes.cancel()
        self.expire_trades.cancel()

        if self.batcher.has_pending_updates():
            flushed = await self.batcher.flush()
            logger.info(f"Final flush wrote {flushed} pending updates")
        logger.info("Background tasks stopped")

    @tasks.loop(seconds=BATCH.FLUSH_INTERVAL_SECONDS)
    async def flush_pending_writes(self):
        """지연 쓰기 일괄 저장 (60초마다)"""
        try:
            if self.batcher.has_pending_updates():
                await self.batcher.flush()
        except Exception as e:
            logger.error(f"Failed to flush batched writes: {e}", exc_info=True)

    @tasks.loop(minutes=TRADE.EXPIRY_SWEEP_MINUTES)
    async def expire_trades(self):
        """만료된 거래 처리 (5분마다)"""
        try:
            expired = await TradeService.expire_pending_trades()
            if expired == 0:
                logger.debug("No pending trades to expire")
        except Exception as e:
            logger.error(f"Failed to expire trades: {e}", exc_info=True)
