from datetime import datetime, timezone
from enum import Enum

from tortoise import Model, fields

from config.rarity import RarityTier


class StockMode(str, Enum):
    """재고 방식"""
    INFINITE = "infinite"   # 무제한 (시리얼 없음)
    LIMITED = "limited"     # 한정 수량
    TIMER = "timer"         # 기간 한정


# 아이템 정의 (뽑기 대상)
class ItemDefinition(Model):
    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=100)
    description = fields.TextField(default="")
    image_url = fields.TextField(default="")
    value = fields.BigIntField()
    rarity = fields.CharEnumField(RarityTier)
    off_sale = fields.BooleanField(default=False)

    stock_mode = fields.CharEnumField(StockMode, default=StockMode.INFINITE)
    # limited 전용, 금고의 0번 시리얼은 포함하지 않음
    total_stock = fields.IntField(null=True)
    remaining_stock = fields.IntField(null=True)
    # timer 전용
    timer_ends_at = fields.DatetimeField(null=True)
    next_serial = fields.IntField(default=1)

    # limited/timer: 고유 소유자 수, infinite: 누적 획득 수
    total_owners = fields.IntField(default=0)

    created_at = fields.DatetimeField(auto_now_add=True)
    created_by = fields.IntField(null=True)
    version = fields.IntField(default=0)

    class Meta:
        table = "items"

    @property
    def is_serialized(self) -> bool:
        return self.stock_mode in (StockMode.LIMITED, StockMode.TIMER)

    def is_timer_expired(self, now: datetime | None = None) -> bool:
        if self.stock_mode != StockMode.TIMER or self.timer_ends_at is None:
            return False
        return (now or datetime.now(timezone.utc)) >= self.timer_ends_at

    def __str__(self):
        return self.name or str(self.id)
