"""
거래 제안 모델

두 계정 간 1:1 물물교환(보유품 + 현금) 제안을 관리합니다.
"""
from datetime import datetime, timezone
from enum import Enum

from tortoise import fields, models


class TradeStatus(str, Enum):
    """거래 상태 (pending 외에는 모두 종료 상태)"""
    PENDING = "pending"       # 수락 대기
    ACCEPTED = "accepted"     # 체결 완료
    DECLINED = "declined"     # 수신자 거절
    CANCELLED = "cancelled"   # 제안자 취소
    EXPIRED = "expired"       # 기간 만료


class TradeOffer(models.Model):
    """
    거래 제안

    - initiator_items / recipient_items: 보유품 스냅샷 목록
      [{"holding_id", "item_id", "item_name", "item_value", "serial_number", "amount"}]
    - pending을 벗어나면 더 이상 변경되지 않음
    - 체결된 거래는 삭제하지 않고 accepted 상태로 보관
    """

    id = fields.BigIntField(pk=True)

    initiator = fields.ForeignKeyField(
        "models.Account",
        related_name="outbound_trades",
        on_delete=fields.CASCADE
    )
    recipient = fields.ForeignKeyField(
        "models.Account",
        related_name="inbound_trades",
        on_delete=fields.CASCADE
    )

    initiator_items = fields.JSONField(default=list)
    recipient_items = fields.JSONField(default=list)
    initiator_cash = fields.BigIntField(default=0)
    recipient_cash = fields.BigIntField(default=0)
    message = fields.CharField(max_length=200, default="")

    status = fields.CharEnumField(TradeStatus, default=TradeStatus.PENDING)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)
    expires_at = fields.DatetimeField()
    completed_at = fields.DatetimeField(null=True)
    version = fields.IntField(default=0)

    class Meta:
        table = "trade_offers"
        indexes = (
            ("status", "expires_at"),   # 만료 처리 쿼리
            ("recipient", "status"),    # 받은 거래
            ("initiator", "status"),    # 보낸 거래
        )

    @property
    def is_pending(self) -> bool:
        return self.status == TradeStatus.PENDING

    @property
    def is_expired(self) -> bool:
        """만료 여부"""
        return self.status == TradeStatus.PENDING and datetime.now(timezone.utc) > self.expires_at

    def __str__(self) -> str:
        return f"Trade {self.id}: {self.initiator_id} -> {self.recipient_id} ({self.status})"
