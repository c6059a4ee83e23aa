"""
Account 모델 정의

플레이어 계정과 보유 현금, 인벤토리(보유품 배열)를 관리합니다.
"""
from datetime import datetime, timezone
from enum import Enum

from tortoise import fields, models


class BanStatus(str, Enum):
    """이용 정지 상태"""
    NONE = "none"
    TEMPORARY = "temporary"   # 만료 시각까지 정지
    PERMANENT = "permanent"   # 영구 정지


class Account(models.Model):
    """
    플레이어 계정

    - inventory는 보유품(Holding) dict의 배열로 계정 행에 함께 저장
      (인벤토리 변경이 계정 한 건의 원자적 갱신으로 끝남)
    - version은 낙관적 동시성 제어용 (service.transaction.cas_update)
    - user_number 1번은 금고(house) 계정
    """

    id = fields.IntField(pk=True)
    identity_ref = fields.CharField(max_length=128, unique=True)
    username = fields.CharField(max_length=32)
    user_number = fields.IntField(unique=True)

    is_admin = fields.BooleanField(default=False)
    is_moderator = fields.BooleanField(default=False)

    ban_status = fields.CharEnumField(BanStatus, default=BanStatus.NONE)
    ban_reason = fields.CharField(max_length=255, null=True)
    ban_expires_at = fields.DatetimeField(null=True)

    cash = fields.BigIntField(default=1000)
    roll_count = fields.IntField(default=0)
    auto_sell_rarities = fields.JSONField(default=list)
    inventory = fields.JSONField(default=list)

    # 지연 쓰기 대상 (접속 상태)
    custom_status = fields.CharField(max_length=120, default="")
    last_active = fields.DatetimeField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)
    version = fields.IntField(default=0)

    class Meta:
        table = "accounts"

    @property
    def is_banned(self) -> bool:
        """현재 정지 상태 여부"""
        if self.ban_status == BanStatus.PERMANENT:
            return True
        if self.ban_status == BanStatus.TEMPORARY:
            return self.ban_expires_at is not None and self.ban_expires_at > datetime.now(timezone.utc)
        return False

    def __str__(self) -> str:
        return f"{self.username}#{self.user_number}"
