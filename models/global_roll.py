"""
전체 공지용 고가 뽑기 기록
"""
from tortoise import fields, models

from config.rarity import RarityTier


class GlobalRoll(models.Model):
    """고가치 아이템 뽑기 이벤트 (최근 기록 표시용)"""

    id = fields.BigIntField(pk=True)
    username = fields.CharField(max_length=32)
    item_id = fields.IntField()
    item_name = fields.CharField(max_length=100)
    item_image_url = fields.TextField(default="")
    item_value = fields.BigIntField()
    rarity = fields.CharEnumField(RarityTier)
    serial_number = fields.IntField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "global_rolls"
