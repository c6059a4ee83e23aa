"""
OwnershipMarker 모델 정의

limited/timer 아이템의 (아이템, 계정)별 최초 소유 여부를 기록합니다.
"""
from tortoise import fields, models


class OwnershipMarker(models.Model):
    """
    소유 마커

    - 존재하면 해당 계정이 이 아이템을 한 번이라도 보유 중
    - 마지막 사본을 판매/거래로 내보내면 삭제
    """

    id = fields.BigIntField(pk=True)
    item = fields.ForeignKeyField(
        "models.ItemDefinition",
        related_name="ownership_markers",
        on_delete=fields.CASCADE
    )
    account = fields.ForeignKeyField(
        "models.Account",
        related_name="ownership_markers",
        on_delete=fields.CASCADE
    )
    owned_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "ownership_markers"
        unique_together = [("item", "account")]
