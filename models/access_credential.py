"""
AccessCredential 모델 정의

Bearer 토큰 검증용 해시를 저장합니다. (토큰 원문은 저장하지 않음)
"""
from tortoise import fields, models


class AccessCredential(models.Model):
    id = fields.IntField(pk=True)
    identity_ref = fields.CharField(max_length=128, unique=True)
    token_hash = fields.CharField(max_length=64)
    salt = fields.CharField(max_length=32)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "access_credentials"
