"""
신원 확인

Bearer 토큰("<identity_ref>.<secret>")을 저장된 해시와 비교해 인증 식별자를 돌려줍니다.
해시는 sha256(secret + salt + pepper)이며, pepper는 환경변수에서 읽습니다.
"""
import hashlib
import logging
import os
import secrets
from typing import Optional, Protocol

from models.access_credential import AccessCredential

logger = logging.getLogger(__name__)

PEPPER_ENV = "CREDENTIAL_PEPPER"


def _pepper() -> str:
    return os.getenv(PEPPER_ENV, "")


def hash_secret(secret: str, salt: str) -> str:
    return hashlib.sha256((secret + salt + _pepper()).encode()).hexdigest()


class IdentityVerifier(Protocol):
    """토큰을 인증 식별자로 바꾸는 검증기"""

    async def verify(self, token: str) -> Optional[str]:
        ...


class CredentialVerifier:
    """AccessCredential 테이블 기반 기본 검증기"""

    async def verify(self, token: str) -> Optional[str]:
        """
        토큰 검증

        Args:
            token: "<identity_ref>.<secret>"

        Returns:
            검증된 identity_ref (실패 시 None)
        """
        identity_ref, sep, secret = token.rpartition(".")
        if not sep or not identity_ref or not secret:
            return None

        credential = await AccessCredential.get_or_none(identity_ref=identity_ref)
        if credential is None:
            logger.debug(f"No credential for {identity_ref}")
            return None

        if not secrets.compare_digest(hash_secret(secret, credential.salt), credential.token_hash):
            logger.debug(f"Credential mismatch for {identity_ref}")
            return None

        return identity_ref


async def issue_credential(identity_ref: str) -> str:
    """
    토큰 발급 (기존 토큰은 폐기)

    Returns:
        Bearer 토큰 원문 (저장되지 않으므로 호출자가 전달해야 함)
    """
    secret = secrets.token_urlsafe(32)
    salt = secrets.token_hex(16)
    await AccessCredential.update_or_create(
        identity_ref=identity_ref,
        defaults={"token_hash": hash_secret(secret, salt), "salt": salt},
    )
    logger.info(f"Issued access credential for {identity_ref}")
    return f"{identity_ref}.{secret}"
