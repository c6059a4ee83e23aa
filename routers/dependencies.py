"""
인증 의존성

모든 경로는 Bearer 토큰으로 확인된 계정이 필요합니다.
"""
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from exceptions import AdminRequiredError
from models.account import Account
from models.repos.account_repo import get_account_by_identity
from service.auth.identity import CredentialVerifier, IdentityVerifier

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)
_default_verifier = CredentialVerifier()


def get_identity_verifier() -> IdentityVerifier:
    return _default_verifier


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Account:
    """
    요청한 계정 확인

    Raises:
        HTTPException: 토큰 없음/불일치(401)
    """
    if credentials is None:
        raise _unauthorized("인증 토큰이 필요합니다")

    identity_ref = await verifier.verify(credentials.credentials)
    if identity_ref is None:
        raise _unauthorized("유효하지 않은 인증 토큰입니다")

    account = await get_account_by_identity(identity_ref)
    if account is None:
        raise _unauthorized("등록되지 않은 계정입니다")
    return account


async def get_admin_account(account: Account = Depends(get_current_account)) -> Account:
    if not account.is_admin:
        raise AdminRequiredError()
    return account


def ensure_same_account(account: Account, account_id: int) -> None:
    """요청 계정과 대상 계정이 다르면 403"""
    if account.id != account_id:
        logger.debug(f"Account {account.id} tried to act as {account_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="다른 계정으로 요청할 수 없습니다",
        )
