"""
Account Repository

계정 데이터 접근 레이어입니다.
"""
from typing import Optional

from tortoise.transactions import in_transaction

from models.account import Account


async def get_account_by_identity(identity_ref: str) -> Optional[Account]:
    """
    인증 식별자로 조회

    Args:
        identity_ref: 인증 서비스가 돌려준 식별자

    Returns:
        Account 객체 또는 None
    """
    return await Account.get_or_none(identity_ref=identity_ref)


async def get_account_by_user_number(user_number: int) -> Optional[Account]:
    """순차 번호로 조회 (1번 = 금고 계정)"""
    return await Account.get_or_none(user_number=user_number)


async def create_account(
    identity_ref: str,
    username: str,
    is_admin: bool = False,
    cash: int = 1000,
) -> Account:
    """
    계정 생성 (다음 순차 번호 부여)

    Args:
        identity_ref: 인증 식별자
        username: 표시 이름
        is_admin: 관리자 여부
        cash: 시작 현금

    Returns:
        생성된 Account
    """
    async with in_transaction() as conn:
        last = await Account.all().using_db(conn).order_by("-user_number").first()
        next_number = (last.user_number + 1) if last else 1
        return await Account.create(
            identity_ref=identity_ref,
            username=username,
            user_number=next_number,
            is_admin=is_admin,
            cash=cash,
            using_db=conn,
        )
