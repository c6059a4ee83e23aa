#!/usr/bin/env python3
"""
데이터베이스 초기화 및 금고 계정 생성

실행: python scripts/init_database.py [--admin <identity_ref> <username>]
"""
import argparse
import asyncio
import os
import sys

# 프로젝트 루트를 path에 추가
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from dotenv import load_dotenv
from tortoise import Tortoise

load_dotenv()

from config.economy import CACHE
from models.repos.account_repo import create_account, get_account_by_identity, get_account_by_user_number
from server import get_database_url
from service.auth.identity import issue_credential

TREASURY_IDENTITY = "treasury"


async def init_db():
    """데이터베이스 연결 초기화"""
    print(f"📡 데이터베이스 연결 중: {os.getenv('DATABASE_URL')}:{os.getenv('DATABASE_PORT')}/{os.getenv('DATABASE_TABLE')}")

    await Tortoise.init(
        db_url=get_database_url(),
        modules={"models": ["models"]}
    )


async def create_schema():
    """스키마 생성"""
    print("\n📋 테이블 스키마 생성 중...")
    await Tortoise.generate_schemas()
    print("✅ 스키마 생성 완료!")


async def ensure_treasury():
    """금고 계정(순차 번호 1번) 생성"""
    treasury = await get_account_by_user_number(CACHE.TREASURY_USER_NUMBER)
    if treasury:
        print(f"\n🏦 금고 계정 확인: {treasury}")
        return treasury

    treasury = await create_account(TREASURY_IDENTITY, "Treasury", is_admin=True, cash=0)
    print(f"\n🏦 금고 계정 생성: {treasury}")
    if treasury.user_number != CACHE.TREASURY_USER_NUMBER:
        print(f"  ⚠️ 금고 계정 번호가 {treasury.user_number}번입니다. 기존 계정을 확인하세요.")
    return treasury


async def ensure_admin(identity_ref: str, username: str):
    """관리자 계정 생성 후 접근 토큰 발급"""
    account = await get_account_by_identity(identity_ref)
    if account is None:
        account = await create_account(identity_ref, username, is_admin=True)
        print(f"\n👤 관리자 계정 생성: {account}")
    else:
        print(f"\n👤 관리자 계정 확인: {account}")

    token = await issue_credential(identity_ref)
    print(f"🔑 접근 토큰 (다시 표시되지 않음): {token}")


async def main():
    parser = argparse.ArgumentParser(description="데이터베이스 초기화")
    parser.add_argument("--admin", nargs=2, metavar=("IDENTITY_REF", "USERNAME"))
    args = parser.parse_args()

    print("=" * 60)
    print("🚀 데이터베이스 초기화 시작")
    print("=" * 60)

    try:
        await init_db()
        await create_schema()
        await ensure_treasury()
        if args.admin:
            await ensure_admin(*args.admin)

        print("\n" + "=" * 60)
        print("🎉 데이터베이스 초기화 완료!")
        print("=" * 60)

    except Exception as e:
        print(f"\n❌ 오류 발생: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)

    finally:
        await Tortoise.close_connections()


if __name__ == "__main__":
    asyncio.run(main())
