"""
pytest 설정 및 공통 픽스처 정의
"""
import sys
from pathlib import Path
from typing import AsyncGenerator, Optional

import pytest

# 프로젝트 루트를 Python 경로에 추가
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# pytest 설정
# =============================================================================


def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# =============================================================================
# 데이터베이스 픽스처
# =============================================================================


@pytest.fixture(scope="function")
async def test_db() -> AsyncGenerator[None, None]:
    """
    테스트용 인메모리 SQLite 데이터베이스
    각 테스트 함수마다 새로운 DB 생성
    """
    from tortoise import Tortoise

    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={"models": ["models"]}
    )
    await Tortoise.generate_schemas()

    yield

    await Tortoise.close_connections()


# =============================================================================
# 전역 상태 초기화
# =============================================================================


@pytest.fixture(autouse=True)
def reset_shared_state(tmp_path, monkeypatch):
    """캐시/배처 싱글톤과 웹훅 환경변수 초기화"""
    from models.repos.catalog_cache import catalog_cache
    from models.repos.treasury_cache import treasury_cache
    from service.write_batcher import write_batcher

    for name in ("DISCORD_WEBHOOK_ITEM_RELEASE", "DISCORD_WEBHOOK_ADMIN_LOG", "DISCORD_RELEASE_ROLE_ID"):
        monkeypatch.delenv(name, raising=False)

    catalog_cache._storage_path = tmp_path / "rollable_items.json"
    catalog_cache._storage_checked = False
    catalog_cache.clear()
    treasury_cache.invalidate()
    write_batcher._pending.clear()

    yield

    catalog_cache.clear()
    treasury_cache.invalidate()
    write_batcher._pending.clear()


# =============================================================================
# 게임 엔티티 팩토리 픽스처
# =============================================================================


@pytest.fixture
def account_factory(test_db):
    """테스트용 Account 생성 팩토리 (생성 순서대로 순차 번호 부여)"""
    from models.repos.account_repo import create_account

    async def _create_account(
        username: str = "TestUser",
        cash: int = 1000,
        is_admin: bool = False,
        **fields,
    ):
        account = await create_account(
            identity_ref=f"ref-{username}",
            username=username,
            is_admin=is_admin,
            cash=cash,
        )
        if fields:
            for name, value in fields.items():
                setattr(account, name, value)
            await account.save()
        return account

    return _create_account


@pytest.fixture
async def treasury(account_factory):
    """금고 계정 (순차 번호 1번)"""
    return await account_factory("Treasury", cash=0, is_admin=True)


@pytest.fixture
def item_factory(test_db):
    """테스트용 ItemDefinition 생성 팩토리"""
    from config.rarity import get_rarity_from_value
    from models.item import ItemDefinition, StockMode

    async def _create_item(
        name: str = "테스트 아이템",
        value: int = 100,
        stock_mode: StockMode = StockMode.INFINITE,
        stock: Optional[int] = None,
        timer_ends_at=None,
        off_sale: bool = False,
    ):
        return await ItemDefinition.create(
            name=name,
            value=value,
            rarity=get_rarity_from_value(value),
            stock_mode=stock_mode,
            total_stock=stock,
            remaining_stock=stock,
            timer_ends_at=timer_ends_at,
            off_sale=off_sale,
        )

    return _create_item


@pytest.fixture
def give_holding(test_db):
    """
    계정에 보유품 직접 지급

    시리얼 아이템이면 소유 마커와 소유자 수도 함께 맞춥니다.
    """
    from models.holding import Holding
    from models.ownership_marker import OwnershipMarker

    async def _give(account, item, serial_number=None, amount: int = 1, do_not_trade: bool = False):
        holding = Holding(
            item_id=item.id,
            serial_number=serial_number,
            amount=amount,
            do_not_trade=do_not_trade,
        )
        account.inventory = list(account.inventory or []) + [holding.to_dict()]
        await account.save()

        if item.is_serialized:
            _, created = await OwnershipMarker.get_or_create(item_id=item.id, account_id=account.id)
            if created:
                item.total_owners += 1
                await item.save()
        return holding

    return _give
