"""
소유 마커 관리

limited/timer 아이템의 고유 소유자 수(total_owners)를 마커와 함께 맞춰 갱신합니다.
모든 함수는 트랜잭션 본문 안에서 호출되며, 아이템 저장(cas_update)은 호출자가 수행합니다.
"""
from models.item import ItemDefinition
from models.ownership_marker import OwnershipMarker


async def has_marker(conn, item_id: int, account_id: int) -> bool:
    return await OwnershipMarker.filter(
        item_id=item_id, account_id=account_id
    ).using_db(conn).exists()


async def claim_ownership(conn, item: ItemDefinition, account_id: int) -> bool:
    """
    최초 소유 기록

    Returns:
        새로 마커를 만들었으면 True (total_owners 1 증가)
    """
    if await has_marker(conn, item.id, account_id):
        return False

    await OwnershipMarker.create(item_id=item.id, account_id=account_id, using_db=conn)
    item.total_owners += 1
    return True


async def release_ownership(conn, item: ItemDefinition, account_id: int) -> bool:
    """
    마지막 사본을 내보낸 계정의 소유 기록 삭제

    Returns:
        마커를 삭제했으면 True (total_owners 1 감소, 0 미만 불가)
    """
    deleted = await OwnershipMarker.filter(
        item_id=item.id, account_id=account_id
    ).using_db(conn).delete()
    if not deleted:
        return False

    item.total_owners = max(0, item.total_owners - 1)
    return True
