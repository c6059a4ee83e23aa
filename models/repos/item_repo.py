"""
ItemDefinition Repository

아이템 정의 데이터 접근 레이어입니다.
"""
from datetime import datetime, timezone
from typing import List

from tortoise.expressions import Q

from models.item import ItemDefinition, StockMode


async def get_items_by_ids(item_ids: List[int]) -> dict[int, ItemDefinition]:
    """
    여러 아이템 일괄 조회

    Args:
        item_ids: 아이템 ID 목록

    Returns:
        {item_id: ItemDefinition}
    """
    if not item_ids:
        return {}
    items = await ItemDefinition.filter(id__in=list(set(item_ids)))
    return {item.id: item for item in items}


async def get_rollable_items() -> List[ItemDefinition]:
    """
    뽑기 가능한 아이템 조회

    판매 중이면서 무제한이거나, 재고가 남은 한정 아이템이거나,
    기간이 끝나지 않은 기간 한정 아이템

    Returns:
        ItemDefinition 목록 (ID 순)
    """
    now = datetime.now(timezone.utc)
    return await ItemDefinition.filter(
        Q(stock_mode=StockMode.INFINITE)
        | Q(stock_mode=StockMode.LIMITED, remaining_stock__gt=0)
        | Q(stock_mode=StockMode.TIMER, timer_ends_at__gt=now),
        off_sale=False,
    ).order_by("id")
