"""
TradeOffer Repository

거래 목록 조회 레이어입니다.
"""
from enum import Enum
from typing import List

from tortoise.expressions import Q

from models.trade_offer import TradeOffer, TradeStatus


class TradeBox(str, Enum):
    """거래함 분류"""
    INBOUND = "inbound"       # 받은 대기 거래
    OUTBOUND = "outbound"     # 보낸 대기 거래
    COMPLETED = "completed"   # 체결된 거래
    INACTIVE = "inactive"     # 거절/취소/만료


INACTIVE_STATUSES = [TradeStatus.DECLINED, TradeStatus.CANCELLED, TradeStatus.EXPIRED]


async def list_trades(account_id: int, box: TradeBox, limit: int = 50) -> List[TradeOffer]:
    """
    거래함별 목록 조회

    Args:
        account_id: 조회할 계정 ID
        box: 거래함 분류
        limit: 최대 개수

    Returns:
        TradeOffer 목록 (최신순)
    """
    involved = Q(initiator_id=account_id) | Q(recipient_id=account_id)

    if box == TradeBox.INBOUND:
        query = TradeOffer.filter(recipient_id=account_id, status=TradeStatus.PENDING)
    elif box == TradeBox.OUTBOUND:
        query = TradeOffer.filter(initiator_id=account_id, status=TradeStatus.PENDING)
    elif box == TradeBox.COMPLETED:
        query = TradeOffer.filter(involved, status=TradeStatus.ACCEPTED)
    else:
        query = TradeOffer.filter(involved, status__in=INACTIVE_STATUSES)

    return await query.order_by("-created_at").limit(limit)
