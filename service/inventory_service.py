"""
InventoryService

계정 인벤토리(보유품 배열) 조작을 담당합니다.
모든 함수는 트랜잭션 본문 안에서 새로 읽은 Account에 대해 호출됩니다.
"""
import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional

from exceptions import AccountNotFoundError, InvalidRequestError
from models.account import Account
from models.holding import Holding
from service.transaction import cas_update, run_transaction

logger = logging.getLogger(__name__)


def load_holdings(account: Account) -> List[Holding]:
    """계정 인벤토리를 Holding 목록으로 변환"""
    return [Holding.from_dict(entry) for entry in (account.inventory or [])]


def store_holdings(account: Account, holdings: Iterable[Holding]) -> None:
    """Holding 목록을 계정 인벤토리에 반영 (저장은 호출자가 수행)"""
    account.inventory = [holding.to_dict() for holding in holdings]


def find_holding(holdings: List[Holding], holding_id: str) -> Optional[Holding]:
    for holding in holdings:
        if holding.id == holding_id:
            return holding
    return None


def count_copies(holdings: List[Holding], item_id: int) -> int:
    """특정 아이템의 총 보유 수량 (스택 수량 포함)"""
    return sum(h.amount for h in holdings if h.item_id == item_id)


def add_copy(holdings: List[Holding], item_id: int, serial_number: Optional[int]) -> Holding:
    """
    아이템 1개 추가

    시리얼 없는 아이템은 기존 스택에 합치고, 시리얼이 있으면 항상 새 보유품을 만듭니다.

    Args:
        holdings: 대상 보유품 목록 (직접 수정됨)
        item_id: 아이템 ID
        serial_number: 시리얼 번호 (없으면 None)

    Returns:
        추가되거나 수량이 늘어난 Holding
    """
    if serial_number is None:
        for holding in holdings:
            if holding.item_id == item_id and holding.serial_number is None:
                holding.amount += 1
                return holding

    holding = Holding(item_id=item_id, serial_number=serial_number)
    holdings.append(holding)
    return holding


def remove_units(holdings: List[Holding], holding_ids: List[str]) -> Dict[int, int]:
    """
    보유품 수량 차감

    holding_ids에 같은 ID가 여러 번 나오면 그 횟수만큼 스택에서 차감합니다.
    보유 수량보다 많이 요청된 부분은 차감되지 않습니다.

    Args:
        holdings: 대상 보유품 목록 (직접 수정됨)
        holding_ids: 차감할 보유품 ID (1개 단위)

    Returns:
        {item_id: 실제 차감된 수량}
    """
    removed: Counter = Counter()
    for holding_id, units in Counter(holding_ids).items():
        holding = find_holding(holdings, holding_id)
        if holding is None:
            continue
        taken = min(units, holding.amount)
        holding.amount -= taken
        removed[holding.item_id] += taken
        if holding.amount <= 0:
            holdings.remove(holding)
    return dict(removed)


class InventoryService:
    """인벤토리 비즈니스 로직"""

    @staticmethod
    async def set_do_not_trade(account_id: int, holding_id: str, do_not_trade: bool) -> Holding:
        """
        거래 금지 표시 변경

        Args:
            account_id: 계정 ID
            holding_id: 보유품 ID
            do_not_trade: 거래 금지 여부

        Returns:
            변경된 Holding

        Raises:
            AccountNotFoundError: 계정 없음
            InvalidRequestError: 보유품 없음
        """
        async def body(conn) -> Holding:
            account = await Account.get_or_none(id=account_id, using_db=conn)
            if account is None:
                raise AccountNotFoundError(account_id)

            holdings = load_holdings(account)
            holding = find_holding(holdings, holding_id)
            if holding is None:
                raise InvalidRequestError(f"보유품을 찾을 수 없습니다: {holding_id}")

            holding.do_not_trade = do_not_trade
            store_holdings(account, holdings)
            await cas_update(account, conn, "inventory")
            return holding

        holding = await run_transaction(body)
        logger.info(f"Account {account_id} set do_not_trade={do_not_trade} on {holding_id}")
        return holding
