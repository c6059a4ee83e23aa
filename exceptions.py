"""
경제 엔진 커스텀 예외 클래스 정의

모든 예외는 EconomyError를 상속받아 일관된 에러 처리를 제공합니다.
HTTP 계층은 아래 4개 분류(검증/충돌/리소스 없음/권한)로 상태 코드를 결정합니다.
"""
from typing import Optional


class EconomyError(Exception):
    """경제 엔진 기본 예외 클래스"""

    def __init__(self, message: str = "알 수 없는 오류가 발생했습니다"):
        self.message = message
        super().__init__(self.message)


# =============================================================================
# 검증 (트랜잭션 시작 전 거부)
# =============================================================================


class InvalidRequestError(EconomyError):
    """잘못된 요청"""
    pass


class InvalidQuantityError(InvalidRequestError):
    """잘못된 수량"""

    def __init__(self, quantity: int, available: Optional[int] = None):
        self.quantity = quantity
        self.available = available
        if available is None:
            super().__init__(f"수량은 1 이상이어야 합니다. (요청: {quantity})")
        else:
            super().__init__(
                f"보유 수량보다 많이 판매할 수 없습니다. (요청: {quantity}, 보유: {available})"
            )


class TradeValidationError(InvalidRequestError):
    """거래 제안 형식 오류"""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"거래를 생성할 수 없습니다: {reason}")


# =============================================================================
# 충돌/낡은 상태
# =============================================================================


class ConflictError(EconomyError):
    """현재 상태와 충돌"""
    pass


class OutOfStockError(ConflictError):
    """재고 소진"""

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"아이템 재고가 모두 소진되었습니다: {item_id}")


class TimerExpiredError(ConflictError):
    """기간 한정 아이템 판매 종료"""

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"판매 기간이 종료된 아이템입니다: {item_id}")


class OffSaleConflictError(ConflictError):
    """판매 중지된 아이템"""

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"판매가 중지된 아이템은 뽑을 수 없습니다: {item_id}")


class InventoryMismatchError(ConflictError):
    """인벤토리 불일치 (클라이언트 정보가 오래됨)"""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"인벤토리가 변경되었습니다. 새로고침 후 다시 시도해주세요. "
            f"(요청: {expected}, 처리 가능: {actual})"
        )


class StaleOfferError(ConflictError):
    """거래 제안 아이템이 더 이상 존재하지 않음"""

    def __init__(self, trade_id: int):
        self.trade_id = trade_id
        super().__init__("제안된 아이템 중 일부를 더 이상 보유하고 있지 않습니다.")


class InsufficientFundsError(ConflictError):
    """현금 부족"""

    def __init__(self, required: int, current: int):
        self.required = required
        self.current = current
        super().__init__(f"현금이 부족합니다. (필요: {required}, 보유: {current})")


class TradeNotPendingError(ConflictError):
    """대기 상태가 아닌 거래"""

    def __init__(self, trade_id: int, current_status: str):
        self.trade_id = trade_id
        self.current_status = current_status
        super().__init__(f"대기 중인 거래가 아닙니다. (현재: {current_status})")


class TransactionRetryExhaustedError(ConflictError):
    """트랜잭션 재시도 한도 초과"""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"요청이 몰려 처리하지 못했습니다. 잠시 후 다시 시도해주세요. ({attempts}회 시도)")


# =============================================================================
# 리소스 없음
# =============================================================================


class ResourceNotFoundError(EconomyError):
    """리소스를 찾을 수 없음"""
    pass


class ItemNotFoundError(ResourceNotFoundError):
    """아이템을 찾을 수 없음"""

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"아이템을 찾을 수 없습니다: {item_id}")


class AccountNotFoundError(ResourceNotFoundError):
    """계정을 찾을 수 없음"""

    def __init__(self, account_id):
        self.account_id = account_id
        super().__init__(f"계정을 찾을 수 없습니다: {account_id}")


class TradeNotFoundError(ResourceNotFoundError):
    """거래를 찾을 수 없음"""

    def __init__(self, trade_id: int):
        self.trade_id = trade_id
        super().__init__(f"거래를 찾을 수 없습니다: {trade_id}")


class NoItemsAvailableError(ResourceNotFoundError):
    """뽑을 수 있는 아이템 없음"""

    def __init__(self):
        super().__init__("현재 뽑을 수 있는 아이템이 없습니다.")


class TreasuryUnavailableError(ResourceNotFoundError):
    """금고 계정 없음"""

    def __init__(self):
        super().__init__("금고 계정을 찾을 수 없어 판매를 처리할 수 없습니다.")


# =============================================================================
# 권한
# =============================================================================


class AuthorizationError(EconomyError):
    """권한 없음"""
    pass


class TradeActorError(AuthorizationError):
    """거래 당사자가 아님"""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"이 거래를 {action}할 권한이 없습니다.")


class AccountBannedError(AuthorizationError):
    """정지된 계정"""

    def __init__(self, account_id: int, reason: Optional[str] = None):
        self.account_id = account_id
        self.reason = reason
        detail = f" (사유: {reason})" if reason else ""
        super().__init__(f"이용이 정지된 계정입니다{detail}")


class AdminRequiredError(AuthorizationError):
    """관리자 권한 필요"""

    def __init__(self):
        super().__init__("관리자 권한이 필요합니다.")
