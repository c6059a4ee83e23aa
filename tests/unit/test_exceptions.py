"""
exceptions.py 유닛 테스트
"""
from exceptions import (
    AccountBannedError,
    AuthorizationError,
    ConflictError,
    EconomyError,
    InsufficientFundsError,
    InvalidQuantityError,
    InvalidRequestError,
    InventoryMismatchError,
    ItemNotFoundError,
    OutOfStockError,
    ResourceNotFoundError,
    StaleOfferError,
    TradeActorError,
    TradeNotPendingError,
    TradeValidationError,
    TransactionRetryExhaustedError,
)


class TestEconomyError:
    """기본 예외 클래스 테스트"""

    def test_default_message(self):
        """기본 메시지 테스트"""
        error = EconomyError()
        assert error.message == "알 수 없는 오류가 발생했습니다"
        assert str(error) == "알 수 없는 오류가 발생했습니다"

    def test_custom_message(self):
        """커스텀 메시지 테스트"""
        error = EconomyError("커스텀 에러 메시지")
        assert error.message == "커스텀 에러 메시지"

    def test_inheritance(self):
        """상속 관계 테스트"""
        assert isinstance(EconomyError(), Exception)


class TestErrorTaxonomy:
    """검증/충돌/리소스 없음/권한 분류 테스트"""

    def test_validation_errors(self):
        assert isinstance(InvalidQuantityError(0), InvalidRequestError)
        assert isinstance(TradeValidationError("빈 목록"), InvalidRequestError)

    def test_conflict_errors(self):
        for error in (
            OutOfStockError(1),
            InventoryMismatchError(3, 2),
            StaleOfferError(1),
            InsufficientFundsError(100, 50),
            TradeNotPendingError(1, "accepted"),
            TransactionRetryExhaustedError(5),
        ):
            assert isinstance(error, ConflictError)

    def test_not_found_errors(self):
        assert isinstance(ItemNotFoundError(1), ResourceNotFoundError)

    def test_authorization_errors(self):
        assert isinstance(TradeActorError("수락"), AuthorizationError)
        assert isinstance(AccountBannedError(1), AuthorizationError)


class TestInvalidQuantityError:
    """수량 오류 테스트"""

    def test_non_positive_message(self):
        error = InvalidQuantityError(0)
        assert error.quantity == 0
        assert error.available is None
        assert "1 이상" in str(error)

    def test_exceeds_available_message(self):
        error = InvalidQuantityError(5, 3)
        assert error.available == 3
        assert "보유: 3" in str(error)


class TestInsufficientFundsError:
    """현금 부족 예외 테스트"""

    def test_values_stored(self):
        error = InsufficientFundsError(1000, 500)
        assert error.required == 1000
        assert error.current == 500

    def test_message_format(self):
        error = InsufficientFundsError(1000, 500)
        assert "1000" in str(error)
        assert "500" in str(error)
        assert "부족" in str(error)


class TestAccountBannedError:
    """정지 계정 예외 테스트"""

    def test_reason_in_message(self):
        error = AccountBannedError(7, "매크로 사용")
        assert error.account_id == 7
        assert "매크로 사용" in str(error)

    def test_without_reason(self):
        assert "사유" not in str(AccountBannedError(7))
