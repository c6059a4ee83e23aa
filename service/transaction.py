"""
낙관적 트랜잭션 실행기

여러 문서(계정/아이템/거래)를 한 번에 바꾸는 작업을 원자적으로 처리합니다.
- 본문(body)은 새로 읽은 상태만으로 쓰기 집합을 계산해야 합니다.
- 쓰기는 cas_update로 version을 비교하며, 불일치 시 본문 전체를 재실행합니다.
- 캐시 무효화, 알림 같은 부수 효과는 본문 밖(완료 후)에서 처리합니다.
"""
import logging
from typing import Awaitable, Callable, TypeVar

from tortoise.exceptions import IntegrityError
from tortoise.models import Model
from tortoise.transactions import in_transaction

from config.economy import TRANSACTION
from exceptions import TransactionRetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TransactionConflict(Exception):
    """동시 수정 감지 (내부 재시도 신호)"""

    def __init__(self, model_name: str, pk):
        self.model_name = model_name
        self.pk = pk
        super().__init__(f"{model_name}({pk}) was modified concurrently")


async def cas_update(obj: Model, conn, *field_names: str) -> None:
    """
    version 비교 후 갱신 (compare-and-swap)

    Args:
        obj: 갱신할 모델 (version 필드 필요)
        conn: 트랜잭션 커넥션
        field_names: 갱신할 필드 이름들

    Raises:
        TransactionConflict: 읽은 이후 다른 트랜잭션이 먼저 갱신함
    """
    values = {name: getattr(obj, name) for name in field_names}
    expected = obj.version
    updated = await type(obj).filter(pk=obj.pk, version=expected).using_db(conn).update(
        **values, version=expected + 1
    )
    if not updated:
        raise TransactionConflict(type(obj).__name__, obj.pk)
    obj.version = expected + 1


async def run_transaction(
    body: Callable[..., Awaitable[T]],
    max_attempts: int = TRANSACTION.MAX_ATTEMPTS,
) -> T:
    """
    트랜잭션 본문 실행 (충돌 시 자동 재시도)

    Args:
        body: async def body(conn) -> T
        max_attempts: 최대 시도 횟수

    Returns:
        본문 반환값

    Raises:
        TransactionRetryExhaustedError: 모든 시도가 충돌로 실패
        EconomyError: 본문이 던진 도메인 예외는 그대로 전파 (롤백됨)
    """
    for attempt in range(1, max_attempts + 1):
        try:
            async with in_transaction() as conn:
                return await body(conn)
        except TransactionConflict as e:
            logger.debug(f"Transaction conflict (attempt {attempt}/{max_attempts}): {e}")
        except IntegrityError as e:
            logger.debug(f"Integrity conflict (attempt {attempt}/{max_attempts}): {e}")

    logger.warning(f"Transaction gave up after {max_attempts} attempts")
    raise TransactionRetryExhaustedError(max_attempts)
