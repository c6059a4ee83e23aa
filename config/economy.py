"""경제 시스템 설정 (뽑기, 판매, 거래, 캐시, 일괄 저장)"""
from dataclasses import dataclass


# =============================================================================
# 뽑기
# =============================================================================

@dataclass(frozen=True)
class RollConfig:
    """뽑기 설정"""

    GLOBAL_ROLL_THRESHOLD: int = 2_500_000
    """전체 공지 대상 최소 가치"""

    TREASURY_SERIAL: int = 0
    """금고 계정 전용 시리얼 번호 (재고에 포함되지 않음)"""

    FIRST_PLAYER_SERIAL: int = 1
    """플레이어에게 발급되는 첫 시리얼 번호"""


ROLL = RollConfig()


# =============================================================================
# 판매 (자동 판매 포함)
# =============================================================================

@dataclass(frozen=True)
class LiquidationConfig:
    """판매 대금 분배 설정"""

    PLAYER_SHARE_PERCENT: int = 80
    """판매자 몫 (%)"""

    TREASURY_SHARE_PERCENT: int = 20
    """금고 몫 (%)"""


LIQUIDATION = LiquidationConfig()


# =============================================================================
# 거래
# =============================================================================

@dataclass(frozen=True)
class TradeConfig:
    """1:1 거래 설정"""

    MAX_HOLDINGS_PER_SIDE: int = 7
    """한쪽이 제시할 수 있는 최대 보유품 수"""

    MAX_INITIATOR_CASH: int = 50_000
    """제안자 최대 현금"""

    MAX_RECIPIENT_CASH: int = 10_000
    """수신자 최대 현금"""

    MAX_MESSAGE_LENGTH: int = 200
    """거래 메시지 최대 길이"""

    OFFER_TTL_HOURS: int = 168
    """거래 제안 유효 기간 (7일)"""

    EXPIRY_SWEEP_MINUTES: int = 5
    """만료 처리 주기 (분)"""


TRADE = TradeConfig()


# =============================================================================
# 캐시
# =============================================================================

@dataclass(frozen=True)
class CacheConfig:
    """참조 데이터 캐시 설정"""

    CATALOG_TTL_SECONDS: float = 300.0
    """뽑기 목록 캐시 유효 시간 (5분)"""

    TREASURY_RETRY_SECONDS: float = 30.0
    """금고 계정 조회 실패 시 재시도 대기 (30초)"""

    TREASURY_USER_NUMBER: int = 1
    """금고 계정의 순차 번호"""

    CATALOG_CACHE_FILE: str = ".cache/rollable_items.json"
    """뽑기 목록 로컬 캐시 파일 기본 경로"""


CACHE = CacheConfig()


# =============================================================================
# 일괄 저장
# =============================================================================

@dataclass(frozen=True)
class BatchConfig:
    """지연 쓰기 설정"""

    FLUSH_INTERVAL_SECONDS: float = 60.0
    """일괄 저장 주기 (60초)"""


BATCH = BatchConfig()


# =============================================================================
# 트랜잭션
# =============================================================================

@dataclass(frozen=True)
class TransactionConfig:
    """낙관적 트랜잭션 설정"""

    MAX_ATTEMPTS: int = 5
    """충돌 시 최대 시도 횟수"""


TRANSACTION = TransactionConfig()
