"""
경제 엔진 설정 상수

모든 매직 넘버와 경제 밸런스 관련 상수를 여기서 관리합니다.
각 도메인별 설정은 config/ 하위 모듈에 정의되어 있습니다.
"""
from config.rarity import (
    RarityTier, RarityInfo, RARITY_TABLE, RARITY_ORDER, PROTECTED_RARITIES,
    get_rarity_from_value, get_rarity_info, is_auto_sellable,
)
from config.economy import (
    RollConfig, ROLL,
    LiquidationConfig, LIQUIDATION,
    TradeConfig, TRADE,
    CacheConfig, CACHE,
    BatchConfig, BATCH,
    TransactionConfig, TRANSACTION,
)
from config.notification import WebhookConfig, WEBHOOK

__all__ = [
    # rarity
    "RarityTier", "RarityInfo", "RARITY_TABLE", "RARITY_ORDER", "PROTECTED_RARITIES",
    "get_rarity_from_value", "get_rarity_info", "is_auto_sellable",
    # economy
    "RollConfig", "ROLL",
    "LiquidationConfig", "LIQUIDATION",
    "TradeConfig", "TRADE",
    "CacheConfig", "CACHE",
    "BatchConfig", "BATCH",
    "TransactionConfig", "TRANSACTION",
    # notification
    "WebhookConfig", "WEBHOOK",
]
