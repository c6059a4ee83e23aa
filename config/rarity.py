"""아이템 희귀도 등급 설정"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RarityTier(str, Enum):
    """희귀도 등급 (아이템 가치로 결정)"""
    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    ULTRA_RARE = "ULTRA_RARE"
    EPIC = "EPIC"
    ULTRA_EPIC = "ULTRA_EPIC"
    MYTHIC = "MYTHIC"
    INSANE = "INSANE"


@dataclass(frozen=True)
class RarityInfo:
    """등급별 설정"""
    tier: RarityTier
    name: str
    min_value: int
    max_value: Optional[int]
    color: str


# 낮은 등급부터 높은 등급 순서
RARITY_TABLE: dict[RarityTier, RarityInfo] = {
    RarityTier.COMMON: RarityInfo(
        RarityTier.COMMON, "Common", 1, 2_499, "#ffffff"
    ),
    RarityTier.UNCOMMON: RarityInfo(
        RarityTier.UNCOMMON, "Uncommon", 2_500, 9_999, "#90ee90"
    ),
    RarityTier.RARE: RarityInfo(
        RarityTier.RARE, "Rare", 10_000, 49_999, "#87ceeb"
    ),
    RarityTier.ULTRA_RARE: RarityInfo(
        RarityTier.ULTRA_RARE, "Ultra Rare", 50_000, 249_999, "#1e3a8a"
    ),
    RarityTier.EPIC: RarityInfo(
        RarityTier.EPIC, "Epic", 250_000, 749_999, "#a855f7"
    ),
    RarityTier.ULTRA_EPIC: RarityInfo(
        RarityTier.ULTRA_EPIC, "Ultra Epic", 750_000, 2_499_999, "#6b21a8"
    ),
    RarityTier.MYTHIC: RarityInfo(
        RarityTier.MYTHIC, "Mythic", 2_500_000, 9_999_999, "#dc2626"
    ),
    RarityTier.INSANE: RarityInfo(
        RarityTier.INSANE, "Insane", 10_000_000, None, "rainbow"
    ),
}

RARITY_ORDER: list[RarityTier] = list(RARITY_TABLE.keys())

# 자동 판매가 허용되지 않는 최상위 2개 등급
PROTECTED_RARITIES: frozenset[RarityTier] = frozenset(RARITY_ORDER[-2:])


def get_rarity_from_value(value: int) -> RarityTier:
    """
    가치로부터 희귀도 등급 계산

    Args:
        value: 아이템 가치 (양수)

    Returns:
        해당 RarityTier
    """
    for tier in reversed(RARITY_ORDER):
        if value >= RARITY_TABLE[tier].min_value:
            return tier
    return RarityTier.COMMON


def get_rarity_info(tier: RarityTier) -> RarityInfo:
    """등급 정보 조회"""
    return RARITY_TABLE[RarityTier(tier)]


def is_auto_sellable(tier: RarityTier) -> bool:
    """자동 판매 가능한 등급인지 여부"""
    return RarityTier(tier) not in PROTECTED_RARITIES
