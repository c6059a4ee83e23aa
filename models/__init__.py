"""
Tortoise 모델 패키지

Tortoise.init(modules={"models": ["models"]})가 이 모듈에서 모델을 찾습니다.
"""
from models.access_credential import AccessCredential
from models.account import Account, BanStatus
from models.global_roll import GlobalRoll
from models.holding import Holding
from models.item import ItemDefinition, StockMode
from models.ownership_marker import OwnershipMarker
from models.trade_offer import TradeOffer, TradeStatus

__all__ = [
    "AccessCredential",
    "Account", "BanStatus",
    "GlobalRoll",
    "Holding",
    "ItemDefinition", "StockMode",
    "OwnershipMarker",
    "TradeOffer", "TradeStatus",
]
