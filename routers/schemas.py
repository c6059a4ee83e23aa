"""HTTP 요청/응답 스키마"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.item import StockMode


# =============================================================================
# 거래
# =============================================================================


class CreateTradeRequest(BaseModel):
    initiator_id: int
    recipient_id: int
    initiator_holding_ids: List[str]
    recipient_holding_ids: List[str]
    initiator_cash: int = 0
    recipient_cash: int = 0
    message: str = ""


class TradeHoldingSchema(BaseModel):
    holding_id: str
    item_id: int
    item_name: str
    item_value: int
    serial_number: Optional[int] = None
    amount: int = 1


class TradeSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    initiator_id: int
    recipient_id: int
    initiator_items: List[TradeHoldingSchema]
    recipient_items: List[TradeHoldingSchema]
    initiator_cash: int
    recipient_cash: int
    message: str
    status: str
    created_at: datetime
    expires_at: datetime
    completed_at: Optional[datetime] = None


# =============================================================================
# 뽑기 / 판매
# =============================================================================


class RollSchema(BaseModel):
    item_id: int
    item_name: str
    value: int
    rarity: str
    serial_number: Optional[int] = None
    auto_sold: bool = False
    player_earned: Optional[int] = None


class SellRequest(BaseModel):
    holding_ids: List[str]
    unit_value: int
    quantity: int


class SellSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sold_count: int
    player_earned: int
    admin_earned: int


class CatalogItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    value: int
    rarity: str
    stock_mode: str
    image_url: str = ""
    total_stock: Optional[int] = None
    remaining_stock: Optional[int] = None
    timer_ends_at: Optional[str] = None


class PresenceRequest(BaseModel):
    custom_status: Optional[str] = Field(default=None, max_length=120)


class DoNotTradeRequest(BaseModel):
    do_not_trade: bool


class HoldingSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    item_id: int
    serial_number: Optional[int] = None
    amount: int
    do_not_trade: bool
    acquired_at: str


# =============================================================================
# 관리자
# =============================================================================


class CreateItemRequest(BaseModel):
    name: str
    value: int
    stock_mode: StockMode = StockMode.INFINITE
    stock: Optional[int] = None
    timer_ends_at: Optional[datetime] = None
    description: str = ""
    image_url: str = ""


class ItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    value: int
    rarity: str
    stock_mode: str
    off_sale: bool
    total_stock: Optional[int] = None
    remaining_stock: Optional[int] = None
    timer_ends_at: Optional[datetime] = None
    total_owners: int


class OffSaleRequest(BaseModel):
    off_sale: bool


class BanRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=255)
    duration_hours: Optional[int] = None


class AccountSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    user_number: int
    ban_status: str
    ban_reason: Optional[str] = None
    ban_expires_at: Optional[datetime] = None
