"""뽑기/판매/인벤토리 API"""
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends

from models.account import Account
from models.repos.catalog_cache import catalog_cache
from routers.dependencies import get_current_account
from routers.schemas import (
    CatalogItemSchema,
    DoNotTradeRequest,
    HoldingSchema,
    PresenceRequest,
    RollSchema,
    SellRequest,
    SellSchema,
)
from service.inventory_service import InventoryService, load_holdings
from service.liquidation_service import LiquidationService
from service.roll_service import RollService
from service.write_batcher import write_batcher

economy_router = APIRouter(tags=["economy"])


@economy_router.post("/rolls", response_model=RollSchema)
async def roll(account: Account = Depends(get_current_account)):
    result = await RollService.perform_roll(account.id)
    item = result.item
    return RollSchema(
        item_id=item.id,
        item_name=item.name,
        value=item.value,
        rarity=item.rarity.value,
        serial_number=result.serial_number,
        auto_sold=result.auto_sold,
        player_earned=result.player_earned,
    )


@economy_router.post("/sales", response_model=SellSchema)
async def sell(request: SellRequest, account: Account = Depends(get_current_account)):
    result = await LiquidationService.sell_holdings(
        account_id=account.id,
        holding_ids=request.holding_ids,
        unit_value=request.unit_value,
        quantity=request.quantity,
    )
    return SellSchema.model_validate(result)


@economy_router.get("/catalog", response_model=List[CatalogItemSchema])
async def get_catalog(account: Account = Depends(get_current_account)):
    items = await catalog_cache.get_rollable_items()
    return [CatalogItemSchema.model_validate(item) for item in items]


@economy_router.get("/inventory", response_model=List[HoldingSchema])
async def get_inventory(account: Account = Depends(get_current_account)):
    return [HoldingSchema.model_validate(holding) for holding in load_holdings(account)]


@economy_router.patch("/inventory/{holding_id}", response_model=HoldingSchema)
async def set_do_not_trade(
    holding_id: str,
    request: DoNotTradeRequest,
    account: Account = Depends(get_current_account),
):
    holding = await InventoryService.set_do_not_trade(account.id, holding_id, request.do_not_trade)
    return HoldingSchema.model_validate(holding)


@economy_router.post("/presence", status_code=202)
async def update_presence(request: PresenceRequest, account: Account = Depends(get_current_account)):
    fields = {"last_active": datetime.now(timezone.utc)}
    if request.custom_status is not None:
        fields["custom_status"] = request.custom_status
    write_batcher.queue_update(f"accounts/{account.id}", fields)
    return {"queued": True}
