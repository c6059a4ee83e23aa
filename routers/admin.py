"""관리자 API"""
from fastapi import APIRouter, Depends

from models.account import Account
from models.item import ItemDefinition
from routers.dependencies import get_admin_account
from routers.schemas import AccountSchema, BanRequest, CreateItemRequest, ItemSchema, OffSaleRequest
from service.admin_service import AdminService

admin_router = APIRouter(prefix="/admin", tags=["admin"])


def to_item_schema(item: ItemDefinition) -> ItemSchema:
    return ItemSchema(
        id=item.id,
        name=item.name,
        value=item.value,
        rarity=item.rarity.value,
        stock_mode=item.stock_mode.value,
        off_sale=item.off_sale,
        total_stock=item.total_stock,
        remaining_stock=item.remaining_stock,
        timer_ends_at=item.timer_ends_at,
        total_owners=item.total_owners,
    )


def to_account_schema(account: Account) -> AccountSchema:
    return AccountSchema(
        id=account.id,
        username=account.username,
        user_number=account.user_number,
        ban_status=account.ban_status.value,
        ban_reason=account.ban_reason,
        ban_expires_at=account.ban_expires_at,
    )


@admin_router.post("/items", response_model=ItemSchema, status_code=201)
async def create_item(request: CreateItemRequest, admin: Account = Depends(get_admin_account)):
    item = await AdminService.create_item(
        admin_id=admin.id,
        name=request.name,
        value=request.value,
        stock_mode=request.stock_mode,
        stock=request.stock,
        timer_ends_at=request.timer_ends_at,
        description=request.description,
        image_url=request.image_url,
    )
    return to_item_schema(item)


@admin_router.post("/items/{item_id}/off-sale", response_model=ItemSchema)
async def set_off_sale(item_id: int, request: OffSaleRequest, admin: Account = Depends(get_admin_account)):
    item = await AdminService.set_off_sale(admin.id, item_id, request.off_sale)
    return to_item_schema(item)


@admin_router.post("/accounts/{account_id}/ban", response_model=AccountSchema)
async def ban_account(account_id: int, request: BanRequest, admin: Account = Depends(get_admin_account)):
    account = await AdminService.ban_account(admin.id, account_id, request.reason, request.duration_hours)
    return to_account_schema(account)


@admin_router.post("/accounts/{account_id}/unban", response_model=AccountSchema)
async def unban_account(account_id: int, admin: Account = Depends(get_admin_account)):
    account = await AdminService.unban_account(admin.id, account_id)
    return to_account_schema(account)
