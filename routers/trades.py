"""거래 API"""
from typing import List

from fastapi import APIRouter, Depends, Query

from models.account import Account
from models.repos.trade_repo import TradeBox
from models.trade_offer import TradeOffer
from routers.dependencies import ensure_same_account, get_current_account
from routers.schemas import CreateTradeRequest, TradeSchema
from service.trade.trade_service import TradeService

trade_router = APIRouter(prefix="/trades", tags=["trades"])


def to_trade_schema(trade: TradeOffer) -> TradeSchema:
    return TradeSchema(
        id=trade.id,
        initiator_id=trade.initiator_id,
        recipient_id=trade.recipient_id,
        initiator_items=trade.initiator_items,
        recipient_items=trade.recipient_items,
        initiator_cash=trade.initiator_cash,
        recipient_cash=trade.recipient_cash,
        message=trade.message,
        status=trade.status.value,
        created_at=trade.created_at,
        expires_at=trade.expires_at,
        completed_at=trade.completed_at,
    )


@trade_router.post("", response_model=TradeSchema, status_code=201)
async def create_trade(
    request: CreateTradeRequest,
    account: Account = Depends(get_current_account),
):
    ensure_same_account(account, request.initiator_id)
    trade = await TradeService.create_trade(
        initiator_id=request.initiator_id,
        recipient_id=request.recipient_id,
        initiator_holding_ids=request.initiator_holding_ids,
        recipient_holding_ids=request.recipient_holding_ids,
        initiator_cash=request.initiator_cash,
        recipient_cash=request.recipient_cash,
        message=request.message,
    )
    return to_trade_schema(trade)


@trade_router.get("", response_model=List[TradeSchema])
async def list_trades(
    user_id: int = Query(alias="userId"),
    box: TradeBox = Query(default=TradeBox.INBOUND),
    account: Account = Depends(get_current_account),
):
    ensure_same_account(account, user_id)
    trades = await TradeService.get_trades(user_id, box)
    return [to_trade_schema(trade) for trade in trades]


@trade_router.post("/{trade_id}/accept", response_model=TradeSchema)
async def accept_trade(trade_id: int, account: Account = Depends(get_current_account)):
    trade = await TradeService.accept_trade(account.id, trade_id)
    return to_trade_schema(trade)


@trade_router.post("/{trade_id}/decline", response_model=TradeSchema)
async def decline_trade(trade_id: int, account: Account = Depends(get_current_account)):
    trade = await TradeService.decline_trade(account.id, trade_id)
    return to_trade_schema(trade)


@trade_router.post("/{trade_id}/cancel", response_model=TradeSchema)
async def cancel_trade(trade_id: int, account: Account = Depends(get_current_account)):
    trade = await TradeService.cancel_trade(account.id, trade_id)
    return to_trade_schema(trade)
