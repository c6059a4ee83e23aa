from routers.admin import admin_router
from routers.economy import economy_router
from routers.trades import trade_router

__all__ = ["admin_router", "economy_router", "trade_router"]
