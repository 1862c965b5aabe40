"""
Routes package.
"""

from .auth import router as auth_router
from .stores import router as stores_router
from .sync import router as sync_router
from .ads import router as ads_router
from .dashboard import router as dashboard_router
from .orders import router as orders_router

__all__ = [
    "auth_router",
    "stores_router",
    "sync_router",
    "ads_router",
    "dashboard_router",
    "orders_router",
]
