"""API routes."""

from .auth_routes import router as auth_router, account_router
from .admin import router as admin_router
from .menus import router as menus_router, platform_router as platform_menus_router, block_router
from .portfolio import router as portfolio_router
from .sections import router as sections_router
from .public import router as public_router

__all__ = [
    "auth_router",
    "account_router",
    "admin_router",
    "menus_router",
    "platform_menus_router",
    "block_router",
    "portfolio_router",
    "sections_router",
    "public_router",
]
