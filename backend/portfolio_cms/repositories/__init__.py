"""Data access repositories."""

from .base import BaseRepository
from .user_repository import AdminUserRepository, PortfolioRepository
from .menu_repository import PlatformMenuRepository, PortfolioMenuRepository, MenuBlockRepository

__all__ = [
    "BaseRepository",
    "AdminUserRepository",
    "PortfolioRepository",
    "PlatformMenuRepository",
    "PortfolioMenuRepository",
    "MenuBlockRepository",
]
