"""Pydantic schemas for API validation."""

from .menu import (
    PlatformMenuCreate,
    PlatformMenuUpdate,
    PlatformMenuResponse,
    PortfolioMenuResponse,
    MenuBlockResponse,
    MenuEditorResponse,
)
from .menu_block import BLOCK_SCHEMAS, parse_block_data
from .portfolio import (
    PortfolioResponse,
    PendingPortfolioResponse,
    SectionIntrosUpdate,
    SectionIntrosResponse,
)

__all__ = [
    "PlatformMenuCreate",
    "PlatformMenuUpdate",
    "PlatformMenuResponse",
    "PortfolioMenuResponse",
    "MenuBlockResponse",
    "MenuEditorResponse",
    "BLOCK_SCHEMAS",
    "parse_block_data",
    "PortfolioResponse",
    "PendingPortfolioResponse",
    "SectionIntrosUpdate",
    "SectionIntrosResponse",
]
