"""Platform menu, portfolio menu and menu block schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional


class PlatformMenuCreate(BaseModel):
    """Schema for creating a platform menu."""
    key: str
    label: str
    component_keys: List[str] = Field(..., description="Ordered UI component keys")
    section_type: Optional[str] = None
    order: Optional[int] = None
    enabled: bool = True


class PlatformMenuUpdate(BaseModel):
    """Schema for updating a platform menu. The key cannot be changed."""
    label: Optional[str] = None
    enabled: Optional[bool] = None
    order: Optional[int] = None
    component_keys: Optional[List[str]] = None


class PlatformMenuResponse(BaseModel):
    id: str
    key: str
    label: str
    section_type: Optional[str] = None
    component_keys: List[str]
    order: int
    enabled: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UIComponentResponse(BaseModel):
    """A UI component a platform menu can be built from."""
    key: str
    label: str
    description: str

    model_config = {"from_attributes": True}


class KeyAvailabilityResponse(BaseModel):
    key: str
    available: bool


class RestoreDefaultsResponse(BaseModel):
    """Menus whose component keys were filled in from the defaults."""
    updated: List[str]


class PortfolioMenuResponse(BaseModel):
    """A portfolio's menu instance joined with its platform menu.

    Platform-disabled and non-renderable menus are included; ``editable`` and
    ``platform_menu.enabled`` let the admin UI explain why a menu is unavailable.
    """
    id: str
    portfolio_id: str
    platform_menu_id: str
    visible: bool
    order: int
    published_visible: bool
    published_order: int
    editable: bool = False
    platform_menu: PlatformMenuResponse

    model_config = {"from_attributes": True}


class VisibilityUpdate(BaseModel):
    visible: bool


class ReorderRequest(BaseModel):
    ordered_ids: List[str] = Field(..., description="PortfolioMenu ids in their new order")


class PublishResponse(BaseModel):
    published: int


class MenuBlockResponse(BaseModel):
    id: str
    component_key: str
    order: int
    data: Dict[str, Any]

    model_config = {"from_attributes": True}


class MenuBlockUpdate(BaseModel):
    data: Dict[str, Any]


class MenuEditorResponse(BaseModel):
    """Everything the generic menu editor needs for one (portfolio, menu key)."""
    platform_menu: PlatformMenuResponse
    portfolio_menu_id: str
    is_component_based: bool
    blocks: List[MenuBlockResponse]
