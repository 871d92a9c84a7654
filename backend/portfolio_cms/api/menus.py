"""Menu API: platform menu catalog, per-portfolio menu configuration, blocks.

Routers:
    platform_router: /api/admin/platform-menus, super admin only
    router         : /api/admin/menus, scoped to the caller's admin context
    block_router   : /api/admin/blocks, generic block editor writes
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.auth import get_admin_context, require_super_admin
from ..database import get_db
from ..models import PortfolioMenu
from ..schemas.menu import (
    KeyAvailabilityResponse,
    MenuBlockResponse,
    MenuBlockUpdate,
    MenuEditorResponse,
    PlatformMenuCreate,
    PlatformMenuResponse,
    PlatformMenuUpdate,
    PortfolioMenuResponse,
    PublishResponse,
    ReorderRequest,
    RestoreDefaultsResponse,
    UIComponentResponse,
    VisibilityUpdate,
)
from ..services import MenuService
from ..services.scope_service import Actor, AdminContext

logger = logging.getLogger(__name__)

platform_router = APIRouter(prefix="/api/admin/platform-menus", tags=["Platform menus"])
router = APIRouter(prefix="/api/admin/menus", tags=["Portfolio menus"])
block_router = APIRouter(prefix="/api/admin/blocks", tags=["Menu blocks"])


def _portfolio_menu_response(pm: PortfolioMenu) -> PortfolioMenuResponse:
    response = PortfolioMenuResponse.model_validate(pm)
    response.editable = MenuService.is_editable(pm)
    return response


# -- Platform menus ------------------------------------------------------

@platform_router.get("", response_model=List[PlatformMenuResponse])
def list_platform_menus(actor: Actor = Depends(require_super_admin), db: Session = Depends(get_db)):
    return MenuService(db).list_platform_menus()


@platform_router.get("/components", response_model=List[UIComponentResponse])
def list_components(actor: Actor = Depends(require_super_admin), db: Session = Depends(get_db)):
    """The fixed catalog of UI components menus can be composed from."""
    return MenuService(db).list_components()


@platform_router.get("/components/{component_key}", response_model=UIComponentResponse)
def get_component(
    component_key: str,
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    return MenuService(db).get_component(component_key)


@platform_router.get("/key-availability", response_model=KeyAvailabilityResponse)
def check_key_availability(
    key: str = Query(..., description="Candidate menu key"),
    exclude_id: Optional[str] = Query(None, description="Menu being edited"),
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    available = MenuService(db).check_key_availability(key, exclude_id)
    return KeyAvailabilityResponse(key=key, available=available)


@platform_router.post("", response_model=PlatformMenuResponse, status_code=201)
def create_platform_menu(
    data: PlatformMenuCreate,
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    return MenuService(db).create_platform_menu(actor, data)


@platform_router.put("/{menu_id}", response_model=PlatformMenuResponse)
def update_platform_menu(
    menu_id: str,
    data: PlatformMenuUpdate,
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    return MenuService(db).update_platform_menu(actor, menu_id, data)


@platform_router.delete("/{menu_id}", status_code=204)
def delete_platform_menu(
    menu_id: str,
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """Delete a menu. 409 with per-table counts if any portfolio has content in it."""
    MenuService(db).delete_platform_menu(actor, menu_id)


@platform_router.post("/restore-defaults", response_model=RestoreDefaultsResponse)
def restore_default_component_keys(
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    return RestoreDefaultsResponse(updated=MenuService(db).restore_default_component_keys(actor))


# -- Portfolio menus -----------------------------------------------------

@router.get("", response_model=List[PortfolioMenuResponse])
def list_portfolio_menus(ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    """All menus of the scoped portfolio, disabled and non-editable ones included."""
    menus = MenuService(db).get_portfolio_menus(ctx.portfolio_id)
    return [_portfolio_menu_response(pm) for pm in menus]


@router.get("/sidebar", response_model=List[PortfolioMenuResponse])
def list_sidebar_menus(ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    menus = MenuService(db).get_admin_sidebar_menus(ctx.portfolio_id)
    return [_portfolio_menu_response(pm) for pm in menus]


@router.put("/{portfolio_menu_id}/visibility", response_model=PortfolioMenuResponse)
def update_visibility(
    portfolio_menu_id: str,
    body: VisibilityUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    pm = MenuService(db).update_portfolio_menu_visibility(ctx, portfolio_menu_id, body.visible)
    return _portfolio_menu_response(pm)


@router.put("/order", response_model=List[PortfolioMenuResponse])
def reorder_menus(
    body: ReorderRequest,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    menus = MenuService(db).reorder_portfolio_menus(ctx, body.ordered_ids)
    return [_portfolio_menu_response(pm) for pm in menus]


@router.post("/publish", response_model=PublishResponse)
def publish_menus(ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    """Make the draft menu configuration the public one."""
    return PublishResponse(published=MenuService(db).publish_menu_configuration(ctx))


@router.get("/{menu_key}/editor", response_model=MenuEditorResponse)
def get_menu_editor(
    menu_key: str,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return MenuService(db).get_menu_editor_data(ctx, menu_key)


# -- Blocks --------------------------------------------------------------

@block_router.put("/{block_id}", response_model=MenuBlockResponse)
def update_block(
    block_id: str,
    body: MenuBlockUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return MenuService(db).update_menu_block(ctx, block_id, body.data)
