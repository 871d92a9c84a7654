"""Owner-facing portfolio endpoints: status, publication request, settings."""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..core.auth import get_admin_context
from ..database import get_db
from ..exceptions import NotFoundError
from ..schemas.portfolio import (
    PortfolioResponse,
    PublicFlagUpdate,
    SectionIntrosResponse,
    SectionIntrosUpdate,
)
from ..services import PortfolioService
from ..services.scope_service import AdminContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/portfolio", tags=["Portfolio"])


class SlugUpdate(BaseModel):
    slug: str


def _scoped_portfolio_id(ctx: AdminContext) -> str:
    if not ctx.portfolio_id:
        raise NotFoundError("portfolio")
    return ctx.portfolio_id


@router.get("", response_model=PortfolioResponse)
def get_portfolio(ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    """The portfolio in scope: the caller's own, or the impersonated one."""
    return PortfolioService(db).get_portfolio(_scoped_portfolio_id(ctx))


@router.post("/request-publication", response_model=PortfolioResponse)
def request_publication(ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    return PortfolioService(db).request_publication(ctx)


@router.put("/public", response_model=PortfolioResponse)
def set_public(
    body: PublicFlagUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return PortfolioService(db).set_public(ctx, body.is_public)


@router.put("/slug", response_model=PortfolioResponse)
def update_slug(
    body: SlugUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return PortfolioService(db).update_slug(ctx, body.slug)


@router.get("/intros", response_model=SectionIntrosResponse)
def get_section_intros(ctx: AdminContext = Depends(get_admin_context), db: Session = Depends(get_db)):
    return PortfolioService(db).get_section_intros(_scoped_portfolio_id(ctx))


@router.put("/intros", response_model=SectionIntrosResponse)
def update_section_intros(
    body: SectionIntrosUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    db: Session = Depends(get_db),
):
    return PortfolioService(db).update_section_intros(ctx, body)
