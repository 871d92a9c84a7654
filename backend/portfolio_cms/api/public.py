"""Public read API. No authentication; unpublished or private portfolios are 404."""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..services import PublicService

router = APIRouter(prefix="/api/public", tags=["Public"])


@router.get("/portfolios/{slug}")
def get_public_page(slug: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Hero, section intros and every published section in published order."""
    return PublicService(db).get_page(slug)


@router.get("/portfolios/{slug}/sections/{menu_key}")
def get_public_section(slug: str, menu_key: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    return PublicService(db).get_section(slug, menu_key)
