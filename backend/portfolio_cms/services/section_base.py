"""Shared plumbing for the per-section content services.

Every content service follows the same contract:
    list_for_admin  -- rows of the scoped portfolio; empty when nothing is in scope
    create          -- guard, validate lengths, insert under the owner's portfolio
    update          -- load, resolve owning portfolio via parents, guard, validate, apply
    delete          -- load, resolve owner, guard, delete (children cascade)
    set_*_visibility -- guard, flip ``is_visible`` only, return {id, is_visible}
and revalidates the admin page and the portfolio's public page afterwards.
"""

import logging
from typing import Any, Dict, List, Optional, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core import revalidation
from ..core.text_limits import clean_list, validate_each, validate_text_length
from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..models import PlatformMenu, Portfolio
from .permission_service import assert_writable
from .scope_service import AdminContext

logger = logging.getLogger(__name__)


class SectionService:
    """Base class; subclasses set ``section`` (admin path segment)."""

    section: str = ""

    def __init__(self, db: Session, revalidator: Optional[revalidation.PathRevalidator] = None):
        self.db = db
        self.revalidator = revalidator or revalidation.get_revalidator()

    # -- lookups -----------------------------------------------------------

    def _get(self, model: Type, item_id: str, resource: str):
        item = self.db.query(model).filter(model.id == item_id).first()
        if item is None:
            raise NotFoundError(resource, item_id)
        return item

    def _require_menu(self, platform_menu_id: str) -> PlatformMenu:
        menu = self.db.query(PlatformMenu).filter(PlatformMenu.id == platform_menu_id).first()
        if menu is None:
            raise NotFoundError("platform_menu", platform_menu_id)
        return menu

    # -- guard + persistence ----------------------------------------------

    def _guard(self, ctx: AdminContext, portfolio_id: Optional[str]) -> None:
        assert_writable(ctx, portfolio_id)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Integrity error on %s write: %s", self.section, e.orig)
            raise ConflictError("This change conflicts with existing content")

    def _done(self, portfolio_id: str) -> None:
        """Revalidate the admin page and the public page of *portfolio_id*."""
        row = self.db.query(Portfolio.slug).filter(Portfolio.id == portfolio_id).first()
        self.revalidator.revalidate_many([
            revalidation.admin_path(self.section),
            revalidation.public_path(row.slug if row else None),
        ])

    def _set_visibility(
        self, ctx: AdminContext, item: Any, portfolio_id: str, is_visible: bool
    ) -> Dict[str, Any]:
        self._guard(ctx, portfolio_id)
        item.is_visible = is_visible
        self._commit()
        self._done(portfolio_id)
        return {"id": item.id, "is_visible": item.is_visible}

    # -- validation --------------------------------------------------------

    @staticmethod
    def _text(value: Optional[str], limit: int, field: str, required: bool = False) -> Optional[str]:
        """Trim, enforce the ceiling, and optionally require a non-empty value."""
        if value is None:
            return None
        validate_text_length(value, limit, field)
        value = value.strip()
        if required and not value:
            raise ValidationError(f"{field} is required", field=field.lower())
        return value

    @staticmethod
    def _items(values: Optional[List[str]], limit: int, field: str) -> Optional[List[str]]:
        if values is None:
            return None
        validate_each(values, limit, field)
        return clean_list(values)
