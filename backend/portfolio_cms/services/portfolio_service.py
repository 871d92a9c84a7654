"""Portfolio lifecycle: creation, publish workflow and portfolio-level settings.

Status machine::

    DRAFT ──request──▶ READY_FOR_REVIEW ──approve──▶ PUBLISHED
                            ▲     │
                  request   │     └──reject──▶ REJECTED
                            └──────────────────────┘

Approve and reject re-check the status inside the UPDATE statement itself, so
of two concurrent reviewers only one succeeds and the other gets
InvalidStateError. The rejection reason survives resubmission and is cleared
only by approval.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core import revalidation
from ..core.text_limits import TEXT_LIMITS, validate_text_length
from ..exceptions import ConflictError, InvalidStateError, ValidationError
from ..models import AdminUser, Portfolio, PortfolioStatus
from ..repositories import PortfolioRepository
from ..schemas.portfolio import SectionIntrosUpdate
from . import audit_service
from .menu_service import MenuService
from .permission_service import assert_writable, require_super_admin
from .scope_service import Actor, AdminContext

logger = logging.getLogger(__name__)

DEFAULT_SECTION_INTROS: Dict[str, str] = {
    "skills": "An overview of the skills and tools used across professional projects.",
    "projects": "A selection of projects highlighting problem-solving and delivery experience.",
    "experience": "A summary of professional experience and roles over time.",
    "architecture": "An overview of the technical principles and architectural approach behind this work.",
}

_REQUESTABLE_FROM = (PortfolioStatus.DRAFT.value, PortfolioStatus.REJECTED.value)
_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
_SLUG_MAX = 60


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")
    return slug[:_SLUG_MAX].strip("-") or "portfolio"


class PortfolioService:
    """Portfolio creation, review workflow and settings."""

    def __init__(self, db: Session, revalidator: Optional[revalidation.PathRevalidator] = None):
        self.db = db
        self.repo = PortfolioRepository(db)
        self.revalidator = revalidator or revalidation.get_revalidator()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_for_user(self, user: AdminUser, commit: bool = True) -> Portfolio:
        """Create the user's portfolio (DRAFT, private) with all enabled menus."""
        portfolio = Portfolio(
            user_id=user.id,
            slug=self._unique_slug(user.name or user.email.split("@")[0]),
            status=PortfolioStatus.DRAFT.value,
            is_public=False,
        )
        self.db.add(portfolio)
        self.db.flush()
        MenuService(self.db, self.revalidator).ensure_portfolio_menus(portfolio.id, commit=False)
        if commit:
            self.db.commit()
            self.db.refresh(portfolio)
        logger.info("Portfolio created", extra={"portfolio_id": portfolio.id, "user_id": user.id})
        return portfolio

    def delete_portfolio(self, actor: Actor, portfolio_id: str) -> None:
        """Delete a portfolio and everything it owns.

        Removed with it: portfolio menus and their blocks, skill groups and
        skills, projects with bullets and tags, experiences with bullets and
        tech, about content and principles, architecture content with pillars
        and points, person info and hero content.
        """
        require_super_admin(actor)
        portfolio = self.repo.get_by_id(portfolio_id)
        slug = portfolio.slug
        self.db.delete(portfolio)
        self.db.commit()
        logger.info("Portfolio deleted", extra={"portfolio_id": portfolio_id})
        audit_service.log(self.db, actor.id, "portfolio_delete", "portfolio", portfolio_id)
        self.revalidator.revalidate(revalidation.public_path(slug))

    def get_portfolio(self, portfolio_id: str) -> Portfolio:
        return self.repo.get_by_id(portfolio_id)

    def list_portfolios(self, actor: Actor) -> List[Portfolio]:
        require_super_admin(actor)
        return self.repo.list_all()

    # ------------------------------------------------------------------
    # Publish workflow
    # ------------------------------------------------------------------

    def request_publication(self, ctx: AdminContext) -> Portfolio:
        """Owner submits for review: DRAFT or REJECTED -> READY_FOR_REVIEW."""
        portfolio_id = ctx.portfolio_id
        assert_writable(ctx, portfolio_id)

        result = self.db.execute(
            update(Portfolio)
            .where(Portfolio.id == portfolio_id, Portfolio.status.in_(_REQUESTABLE_FROM))
            .values(status=PortfolioStatus.READY_FOR_REVIEW.value)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            current = self.repo.get_by_id(portfolio_id)
            raise InvalidStateError(
                "Portfolio can only be submitted for review from DRAFT or REJECTED",
                expected=list(_REQUESTABLE_FROM),
                actual=current.status,
            )
        self.db.commit()

        portfolio = self.repo.get_by_id(portfolio_id)
        self.db.refresh(portfolio)
        logger.info("Publication requested", extra={"portfolio_id": portfolio_id})
        audit_service.log(self.db, ctx.actor.id, "publish_request", "portfolio", portfolio_id)
        self.revalidator.revalidate(revalidation.admin_path())
        return portfolio

    def approve_portfolio(self, actor: Actor, portfolio_id: str) -> Portfolio:
        """READY_FOR_REVIEW -> PUBLISHED; clears the rejection reason and stamps approved_at."""
        require_super_admin(actor)
        portfolio = self._transition_from_review(
            portfolio_id,
            status=PortfolioStatus.PUBLISHED.value,
            rejection_reason=None,
            approved_at=datetime.now(timezone.utc),
        )
        logger.info("Portfolio approved", extra={"portfolio_id": portfolio_id, "actor_id": actor.id})
        audit_service.log(self.db, actor.id, "approve", "portfolio", portfolio_id)
        self.revalidator.revalidate_many([
            revalidation.admin_path("review"),
            revalidation.public_path(portfolio.slug),
        ])
        return portfolio

    def reject_portfolio(self, actor: Actor, portfolio_id: str, reason: str) -> Portfolio:
        """READY_FOR_REVIEW -> REJECTED with a required, trimmed reason."""
        require_super_admin(actor)
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("Rejection reason is required", field="reason")
        validate_text_length(reason, TEXT_LIMITS.DESCRIPTION, "Reason")

        portfolio = self._transition_from_review(
            portfolio_id,
            status=PortfolioStatus.REJECTED.value,
            rejection_reason=reason,
        )
        logger.info("Portfolio rejected", extra={"portfolio_id": portfolio_id, "actor_id": actor.id})
        audit_service.log(
            self.db, actor.id, "reject", "portfolio", portfolio_id, details={"reason": reason}
        )
        self.revalidator.revalidate(revalidation.admin_path("review"))
        return portfolio

    def list_pending(self, actor: Actor) -> List[Portfolio]:
        require_super_admin(actor)
        return self.repo.list_by_status(PortfolioStatus.READY_FOR_REVIEW)

    def count_pending(self, actor: Actor) -> int:
        require_super_admin(actor)
        return self.repo.count_by_status(PortfolioStatus.READY_FOR_REVIEW)

    def _transition_from_review(self, portfolio_id: str, **values) -> Portfolio:
        # 404 before 409: a missing portfolio is not a state conflict.
        self.repo.get_by_id(portfolio_id)

        result = self.db.execute(
            update(Portfolio)
            .where(
                Portfolio.id == portfolio_id,
                Portfolio.status == PortfolioStatus.READY_FOR_REVIEW.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            current = self.repo.get_by_id(portfolio_id)
            raise InvalidStateError(
                "Portfolio is not pending review",
                expected=PortfolioStatus.READY_FOR_REVIEW.value,
                actual=current.status,
            )
        self.db.commit()

        portfolio = self.repo.get_by_id(portfolio_id)
        self.db.refresh(portfolio)
        return portfolio

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_public(self, ctx: AdminContext, is_public: bool) -> Portfolio:
        portfolio = self._owned_portfolio(ctx)
        portfolio.is_public = is_public
        self.db.commit()
        self.db.refresh(portfolio)
        self.revalidator.revalidate_many([revalidation.admin_path(), revalidation.public_path(portfolio.slug)])
        return portfolio

    def update_slug(self, ctx: AdminContext, slug: str) -> Portfolio:
        portfolio = self._owned_portfolio(ctx)
        slug = (slug or "").strip().lower()
        validate_text_length(slug, _SLUG_MAX, "Slug")
        if not _SLUG_PATTERN.match(slug):
            raise ValidationError(
                "Slug must contain only lowercase letters, numbers and single hyphens",
                field="slug",
            )
        if slug == portfolio.slug:
            return portfolio
        existing = self.repo.get_by_slug(slug)
        if existing is not None:
            raise ConflictError(f"The address '{slug}' is already taken", field="slug")

        old_slug = portfolio.slug
        portfolio.slug = slug
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"The address '{slug}' is already taken", field="slug")
        self.db.refresh(portfolio)
        self.revalidator.revalidate_many([revalidation.public_path(old_slug), revalidation.public_path(slug)])
        return portfolio

    def get_section_intros(self, portfolio_id: Optional[str]) -> Optional[Dict[str, str]]:
        """Effective intro per section: the owner's text, or the default."""
        if not portfolio_id:
            return None
        portfolio = self.repo.get_by_id(portfolio_id)
        return {
            f"{section}_intro": (getattr(portfolio, f"{section}_intro") or "").strip() or default
            for section, default in DEFAULT_SECTION_INTROS.items()
        }

    def update_section_intros(self, ctx: AdminContext, data: SectionIntrosUpdate) -> Dict[str, str]:
        """Change the provided intros; blank or null resets a section to its default."""
        portfolio = self._owned_portfolio(ctx)
        cleaned = {
            field: (value or "").strip() for field, value in data.model_dump(exclude_unset=True).items()
        }
        for value in cleaned.values():
            validate_text_length(value, TEXT_LIMITS.SECTION_INTRO, "Introduction")
        for field, value in cleaned.items():
            setattr(portfolio, field, value or None)
        self.db.commit()
        self.revalidator.revalidate_many([
            revalidation.admin_path("section-intros"),
            revalidation.public_path(portfolio.slug),
        ])
        return self.get_section_intros(portfolio.id)

    def _owned_portfolio(self, ctx: AdminContext) -> Portfolio:
        assert_writable(ctx, ctx.portfolio_id)
        return self.repo.get_by_id(ctx.portfolio_id)

    def _unique_slug(self, base: str) -> str:
        root = slugify(base)
        slug, n = root, 2
        while self.repo.slug_taken(slug):
            slug = f"{root}-{n}"
            n += 1
        return slug
