"""Resolution of the acting-as portfolio for admin requests.

The caller identity (``Actor``) and the resolved ``AdminScope`` travel
together as an ``AdminContext`` that is passed explicitly into every service
call. Nothing here reads request state; the HTTP layer supplies the
impersonation cookie value and tests can build any combination directly.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ..exceptions import NotFoundError
from ..models import Portfolio, ROLE_SUPER_ADMIN
from . import audit_service
from .permission_service import require_super_admin

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """Authenticated caller, loaded fresh from the database on each request."""

    id: str
    email: str
    role: str
    name: Optional[str] = None
    portfolio_id: Optional[str] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN


@dataclass(frozen=True)
class AdminScope:
    """Portfolio an admin request operates on.

    ``portfolio_id`` is None for a super admin who is not impersonating: a
    platform-management-only context with no portfolio screens.
    """

    portfolio_id: Optional[str]
    is_impersonating: bool = False


@dataclass(frozen=True)
class AdminContext:
    actor: Actor
    scope: AdminScope

    @property
    def portfolio_id(self) -> Optional[str]:
        return self.scope.portfolio_id

    @property
    def is_impersonating(self) -> bool:
        return self.scope.is_impersonating


def resolve_admin_scope(
    db: Session,
    actor: Actor,
    impersonated_portfolio_id: Optional[str] = None,
) -> AdminScope:
    """Derive the effective scope from the actor's role and impersonation state.

    - Regular user: its own portfolio; any impersonation value is ignored.
    - Super admin impersonating an existing portfolio: that portfolio, read-only.
    - Super admin otherwise (no value, or the portfolio no longer exists):
      no portfolio in scope.
    """
    if not actor.is_super_admin:
        return AdminScope(portfolio_id=actor.portfolio_id, is_impersonating=False)

    if not impersonated_portfolio_id:
        return AdminScope(portfolio_id=None, is_impersonating=False)

    exists = (
        db.query(Portfolio.id)
        .filter(Portfolio.id == impersonated_portfolio_id)
        .first()
    )
    if exists is None:
        logger.info(
            "Ignoring impersonation of missing portfolio",
            extra={"portfolio_id": impersonated_portfolio_id, "actor_id": actor.id},
        )
        return AdminScope(portfolio_id=None, is_impersonating=False)

    return AdminScope(portfolio_id=impersonated_portfolio_id, is_impersonating=True)


def build_context(
    db: Session,
    actor: Actor,
    impersonated_portfolio_id: Optional[str] = None,
) -> AdminContext:
    return AdminContext(actor=actor, scope=resolve_admin_scope(db, actor, impersonated_portfolio_id))


def start_impersonation(db: Session, actor: Actor, portfolio_id: str) -> Portfolio:
    """Validate that a super admin may view *portfolio_id* read-only.

    The HTTP layer stores the id in the path-scoped impersonation cookie.
    """
    require_super_admin(actor)
    portfolio = db.query(Portfolio).filter(Portfolio.id == portfolio_id).first()
    if portfolio is None:
        raise NotFoundError("portfolio", portfolio_id)

    logger.info("Impersonation set", extra={"actor_id": actor.id, "portfolio_id": portfolio_id})
    audit_service.log(db, actor.id, "impersonate_set", "portfolio", portfolio_id)
    return portfolio


def stop_impersonation(db: Session, actor: Actor) -> None:
    require_super_admin(actor)
    logger.info("Impersonation cleared", extra={"actor_id": actor.id})
    audit_service.log(db, actor.id, "impersonate_clear", "portfolio")
