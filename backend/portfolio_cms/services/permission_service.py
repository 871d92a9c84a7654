"""Write authorization: the one place where ownership rules are defined.

Every mutation of portfolio content calls ``assert_writable`` before touching
the database. The checks are pure; callers perform the mutation afterwards.

Rules:
    - Impersonation is strictly read-only, whatever the role.
    - A super admin has no content of its own and never writes portfolio
      content; it manages platform configuration and users instead.
    - A regular user may only write to the portfolio it owns.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from ..exceptions import ForbiddenError

if TYPE_CHECKING:
    from .scope_service import Actor, AdminContext

logger = logging.getLogger(__name__)

IMPERSONATION_READ_ONLY = "Impersonation is read-only. Stop impersonating to make changes."
SUPER_ADMIN_NO_CONTENT = "Super admins cannot edit portfolio content."

_MESSAGES = {
    "impersonating": IMPERSONATION_READ_ONLY,
    "super_admin": SUPER_ADMIN_NO_CONTENT,
    "not_owner": "Access denied",
}


def denial_reason(ctx: AdminContext, target_portfolio_id: Optional[str]) -> Optional[str]:
    """Return why *ctx* may not write to *target_portfolio_id*, or None if it may."""
    if ctx.scope.is_impersonating:
        return "impersonating"
    if ctx.actor.is_super_admin:
        return "super_admin"
    if not ctx.actor.portfolio_id or ctx.actor.portfolio_id != target_portfolio_id:
        return "not_owner"
    return None


def assert_writable(ctx: AdminContext, target_portfolio_id: Optional[str]) -> None:
    """Raise ForbiddenError unless *ctx* may mutate content of *target_portfolio_id*."""
    reason = denial_reason(ctx, target_portfolio_id)
    if reason is None:
        return
    logger.warning(
        "Write denied",
        extra={"actor_id": ctx.actor.id, "target_portfolio_id": target_portfolio_id, "reason": reason},
    )
    raise ForbiddenError(_MESSAGES[reason])


def can_write(ctx: AdminContext, target_portfolio_id: Optional[str]) -> bool:
    return denial_reason(ctx, target_portfolio_id) is None


def require_super_admin(actor: Actor) -> None:
    """Raise ForbiddenError unless *actor* is a super admin."""
    if not actor.is_super_admin:
        logger.warning("Super admin action denied", extra={"actor_id": actor.id})
        raise ForbiddenError("Super admin access required")
