"""Seed platform data on startup.

Creates the default platform menus and the configured super admin, then
backfills portfolio menus so every portfolio has an instance of every
enabled platform menu. Every step is idempotent.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from sqlalchemy.orm import Session

from .config import settings

logger = logging.getLogger(__name__)


@dataclass
class SeedResult:
    menus_created: List[str] = field(default_factory=list)
    super_admin_created: bool = False
    portfolio_menus_created: int = 0


def seed_platform(db: Session) -> SeedResult:
    """Run all startup seeding against an open session.

    Args:
        db: An open SQLAlchemy session.

    Returns:
        What was created; empty on an already-seeded database.
    """
    from ..repositories import AdminUserRepository, PortfolioRepository
    from ..services import MenuService, auth_service

    result = SeedResult()
    menus = MenuService(db)

    if settings.seed_default_menus:
        result.menus_created = menus.ensure_default_platform_menus()

    if settings.super_admin_email and settings.super_admin_password:
        existed = AdminUserRepository(db).get_by_email(settings.super_admin_email) is not None
        auth_service.ensure_super_admin(db, settings.super_admin_email, settings.super_admin_password)
        result.super_admin_created = not existed

    for portfolio_id in PortfolioRepository(db).list_ids():
        result.portfolio_menus_created += menus.ensure_portfolio_menus(portfolio_id)

    if result.menus_created or result.super_admin_created or result.portfolio_menus_created:
        logger.info(
            "Seeded platform data",
            extra={
                "menus": result.menus_created,
                "super_admin": result.super_admin_created,
                "portfolio_menus": result.portfolio_menus_created,
            },
        )
    return result
