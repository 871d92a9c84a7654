"""Repositories for platform menus, portfolio menus and menu blocks."""

from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from .base import BaseRepository
from ..models import PlatformMenu, PortfolioMenu, MenuBlock, MENU_CONTENT_MODELS


class PlatformMenuRepository(BaseRepository[PlatformMenu]):
    model_class = PlatformMenu
    resource_name = "platform_menu"

    def get_by_key(self, key: str) -> Optional[PlatformMenu]:
        return self.db.query(PlatformMenu).filter(PlatformMenu.key == key).first()

    def list_all(self) -> List[PlatformMenu]:
        return self.db.query(PlatformMenu).order_by(PlatformMenu.order, PlatformMenu.key).all()

    def list_enabled(self) -> List[PlatformMenu]:
        return (
            self.db.query(PlatformMenu)
            .filter(PlatformMenu.enabled.is_(True))
            .order_by(PlatformMenu.order, PlatformMenu.key)
            .all()
        )

    def next_order(self) -> int:
        current = self.db.query(func.max(PlatformMenu.order)).scalar()
        return 0 if current is None else current + 1

    def content_counts(self, platform_menu_id: str) -> Dict[str, int]:
        """Count content rows referencing the menu, per content table (non-zero only)."""
        counts: Dict[str, int] = {}
        for model in MENU_CONTENT_MODELS:
            n = (
                self.db.query(func.count(model.id))
                .filter(model.platform_menu_id == platform_menu_id)
                .scalar()
            )
            if n:
                counts[model.__tablename__] = n
        return counts


class PortfolioMenuRepository(BaseRepository[PortfolioMenu]):
    model_class = PortfolioMenu
    resource_name = "portfolio_menu"

    def _with_platform(self):
        return self.db.query(PortfolioMenu).options(joinedload(PortfolioMenu.platform_menu))

    def list_for_portfolio(self, portfolio_id: str) -> List[PortfolioMenu]:
        return (
            self._with_platform()
            .filter(PortfolioMenu.portfolio_id == portfolio_id)
            .order_by(PortfolioMenu.order, PortfolioMenu.id)
            .all()
        )

    def list_for_platform_menu(self, platform_menu_id: str) -> List[PortfolioMenu]:
        return (
            self.db.query(PortfolioMenu)
            .filter(PortfolioMenu.platform_menu_id == platform_menu_id)
            .all()
        )

    def get_for(self, portfolio_id: str, platform_menu_id: str) -> Optional[PortfolioMenu]:
        return (
            self.db.query(PortfolioMenu)
            .filter(
                PortfolioMenu.portfolio_id == portfolio_id,
                PortfolioMenu.platform_menu_id == platform_menu_id,
            )
            .first()
        )

    def next_order(self, portfolio_id: str) -> int:
        current = (
            self.db.query(func.max(PortfolioMenu.order))
            .filter(PortfolioMenu.portfolio_id == portfolio_id)
            .scalar()
        )
        return 0 if current is None else current + 1


class MenuBlockRepository(BaseRepository[MenuBlock]):
    model_class = MenuBlock
    resource_name = "menu_block"

    def list_for_portfolio_menu(self, portfolio_menu_id: str) -> List[MenuBlock]:
        return (
            self.db.query(MenuBlock)
            .filter(MenuBlock.portfolio_menu_id == portfolio_menu_id)
            .order_by(MenuBlock.order)
            .all()
        )
