"""Repository for admin users and portfolios."""

from typing import List, Optional

from sqlalchemy import func

from .base import BaseRepository
from ..models import AdminUser, Portfolio, PortfolioStatus


class AdminUserRepository(BaseRepository[AdminUser]):
    model_class = AdminUser
    resource_name = "user"

    def get_by_email(self, email: str) -> Optional[AdminUser]:
        """Case-insensitive email lookup."""
        return (
            self.db.query(AdminUser)
            .filter(func.lower(AdminUser.email) == email.strip().lower())
            .first()
        )

    def list_all(self) -> List[AdminUser]:
        return self.db.query(AdminUser).order_by(AdminUser.created_at, AdminUser.email).all()


class PortfolioRepository(BaseRepository[Portfolio]):
    model_class = Portfolio
    resource_name = "portfolio"

    def get_by_user(self, user_id: str) -> Optional[Portfolio]:
        return self.db.query(Portfolio).filter(Portfolio.user_id == user_id).first()

    def get_by_slug(self, slug: str) -> Optional[Portfolio]:
        return self.db.query(Portfolio).filter(Portfolio.slug == slug).first()

    def slug_taken(self, slug: str) -> bool:
        return self.db.query(Portfolio.id).filter(Portfolio.slug == slug).first() is not None

    def list_all(self) -> List[Portfolio]:
        return self.db.query(Portfolio).order_by(Portfolio.created_at).all()

    def list_ids(self) -> List[str]:
        return [row.id for row in self.db.query(Portfolio.id).all()]

    def list_by_status(self, status: PortfolioStatus) -> List[Portfolio]:
        return (
            self.db.query(Portfolio)
            .filter(Portfolio.status == status.value)
            .order_by(Portfolio.updated_at)
            .all()
        )

    def count_by_status(self, status: PortfolioStatus) -> int:
        return self.db.query(Portfolio).filter(Portfolio.status == status.value).count()
