"""Experience entries with bullets and technologies."""

from typing import Any, Dict, List

from ..core.text_limits import TEXT_LIMITS
from ..models import Experience, ExperienceBullet, ExperienceTech
from ..schemas.content import ExperienceCreate, ExperienceUpdate
from .scope_service import AdminContext
from .section_base import SectionService

# Scalar fields and their (ceiling, display name).
_FIELDS = {
    "company": (TEXT_LIMITS.NAME, "Company"),
    "location": (TEXT_LIMITS.NAME, "Location"),
    "period": (TEXT_LIMITS.LABEL, "Period"),
}


class ExperienceService(SectionService):
    section = "experience"

    def list_for_admin(self, ctx: AdminContext, platform_menu_id: str) -> List[Experience]:
        if not ctx.portfolio_id:
            return []
        return (
            self.db.query(Experience)
            .filter(
                Experience.portfolio_id == ctx.portfolio_id,
                Experience.platform_menu_id == platform_menu_id,
            )
            .order_by(Experience.order, Experience.created_at)
            .all()
        )

    def create(self, ctx: AdminContext, data: ExperienceCreate) -> Experience:
        self._guard(ctx, ctx.portfolio_id)
        self._require_menu(data.platform_menu_id)
        title = self._text(data.title, TEXT_LIMITS.TITLE, "Title", required=True)
        scalars = {
            name: self._text(getattr(data, name), limit, label)
            for name, (limit, label) in _FIELDS.items()
        }
        bullets = self._items(data.bullets, TEXT_LIMITS.BULLET, "Bullet")
        tech = self._items(data.tech, TEXT_LIMITS.TAG, "Technology")

        experience = Experience(
            portfolio_id=ctx.portfolio_id,
            platform_menu_id=data.platform_menu_id,
            title=title,
            order=data.order,
            bullets=[ExperienceBullet(text=b, order=i) for i, b in enumerate(bullets)],
            tech=[ExperienceTech(name=t, order=i) for i, t in enumerate(tech)],
            **scalars,
        )
        self.db.add(experience)
        self._commit()
        self.db.refresh(experience)
        self._done(experience.portfolio_id)
        return experience

    def update(self, ctx: AdminContext, experience_id: str, data: ExperienceUpdate) -> Experience:
        experience = self._get(Experience, experience_id, "experience")
        self._guard(ctx, experience.portfolio_id)

        title = self._text(data.title, TEXT_LIMITS.TITLE, "Title", required=True)
        fields = {
            name: self._text(getattr(data, name), limit, label)
            for name, (limit, label) in _FIELDS.items()
            if getattr(data, name) is not None
        }
        bullets = self._items(data.bullets, TEXT_LIMITS.BULLET, "Bullet")
        tech = self._items(data.tech, TEXT_LIMITS.TAG, "Technology")

        if title is not None:
            experience.title = title
        for name, value in fields.items():
            setattr(experience, name, value)
        if data.order is not None:
            experience.order = data.order
        if bullets is not None:
            experience.bullets = [ExperienceBullet(text=b, order=i) for i, b in enumerate(bullets)]
        if tech is not None:
            experience.tech = [ExperienceTech(name=t, order=i) for i, t in enumerate(tech)]

        self._commit()
        self.db.refresh(experience)
        self._done(experience.portfolio_id)
        return experience

    def delete(self, ctx: AdminContext, experience_id: str) -> None:
        experience = self._get(Experience, experience_id, "experience")
        portfolio_id = experience.portfolio_id
        self._guard(ctx, portfolio_id)
        self.db.delete(experience)
        self._commit()
        self._done(portfolio_id)

    def set_visibility(self, ctx: AdminContext, experience_id: str, is_visible: bool) -> Dict[str, Any]:
        experience = self._get(Experience, experience_id, "experience")
        return self._set_visibility(ctx, experience, experience.portfolio_id, is_visible)
