"""Public read path: what visitors of a published portfolio see.

Only portfolios that are PUBLISHED and flagged public are served. Menus come
from the published snapshot (``published_visible``/``published_order``) and
must still be enabled and renderable on the platform. Section content is
filtered to items whose ``is_visible`` flag is set.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.components import to_section_template
from ..exceptions import NotFoundError
from ..models import (
    AboutContent,
    ArchitectureContent,
    Experience,
    HeroContent,
    PersonInfo,
    Portfolio,
    PortfolioMenu,
    PortfolioStatus,
    Project,
    SkillGroup,
)
from ..repositories import MenuBlockRepository, PortfolioRepository
from ..schemas import content as schemas
from .menu_service import MenuService
from .portfolio_service import PortfolioService

logger = logging.getLogger(__name__)


class PublicService:
    def __init__(self, db: Session):
        self.db = db
        self.portfolio_repo = PortfolioRepository(db)
        self.block_repo = MenuBlockRepository(db)
        self.menu_service = MenuService(db)

    def get_portfolio_by_slug(self, slug: str) -> Portfolio:
        portfolio = self.portfolio_repo.get_by_slug(slug)
        if (
            portfolio is None
            or portfolio.status != PortfolioStatus.PUBLISHED.value
            or not portfolio.is_public
        ):
            raise NotFoundError("portfolio", slug)
        return portfolio

    def get_page(self, slug: str) -> Dict[str, Any]:
        """Whole public page: hero, intros and every published section in order."""
        portfolio = self.get_portfolio_by_slug(slug)
        return {
            "slug": portfolio.slug,
            "hero": self._hero(portfolio.id),
            "intros": PortfolioService(self.db).get_section_intros(portfolio.id),
            "menus": [
                self._menu_payload(pm)
                for pm in self.menu_service.get_enabled_portfolio_menus(portfolio.id)
            ],
        }

    def get_section(self, slug: str, menu_key: str) -> Dict[str, Any]:
        portfolio = self.get_portfolio_by_slug(slug)
        for pm in self.menu_service.get_enabled_portfolio_menus(portfolio.id):
            if pm.platform_menu.key == menu_key:
                return self._menu_payload(pm)
        raise NotFoundError("section", menu_key)

    # ------------------------------------------------------------------

    def _menu_payload(self, pm: PortfolioMenu) -> Dict[str, Any]:
        menu = pm.platform_menu
        payload: Dict[str, Any] = {
            "key": menu.key,
            "label": menu.label,
            "section_type": menu.section_type,
            "component_keys": list(menu.component_keys or []),
            "blocks": [
                {"component_key": b.component_key, "order": b.order, "data": b.data}
                for b in self.block_repo.list_for_portfolio_menu(pm.id)
            ],
            "content": self._section_content(pm),
        }
        return payload

    def _section_content(self, pm: PortfolioMenu) -> Optional[Any]:
        template = to_section_template(pm.platform_menu.section_type)
        portfolio_id, menu_id = pm.portfolio_id, pm.platform_menu_id

        if template == "skills_template":
            rows = self._visible(SkillGroup, portfolio_id, menu_id)
            return [schemas.SkillGroupResponse.model_validate(r).model_dump() for r in rows]
        if template == "projects_template":
            rows = self._visible(Project, portfolio_id, menu_id)
            return [schemas.ProjectResponse.model_validate(r).model_dump() for r in rows]
        if template == "experience_template":
            rows = self._visible(Experience, portfolio_id, menu_id)
            return [schemas.ExperienceResponse.model_validate(r).model_dump() for r in rows]
        if template == "about_template":
            about = self._single(AboutContent, portfolio_id, menu_id)
            if about is None:
                return None
            data = schemas.AboutContentResponse.model_validate(about).model_dump()
            data["principles"] = [p for p in data["principles"] if p["is_visible"]]
            return data
        if template == "architecture_template":
            arch = self._single(ArchitectureContent, portfolio_id, menu_id)
            if arch is None:
                return None
            data = schemas.ArchitectureContentResponse.model_validate(arch).model_dump()
            data["pillars"] = [p for p in data["pillars"] if p["is_visible"]]
            return data
        if template == "contact_template":
            info = self._single(PersonInfo, portfolio_id, menu_id)
            return schemas.PersonInfoResponse.model_validate(info).model_dump() if info else None
        return None

    def _visible(self, model, portfolio_id: str, platform_menu_id: str) -> List[Any]:
        return (
            self.db.query(model)
            .filter(
                model.portfolio_id == portfolio_id,
                model.platform_menu_id == platform_menu_id,
                model.is_visible.is_(True),
            )
            .order_by(model.order)
            .all()
        )

    def _single(self, model, portfolio_id: str, platform_menu_id: str):
        return (
            self.db.query(model)
            .filter(model.portfolio_id == portfolio_id, model.platform_menu_id == platform_menu_id)
            .first()
        )

    def _hero(self, portfolio_id: str) -> Optional[Dict[str, Any]]:
        hero = self.db.query(HeroContent).filter(HeroContent.portfolio_id == portfolio_id).first()
        return schemas.HeroContentResponse.model_validate(hero).model_dump() if hero else None
