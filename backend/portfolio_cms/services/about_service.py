"""About section: one content row per (portfolio, menu) plus its principles."""

from typing import Any, Dict, Optional

from ..core.text_limits import TEXT_LIMITS
from ..models import AboutContent, AboutPrinciple
from ..schemas.content import AboutContentUpsert, AboutPrincipleCreate, AboutPrincipleUpdate
from .scope_service import AdminContext
from .section_base import SectionService


class AboutService(SectionService):
    section = "about"

    def get_for_admin(self, ctx: AdminContext, platform_menu_id: str) -> Optional[AboutContent]:
        if not ctx.portfolio_id:
            return None
        return self._find(ctx.portfolio_id, platform_menu_id)

    def upsert(self, ctx: AdminContext, data: AboutContentUpsert) -> AboutContent:
        """Create or replace the title and paragraphs of the about section."""
        self._guard(ctx, ctx.portfolio_id)
        self._require_menu(data.platform_menu_id)
        title = self._text(data.title, TEXT_LIMITS.TITLE, "Title")
        paragraphs = self._items(data.paragraphs, TEXT_LIMITS.LONG_TEXT, "Paragraph")

        content = self._find(ctx.portfolio_id, data.platform_menu_id)
        if content is None:
            content = AboutContent(portfolio_id=ctx.portfolio_id, platform_menu_id=data.platform_menu_id)
            self.db.add(content)
        content.title = title
        content.paragraphs = paragraphs

        self._commit()
        self.db.refresh(content)
        self._done(content.portfolio_id)
        return content

    def delete(self, ctx: AdminContext, content_id: str) -> None:
        content = self._get(AboutContent, content_id, "about_content")
        portfolio_id = content.portfolio_id
        self._guard(ctx, portfolio_id)
        self.db.delete(content)
        self._commit()
        self._done(portfolio_id)

    # -- principles --------------------------------------------------------

    def create_principle(self, ctx: AdminContext, data: AboutPrincipleCreate) -> AboutPrinciple:
        content = self._get(AboutContent, data.about_content_id, "about_content")
        self._guard(ctx, content.portfolio_id)
        principle = AboutPrinciple(
            about_content_id=content.id,
            title=self._text(data.title, TEXT_LIMITS.TITLE, "Title", required=True),
            description=self._text(data.description, TEXT_LIMITS.DESCRIPTION, "Description"),
            order=data.order,
        )
        self.db.add(principle)
        self._commit()
        self.db.refresh(principle)
        self._done(content.portfolio_id)
        return principle

    def update_principle(self, ctx: AdminContext, principle_id: str, data: AboutPrincipleUpdate) -> AboutPrinciple:
        principle = self._get(AboutPrinciple, principle_id, "about_principle")
        portfolio_id = principle.about_content.portfolio_id
        self._guard(ctx, portfolio_id)

        title = self._text(data.title, TEXT_LIMITS.TITLE, "Title", required=True)
        description = self._text(data.description, TEXT_LIMITS.DESCRIPTION, "Description")

        if title is not None:
            principle.title = title
        if data.description is not None:
            principle.description = description
        if data.order is not None:
            principle.order = data.order

        self._commit()
        self.db.refresh(principle)
        self._done(portfolio_id)
        return principle

    def delete_principle(self, ctx: AdminContext, principle_id: str) -> None:
        principle = self._get(AboutPrinciple, principle_id, "about_principle")
        portfolio_id = principle.about_content.portfolio_id
        self._guard(ctx, portfolio_id)
        self.db.delete(principle)
        self._commit()
        self._done(portfolio_id)

    def set_principle_visibility(self, ctx: AdminContext, principle_id: str, is_visible: bool) -> Dict[str, Any]:
        principle = self._get(AboutPrinciple, principle_id, "about_principle")
        return self._set_visibility(ctx, principle, principle.about_content.portfolio_id, is_visible)

    def _find(self, portfolio_id: str, platform_menu_id: str) -> Optional[AboutContent]:
        return (
            self.db.query(AboutContent)
            .filter(
                AboutContent.portfolio_id == portfolio_id,
                AboutContent.platform_menu_id == platform_menu_id,
            )
            .first()
        )
