"""Architecture section: content -> pillars -> points.

Points reach their portfolio through two parent hops
(point -> pillar -> content), which is where ownership is resolved.
"""

from typing import Any, Dict, Optional

from ..core.text_limits import TEXT_LIMITS
from ..models import ArchitectureContent, ArchitecturePillar, ArchitecturePoint
from ..schemas.content import (
    ArchitecturePillarCreate,
    ArchitecturePillarUpdate,
    ArchitecturePointCreate,
    ArchitecturePointUpdate,
)
from .scope_service import AdminContext
from .section_base import SectionService


class ArchitectureService(SectionService):
    section = "architecture"

    def get_for_admin(self, ctx: AdminContext, platform_menu_id: str) -> Optional[ArchitectureContent]:
        if not ctx.portfolio_id:
            return None
        return self._find(ctx.portfolio_id, platform_menu_id)

    def ensure_content(self, ctx: AdminContext, platform_menu_id: str) -> ArchitectureContent:
        """Return the section's content row, creating it on first use."""
        self._guard(ctx, ctx.portfolio_id)
        self._require_menu(platform_menu_id)
        content = self._find(ctx.portfolio_id, platform_menu_id)
        if content is not None:
            return content

        content = ArchitectureContent(portfolio_id=ctx.portfolio_id, platform_menu_id=platform_menu_id)
        self.db.add(content)
        self._commit()
        self.db.refresh(content)
        self._done(content.portfolio_id)
        return content

    def delete_content(self, ctx: AdminContext, content_id: str) -> None:
        content = self._get(ArchitectureContent, content_id, "architecture_content")
        portfolio_id = content.portfolio_id
        self._guard(ctx, portfolio_id)
        self.db.delete(content)
        self._commit()
        self._done(portfolio_id)

    # -- pillars -----------------------------------------------------------

    def create_pillar(self, ctx: AdminContext, data: ArchitecturePillarCreate) -> ArchitecturePillar:
        content = self._get(ArchitectureContent, data.architecture_content_id, "architecture_content")
        self._guard(ctx, content.portfolio_id)
        title = self._text(data.title, TEXT_LIMITS.ARCHITECTURE_PILLAR_TITLE, "Title", required=True)
        points = self._items(data.points, TEXT_LIMITS.ARCHITECTURE_POINT, "Point")

        pillar = ArchitecturePillar(
            architecture_content_id=content.id,
            title=title,
            order=data.order,
            points=[ArchitecturePoint(text=p, order=i) for i, p in enumerate(points)],
        )
        self.db.add(pillar)
        self._commit()
        self.db.refresh(pillar)
        self._done(content.portfolio_id)
        return pillar

    def update_pillar(self, ctx: AdminContext, pillar_id: str, data: ArchitecturePillarUpdate) -> ArchitecturePillar:
        pillar = self._get(ArchitecturePillar, pillar_id, "architecture_pillar")
        portfolio_id = pillar.architecture_content.portfolio_id
        self._guard(ctx, portfolio_id)

        if data.title is not None:
            pillar.title = self._text(
                data.title, TEXT_LIMITS.ARCHITECTURE_PILLAR_TITLE, "Title", required=True
            )
        if data.order is not None:
            pillar.order = data.order

        self._commit()
        self.db.refresh(pillar)
        self._done(portfolio_id)
        return pillar

    def delete_pillar(self, ctx: AdminContext, pillar_id: str) -> None:
        pillar = self._get(ArchitecturePillar, pillar_id, "architecture_pillar")
        portfolio_id = pillar.architecture_content.portfolio_id
        self._guard(ctx, portfolio_id)
        self.db.delete(pillar)
        self._commit()
        self._done(portfolio_id)

    def set_pillar_visibility(self, ctx: AdminContext, pillar_id: str, is_visible: bool) -> Dict[str, Any]:
        pillar = self._get(ArchitecturePillar, pillar_id, "architecture_pillar")
        return self._set_visibility(ctx, pillar, pillar.architecture_content.portfolio_id, is_visible)

    # -- points ------------------------------------------------------------

    def create_point(self, ctx: AdminContext, data: ArchitecturePointCreate) -> ArchitecturePoint:
        pillar = self._get(ArchitecturePillar, data.pillar_id, "architecture_pillar")
        portfolio_id = pillar.architecture_content.portfolio_id
        self._guard(ctx, portfolio_id)
        point = ArchitecturePoint(
            pillar_id=pillar.id,
            text=self._text(data.text, TEXT_LIMITS.ARCHITECTURE_POINT, "Point", required=True),
            order=data.order,
        )
        self.db.add(point)
        self._commit()
        self.db.refresh(point)
        self._done(portfolio_id)
        return point

    def update_point(self, ctx: AdminContext, point_id: str, data: ArchitecturePointUpdate) -> ArchitecturePoint:
        point = self._get(ArchitecturePoint, point_id, "architecture_point")
        portfolio_id = point.pillar.architecture_content.portfolio_id
        self._guard(ctx, portfolio_id)

        if data.text is not None:
            point.text = self._text(data.text, TEXT_LIMITS.ARCHITECTURE_POINT, "Point", required=True)
        if data.order is not None:
            point.order = data.order

        self._commit()
        self.db.refresh(point)
        self._done(portfolio_id)
        return point

    def delete_point(self, ctx: AdminContext, point_id: str) -> None:
        point = self._get(ArchitecturePoint, point_id, "architecture_point")
        portfolio_id = point.pillar.architecture_content.portfolio_id
        self._guard(ctx, portfolio_id)
        self.db.delete(point)
        self._commit()
        self._done(portfolio_id)

    def _find(self, portfolio_id: str, platform_menu_id: str) -> Optional[ArchitectureContent]:
        return (
            self.db.query(ArchitectureContent)
            .filter(
                ArchitectureContent.portfolio_id == portfolio_id,
                ArchitectureContent.platform_menu_id == platform_menu_id,
            )
            .first()
        )
