"""Projects with their bullets and tags."""

from typing import Any, Dict, List

from ..core.text_limits import TEXT_LIMITS
from ..models import Project, ProjectBullet, ProjectTag
from ..schemas.content import ProjectCreate, ProjectUpdate
from .scope_service import AdminContext
from .section_base import SectionService


class ProjectService(SectionService):
    section = "projects"

    def list_for_admin(self, ctx: AdminContext, platform_menu_id: str) -> List[Project]:
        if not ctx.portfolio_id:
            return []
        return (
            self.db.query(Project)
            .filter(
                Project.portfolio_id == ctx.portfolio_id,
                Project.platform_menu_id == platform_menu_id,
            )
            .order_by(Project.order, Project.created_at)
            .all()
        )

    def create(self, ctx: AdminContext, data: ProjectCreate) -> Project:
        self._guard(ctx, ctx.portfolio_id)
        self._require_menu(data.platform_menu_id)
        title = self._text(data.title, TEXT_LIMITS.TITLE, "Title", required=True)
        summary = self._text(data.summary, TEXT_LIMITS.SUMMARY, "Summary")
        bullets = self._items(data.bullets, TEXT_LIMITS.BULLET, "Bullet")
        tags = self._items(data.tags, TEXT_LIMITS.TAG, "Tag")

        project = Project(
            portfolio_id=ctx.portfolio_id,
            platform_menu_id=data.platform_menu_id,
            title=title,
            summary=summary,
            order=data.order,
            bullets=[ProjectBullet(text=b, order=i) for i, b in enumerate(bullets)],
            tags=[ProjectTag(name=t, order=i) for i, t in enumerate(tags)],
        )
        self.db.add(project)
        self._commit()
        self.db.refresh(project)
        self._done(project.portfolio_id)
        return project

    def update(self, ctx: AdminContext, project_id: str, data: ProjectUpdate) -> Project:
        """Apply provided fields; ``bullets``/``tags`` replace the whole list."""
        project = self._get(Project, project_id, "project")
        self._guard(ctx, project.portfolio_id)

        title = self._text(data.title, TEXT_LIMITS.TITLE, "Title", required=True)
        summary = self._text(data.summary, TEXT_LIMITS.SUMMARY, "Summary")
        bullets = self._items(data.bullets, TEXT_LIMITS.BULLET, "Bullet")
        tags = self._items(data.tags, TEXT_LIMITS.TAG, "Tag")

        if title is not None:
            project.title = title
        if data.summary is not None:
            project.summary = summary
        if data.order is not None:
            project.order = data.order
        if bullets is not None:
            project.bullets = [ProjectBullet(text=b, order=i) for i, b in enumerate(bullets)]
        if tags is not None:
            project.tags = [ProjectTag(name=t, order=i) for i, t in enumerate(tags)]

        self._commit()
        self.db.refresh(project)
        self._done(project.portfolio_id)
        return project

    def delete(self, ctx: AdminContext, project_id: str) -> None:
        project = self._get(Project, project_id, "project")
        portfolio_id = project.portfolio_id
        self._guard(ctx, portfolio_id)
        self.db.delete(project)
        self._commit()
        self._done(portfolio_id)

    def set_visibility(self, ctx: AdminContext, project_id: str, is_visible: bool) -> Dict[str, Any]:
        project = self._get(Project, project_id, "project")
        return self._set_visibility(ctx, project, project.portfolio_id, is_visible)
