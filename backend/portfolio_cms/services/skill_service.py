"""Skill groups and their skills."""

from typing import Dict, List, Any

from ..core.text_limits import TEXT_LIMITS
from ..models import SkillGroup, Skill
from ..schemas.content import SkillCreate, SkillGroupCreate, SkillGroupUpdate, SkillUpdate
from .scope_service import AdminContext
from .section_base import SectionService


class SkillService(SectionService):
    section = "skills"

    def list_for_admin(self, ctx: AdminContext, platform_menu_id: str) -> List[SkillGroup]:
        if not ctx.portfolio_id:
            return []
        return (
            self.db.query(SkillGroup)
            .filter(
                SkillGroup.portfolio_id == ctx.portfolio_id,
                SkillGroup.platform_menu_id == platform_menu_id,
            )
            .order_by(SkillGroup.order, SkillGroup.created_at)
            .all()
        )

    def create_group(self, ctx: AdminContext, data: SkillGroupCreate) -> SkillGroup:
        self._guard(ctx, ctx.portfolio_id)
        self._require_menu(data.platform_menu_id)
        name = self._text(data.name, TEXT_LIMITS.TITLE, "Name", required=True)
        skills = self._items(data.skills, TEXT_LIMITS.TAG, "Skill")

        group = SkillGroup(
            portfolio_id=ctx.portfolio_id,
            platform_menu_id=data.platform_menu_id,
            name=name,
            order=data.order,
            skills=[Skill(name=s, order=i) for i, s in enumerate(skills)],
        )
        self.db.add(group)
        self._commit()
        self.db.refresh(group)
        self._done(group.portfolio_id)
        return group

    def update_group(self, ctx: AdminContext, group_id: str, data: SkillGroupUpdate) -> SkillGroup:
        group = self._get(SkillGroup, group_id, "skill_group")
        self._guard(ctx, group.portfolio_id)

        name = self._text(data.name, TEXT_LIMITS.TITLE, "Name", required=True)
        skills = self._items(data.skills, TEXT_LIMITS.TAG, "Skill")

        if name is not None:
            group.name = name
        if data.order is not None:
            group.order = data.order
        if skills is not None:
            group.skills = [Skill(name=s, order=i) for i, s in enumerate(skills)]

        self._commit()
        self.db.refresh(group)
        self._done(group.portfolio_id)
        return group

    def delete_group(self, ctx: AdminContext, group_id: str) -> None:
        group = self._get(SkillGroup, group_id, "skill_group")
        portfolio_id = group.portfolio_id
        self._guard(ctx, portfolio_id)
        self.db.delete(group)
        self._commit()
        self._done(portfolio_id)

    def set_group_visibility(self, ctx: AdminContext, group_id: str, is_visible: bool) -> Dict[str, Any]:
        group = self._get(SkillGroup, group_id, "skill_group")
        return self._set_visibility(ctx, group, group.portfolio_id, is_visible)

    # -- individual skills (owner resolved through the group) -------------

    def create_skill(self, ctx: AdminContext, data: SkillCreate) -> Skill:
        group = self._get(SkillGroup, data.skill_group_id, "skill_group")
        self._guard(ctx, group.portfolio_id)
        skill = Skill(
            skill_group_id=group.id,
            name=self._text(data.name, TEXT_LIMITS.TAG, "Skill", required=True),
            order=data.order,
        )
        self.db.add(skill)
        self._commit()
        self.db.refresh(skill)
        self._done(group.portfolio_id)
        return skill

    def update_skill(self, ctx: AdminContext, skill_id: str, data: SkillUpdate) -> Skill:
        skill = self._get(Skill, skill_id, "skill")
        portfolio_id = skill.skill_group.portfolio_id
        self._guard(ctx, portfolio_id)
        if data.name is not None:
            skill.name = self._text(data.name, TEXT_LIMITS.TAG, "Skill", required=True)
        if data.order is not None:
            skill.order = data.order
        self._commit()
        self.db.refresh(skill)
        self._done(portfolio_id)
        return skill

    def delete_skill(self, ctx: AdminContext, skill_id: str) -> None:
        skill = self._get(Skill, skill_id, "skill")
        portfolio_id = skill.skill_group.portfolio_id
        self._guard(ctx, portfolio_id)
        self.db.delete(skill)
        self._commit()
        self._done(portfolio_id)
