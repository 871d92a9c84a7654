"""Contact details (PersonInfo) and hero content."""

import re
from typing import Optional

from ..core.text_limits import TEXT_LIMITS
from ..exceptions import ValidationError
from ..models import HeroContent, PersonInfo
from ..schemas.content import HeroContentUpsert, PersonInfoUpsert
from .scope_service import AdminContext
from .section_base import SectionService

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ContactService(SectionService):
    section = "contact"

    def get_for_admin(self, ctx: AdminContext, platform_menu_id: str) -> Optional[PersonInfo]:
        if not ctx.portfolio_id:
            return None
        return self._find(ctx.portfolio_id, platform_menu_id)

    def upsert(self, ctx: AdminContext, data: PersonInfoUpsert) -> PersonInfo:
        self._guard(ctx, ctx.portfolio_id)
        self._require_menu(data.platform_menu_id)

        values = {
            "name": self._text(data.name, TEXT_LIMITS.NAME, "Name"),
            "role": self._text(data.role, TEXT_LIMITS.TITLE, "Role"),
            "location": self._text(data.location, TEXT_LIMITS.NAME, "Location"),
            "email": self._text(data.email, TEXT_LIMITS.URL, "Email"),
            "linkedin": self._text(data.linkedin, TEXT_LIMITS.URL, "LinkedIn") or None,
            "message": self._text(data.message, TEXT_LIMITS.CONTACT_MESSAGE, "Message") or None,
        }
        if values["email"] and not _EMAIL_RE.match(values["email"]):
            raise ValidationError("Enter a valid email address", field="email")

        info = self._find(ctx.portfolio_id, data.platform_menu_id)
        if info is None:
            info = PersonInfo(portfolio_id=ctx.portfolio_id, platform_menu_id=data.platform_menu_id)
            self.db.add(info)
        for name, value in values.items():
            setattr(info, name, value)

        self._commit()
        self.db.refresh(info)
        self._done(info.portfolio_id)
        return info

    def delete(self, ctx: AdminContext, info_id: str) -> None:
        info = self._get(PersonInfo, info_id, "person_info")
        portfolio_id = info.portfolio_id
        self._guard(ctx, portfolio_id)
        self.db.delete(info)
        self._commit()
        self._done(portfolio_id)

    def _find(self, portfolio_id: str, platform_menu_id: str) -> Optional[PersonInfo]:
        return (
            self.db.query(PersonInfo)
            .filter(
                PersonInfo.portfolio_id == portfolio_id,
                PersonInfo.platform_menu_id == platform_menu_id,
            )
            .first()
        )


class HeroService(SectionService):
    section = "hero"

    def get_for_admin(self, ctx: AdminContext) -> Optional[HeroContent]:
        if not ctx.portfolio_id:
            return None
        return self.db.query(HeroContent).filter(HeroContent.portfolio_id == ctx.portfolio_id).first()

    def upsert(self, ctx: AdminContext, data: HeroContentUpsert) -> HeroContent:
        self._guard(ctx, ctx.portfolio_id)
        headline = self._text(data.headline, TEXT_LIMITS.HEADLINE, "Headline")
        subheadline = self._text(data.subheadline, TEXT_LIMITS.SUBHEADLINE, "Subheadline")
        highlights = self._items(data.highlights, TEXT_LIMITS.HIGHLIGHT, "Highlight")

        hero = self.db.query(HeroContent).filter(HeroContent.portfolio_id == ctx.portfolio_id).first()
        if hero is None:
            hero = HeroContent(portfolio_id=ctx.portfolio_id)
            self.db.add(hero)
        hero.headline = headline
        hero.subheadline = subheadline
        hero.highlights = highlights

        self._commit()
        self.db.refresh(hero)
        self._done(hero.portfolio_id)
        return hero
