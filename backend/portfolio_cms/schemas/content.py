"""Section content schemas (skills, projects, experience, about, architecture, contact, hero)."""

from pydantic import BaseModel, Field
from typing import List, Optional


class ItemVisibilityUpdate(BaseModel):
    is_visible: bool


class ItemVisibilityResponse(BaseModel):
    """Minimal projection returned by item visibility toggles."""
    id: str
    is_visible: bool

    model_config = {"from_attributes": True}


# -- Skills ---------------------------------------------------------------

class SkillGroupCreate(BaseModel):
    platform_menu_id: str
    name: str
    order: int = 0
    skills: List[str] = Field(default_factory=list)


class SkillGroupUpdate(BaseModel):
    name: Optional[str] = None
    order: Optional[int] = None
    skills: Optional[List[str]] = None


class SkillCreate(BaseModel):
    skill_group_id: str
    name: str
    order: int = 0


class SkillUpdate(BaseModel):
    name: Optional[str] = None
    order: Optional[int] = None


class SkillResponse(BaseModel):
    id: str
    name: str
    order: int

    model_config = {"from_attributes": True}


class SkillGroupResponse(BaseModel):
    id: str
    portfolio_id: str
    platform_menu_id: str
    name: str
    order: int
    is_visible: bool
    skills: List[SkillResponse] = []

    model_config = {"from_attributes": True}


# -- Projects -------------------------------------------------------------

class ProjectCreate(BaseModel):
    platform_menu_id: str
    title: str
    summary: str = ""
    order: int = 0
    bullets: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class ProjectUpdate(BaseModel):
    title: Optional[str] = None
    summary: Optional[str] = None
    order: Optional[int] = None
    bullets: Optional[List[str]] = None
    tags: Optional[List[str]] = None


class TextItemResponse(BaseModel):
    """Ordered child row holding a single string (bullet)."""
    id: str
    text: str
    order: int

    model_config = {"from_attributes": True}


class NamedItemResponse(BaseModel):
    """Ordered child row holding a short name (tag, tech)."""
    id: str
    name: str
    order: int

    model_config = {"from_attributes": True}


class ProjectResponse(BaseModel):
    id: str
    portfolio_id: str
    platform_menu_id: str
    title: str
    summary: str
    order: int
    is_visible: bool
    bullets: List[TextItemResponse] = []
    tags: List[NamedItemResponse] = []

    model_config = {"from_attributes": True}


# -- Experience -----------------------------------------------------------

class ExperienceCreate(BaseModel):
    platform_menu_id: str
    title: str
    company: str = ""
    location: str = ""
    period: str = ""
    order: int = 0
    bullets: List[str] = Field(default_factory=list)
    tech: List[str] = Field(default_factory=list)


class ExperienceUpdate(BaseModel):
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    period: Optional[str] = None
    order: Optional[int] = None
    bullets: Optional[List[str]] = None
    tech: Optional[List[str]] = None


class ExperienceResponse(BaseModel):
    id: str
    portfolio_id: str
    platform_menu_id: str
    title: str
    company: str
    location: str
    period: str
    order: int
    is_visible: bool
    bullets: List[TextItemResponse] = []
    tech: List[NamedItemResponse] = []

    model_config = {"from_attributes": True}


# -- About ----------------------------------------------------------------

class AboutContentUpsert(BaseModel):
    platform_menu_id: str
    title: str = ""
    paragraphs: List[str] = Field(default_factory=list)


class AboutPrincipleCreate(BaseModel):
    about_content_id: str
    title: str
    description: str = ""
    order: int = 0


class AboutPrincipleUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    order: Optional[int] = None


class AboutPrincipleResponse(BaseModel):
    id: str
    title: str
    description: str
    order: int
    is_visible: bool

    model_config = {"from_attributes": True}


class AboutContentResponse(BaseModel):
    id: str
    portfolio_id: str
    platform_menu_id: str
    title: str
    paragraphs: List[str]
    principles: List[AboutPrincipleResponse] = []

    model_config = {"from_attributes": True}


# -- Architecture ---------------------------------------------------------

class ArchitecturePillarCreate(BaseModel):
    architecture_content_id: str
    title: str
    order: int = 0
    points: List[str] = Field(default_factory=list)


class ArchitecturePillarUpdate(BaseModel):
    title: Optional[str] = None
    order: Optional[int] = None


class ArchitecturePointCreate(BaseModel):
    pillar_id: str
    text: str
    order: int = 0


class ArchitecturePointUpdate(BaseModel):
    text: Optional[str] = None
    order: Optional[int] = None


class ArchitecturePillarResponse(BaseModel):
    id: str
    title: str
    order: int
    is_visible: bool
    points: List[TextItemResponse] = []

    model_config = {"from_attributes": True}


class ArchitectureContentResponse(BaseModel):
    id: str
    portfolio_id: str
    platform_menu_id: str
    pillars: List[ArchitecturePillarResponse] = []

    model_config = {"from_attributes": True}


# -- Contact --------------------------------------------------------------

class PersonInfoUpsert(BaseModel):
    platform_menu_id: str
    name: str = ""
    role: str = ""
    location: str = ""
    email: str = ""
    linkedin: Optional[str] = None
    message: Optional[str] = None


class PersonInfoResponse(BaseModel):
    id: str
    portfolio_id: str
    platform_menu_id: str
    name: str
    role: str
    location: str
    email: str
    linkedin: Optional[str] = None
    message: Optional[str] = None

    model_config = {"from_attributes": True}


# -- Hero -----------------------------------------------------------------

class HeroContentUpsert(BaseModel):
    headline: str = ""
    subheadline: str = ""
    highlights: List[str] = Field(default_factory=list)


class HeroContentResponse(BaseModel):
    id: str
    portfolio_id: str
    headline: str
    subheadline: str
    highlights: List[str]

    model_config = {"from_attributes": True}
