"""Portfolio model and its publication status."""

from enum import Enum

from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base, generate_id


class PortfolioStatus(str, Enum):
    """Publication workflow states.

    DRAFT -> READY_FOR_REVIEW -> PUBLISHED | REJECTED, and REJECTED may be
    resubmitted. PUBLISHED is terminal for the owner.
    """
    DRAFT = "DRAFT"
    READY_FOR_REVIEW = "READY_FOR_REVIEW"
    REJECTED = "REJECTED"
    PUBLISHED = "PUBLISHED"


_OWNED = dict(back_populates="portfolio", cascade="all, delete-orphan", passive_deletes=True)


class Portfolio(Base):
    """One user's complete content set and publication state.

    Deleting a portfolio removes its portfolio menus (and their blocks) and
    every content row it owns: skill groups, projects, experiences, about,
    architecture, person info and hero content.
    """

    __tablename__ = "portfolios"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(
        String(36),
        ForeignKey("admin_users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    slug = Column(String(100), unique=True, nullable=True)
    status = Column(String(30), nullable=False, default=PortfolioStatus.DRAFT.value)
    rejection_reason = Column(Text, nullable=True)
    is_public = Column(Boolean, nullable=False, default=False)
    approved_at = Column(DateTime(timezone=True), nullable=True)

    # Per-section intro copy shown above the public section; NULL means default.
    skills_intro = Column(Text, nullable=True)
    projects_intro = Column(Text, nullable=True)
    experience_intro = Column(Text, nullable=True)
    architecture_intro = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("AdminUser", back_populates="portfolio")

    menus = relationship("PortfolioMenu", **_OWNED)
    skill_groups = relationship("SkillGroup", **_OWNED)
    projects = relationship("Project", **_OWNED)
    experiences = relationship("Experience", **_OWNED)
    about_contents = relationship("AboutContent", **_OWNED)
    architecture_contents = relationship("ArchitectureContent", **_OWNED)
    person_infos = relationship("PersonInfo", **_OWNED)
    hero = relationship("HeroContent", uselist=False, **_OWNED)
