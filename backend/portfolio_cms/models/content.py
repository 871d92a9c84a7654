"""Section content models.

Every top-level content row is scoped by ``portfolio_id`` (cascade on
portfolio deletion) and by ``platform_menu_id`` (RESTRICT, so a platform menu
cannot be dropped while content references it). Nested rows reach their
portfolio through one or two parent hops.
"""

from sqlalchemy import (
    Column, String, Text, Integer, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base, generate_id


def _portfolio_fk():
    return Column(
        String(36), ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=False, index=True
    )


def _platform_menu_fk():
    return Column(
        String(36), ForeignKey("platform_menus.id", ondelete="RESTRICT"), nullable=False, index=True
    )


def _children(target: str, back: str):
    return relationship(
        target,
        back_populates=back,
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=f"{target}.order",
    )


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------

class SkillGroup(Base):
    __tablename__ = "skill_groups"

    id = Column(String(36), primary_key=True, default=generate_id)
    portfolio_id = _portfolio_fk()
    platform_menu_id = _platform_menu_fk()
    name = Column(String(80), nullable=False)
    order = Column(Integer, nullable=False, default=0)
    is_visible = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    portfolio = relationship("Portfolio", back_populates="skill_groups")
    skills = _children("Skill", "skill_group")


class Skill(Base):
    __tablename__ = "skills"

    id = Column(String(36), primary_key=True, default=generate_id)
    skill_group_id = Column(
        String(36), ForeignKey("skill_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(40), nullable=False)
    order = Column(Integer, nullable=False, default=0)

    skill_group = relationship("SkillGroup", back_populates="skills")


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=generate_id)
    portfolio_id = _portfolio_fk()
    platform_menu_id = _platform_menu_fk()
    title = Column(String(80), nullable=False)
    summary = Column(Text, nullable=False, default="")
    order = Column(Integer, nullable=False, default=0)
    is_visible = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    portfolio = relationship("Portfolio", back_populates="projects")
    bullets = _children("ProjectBullet", "project")
    tags = _children("ProjectTag", "project")


class ProjectBullet(Base):
    __tablename__ = "project_bullets"

    id = Column(String(36), primary_key=True, default=generate_id)
    project_id = Column(
        String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text = Column(Text, nullable=False)
    order = Column(Integer, nullable=False, default=0)

    project = relationship("Project", back_populates="bullets")


class ProjectTag(Base):
    __tablename__ = "project_tags"

    id = Column(String(36), primary_key=True, default=generate_id)
    project_id = Column(
        String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(40), nullable=False)
    order = Column(Integer, nullable=False, default=0)

    project = relationship("Project", back_populates="tags")


# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------

class Experience(Base):
    __tablename__ = "experiences"

    id = Column(String(36), primary_key=True, default=generate_id)
    portfolio_id = _portfolio_fk()
    platform_menu_id = _platform_menu_fk()
    title = Column(String(80), nullable=False)
    company = Column(String(80), nullable=False, default="")
    location = Column(String(80), nullable=False, default="")
    period = Column(String(40), nullable=False, default="")
    order = Column(Integer, nullable=False, default=0)
    is_visible = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    portfolio = relationship("Portfolio", back_populates="experiences")
    bullets = _children("ExperienceBullet", "experience")
    tech = _children("ExperienceTech", "experience")


class ExperienceBullet(Base):
    __tablename__ = "experience_bullets"

    id = Column(String(36), primary_key=True, default=generate_id)
    experience_id = Column(
        String(36), ForeignKey("experiences.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text = Column(Text, nullable=False)
    order = Column(Integer, nullable=False, default=0)

    experience = relationship("Experience", back_populates="bullets")


class ExperienceTech(Base):
    __tablename__ = "experience_tech"

    id = Column(String(36), primary_key=True, default=generate_id)
    experience_id = Column(
        String(36), ForeignKey("experiences.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(40), nullable=False)
    order = Column(Integer, nullable=False, default=0)

    experience = relationship("Experience", back_populates="tech")


# ---------------------------------------------------------------------------
# About
# ---------------------------------------------------------------------------

class AboutContent(Base):
    """Single about section per (portfolio, menu); paragraphs kept as a JSON list."""

    __tablename__ = "about_contents"
    __table_args__ = (
        UniqueConstraint("portfolio_id", "platform_menu_id", name="uq_about_portfolio_menu"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    portfolio_id = _portfolio_fk()
    platform_menu_id = _platform_menu_fk()
    title = Column(String(80), nullable=False, default="")
    paragraphs = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    portfolio = relationship("Portfolio", back_populates="about_contents")
    principles = _children("AboutPrinciple", "about_content")


class AboutPrinciple(Base):
    __tablename__ = "about_principles"

    id = Column(String(36), primary_key=True, default=generate_id)
    about_content_id = Column(
        String(36), ForeignKey("about_contents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(80), nullable=False)
    description = Column(Text, nullable=False, default="")
    order = Column(Integer, nullable=False, default=0)
    is_visible = Column(Boolean, nullable=False, default=True)

    about_content = relationship("AboutContent", back_populates="principles")


# ---------------------------------------------------------------------------
# Architecture
# ---------------------------------------------------------------------------

class ArchitectureContent(Base):
    __tablename__ = "architecture_contents"
    __table_args__ = (
        UniqueConstraint("portfolio_id", "platform_menu_id", name="uq_architecture_portfolio_menu"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    portfolio_id = _portfolio_fk()
    platform_menu_id = _platform_menu_fk()
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    portfolio = relationship("Portfolio", back_populates="architecture_contents")
    pillars = _children("ArchitecturePillar", "architecture_content")


class ArchitecturePillar(Base):
    __tablename__ = "architecture_pillars"

    id = Column(String(36), primary_key=True, default=generate_id)
    architecture_content_id = Column(
        String(36),
        ForeignKey("architecture_contents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(80), nullable=False)
    order = Column(Integer, nullable=False, default=0)
    is_visible = Column(Boolean, nullable=False, default=True)

    architecture_content = relationship("ArchitectureContent", back_populates="pillars")
    points = _children("ArchitecturePoint", "pillar")


class ArchitecturePoint(Base):
    __tablename__ = "architecture_points"

    id = Column(String(36), primary_key=True, default=generate_id)
    pillar_id = Column(
        String(36), ForeignKey("architecture_pillars.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text = Column(Text, nullable=False)
    order = Column(Integer, nullable=False, default=0)

    pillar = relationship("ArchitecturePillar", back_populates="points")


# ---------------------------------------------------------------------------
# Contact and hero
# ---------------------------------------------------------------------------

class PersonInfo(Base):
    """Contact details shown by the contact section."""

    __tablename__ = "person_infos"
    __table_args__ = (
        UniqueConstraint("portfolio_id", "platform_menu_id", name="uq_person_info_portfolio_menu"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    portfolio_id = _portfolio_fk()
    platform_menu_id = _platform_menu_fk()
    name = Column(String(80), nullable=False, default="")
    role = Column(String(80), nullable=False, default="")
    location = Column(String(80), nullable=False, default="")
    email = Column(String(255), nullable=False, default="")
    linkedin = Column(String(300), nullable=True)
    message = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    portfolio = relationship("Portfolio", back_populates="person_infos")


class HeroContent(Base):
    """Landing headline for a portfolio; one row per portfolio."""

    __tablename__ = "hero_contents"

    id = Column(String(36), primary_key=True, default=generate_id)
    portfolio_id = Column(
        String(36), ForeignKey("portfolios.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    headline = Column(String(100), nullable=False, default="")
    subheadline = Column(Text, nullable=False, default="")
    highlights = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    portfolio = relationship("Portfolio", back_populates="hero")
