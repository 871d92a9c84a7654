"""Database models."""

from .user import AdminUser, AuditLog, ONBOARDING_FINAL_STEP, ROLE_USER, ROLE_SUPER_ADMIN, VALID_ROLES
from .portfolio import Portfolio, PortfolioStatus
from .menu import PlatformMenu, PortfolioMenu, MenuBlock
from .content import (
    SkillGroup, Skill,
    Project, ProjectBullet, ProjectTag,
    Experience, ExperienceBullet, ExperienceTech,
    AboutContent, AboutPrinciple,
    ArchitectureContent, ArchitecturePillar, ArchitecturePoint,
    PersonInfo, HeroContent,
)

# Tables whose rows pin a platform menu in place (FK with ON DELETE RESTRICT).
MENU_CONTENT_MODELS = (
    SkillGroup, Experience, Project, AboutContent, PersonInfo, ArchitectureContent,
)

__all__ = [
    "AdminUser", "AuditLog", "ONBOARDING_FINAL_STEP", "ROLE_USER", "ROLE_SUPER_ADMIN", "VALID_ROLES",
    "Portfolio", "PortfolioStatus",
    "PlatformMenu", "PortfolioMenu", "MenuBlock",
    "SkillGroup", "Skill",
    "Project", "ProjectBullet", "ProjectTag",
    "Experience", "ExperienceBullet", "ExperienceTech",
    "AboutContent", "AboutPrinciple",
    "ArchitectureContent", "ArchitecturePillar", "ArchitecturePoint",
    "PersonInfo", "HeroContent",
    "MENU_CONTENT_MODELS",
]
