"""Business logic services."""

from .menu_service import MenuService
from .portfolio_service import PortfolioService
from .public_service import PublicService
from .skill_service import SkillService
from .project_service import ProjectService
from .experience_service import ExperienceService
from .about_service import AboutService
from .architecture_service import ArchitectureService
from .contact_service import ContactService, HeroService

__all__ = [
    "MenuService",
    "PortfolioService",
    "PublicService",
    "SkillService",
    "ProjectService",
    "ExperienceService",
    "AboutService",
    "ArchitectureService",
    "ContactService",
    "HeroService",
]
