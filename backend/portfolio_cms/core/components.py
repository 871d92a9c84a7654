"""Registry of UI components and section templates.

Menus are pages composed of a fixed set of UI components; there is no
free-text component creation. A section is renderable when its template has
an admin editor or when its menu lists at least one component.
"""

from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class UIComponentDef:
    key: str
    label: str
    description: str


UI_COMPONENT_REGISTRY: tuple[UIComponentDef, ...] = (
    UIComponentDef("title", "Title / Headline", "Section title or headline"),
    UIComponentDef("subtitle", "Subtitle / Intro", "Intro or subtitle text"),
    UIComponentDef("rich_text", "Rich text", "Formatted body content"),
    UIComponentDef("pill_list", "Pill / Tag list", "List of pills or tags"),
    UIComponentDef("card_grid", "Card grid", "Grid of cards (e.g. projects)"),
    UIComponentDef("timeline", "Timeline item", "Timeline or experience entry"),
    UIComponentDef("pillar_card", "Pillar / Feature card", "Title + description card"),
    UIComponentDef("contact_block", "Contact block", "Email, phone, links"),
    UIComponentDef("file_link", "File / Link", "File upload or external link (e.g. certificate)"),
)

UI_COMPONENT_KEYS = frozenset(c.key for c in UI_COMPONENT_REGISTRY)

# Section templates that ship with a dedicated admin editor.
SECTION_TEMPLATES_WITH_EDITORS = frozenset({
    "about_template",
    "skills_template",
    "projects_template",
    "experience_template",
    "architecture_template",
    "contact_template",
})

SECTION_TEMPLATES = SECTION_TEMPLATES_WITH_EDITORS | {"custom_static"}

# Default menus created on first startup, with the components each one is built from.
DEFAULT_MENU_COMPONENT_KEYS: dict[str, list[str]] = {
    "skills": ["title", "pill_list"],
    "experience": ["title", "timeline"],
    "projects": ["title", "card_grid"],
    "about": ["title", "rich_text"],
    "architecture": ["title", "pillar_card"],
    "contact": ["contact_block"],
}

DEFAULT_MENU_LABELS: dict[str, str] = {
    "skills": "Skills",
    "experience": "Experience",
    "projects": "Projects",
    "about": "About",
    "architecture": "Architecture",
    "contact": "Contact",
}

NO_EDITOR_MESSAGE = "This section is defined by the platform but does not have an editor yet."


def is_valid_component_key(key: str) -> bool:
    return key in UI_COMPONENT_KEYS


def get_component_def(key: str) -> Optional[UIComponentDef]:
    for component in UI_COMPONENT_REGISTRY:
        if component.key == key:
            return component
    return None


def to_section_template(section_type: Optional[str]) -> Optional[str]:
    """Normalize a legacy section type to its template form ("skills" -> "skills_template")."""
    if not section_type:
        return None
    if section_type in SECTION_TEMPLATES:
        return section_type
    candidate = f"{section_type.removesuffix('_template')}_template"
    return candidate if candidate in SECTION_TEMPLATES else None


def has_section_editor(section_type: Optional[str]) -> bool:
    return to_section_template(section_type) in SECTION_TEMPLATES_WITH_EDITORS


def is_renderable(section_type: Optional[str], component_keys: Optional[Sequence[str]]) -> bool:
    """True when a menu has something to edit and render."""
    return has_section_editor(section_type) or bool(component_keys)
