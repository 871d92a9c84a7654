"""Length ceilings for every user-entered text field.

Each field category has its own ceiling. Services call ``validate_text_length``
before persisting; values are never silently truncated.
"""

from typing import Iterable, Optional

from ..exceptions import ValidationError


class TextLimits:
    """Maximum lengths per field category (measured on the trimmed value)."""

    # Titles and names
    TITLE = 80
    NAME = 80

    # Short labels
    LABEL = 40
    TAG = 40

    SECTION_INTRO = 240

    # Descriptions and summaries
    SUMMARY = 600
    DESCRIPTION = 600

    LONG_TEXT = 1200
    BULLET = 160
    URL = 300
    CONTACT_MESSAGE = 500

    # Hero content
    HEADLINE = 100
    SUBHEADLINE = 1000
    HIGHLIGHT = 100

    # Architecture
    ARCHITECTURE_PILLAR_TITLE = 80
    ARCHITECTURE_POINT = 200

    # Platform menus
    PLATFORM_MENU_KEY_MAX = 50
    PLATFORM_MENU_LABEL = 80

    # Menu blocks
    MENU_BLOCK_TITLE = 80
    MENU_BLOCK_SUBTITLE = 240
    MENU_BLOCK_RICH_TEXT = 5000
    MENU_BLOCK_DESCRIPTION = 600
    MENU_BLOCK_URL = 300
    MENU_BLOCK_ITEM_VALUE = 80


TEXT_LIMITS = TextLimits()


def validate_text_length(text: Optional[str], limit: int, field_name: str) -> None:
    """Raise ValidationError when the trimmed *text* is longer than *limit*.

    ``None`` is accepted so that optional fields can be passed straight through.
    """
    if text is None:
        return
    length = len(text.strip())
    if length > limit:
        raise ValidationError(
            f"{field_name} must be {limit} characters or less (currently {length})",
            field=field_name,
            limit=limit,
            length=length,
        )


def validate_each(items: Optional[Iterable[str]], limit: int, field_name: str) -> None:
    """Apply ``validate_text_length`` to every entry of a list field."""
    if items is None:
        return
    for item in items:
        validate_text_length(item, limit, field_name)


def clean_list(items: Iterable[str]) -> list[str]:
    """Trim entries and drop blank ones, preserving order."""
    return [item.strip() for item in items if item and item.strip()]
