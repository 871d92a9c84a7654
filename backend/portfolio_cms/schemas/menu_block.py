"""Typed payloads for menu block data, one schema per UI component.

Block ``data`` is stored as JSON, but every write passes through the schema
for the block's component key first. Unknown keys are rejected, and each text
field is checked against its length ceiling. Values are never truncated.

Every block may carry ``_disabledFields``: names of fields the owner has
switched off on the public page without deleting their content.
"""

import re
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..core.text_limits import TEXT_LIMITS, validate_text_length
from ..exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class _BlockData(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    disabled_fields: List[str] = Field(default_factory=list, alias="_disabledFields")

    def check_limits(self) -> None:
        """Raise ValidationError for any text over its ceiling."""


class BlockItem(BaseModel):
    model_config = ConfigDict(extra="forbid")

    value: str = ""
    visible: bool = True


class _ItemListBlock(_BlockData):
    items: List[BlockItem] = Field(default_factory=list)

    def check_limits(self) -> None:
        for item in self.items:
            validate_text_length(item.value, TEXT_LIMITS.MENU_BLOCK_ITEM_VALUE, "Item")


class TitleBlock(_BlockData):
    text: str = ""

    def check_limits(self) -> None:
        validate_text_length(self.text, TEXT_LIMITS.MENU_BLOCK_TITLE, "Title")


class SubtitleBlock(_BlockData):
    text: str = ""

    def check_limits(self) -> None:
        validate_text_length(self.text, TEXT_LIMITS.MENU_BLOCK_SUBTITLE, "Subtitle")


class RichTextBlock(_BlockData):
    content: str = ""

    def check_limits(self) -> None:
        validate_text_length(self.content, TEXT_LIMITS.MENU_BLOCK_RICH_TEXT, "Rich text")


class PillListBlock(_ItemListBlock):
    pass


class CardGridBlock(_ItemListBlock):
    pass


class TimelineBlock(_ItemListBlock):
    pass


class PillarCardBlock(_BlockData):
    title: str = ""
    description: str = ""

    def check_limits(self) -> None:
        validate_text_length(self.title, TEXT_LIMITS.MENU_BLOCK_TITLE, "Title")
        validate_text_length(self.description, TEXT_LIMITS.MENU_BLOCK_DESCRIPTION, "Description")


class ContactBlock(_BlockData):
    name: str = ""
    email: str = ""
    phone: str = ""
    message: str = ""

    def check_limits(self) -> None:
        validate_text_length(self.name, TEXT_LIMITS.NAME, "Name")
        validate_text_length(self.message, TEXT_LIMITS.CONTACT_MESSAGE, "Message")
        email = self.email.strip()
        if email and not _EMAIL_RE.match(email):
            raise ValidationError("Enter a valid email address", field="email")


class FileLinkItem(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    title: str = ""
    type: Literal["link", "upload"] = "link"
    file_url: Optional[str] = Field(default=None, alias="fileUrl")
    external_url: Optional[str] = Field(default=None, alias="externalUrl")
    visible: bool = True

    def check_limits(self) -> None:
        validate_text_length(self.title, TEXT_LIMITS.MENU_BLOCK_TITLE, "Title")
        validate_text_length(self.external_url, TEXT_LIMITS.MENU_BLOCK_URL, "URL")
        validate_text_length(self.file_url, TEXT_LIMITS.MENU_BLOCK_URL, "URL")


class FileLinkBlock(_BlockData):
    """Either a list of links/files or a single one given inline."""

    items: Optional[List[FileLinkItem]] = None
    title: str = ""
    type: Literal["link", "upload"] = "link"
    file_url: Optional[str] = Field(default=None, alias="fileUrl")
    external_url: Optional[str] = Field(default=None, alias="externalUrl")

    def check_limits(self) -> None:
        if self.items is not None:
            for item in self.items:
                item.check_limits()
            return
        validate_text_length(self.title, TEXT_LIMITS.MENU_BLOCK_TITLE, "Title")
        validate_text_length(self.external_url, TEXT_LIMITS.MENU_BLOCK_URL, "URL")
        validate_text_length(self.file_url, TEXT_LIMITS.MENU_BLOCK_URL, "URL")


BLOCK_SCHEMAS: Dict[str, Type[_BlockData]] = {
    "title": TitleBlock,
    "subtitle": SubtitleBlock,
    "rich_text": RichTextBlock,
    "pill_list": PillListBlock,
    "card_grid": CardGridBlock,
    "timeline": TimelineBlock,
    "pillar_card": PillarCardBlock,
    "contact_block": ContactBlock,
    "file_link": FileLinkBlock,
}


def parse_block_data(component_key: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate *data* for *component_key* and return the normalized JSON form.

    Raises:
        ValidationError: unknown component, malformed payload, or a text field
            over its limit.
    """
    schema = BLOCK_SCHEMAS.get(component_key)
    if schema is None:
        raise ValidationError(f"Unknown component: {component_key}", field="componentKey")

    try:
        block = schema.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "data"
        raise ValidationError(
            f"Invalid {component_key} block data at '{location}': {first.get('msg')}",
            field=location,
        )

    block.check_limits()
    return block.model_dump(by_alias=True, exclude_none=True)
