"""Tests for length ceilings and block payload schemas: pure functions, no DB."""

import pytest

from portfolio_cms.core.text_limits import TEXT_LIMITS, clean_list, validate_each, validate_text_length
from portfolio_cms.exceptions import ValidationError
from portfolio_cms.schemas.menu_block import BLOCK_SCHEMAS, parse_block_data
from portfolio_cms.core.components import UI_COMPONENT_KEYS


class TestValidateTextLength:

    def test_exactly_at_limit_passes(self):
        validate_text_length("x" * TEXT_LIMITS.TITLE, TEXT_LIMITS.TITLE, "Title")

    def test_one_over_limit_fails_with_counts(self):
        with pytest.raises(ValidationError) as exc:
            validate_text_length("x" * 81, TEXT_LIMITS.TITLE, "Title")
        assert exc.value.message == "Title must be 80 characters or less (currently 81)"
        assert exc.value.details == {"field": "Title", "limit": 80, "length": 81}
        assert exc.value.status_code == 400

    def test_measured_after_trimming(self):
        validate_text_length("   " + "x" * 80 + "   ", TEXT_LIMITS.TITLE, "Title")

    def test_none_passes(self):
        validate_text_length(None, TEXT_LIMITS.TITLE, "Title")

    def test_each_item_checked(self):
        with pytest.raises(ValidationError, match="Bullet must be 160"):
            validate_each(["ok", "y" * 161], TEXT_LIMITS.BULLET, "Bullet")

    def test_clean_list_drops_blanks(self):
        assert clean_list([" a ", "", "  ", "b"]) == ["a", "b"]


class TestBlockSchemas:

    def test_every_component_has_a_schema(self):
        assert set(BLOCK_SCHEMAS) == set(UI_COMPONENT_KEYS)

    def test_title_block(self):
        assert parse_block_data("title", {"text": "Hello"}) == {"text": "Hello", "_disabledFields": []}

    def test_title_over_limit(self):
        with pytest.raises(ValidationError, match=r"Title must be 80 characters or less \(currently 81\)"):
            parse_block_data("title", {"text": "t" * 81})

    def test_rich_text_limit(self):
        parse_block_data("rich_text", {"content": "c" * 5000})
        with pytest.raises(ValidationError):
            parse_block_data("rich_text", {"content": "c" * 5001})

    def test_item_list_blocks(self):
        data = parse_block_data("pill_list", {"items": [{"value": "Python"}, {"value": "SQL", "visible": False}]})
        assert data["items"] == [{"value": "Python", "visible": True}, {"value": "SQL", "visible": False}]

    def test_item_value_limit(self):
        with pytest.raises(ValidationError, match="Item must be 80"):
            parse_block_data("timeline", {"items": [{"value": "v" * 81}]})

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError) as exc:
            parse_block_data("subtitle", {"text": "hi", "color": "red"})
        assert exc.value.details["field"] == "color"

    def test_wrong_type_rejected(self):
        with pytest.raises(ValidationError):
            parse_block_data("pill_list", {"items": "not-a-list"})

    def test_unknown_component(self):
        with pytest.raises(ValidationError, match="Unknown component"):
            parse_block_data("carousel", {})

    def test_contact_email_format(self):
        parse_block_data("contact_block", {"email": ""})
        with pytest.raises(ValidationError, match="Enter a valid email address"):
            parse_block_data("contact_block", {"email": "nobody"})

    def test_disabled_fields_round_trip(self):
        data = parse_block_data("pillar_card", {"title": "T", "_disabledFields": ["description"]})
        assert data["_disabledFields"] == ["description"]

    def test_file_link_single_and_list(self):
        single = parse_block_data("file_link", {"title": "CV", "type": "upload", "fileUrl": "/files/cv.pdf"})
        assert single["fileUrl"] == "/files/cv.pdf"
        assert "items" not in single

        listed = parse_block_data(
            "file_link",
            {"items": [{"title": "Cert", "externalUrl": "https://example.com/cert"}]},
        )
        assert listed["items"][0]["externalUrl"] == "https://example.com/cert"

    def test_file_link_type_restricted(self):
        with pytest.raises(ValidationError):
            parse_block_data("file_link", {"type": "ftp"})

    def test_file_link_url_limit(self):
        with pytest.raises(ValidationError, match="URL must be 300"):
            parse_block_data("file_link", {"externalUrl": "u" * 301})
