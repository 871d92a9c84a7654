"""Unit tests for MenuService: platform catalog, per-portfolio menus, blocks.

Runs against the service layer directly with a real session so foreign keys,
cascades and the unique block-order constraint are all in play.
"""

import logging

import pytest

from portfolio_cms.core.components import NO_EDITOR_MESSAGE
from portfolio_cms.exceptions import (
    ConflictError,
    ForbiddenError,
    HasContentError,
    NotFoundError,
    ValidationError,
)
from portfolio_cms.models import MenuBlock, PlatformMenu, PortfolioMenu
from portfolio_cms.schemas.content import SkillGroupCreate
from portfolio_cms.schemas.menu import PlatformMenuCreate, PlatformMenuUpdate
from portfolio_cms.services import MenuService, SkillService
from portfolio_cms.services.menu_service import PLATFORM_DISABLED_MESSAGE


def _menu_by_key(db, portfolio_id: str, key: str) -> PortfolioMenu:
    for pm in MenuService(db).get_portfolio_menus(portfolio_id):
        if pm.platform_menu.key == key:
            return pm
    raise AssertionError(f"no portfolio menu {key}")


def _block_keys(db, portfolio_menu_id: str) -> list:
    blocks = (
        db.query(MenuBlock)
        .filter(MenuBlock.portfolio_menu_id == portfolio_menu_id)
        .order_by(MenuBlock.order)
        .all()
    )
    return [(b.component_key, b.order) for b in blocks]


class TestDefaultMenus:

    def test_seeding_is_idempotent(self, db, menus):
        assert set(menus) == {"skills", "experience", "projects", "about", "architecture", "contact"}
        assert MenuService(db).ensure_default_platform_menus() == []

    def test_new_portfolio_gets_shown_instance_of_each_menu(self, db, owner):
        pms = MenuService(db).get_portfolio_menus(owner.portfolio.id)
        assert len(pms) == 6
        assert all(pm.visible and pm.published_visible for pm in pms)
        assert [pm.order for pm in pms] == list(range(6))
        assert [pm.published_order for pm in pms] == list(range(6))

    def test_new_portfolio_is_public_ready(self, db, owner):
        keys = [pm.platform_menu.key for pm in MenuService(db).get_enabled_portfolio_menus(owner.portfolio.id)]
        assert keys == ["skills", "experience", "projects", "about", "architecture", "contact"]

    def test_signup_logs_created_menus(self, db, menus, user_factory, caplog):
        caplog.set_level(logging.INFO, logger="portfolio_cms.services.menu_service")
        user = user_factory("logged.com")
        record = next(r for r in caplog.records if r.getMessage() == "Created portfolio menus")
        assert record.portfolio_id == user.portfolio.id
        assert record.menus_created == 6

    def test_instance_blocks_follow_component_keys(self, db, owner):
        pm = _menu_by_key(db, owner.portfolio.id, "skills")
        assert _block_keys(db, pm.id) == [("title", 0), ("pill_list", 1)]


class TestCreatePlatformMenu:

    def _create(self, db, admin_ctx, key="certs", component_keys=None, **kwargs):
        data = PlatformMenuCreate(
            key=key,
            label=kwargs.pop("label", "Certificates"),
            component_keys=component_keys or ["title", "file_link"],
            **kwargs,
        )
        return MenuService(db).create_platform_menu(admin_ctx.actor, data)

    def test_every_portfolio_gets_an_instance(self, db, admin_ctx, owner, other_owner):
        menu = self._create(db, admin_ctx)
        for user in (owner, other_owner):
            pm = _menu_by_key(db, user.portfolio.id, "certs")
            assert pm.platform_menu_id == menu.id
            assert pm.visible is False
            assert pm.published_visible is False
            assert pm.order == 6
            assert _block_keys(db, pm.id) == [("title", 0), ("file_link", 1)]

    def test_appended_after_existing_menus(self, db, admin_ctx, menus):
        menu = self._create(db, admin_ctx)
        assert menu.order == max(m.order for m in menus.values()) + 1

    def test_duplicate_key_conflicts(self, db, admin_ctx, menus):
        with pytest.raises(ConflictError):
            self._create(db, admin_ctx, key="skills")

    @pytest.mark.parametrize("key", ["Bad Key", "UPPER", "", "a/b"])
    def test_malformed_key_rejected(self, db, admin_ctx, key):
        with pytest.raises(ValidationError):
            self._create(db, admin_ctx, key=key)

    def test_unknown_component_rejected(self, db, admin_ctx):
        with pytest.raises(ValidationError, match="Unknown UI component"):
            self._create(db, admin_ctx, component_keys=["title", "carousel"])

    def test_duplicate_component_rejected(self, db, admin_ctx):
        with pytest.raises(ValidationError):
            self._create(db, admin_ctx, component_keys=["title", "title"])

    def test_requires_at_least_one_component(self, db, admin_ctx):
        data = PlatformMenuCreate(key="empty", label="Empty", component_keys=[])
        with pytest.raises(ValidationError):
            MenuService(db).create_platform_menu(admin_ctx.actor, data)

    def test_regular_user_cannot_create(self, db, owner_ctx):
        data = PlatformMenuCreate(key="certs", label="Certificates", component_keys=["title"])
        with pytest.raises(ForbiddenError):
            MenuService(db).create_platform_menu(owner_ctx.actor, data)
        assert db.query(PlatformMenu).filter(PlatformMenu.key == "certs").first() is None

    def test_label_over_limit_rejected(self, db, admin_ctx):
        with pytest.raises(ValidationError, match="Label must be 80 characters or less"):
            self._create(db, admin_ctx, label="x" * 81)


class TestComponentCatalog:

    def test_lists_every_component_with_labels(self):
        components = MenuService.list_components()
        assert [c.key for c in components][:2] == ["title", "subtitle"]
        assert len({c.key for c in components}) == len(components) == 9
        assert all(c.label and c.description for c in components)

    def test_single_component(self):
        assert MenuService.get_component("pill_list").label == "Pill / Tag list"

    def test_unknown_component_not_found(self):
        with pytest.raises(NotFoundError):
            MenuService.get_component("carousel")


class TestKeyAvailability:

    def test_taken_key_unavailable(self, db, menus):
        assert MenuService(db).check_key_availability("skills") is False

    def test_own_key_available_when_excluded(self, db, menus):
        assert MenuService(db).check_key_availability("skills", exclude_id=menus["skills"].id) is True

    def test_free_and_malformed_keys(self, db, menus):
        service = MenuService(db)
        assert service.check_key_availability("new-menu_2") is True
        assert service.check_key_availability("Has Spaces") is False


class TestUpdatePlatformMenu:

    def test_reconcile_preserves_block_data_by_key(self, db, admin_ctx, owner_ctx, menus):
        pm = _menu_by_key(db, owner_ctx.portfolio_id, "skills")
        title_block = next(b for b in pm.blocks if b.component_key == "title")
        MenuService(db).update_menu_block(owner_ctx, title_block.id, {"text": "What I use"})

        MenuService(db).update_platform_menu(
            admin_ctx.actor,
            menus["skills"].id,
            PlatformMenuUpdate(component_keys=["pill_list", "subtitle", "title"]),
        )

        assert _block_keys(db, pm.id) == [("pill_list", 0), ("subtitle", 1), ("title", 2)]
        kept = db.query(MenuBlock).filter(MenuBlock.id == title_block.id).one()
        assert kept.order == 2
        assert kept.data["text"] == "What I use"

    def test_removed_component_loses_its_block(self, db, admin_ctx, owner, menus):
        MenuService(db).update_platform_menu(
            admin_ctx.actor, menus["skills"].id, PlatformMenuUpdate(component_keys=["pill_list"])
        )
        pm = _menu_by_key(db, owner.portfolio.id, "skills")
        assert _block_keys(db, pm.id) == [("pill_list", 0)]

    def test_label_and_enabled(self, db, admin_ctx, menus):
        menu = MenuService(db).update_platform_menu(
            admin_ctx.actor, menus["about"].id, PlatformMenuUpdate(label="  Who I am ", enabled=False)
        )
        assert menu.label == "Who I am"
        assert menu.enabled is False
        assert menu.key == "about"

    def test_invalid_components_keep_label(self, db, admin_ctx, menus):
        with pytest.raises(ValidationError, match="Unknown UI component"):
            MenuService(db).update_platform_menu(
                admin_ctx.actor, menus["about"].id, PlatformMenuUpdate(label="Bio", component_keys=["carousel"])
            )
        db.refresh(menus["about"])
        assert menus["about"].label == "About"
        assert menus["about"].component_keys == ["title", "rich_text"]

    def test_missing_menu_not_found(self, db, admin_ctx):
        with pytest.raises(NotFoundError):
            MenuService(db).update_platform_menu(admin_ctx.actor, "nope", PlatformMenuUpdate(label="X"))

    def test_restore_defaults_appends_missing_keys(self, db, admin_ctx, owner, menus):
        service = MenuService(db)
        service.update_platform_menu(
            admin_ctx.actor, menus["skills"].id, PlatformMenuUpdate(component_keys=["pill_list"])
        )

        assert service.restore_default_component_keys(admin_ctx.actor) == ["skills"]

        db.refresh(menus["skills"])
        assert menus["skills"].component_keys == ["pill_list", "title"]
        pm = _menu_by_key(db, owner.portfolio.id, "skills")
        assert _block_keys(db, pm.id) == [("pill_list", 0), ("title", 1)]
        assert service.restore_default_component_keys(admin_ctx.actor) == []


class TestDeletePlatformMenu:

    def test_blocked_while_content_exists(self, db, admin_ctx, owner_ctx, menus):
        SkillService(db).create_group(
            owner_ctx, SkillGroupCreate(platform_menu_id=menus["skills"].id, name="Languages")
        )
        with pytest.raises(HasContentError) as exc:
            MenuService(db).delete_platform_menu(admin_ctx.actor, menus["skills"].id)
        assert exc.value.details["content"] == {"skill_groups": 1}
        assert db.query(PlatformMenu).filter(PlatformMenu.key == "skills").first() is not None

    def test_removes_instances_and_blocks(self, db, admin_ctx, owner, menus):
        menu_id = menus["about"].id
        MenuService(db).delete_platform_menu(admin_ctx.actor, menu_id)

        assert db.query(PlatformMenu).filter(PlatformMenu.id == menu_id).first() is None
        assert db.query(PortfolioMenu).filter(PortfolioMenu.platform_menu_id == menu_id).count() == 0
        assert len(MenuService(db).get_portfolio_menus(owner.portfolio.id)) == 5


class TestPortfolioMenuVisibility:

    def test_toggle_changes_draft_only(self, db, owner_ctx):
        pm = _menu_by_key(db, owner_ctx.portfolio_id, "projects")
        updated = MenuService(db).update_portfolio_menu_visibility(owner_ctx, pm.id, False)
        assert updated.visible is False
        assert updated.published_visible is True

    def test_disabled_platform_menu_cannot_be_shown(self, db, admin_ctx, owner_ctx, menus):
        MenuService(db).update_platform_menu(
            admin_ctx.actor, menus["projects"].id, PlatformMenuUpdate(enabled=False)
        )
        pm = _menu_by_key(db, owner_ctx.portfolio_id, "projects")
        with pytest.raises(ForbiddenError) as exc:
            MenuService(db).update_portfolio_menu_visibility(owner_ctx, pm.id, True)
        assert exc.value.message == PLATFORM_DISABLED_MESSAGE

    def test_non_renderable_menu_cannot_be_shown(self, db, owner_ctx):
        db.add(PlatformMenu(key="legacy", label="Legacy", section_type="custom_static", component_keys=[], order=9))
        db.commit()
        MenuService(db).ensure_portfolio_menus(owner_ctx.portfolio_id)
        pm = _menu_by_key(db, owner_ctx.portfolio_id, "legacy")
        assert MenuService.is_editable(pm) is False
        assert pm.visible is False
        assert pm.published_visible is False
        with pytest.raises(ForbiddenError) as exc:
            MenuService(db).update_portfolio_menu_visibility(owner_ctx, pm.id, True)
        assert exc.value.message == NO_EDITOR_MESSAGE

    def test_hiding_is_always_allowed(self, db, admin_ctx, owner_ctx, menus):
        pm = _menu_by_key(db, owner_ctx.portfolio_id, "projects")
        MenuService(db).update_portfolio_menu_visibility(owner_ctx, pm.id, True)
        MenuService(db).update_platform_menu(
            admin_ctx.actor, menus["projects"].id, PlatformMenuUpdate(enabled=False)
        )
        assert MenuService(db).update_portfolio_menu_visibility(owner_ctx, pm.id, False).visible is False

    def test_impersonation_cannot_toggle(self, db, impersonation_ctx):
        pm = _menu_by_key(db, impersonation_ctx.portfolio_id, "projects")
        with pytest.raises(ForbiddenError):
            MenuService(db).update_portfolio_menu_visibility(impersonation_ctx, pm.id, True)

    def test_foreign_menu_denied(self, db, owner_ctx, other_owner):
        pm = _menu_by_key(db, other_owner.portfolio.id, "projects")
        with pytest.raises(ForbiddenError):
            MenuService(db).update_portfolio_menu_visibility(owner_ctx, pm.id, True)

    def test_sidebar_lists_visible_enabled_menus(self, db, admin_ctx, owner_ctx, menus):
        service = MenuService(db)
        about = _menu_by_key(db, owner_ctx.portfolio_id, "about")
        service.update_portfolio_menu_visibility(owner_ctx, about.id, False)
        service.update_platform_menu(admin_ctx.actor, menus["contact"].id, PlatformMenuUpdate(enabled=False))
        keys = [m.platform_menu.key for m in service.get_admin_sidebar_menus(owner_ctx.portfolio_id)]
        assert keys == ["skills", "experience", "projects", "architecture"]


class TestReorder:

    def test_assigns_positions(self, db, owner_ctx):
        service = MenuService(db)
        ids = [pm.id for pm in service.get_portfolio_menus(owner_ctx.portfolio_id)]
        result = service.reorder_portfolio_menus(owner_ctx, list(reversed(ids)))
        assert [pm.id for pm in result] == list(reversed(ids))
        assert [pm.order for pm in result] == list(range(6))

    def test_foreign_id_rejects_whole_batch(self, db, owner_ctx, other_owner):
        service = MenuService(db)
        own = [pm.id for pm in service.get_portfolio_menus(owner_ctx.portfolio_id)]
        foreign = _menu_by_key(db, other_owner.portfolio.id, "skills").id
        with pytest.raises(ForbiddenError):
            service.reorder_portfolio_menus(owner_ctx, list(reversed(own)) + [foreign])
        db.expire_all()
        assert [pm.id for pm in service.get_portfolio_menus(owner_ctx.portfolio_id)] == own

    def test_disabled_menu_rejected(self, db, admin_ctx, owner_ctx, menus):
        MenuService(db).update_platform_menu(admin_ctx.actor, menus["about"].id, PlatformMenuUpdate(enabled=False))
        ids = [pm.id for pm in MenuService(db).get_portfolio_menus(owner_ctx.portfolio_id)]
        with pytest.raises(ValidationError):
            MenuService(db).reorder_portfolio_menus(owner_ctx, ids)

    def test_duplicate_ids_rejected(self, db, owner_ctx):
        pm = _menu_by_key(db, owner_ctx.portfolio_id, "about")
        with pytest.raises(ValidationError):
            MenuService(db).reorder_portfolio_menus(owner_ctx, [pm.id, pm.id])


class TestPublish:

    def test_copies_draft_into_published_snapshot(self, db, owner_ctx):
        service = MenuService(db)
        about = _menu_by_key(db, owner_ctx.portfolio_id, "about")
        service.update_portfolio_menu_visibility(owner_ctx, about.id, False)
        ids = [pm.id for pm in service.get_portfolio_menus(owner_ctx.portfolio_id)]
        service.reorder_portfolio_menus(owner_ctx, list(reversed(ids)))

        assert service.publish_menu_configuration(owner_ctx) == 6

        for pm in service.get_portfolio_menus(owner_ctx.portfolio_id):
            assert pm.published_visible == pm.visible
            assert pm.published_order == pm.order

    def test_idempotent(self, db, owner_ctx):
        service = MenuService(db)
        about = _menu_by_key(db, owner_ctx.portfolio_id, "about")
        service.update_portfolio_menu_visibility(owner_ctx, about.id, False)
        service.publish_menu_configuration(owner_ctx)
        first = [(pm.id, pm.published_visible, pm.published_order) for pm in service.get_portfolio_menus(owner_ctx.portfolio_id)]
        service.publish_menu_configuration(owner_ctx)
        second = [(pm.id, pm.published_visible, pm.published_order) for pm in service.get_portfolio_menus(owner_ctx.portfolio_id)]
        assert first == second

    def test_later_draft_edits_do_not_leak(self, db, owner_ctx):
        service = MenuService(db)
        about = _menu_by_key(db, owner_ctx.portfolio_id, "about")
        service.publish_menu_configuration(owner_ctx)
        service.update_portfolio_menu_visibility(owner_ctx, about.id, False)
        assert about.id in [pm.id for pm in service.get_enabled_portfolio_menus(owner_ctx.portfolio_id)]

    def test_platform_disable_hides_published_menu(self, db, admin_ctx, owner_ctx, menus):
        service = MenuService(db)
        about = _menu_by_key(db, owner_ctx.portfolio_id, "about")
        service.publish_menu_configuration(owner_ctx)
        assert about.id in [pm.id for pm in service.get_enabled_portfolio_menus(owner_ctx.portfolio_id)]

        service.update_platform_menu(admin_ctx.actor, menus["about"].id, PlatformMenuUpdate(enabled=False))
        assert about.id not in [pm.id for pm in service.get_enabled_portfolio_menus(owner_ctx.portfolio_id)]
        assert len(service.get_enabled_portfolio_menus(owner_ctx.portfolio_id)) == 5

    def test_impersonation_cannot_publish(self, db, impersonation_ctx):
        with pytest.raises(ForbiddenError):
            MenuService(db).publish_menu_configuration(impersonation_ctx)

    def test_publish_revalidates_public_page(self, db, owner_ctx, owner, revalidator):
        MenuService(db).publish_menu_configuration(owner_ctx)
        assert f"/portfolio/{owner.portfolio.slug}" in revalidator.recent()


class TestMenuBlocks:

    def test_editor_data(self, db, owner_ctx):
        data = MenuService(db).get_menu_editor_data(owner_ctx, "contact")
        assert data["is_component_based"] is True
        assert data["platform_menu"].key == "contact"
        assert [b.component_key for b in data["blocks"]] == ["contact_block"]

    def test_editor_readable_while_impersonating(self, db, impersonation_ctx):
        data = MenuService(db).get_menu_editor_data(impersonation_ctx, "skills")
        assert len(data["blocks"]) == 2

    def test_editor_needs_portfolio_in_scope(self, db, admin_ctx, menus):
        with pytest.raises(NotFoundError):
            MenuService(db).get_menu_editor_data(admin_ctx, "skills")

    def test_unknown_menu_key(self, db, owner_ctx):
        with pytest.raises(NotFoundError):
            MenuService(db).get_menu_editor_data(owner_ctx, "missing")

    def test_update_validates_against_component_schema(self, db, owner_ctx):
        block = MenuService(db).get_menu_editor_data(owner_ctx, "contact")["blocks"][0]
        with pytest.raises(ValidationError, match="valid email"):
            MenuService(db).update_menu_block(owner_ctx, block.id, {"email": "not-an-email"})
        with pytest.raises(ValidationError):
            MenuService(db).update_menu_block(owner_ctx, block.id, {"unexpected": "field"})

    def test_update_stores_normalized_data(self, db, owner_ctx):
        block = MenuService(db).get_menu_editor_data(owner_ctx, "contact")["blocks"][0]
        updated = MenuService(db).update_menu_block(
            owner_ctx, block.id, {"email": "me@example.com", "_disabledFields": ["phone"]}
        )
        assert updated.data["email"] == "me@example.com"
        assert updated.data["_disabledFields"] == ["phone"]

    def test_impersonation_cannot_update(self, db, impersonation_ctx):
        block = MenuService(db).get_menu_editor_data(impersonation_ctx, "skills")["blocks"][0]
        with pytest.raises(ForbiddenError):
            MenuService(db).update_menu_block(impersonation_ctx, block.id, {"text": "hi"})
