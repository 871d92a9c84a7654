"""Deep module for the menu model: platform menus, portfolio menus and blocks.

Platform menus are the global catalog of sections, managed by the super admin.
Each portfolio holds one PortfolioMenu per platform menu with a draft state
(``visible``/``order``) and a published snapshot
(``published_visible``/``published_order``). Component-based menus carry one
MenuBlock per component key, kept in step with the platform menu's
``component_keys``.

Consistency rules enforced here:
    - A platform menu key is lowercase ``[a-z0-9_-]+``, unique and never changes.
    - Creating a platform menu gives every portfolio an instance (hidden) with
      empty blocks; creating a portfolio gives it a shown and published instance
      of every enabled, renderable platform menu in catalog order.
    - A portfolio menu can only be made visible when its platform menu is
      enabled and renderable. Platform disablement hides it regardless of the
      stored flag.
    - Only ``publish_menu_configuration`` changes what visitors see.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core import revalidation
from ..core.components import (
    DEFAULT_MENU_COMPONENT_KEYS,
    DEFAULT_MENU_LABELS,
    NO_EDITOR_MESSAGE,
    UI_COMPONENT_REGISTRY,
    UIComponentDef,
    get_component_def,
    is_renderable,
    is_valid_component_key,
    to_section_template,
)
from ..core.text_limits import TEXT_LIMITS, validate_text_length
from ..exceptions import (
    ConflictError,
    ForbiddenError,
    HasContentError,
    NotFoundError,
    ValidationError,
)
from ..models import PlatformMenu, PortfolioMenu, MenuBlock, Portfolio
from ..repositories import (
    MenuBlockRepository,
    PlatformMenuRepository,
    PortfolioMenuRepository,
    PortfolioRepository,
)
from ..schemas.menu import PlatformMenuCreate, PlatformMenuUpdate
from ..schemas.menu_block import parse_block_data
from . import audit_service
from .permission_service import assert_writable, require_super_admin
from .scope_service import Actor, AdminContext

logger = logging.getLogger(__name__)

MENU_KEY_PATTERN = re.compile(r"^[a-z0-9_-]+$")

# Blocks are parked above this index while their order is rewritten so the
# unique (portfolio_menu_id, order) constraint never sees two rows on one slot.
BLOCK_REORDER_OFFSET = 10000

PLATFORM_DISABLED_MESSAGE = "This menu has been disabled by the platform administrator."


class MenuService:
    """All menu operations behind one interface.

    Platform (super admin):
        list_platform_menus, list_components, get_component,
        check_key_availability, create_platform_menu,
        update_platform_menu, delete_platform_menu, restore_default_component_keys,
        ensure_default_platform_menus
    Portfolio (owner, guarded):
        ensure_portfolio_menus, get_portfolio_menus, get_admin_sidebar_menus,
        update_portfolio_menu_visibility, reorder_portfolio_menus,
        publish_menu_configuration
    Blocks:
        get_menu_editor_data, update_menu_block
    Public:
        get_enabled_portfolio_menus
    """

    def __init__(self, db: Session, revalidator: Optional[revalidation.PathRevalidator] = None):
        self.db = db
        self.platform_repo = PlatformMenuRepository(db)
        self.portfolio_menu_repo = PortfolioMenuRepository(db)
        self.block_repo = MenuBlockRepository(db)
        self.portfolio_repo = PortfolioRepository(db)
        self.revalidator = revalidator or revalidation.get_revalidator()

    # ------------------------------------------------------------------
    # Platform menus
    # ------------------------------------------------------------------

    def list_platform_menus(self) -> List[PlatformMenu]:
        return self.platform_repo.list_all()

    @staticmethod
    def list_components() -> List[UIComponentDef]:
        return list(UI_COMPONENT_REGISTRY)

    @staticmethod
    def get_component(component_key: str) -> UIComponentDef:
        component = get_component_def(component_key)
        if component is None:
            raise NotFoundError("ui_component", component_key)
        return component

    def check_key_availability(self, key: str, exclude_id: Optional[str] = None) -> bool:
        """True when *key* is well-formed and not used by another menu."""
        normalized = (key or "").strip()
        try:
            self._validate_key_format(normalized)
        except ValidationError:
            return False
        existing = self.platform_repo.get_by_key(normalized)
        return existing is None or existing.id == exclude_id

    def create_platform_menu(self, actor: Actor, data: PlatformMenuCreate) -> PlatformMenu:
        """Create a platform menu and instantiate it for every existing portfolio.

        Each portfolio gets a hidden PortfolioMenu at the end of its order and
        one empty MenuBlock per component key. Everything is one transaction.
        """
        require_super_admin(actor)

        key = data.key.strip()
        self._validate_key_format(key)
        label = self._validate_label(data.label)
        component_keys = self._validate_component_keys(data.component_keys)
        section_type = self._validate_section_type(data.section_type)

        if self.platform_repo.get_by_key(key) is not None:
            raise ConflictError(f"A menu with key '{key}' already exists", field="key")

        menu = PlatformMenu(
            key=key,
            label=label,
            section_type=section_type,
            component_keys=component_keys,
            order=data.order if data.order is not None else self.platform_repo.next_order(),
            enabled=data.enabled,
        )
        self.db.add(menu)
        try:
            self.db.flush()
            for portfolio_id in self.portfolio_repo.list_ids():
                self._add_portfolio_menu(portfolio_id, menu)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"A menu with key '{key}' already exists", field="key")

        self.db.refresh(menu)
        logger.info(
            "Platform menu created",
            extra={"menu_key": key, "component_keys": component_keys},
        )
        audit_service.log(
            self.db, actor.id, "menu_create", "platform_menu", menu.id,
            details={"key": key, "component_keys": component_keys},
        )
        self.revalidator.revalidate_many([revalidation.admin_path(), revalidation.admin_path("platform-menus")])
        return menu

    def update_platform_menu(self, actor: Actor, menu_id: str, data: PlatformMenuUpdate) -> PlatformMenu:
        """Update label, enabled flag, order and component keys. The key never changes.

        A component_keys change reconciles the blocks of every portfolio's
        instance: blocks are matched by component key (data preserved),
        removed keys lose their block, new keys get an empty block.
        """
        require_super_admin(actor)
        menu = self.platform_repo.get_by_id(menu_id)

        label = self._validate_label(data.label) if data.label is not None else None
        new_keys = (
            self._validate_component_keys(data.component_keys)
            if data.component_keys is not None else None
        )

        if label is not None:
            menu.label = label
        if data.enabled is not None:
            menu.enabled = data.enabled
        if data.order is not None:
            menu.order = data.order

        reconciled = 0
        if new_keys is not None and new_keys != list(menu.component_keys or []):
            menu.component_keys = new_keys
            reconciled = self._reconcile_all_blocks(menu, new_keys)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Menu was modified concurrently; reload and try again")

        self.db.refresh(menu)
        logger.info(
            "Platform menu updated",
            extra={"menu_key": menu.key, "reconciled_portfolio_menus": reconciled},
        )
        audit_service.log(
            self.db, actor.id, "menu_update", "platform_menu", menu.id,
            details=data.model_dump(exclude_none=True),
        )
        self.revalidator.revalidate_many([revalidation.admin_path(), revalidation.PUBLIC_ROOT])
        return menu

    def delete_platform_menu(self, actor: Actor, menu_id: str) -> None:
        """Delete a platform menu that no content references.

        Raises HasContentError when any skill group, experience, project,
        about, contact or architecture row in any portfolio points at it.
        Otherwise its blocks, portfolio menus and the menu itself go in one
        transaction.
        """
        require_super_admin(actor)
        menu = self.platform_repo.get_by_id(menu_id)

        counts = self.platform_repo.content_counts(menu.id)
        if counts:
            raise HasContentError(menu.id, counts)

        key = menu.key
        portfolio_menu_ids = select(PortfolioMenu.id).where(PortfolioMenu.platform_menu_id == menu.id)
        try:
            self.db.query(MenuBlock).filter(
                MenuBlock.portfolio_menu_id.in_(portfolio_menu_ids)
            ).delete(synchronize_session=False)
            removed = self.db.query(PortfolioMenu).filter(
                PortfolioMenu.platform_menu_id == menu.id
            ).delete(synchronize_session=False)
            self.db.query(PlatformMenu).filter(PlatformMenu.id == menu.id).delete(
                synchronize_session=False
            )
            self.db.commit()
        except IntegrityError:
            # Content was attached between the count and the delete.
            self.db.rollback()
            raise HasContentError(menu_id, self.platform_repo.content_counts(menu_id))

        logger.info("Platform menu deleted", extra={"menu_key": key, "portfolio_menus": removed})
        audit_service.log(self.db, actor.id, "menu_delete", "platform_menu", menu_id, details={"key": key})
        self.revalidator.revalidate_many([revalidation.admin_path(), revalidation.PUBLIC_ROOT])

    def restore_default_component_keys(self, actor: Actor) -> List[str]:
        """Add any missing default component keys to the default menus.

        Existing keys (and their block data) are kept; defaults are appended
        in their default order. Returns the keys of menus that changed.
        """
        require_super_admin(actor)
        updated: List[str] = []
        for key, defaults in DEFAULT_MENU_COMPONENT_KEYS.items():
            menu = self.platform_repo.get_by_key(key)
            if menu is None:
                continue
            current = list(menu.component_keys or [])
            merged = current + [k for k in defaults if k not in current]
            if merged != current:
                menu.component_keys = merged
                self._reconcile_all_blocks(menu, merged)
                updated.append(key)

        self.db.commit()
        if updated:
            logger.info("Restored default component keys", extra={"menus": updated})
            audit_service.log(
                self.db, actor.id, "menu_restore_defaults", "platform_menu", None,
                details={"menus": updated},
            )
        return updated

    def ensure_default_platform_menus(self) -> List[str]:
        """Create the default platform menus that do not exist yet. Idempotent."""
        created: List[str] = []
        next_order = self.platform_repo.next_order()
        for key, component_keys in DEFAULT_MENU_COMPONENT_KEYS.items():
            if self.platform_repo.get_by_key(key) is not None:
                continue
            menu = PlatformMenu(
                key=key,
                label=DEFAULT_MENU_LABELS.get(key, key.title()),
                section_type=f"{key}_template",
                component_keys=list(component_keys),
                order=next_order,
                enabled=True,
            )
            next_order += 1
            self.db.add(menu)
            self.db.flush()
            for portfolio_id in self.portfolio_repo.list_ids():
                self._add_portfolio_menu(portfolio_id, menu)
            created.append(key)

        self.db.commit()
        if created:
            logger.info("Seeded default platform menus", extra={"menus": created})
        return created

    # ------------------------------------------------------------------
    # Portfolio menus
    # ------------------------------------------------------------------

    def ensure_portfolio_menus(self, portfolio_id: str, commit: bool = True) -> int:
        """Give *portfolio_id* an instance of every enabled platform menu. Idempotent.

        New instances start shown and published when the menu has an editor,
        appended after any existing ones. Returns the number of portfolio menus created.
        """
        existing = {
            pm.platform_menu_id
            for pm in self.db.query(PortfolioMenu.platform_menu_id)
            .filter(PortfolioMenu.portfolio_id == portfolio_id)
            .all()
        }
        created = 0
        for menu in self.platform_repo.list_enabled():
            if menu.id in existing:
                continue
            shown = is_renderable(menu.section_type, menu.component_keys)
            self._add_portfolio_menu(portfolio_id, menu, visible=shown)
            created += 1

        if commit:
            self.db.commit()
        if created:
            logger.info(
                "Created portfolio menus",
                extra={"portfolio_id": portfolio_id, "menus_created": created},
            )
        return created

    def get_portfolio_menus(self, portfolio_id: Optional[str]) -> List[PortfolioMenu]:
        """All menus of a portfolio, platform-disabled ones included, by draft order."""
        if not portfolio_id:
            return []
        return self.portfolio_menu_repo.list_for_portfolio(portfolio_id)

    def get_admin_sidebar_menus(self, portfolio_id: Optional[str]) -> List[PortfolioMenu]:
        """Menus the owner has switched on and the platform still offers."""
        return [
            pm for pm in self.get_portfolio_menus(portfolio_id)
            if pm.visible and pm.platform_menu.enabled and self.is_editable(pm)
        ]

    def update_portfolio_menu_visibility(
        self, ctx: AdminContext, portfolio_menu_id: str, visible: bool
    ) -> PortfolioMenu:
        """Change the draft ``visible`` flag. ``published_visible`` is untouched."""
        pm = self.portfolio_menu_repo.get_by_id(portfolio_menu_id)
        assert_writable(ctx, pm.portfolio_id)

        if visible:
            if not pm.platform_menu.enabled:
                raise ForbiddenError(PLATFORM_DISABLED_MESSAGE)
            if not self.is_editable(pm):
                raise ForbiddenError(NO_EDITOR_MESSAGE)

        pm.visible = visible
        self.db.commit()
        self.db.refresh(pm)
        self.revalidator.revalidate_many([revalidation.admin_path(), revalidation.admin_path("menus")])
        return pm

    def reorder_portfolio_menus(self, ctx: AdminContext, ordered_ids: Sequence[str]) -> List[PortfolioMenu]:
        """Assign draft order by position in *ordered_ids*.

        The whole batch is rejected if any id is unknown, belongs to another
        portfolio, or refers to a disabled or non-renderable menu.
        """
        portfolio_id = ctx.portfolio_id
        assert_writable(ctx, portfolio_id)

        if len(set(ordered_ids)) != len(ordered_ids):
            raise ValidationError("Menu order contains duplicate ids", field="ordered_ids")

        menus = {
            pm.id: pm
            for pm in self.portfolio_menu_repo.list_for_portfolio(portfolio_id)
        }
        for menu_id in ordered_ids:
            pm = menus.get(menu_id)
            if pm is None:
                raise ForbiddenError("Menu does not belong to this portfolio")
            if not pm.platform_menu.enabled:
                raise ValidationError(
                    f"Menu '{pm.platform_menu.key}' is disabled and cannot be reordered",
                    field="ordered_ids",
                )
            if not self.is_editable(pm):
                raise ValidationError(
                    f"Menu '{pm.platform_menu.key}' has no editor and cannot be reordered",
                    field="ordered_ids",
                )

        for index, menu_id in enumerate(ordered_ids):
            menus[menu_id].order = index

        self.db.commit()
        self.revalidator.revalidate_many([revalidation.admin_path(), revalidation.admin_path("menus")])
        return self.portfolio_menu_repo.list_for_portfolio(portfolio_id)

    def publish_menu_configuration(self, ctx: AdminContext) -> int:
        """Copy draft visibility and order into the published snapshot. Idempotent."""
        portfolio_id = ctx.portfolio_id
        assert_writable(ctx, portfolio_id)

        menus = self.portfolio_menu_repo.list_for_portfolio(portfolio_id)
        for pm in menus:
            pm.published_visible = pm.visible
            pm.published_order = pm.order
        self.db.commit()

        logger.info(
            "Menu configuration published",
            extra={"portfolio_id": portfolio_id, "menus": len(menus)},
        )
        slug = self._portfolio_slug(portfolio_id)
        self.revalidator.revalidate_many([revalidation.admin_path("menus"), revalidation.public_path(slug)])
        return len(menus)

    def get_enabled_portfolio_menus(self, portfolio_id: str) -> List[PortfolioMenu]:
        """Public read path: published, platform-enabled, renderable; by published order."""
        menus = [
            pm for pm in self.portfolio_menu_repo.list_for_portfolio(portfolio_id)
            if pm.published_visible and pm.platform_menu.enabled and self.is_editable(pm)
        ]
        return sorted(menus, key=lambda pm: (pm.published_order, pm.platform_menu.order))

    @staticmethod
    def is_editable(pm: PortfolioMenu) -> bool:
        menu = pm.platform_menu
        return is_renderable(menu.section_type, menu.component_keys)

    # ------------------------------------------------------------------
    # Menu blocks
    # ------------------------------------------------------------------

    def get_menu_editor_data(self, ctx: AdminContext, menu_key: str) -> Dict[str, Any]:
        """Platform menu, portfolio menu and ordered blocks for the scoped portfolio."""
        if not ctx.portfolio_id:
            raise NotFoundError("portfolio")

        menu = self.platform_repo.get_by_key(menu_key)
        if menu is None:
            raise NotFoundError("platform_menu", menu_key)
        pm = self.portfolio_menu_repo.get_for(ctx.portfolio_id, menu.id)
        if pm is None:
            raise NotFoundError("portfolio_menu", menu_key)

        component_keys = list(menu.component_keys or [])
        blocks = self.block_repo.list_for_portfolio_menu(pm.id) if component_keys else []
        return {
            "platform_menu": menu,
            "portfolio_menu_id": pm.id,
            "is_component_based": bool(component_keys),
            "blocks": blocks,
        }

    def update_menu_block(self, ctx: AdminContext, block_id: str, data: Dict[str, Any]) -> MenuBlock:
        """Replace a block's data after validating it against the component's schema."""
        block = self.block_repo.get_by_id(block_id)
        pm = block.portfolio_menu
        assert_writable(ctx, pm.portfolio_id)

        block.data = parse_block_data(block.component_key, data)
        self.db.commit()
        self.db.refresh(block)

        slug = self._portfolio_slug(pm.portfolio_id)
        self.revalidator.revalidate_many([
            revalidation.admin_path(f"sections/{pm.platform_menu.key}"),
            revalidation.public_path(slug),
        ])
        return block

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _add_portfolio_menu(
        self, portfolio_id: str, menu: PlatformMenu, visible: bool = False
    ) -> PortfolioMenu:
        order = self.portfolio_menu_repo.next_order(portfolio_id)
        pm = PortfolioMenu(
            portfolio_id=portfolio_id,
            platform_menu_id=menu.id,
            visible=visible,
            order=order,
            published_visible=visible,
            published_order=order,
        )
        self.db.add(pm)
        self.db.flush()
        for index, component_key in enumerate(menu.component_keys or []):
            self.db.add(MenuBlock(
                portfolio_menu_id=pm.id,
                component_key=component_key,
                order=index,
                data={},
            ))
        self.db.flush()
        return pm

    def _reconcile_all_blocks(self, menu: PlatformMenu, new_keys: List[str]) -> int:
        portfolio_menus = self.portfolio_menu_repo.list_for_platform_menu(menu.id)
        for pm in portfolio_menus:
            self._reconcile_blocks(pm, new_keys)
        return len(portfolio_menus)

    def _reconcile_blocks(self, pm: PortfolioMenu, new_keys: List[str]) -> None:
        """Match blocks to *new_keys* by component key, preserving their data.

        Kept blocks are first parked at BLOCK_REORDER_OFFSET + j and flushed,
        then given their final positions alongside freshly created blocks.
        """
        wanted = set(new_keys)
        kept: Dict[str, MenuBlock] = {}
        for block in self.block_repo.list_for_portfolio_menu(pm.id):
            if block.component_key in wanted and block.component_key not in kept:
                kept[block.component_key] = block
            else:
                self.db.delete(block)

        for j, block in enumerate(kept.values()):
            block.order = BLOCK_REORDER_OFFSET + j
        self.db.flush()

        for index, component_key in enumerate(new_keys):
            block = kept.get(component_key)
            if block is not None:
                block.order = index
            else:
                self.db.add(MenuBlock(
                    portfolio_menu_id=pm.id,
                    component_key=component_key,
                    order=index,
                    data={},
                ))
        self.db.flush()

    def _portfolio_slug(self, portfolio_id: Optional[str]) -> Optional[str]:
        if not portfolio_id:
            return None
        row = self.db.query(Portfolio.slug).filter(Portfolio.id == portfolio_id).first()
        return row.slug if row else None

    @staticmethod
    def _validate_key_format(key: str) -> None:
        if not key:
            raise ValidationError("Menu key is required", field="key")
        validate_text_length(key, TEXT_LIMITS.PLATFORM_MENU_KEY_MAX, "Key")
        if not MENU_KEY_PATTERN.match(key):
            raise ValidationError(
                "Key must contain only lowercase letters, numbers, hyphens and underscores",
                field="key",
            )

    @staticmethod
    def _validate_label(label: str) -> str:
        label = (label or "").strip()
        if not label:
            raise ValidationError("Label is required", field="label")
        validate_text_length(label, TEXT_LIMITS.PLATFORM_MENU_LABEL, "Label")
        return label

    @staticmethod
    def _validate_component_keys(component_keys: Sequence[str]) -> List[str]:
        keys = [k.strip() for k in component_keys or []]
        if not keys:
            raise ValidationError("Select at least one UI component", field="component_keys")
        invalid = [k for k in keys if not is_valid_component_key(k)]
        if invalid:
            raise ValidationError(
                f"Unknown UI component(s): {', '.join(invalid)}",
                field="component_keys",
            )
        if len(set(keys)) != len(keys):
            raise ValidationError("Each UI component can only be used once per menu", field="component_keys")
        return keys

    @staticmethod
    def _validate_section_type(section_type: Optional[str]) -> Optional[str]:
        if not section_type:
            return None
        template = to_section_template(section_type.strip())
        if template is None:
            raise ValidationError(f"Unknown section type: {section_type}", field="section_type")
        return template
