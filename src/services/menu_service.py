# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Menu hierarchy views and menu permission administration."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.config import Settings, settings
from src.exceptions import ConflictError, NotFoundError
from src.models import MenuItem, MenuRolePermission
from src.services import role_service
from src.services.cache import TTLCache
from src.services.path_permission_service import (
    PathPermissionCache,
    normalize_path,
    resolve_menu_access,
)
from src.services.permission_store import translate_store_errors

logger = logging.getLogger(__name__)


@dataclass
class MenuNode:
    """One node of a rendered menu tree."""

    id: str
    internal_id: int
    name: str
    path: str | None
    icon: str | None
    is_group: bool
    is_accessible: bool
    children: list[MenuNode] = field(default_factory=list)


@dataclass
class AccessCaches:
    """The caches derived from menu and role tables.

    Owned by the application and handed to every code path that mutates the
    underlying rows so it can invalidate them.
    """

    paths: PathPermissionCache
    menu_trees: TTLCache[list[MenuNode]]

    @classmethod
    def create(
        cls, ttl_seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> AccessCaches:
        return cls(
            paths=PathPermissionCache(ttl_seconds, clock),
            menu_trees=TTLCache(ttl_seconds, clock),
        )

    def invalidate(self) -> None:
        self.paths.invalidate()
        self.menu_trees.invalidate()


def build_forest(
    items: Iterable[MenuItem], is_accessible: Callable[[MenuItem], bool]
) -> list[MenuNode]:
    """Arrange menu items into a forest ordered by ``sort_order``.

    Items whose parent is not among ``items`` (deleted, inactive or filtered
    out) are promoted to roots. Items caught in a parent cycle are promoted
    too, so every item appears exactly once.
    """
    ordered = sorted(items, key=lambda i: (i.sort_order, i.id))
    known_ids = {i.id for i in ordered}
    children_of: dict[int | None, list[MenuItem]] = {}
    for item in ordered:
        parent = item.parent_id if item.parent_id in known_ids else None
        if item.parent_id is not None and parent is None:
            logger.debug(f"Promoting orphan menu item {item.menu_id} to root")
        children_of.setdefault(parent, []).append(item)

    visited: set[int] = set()

    def build(item: MenuItem) -> MenuNode:
        visited.add(item.id)
        return MenuNode(
            id=item.menu_id,
            internal_id=item.id,
            name=item.name,
            path=item.path,
            icon=item.icon,
            is_group=item.is_group,
            is_accessible=is_accessible(item),
            children=[
                build(child)
                for child in children_of.get(item.id, [])
                if child.id not in visited
            ],
        )

    forest = [build(item) for item in children_of.get(None, [])]
    for item in ordered:
        if item.id not in visited:
            logger.warning(f"Menu item {item.menu_id} is part of a parent cycle")
            forest.append(build(item))
    return forest


def _load_items(db: Session, include_inactive: bool) -> list[MenuItem]:
    with translate_store_errors():
        query = db.query(MenuItem)
        if not include_inactive:
            query = query.filter(MenuItem.is_active.is_(True))
        return query.order_by(MenuItem.sort_order, MenuItem.id).all()


def get_full_menu_tree(db: Session, include_inactive: bool = False) -> list[MenuNode]:
    """Menu tree without role filtering, for the management screens."""
    return build_forest(
        _load_items(db, include_inactive), lambda item: bool(item.is_active)
    )


def get_menu_permissions_for_role(
    db: Session, role: str
) -> list[MenuRolePermission]:
    """Return the menu permission rows of a role, by role id then by name."""
    resolved = role_service.resolve_role(db, role)
    role_name = resolved.name if resolved else role
    with translate_store_errors():
        rows = []
        if resolved is not None:
            rows = (
                db.query(MenuRolePermission)
                .filter(MenuRolePermission.role_id == resolved.id)
                .all()
            )
        if not rows:
            rows = (
                db.query(MenuRolePermission)
                .filter(MenuRolePermission.role_name == role_name)
                .all()
            )
    return rows


def get_menu_tree_for_role(
    db: Session,
    role: str,
    caches: AccessCaches,
    config: Settings | None = None,
) -> list[MenuNode]:
    """Active menu tree with per-node accessibility for ``role``.

    Nodes without a permission row are marked inaccessible. Results are cached
    per canonical role name.
    """
    config = config or settings
    role_name = role_service.canonical_role_name(db, role)
    cached = caches.menu_trees.get(role_name)
    if cached is not None:
        return cached

    rows = {row.menu_item_id: row for row in get_menu_permissions_for_role(db, role)}

    def accessible(item: MenuItem) -> bool:
        row = rows.get(item.id)
        if row is None:
            return False
        return resolve_menu_access(
            row.can_view, row.is_accessible, config.strict_enforcement
        )

    tree = build_forest(_load_items(db, include_inactive=False), accessible)
    return caches.menu_trees.set(role_name, tree)


def create_menu_item(
    db: Session,
    menu_id: str,
    name: str,
    path: str | None = None,
    parent_id: int | None = None,
    icon: str | None = None,
    sort_order: int = 0,
    is_group: bool = False,
    is_active: bool = True,
    caches: AccessCaches | None = None,
) -> MenuItem:
    """Add a menu item. ``menu_id`` and ``path`` must be unique."""
    if parent_id is not None:
        with translate_store_errors():
            parent = db.get(MenuItem, parent_id)
        if parent is None:
            raise NotFoundError(
                f"Parent menu item {parent_id} not found", {"parent_id": parent_id}
            )

    item = MenuItem(
        menu_id=menu_id.strip(),
        name=name,
        path=normalize_path(path) if path else None,
        parent_id=parent_id,
        icon=icon,
        sort_order=sort_order,
        is_group=is_group,
        is_active=is_active,
    )
    with translate_store_errors():
        db.add(item)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ConflictError(
                f"Menu item '{menu_id}' or path '{path}' already exists",
                {"menu_id": menu_id, "path": path},
            ) from e
        db.refresh(item)

    if caches is not None:
        caches.invalidate()
    return item


def save_menu_permission(
    db: Session,
    role: str,
    menu_item_id: int,
    can_view: bool,
    is_accessible: bool | None = None,
    caches: AccessCaches | None = None,
) -> MenuRolePermission:
    """Create or update the single permission row for (role, menu item)."""
    with translate_store_errors():
        item = db.get(MenuItem, menu_item_id)
    if item is None:
        raise NotFoundError(
            f"Menu item {menu_item_id} not found", {"menu_item_id": menu_item_id}
        )

    resolved = role_service.resolve_role(db, role)
    role_name = resolved.name if resolved else role.strip()
    with translate_store_errors():
        row = (
            db.query(MenuRolePermission)
            .filter(
                MenuRolePermission.role_name == role_name,
                MenuRolePermission.menu_item_id == menu_item_id,
            )
            .first()
        )
        if row is None:
            row = MenuRolePermission(role_name=role_name, menu_item_id=menu_item_id)
            db.add(row)
        row.role_id = resolved.id if resolved else None
        row.can_view = can_view
        row.is_accessible = is_accessible
        db.commit()
        db.refresh(row)

    logger.info(
        f"Menu permission saved: role={role_name} menu={item.menu_id} "
        f"can_view={can_view} is_accessible={is_accessible}"
    )
    if caches is not None:
        caches.invalidate()
    return row
