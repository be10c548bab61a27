# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Page-level navigation gate backed by a cached path -> menu item map."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from src.config import Settings, settings
from src.models import MenuItem, MenuRolePermission, Role
from src.services import role_service
from src.services.cache import DEFAULT_TTL_SECONDS, TTLCache
from src.services.permission_store import translate_store_errors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathEntry:
    menu_item_id: int
    menu_id: str


@dataclass(frozen=True)
class PathPermissionResult:
    """Outcome of a navigation check.

    ``requires_permission`` is False for paths no menu item claims.
    """

    requires_permission: bool
    allowed: bool
    reason: str | None = None
    menu_id: str | None = None


class PathPermissionCache:
    """Time-boxed snapshot of every menu item path.

    The snapshot is rebuilt lazily by whichever caller first sees it stale.
    Menu mutations must call ``invalidate`` so the next check reloads.
    """

    _KEY = "path_map"

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cache: TTLCache[dict[str, PathEntry]] = TTLCache(ttl_seconds, clock)

    def load_path_map(self, db: Session) -> dict[str, PathEntry]:
        """Return the path map, refreshing it from the store when stale."""
        cached = self._cache.get(self._KEY)
        if cached is not None:
            return cached

        with translate_store_errors():
            items = (
                db.query(MenuItem.id, MenuItem.menu_id, MenuItem.path)
                .filter(MenuItem.path.is_not(None))
                .all()
            )
        path_map = {
            normalize_path(path): PathEntry(menu_item_id=item_id, menu_id=menu_id)
            for item_id, menu_id, path in items
            if path
        }
        logger.debug(f"Loaded {len(path_map)} menu paths into the path cache")
        return self._cache.set(self._KEY, path_map)

    def invalidate(self) -> None:
        self._cache.invalidate()


def normalize_path(path: str) -> str:
    """Strip trailing slashes, keeping the root path as ``/``."""
    if not path:
        return "/"
    stripped = path.rstrip("/")
    return stripped or "/"


def resolve_menu_access(
    can_view: bool | None, is_accessible: bool | None, strict: bool
) -> bool:
    """Combine the base view flag with the tri-state override.

    An explicit ``is_accessible=False`` always denies. In strict mode the
    override, when set, replaces ``can_view``; otherwise ``can_view`` decides.
    In non-strict mode either flag being True allows.
    """
    if is_accessible is False:
        return False
    if strict:
        return bool(is_accessible if is_accessible is not None else can_view)
    return is_accessible is True or can_view is True


def find_menu_permission(
    db: Session, role: Role | None, role_name: str, menu_item_id: int
) -> MenuRolePermission | None:
    """Look up a menu permission row by role id first, then by role name."""
    with translate_store_errors():
        row = None
        if role is not None:
            row = (
                db.query(MenuRolePermission)
                .filter(
                    MenuRolePermission.role_id == role.id,
                    MenuRolePermission.menu_item_id == menu_item_id,
                )
                .first()
            )
        if row is None:
            row = (
                db.query(MenuRolePermission)
                .filter(
                    MenuRolePermission.role_name == role_name,
                    MenuRolePermission.menu_item_id == menu_item_id,
                )
                .first()
            )
    return row


def check_path_permission(
    db: Session,
    path: str,
    role: str,
    cache: PathPermissionCache,
    config: Settings | None = None,
) -> PathPermissionResult:
    """Decide whether ``role`` may navigate to ``path``.

    Raises:
        StoreUnavailableError: The menu tables could not be read.
    """
    config = config or settings
    path = normalize_path(path)
    entry = cache.load_path_map(db).get(path)
    if entry is None:
        return PathPermissionResult(requires_permission=False, allowed=True)

    resolved = role_service.resolve_role(db, role)
    role_name = resolved.name if resolved else role
    row = find_menu_permission(db, resolved, role_name, entry.menu_item_id)

    if row is None:
        if config.allow_missing_rows:
            return PathPermissionResult(
                requires_permission=False,
                allowed=True,
                reason="No permission row (allow mode)",
            )
        logger.warning(
            f"Path denied, no menu permission row: path={path} role={role} "
            f"menu_id={entry.menu_id}"
        )
        return PathPermissionResult(
            requires_permission=True,
            allowed=False,
            reason="No permission row (deny by default)",
            menu_id=entry.menu_id,
        )

    allowed = resolve_menu_access(
        row.can_view, row.is_accessible, config.strict_enforcement
    )
    reason = None
    if not allowed:
        reason = (
            "Explicitly revoked"
            if row.is_accessible is False
            else "Menu item not viewable for role"
        )
    return PathPermissionResult(
        requires_permission=True, allowed=allowed, reason=reason, menu_id=entry.menu_id
    )
