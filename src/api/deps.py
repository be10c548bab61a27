# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""API dependencies for dependency injection."""

import logging
from collections.abc import Callable

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from src.config import Settings, settings
from src.database import get_db
from src.exceptions import (
    AuthRequiredError,
    PermissionDeniedError,
    StoreUnavailableError,
)
from src.models import User
from src.models.enums import Action
from src.rbac.context import Ownership, SessionIdentity
from src.rbac.permissions import canonical_resource_name
from src.services import permission_service
from src.services.menu_service import AccessCaches
from src.services.permission_service import PermissionCheck
from src.services.permission_store import translate_store_errors

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "user"

OwnerResolver = Callable[[Request, Session], Ownership | None]

__all__ = [
    "get_access_caches",
    "get_current_admin",
    "get_current_identity",
    "get_db",
    "get_optional_identity",
    "get_settings",
    "require_permission",
    "resolve_identity",
]


def get_settings() -> Settings:
    """Get application settings."""
    return settings


def get_access_caches(request: Request) -> AccessCaches:
    """Get the path and menu tree caches owned by the application."""
    return request.app.state.access_caches


def _bearer_user_id(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    if token.startswith("user:"):
        token = token[len("user:") :]
    return token or None


def resolve_identity(db: Session, user_id: str) -> SessionIdentity | None:
    """Build the session identity of an active user, or None."""
    with translate_store_errors():
        user = db.get(User, user_id)
        if user is None or not user.is_active:
            return None
        role = user.role.name if user.role is not None else DEFAULT_ROLE
    return SessionIdentity(user_id=user.id, role=role, group_id=user.group_id or 0)


def get_optional_identity(
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None),
) -> SessionIdentity | None:
    """Get the caller's identity if authenticated, otherwise return None."""
    user_id = _bearer_user_id(authorization)
    if user_id is None:
        return None
    return resolve_identity(db, user_id)


def get_current_identity(
    identity: SessionIdentity | None = Depends(get_optional_identity),
) -> SessionIdentity:
    """Get the caller's identity or fail with 401."""
    if identity is None:
        raise AuthRequiredError()
    return identity


def get_current_admin(
    identity: SessionIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
) -> SessionIdentity:
    """Get the caller's identity and verify it holds an administrator role."""
    if not permission_service.has_admin_role(db, identity.role, config):
        raise PermissionDeniedError(
            "administration",
            "manage",
            message="Admin access required",
            hint="Sign in with an administrator role",
        )
    return identity


def require_permission(
    resource: str,
    action: Action | str,
    resolve_owner: OwnerResolver | None = None,
) -> Callable[..., SessionIdentity]:
    """Dependency for rule-based authorization of one (resource, action).

    ``resolve_owner`` loads the ownership of the addressed resource, e.g. from
    a path parameter. Without it, only ``all`` scopes (and the bypasses) allow.
    """
    action = Action(action.value if isinstance(action, Action) else action.lower())

    def dependency(
        request: Request,
        identity: SessionIdentity = Depends(get_current_identity),
        db: Session = Depends(get_db),
        config: Settings = Depends(get_settings),
    ) -> SessionIdentity:
        try:
            ownership = resolve_owner(request, db) if resolve_owner else None
            ownership = ownership or Ownership()
            allowed = permission_service.check_permission(
                db,
                PermissionCheck.for_identity(
                    identity,
                    resource,
                    action,
                    owner_id=ownership.owner_id,
                    owner_group_id=ownership.owner_group_id,
                ),
                config,
            )
        except StoreUnavailableError:
            if action is Action.READ and config.allows_fail_open_read(
                canonical_resource_name(resource)
            ):
                logger.warning(
                    f"Permission store unavailable, allowing read of {resource} "
                    f"for user {identity.user_id}"
                )
                return identity
            raise

        if not allowed:
            raise PermissionDeniedError(resource, action.value)
        return identity

    return dependency
