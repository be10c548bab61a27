# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Single entry point for resource-level authorization decisions."""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from src.config import Settings, settings
from src.models import PermissionRule
from src.models.enums import Action
from src.rbac.context import SessionIdentity
from src.rbac.permissions import canonical_resource_name
from src.services import permission_store, role_service
from src.services.scope_evaluator import evaluate_scope, normalize_ownership

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PermissionCheck:
    """A request to perform ``action`` on a resource of ``resource_type``.

    ``owner_id`` / ``owner_group_id`` describe the target resource and may be
    omitted when unknown. Empty strings are treated as unknown.
    """

    user_id: str
    role: str
    group_id: int | None
    resource_type: str
    action: Action | str
    owner_id: str | None = None
    owner_group_id: int | str | None = None

    @classmethod
    def for_identity(
        cls,
        identity: SessionIdentity,
        resource_type: str,
        action: Action | str,
        owner_id: str | None = None,
        owner_group_id: int | str | None = None,
    ) -> "PermissionCheck":
        return cls(
            user_id=identity.user_id,
            role=identity.role,
            group_id=identity.group_id,
            resource_type=resource_type,
            action=action,
            owner_id=owner_id,
            owner_group_id=owner_group_id,
        )


def _find_matching_rule(
    db: Session, role: str, resource_type: str, action: Action
) -> PermissionRule | None:
    canonical = canonical_resource_name(resource_type)
    rule = permission_store.find_rule(db, role, canonical, action)
    if rule is None:
        raw = resource_type.strip().lower()
        if raw != canonical:
            rule = permission_store.find_rule(db, role, raw, action)
            if rule is not None:
                logger.warning(
                    f"Permission matched non-canonical resource name {raw!r} "
                    f"(canonical {canonical!r}) for role {role}"
                )
    return rule


def check_permission(
    db: Session, check: PermissionCheck, config: Settings | None = None
) -> bool:
    """Decide whether the caller may perform the requested action.

    Order of evaluation:
        1. canonicalize the role name against the roles table
        2. administrator roles are allowed outright
        3. callers without a group may read analytics-like resources; those
           handlers return empty results for them
        4. look up the (role, resource_type, action) rule; none means deny
        5. evaluate the rule's scope against the resource's ownership

    Raises:
        StoreUnavailableError: The store could not be queried. This is never
            turned into a True/False answer here.
        ValueError: ``action`` is not a known action.
    """
    config = config or settings
    action = (
        check.action
        if isinstance(check.action, Action)
        else Action(check.action.strip().lower())
    )
    role = role_service.canonical_role_name(db, check.role)
    resource = canonical_resource_name(check.resource_type)

    if config.is_admin_role(role):
        logger.debug(f"Admin bypass for role {role} on {action.value} {resource}")
        return True

    group_id = check.group_id or 0
    if (
        not group_id
        and action is Action.READ
        and resource in {r.lower() for r in config.analytics_resources}
    ):
        logger.info(
            f"Allowing groupless read of {resource} for user {check.user_id}; "
            "handler is expected to return an empty result"
        )
        return True

    rule = _find_matching_rule(db, role, check.resource_type, action)
    if rule is None:
        logger.warning(
            f"Permission denied (no rule): role={role} resource={resource} "
            f"action={action.value}"
        )
        return False

    caller = SessionIdentity(user_id=str(check.user_id), role=role, group_id=group_id)
    ownership = normalize_ownership(check.owner_id, check.owner_group_id)
    allowed = evaluate_scope(rule.scope, caller, ownership)
    if not allowed:
        logger.info(
            f"Permission denied by scope {rule.scope}: role={role} "
            f"resource={resource} action={action.value} user={check.user_id}"
        )
    return allowed


def has_admin_role(db: Session, role: str, config: Settings | None = None) -> bool:
    """Check whether ``role`` canonicalizes to a configured administrator role."""
    config = config or settings
    return config.is_admin_role(role_service.canonical_role_name(db, role))
