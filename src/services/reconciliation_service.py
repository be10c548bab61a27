# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Bulk permission edits, role reset and default seeding.

All three operations go through ``permission_store.upsert_rule`` and
find-then-delete, so none of them can create a second rule for the same
(role, resource_type, action) triple.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import Settings, settings
from src.exceptions import AccessControlError, InvalidTemplateError
from src.models import PermissionRule, Role
from src.models.enums import Action, Scope
from src.rbac.permissions import CANONICAL_RESOURCE_TYPES, canonical_resource_name
from src.rbac.roles import DEFAULT_ROLES, ROLE_TEMPLATES, template_entries
from src.services import permission_store, role_service
from src.services.permission_store import translate_store_errors

logger = logging.getLogger(__name__)

# Actions whose scope is capped at "own" for non-admin roles in bulk edits
GUARDED_ACTIONS = {Action.UPDATE, Action.DELETE}

UPSERTED = "upserted"
DELETED = "deleted"
NOOP = "noop"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class BulkEntry:
    role: str
    resource_type: str
    action: str
    scope: str
    description: str | None = None


@dataclass
class EntryOutcome:
    """What happened to one bulk entry."""

    index: int
    status: str
    role: str | None = None
    resource_type: str | None = None
    action: str | None = None
    scope: str | None = None
    rule_id: int | None = None
    error: str | None = None


@dataclass
class BulkUpsertResult:
    rules: list[PermissionRule] = field(default_factory=list)
    outcomes: list[EntryOutcome] = field(default_factory=list)

    def count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)


@dataclass
class SeedSummary:
    resource_types_created: list[str] = field(default_factory=list)
    roles_created: list[str] = field(default_factory=list)
    rules_upserted: int = 0


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def normalize_bulk_entry(raw: Mapping[str, Any] | BulkEntry) -> BulkEntry | None:
    """Trim an incoming entry. Returns None when a required field is blank."""
    if isinstance(raw, BulkEntry):
        raw = raw.__dict__
    entry = BulkEntry(
        role=_text(raw.get("role")),
        resource_type=_text(raw.get("resource_type")),
        action=_text(raw.get("action")).lower(),
        scope=_text(raw.get("scope")).lower(),
        description=str(raw["description"]) if raw.get("description") else None,
    )
    if not (entry.role and entry.resource_type and entry.action):
        return None
    return entry


def cap_scope(role: str, action: Action, scope: Scope, config: Settings) -> Scope:
    """Downgrade broad mutate scopes for non-admin roles to ``own``."""
    if config.is_admin_role(role) or action not in GUARDED_ACTIONS:
        return scope
    if scope > Scope.OWN:
        logger.warning(
            f"Downgrading {role} {action.value} scope from {scope.value} to own"
        )
        return Scope.OWN
    return scope


def _apply_entry(
    db: Session, entry: BulkEntry, config: Settings, outcome: EntryOutcome
) -> PermissionRule | None:
    action = Action(entry.action)
    scope = Scope(entry.scope) if entry.scope else Scope.NONE
    role = role_service.canonical_role_name(db, entry.role)
    resource = canonical_resource_name(entry.resource_type)
    scope = cap_scope(role, action, scope, config)
    outcome.role, outcome.resource_type = role, resource
    outcome.scope = scope.value

    if scope is Scope.NONE:
        existing = permission_store.find_rule(db, role, resource, action)
        if existing is None:
            outcome.status = NOOP
            return None
        permission_store.delete_rule(db, existing.id)
        outcome.status = DELETED
        outcome.rule_id = existing.id
        return None

    rule = permission_store.upsert_rule(
        db, role, resource, action, scope, entry.description or ""
    )
    outcome.status = UPSERTED
    outcome.rule_id = rule.id
    return rule


def bulk_upsert(
    db: Session,
    items: Iterable[Mapping[str, Any] | BulkEntry],
    config: Settings | None = None,
) -> BulkUpsertResult:
    """Apply many rule edits, each as its own committed unit.

    - entries missing role, resource type or action are skipped
    - non-admin update/delete entries asking for group/all get ``own``
    - scope ``none`` (or empty) deletes the matching rule if there is one
    - everything else is upserted

    A failing entry is rolled back and reported; entries already applied
    stay applied.
    """
    config = config or settings
    result = BulkUpsertResult()
    kept: dict[int, PermissionRule] = {}

    for index, raw in enumerate(items):
        entry = normalize_bulk_entry(raw)
        if entry is None:
            result.outcomes.append(EntryOutcome(index=index, status=SKIPPED))
            continue

        outcome = EntryOutcome(
            index=index,
            status=FAILED,
            role=entry.role,
            resource_type=entry.resource_type,
            action=entry.action,
            scope=entry.scope,
        )
        try:
            rule = _apply_entry(db, entry, config, outcome)
        except (AccessControlError, SQLAlchemyError, ValueError) as e:
            db.rollback()
            outcome.status = FAILED
            outcome.error = str(e)
            logger.error(f"Bulk permission entry {index} failed: {e}")
        else:
            if rule is not None:
                kept[rule.id] = rule
            elif outcome.status == DELETED:
                kept.pop(outcome.rule_id, None)
        result.outcomes.append(outcome)

    result.rules = list(kept.values())

    logger.info(
        f"Bulk permissions processed: {result.count(UPSERTED)} upserted, "
        f"{result.count(DELETED)} deleted, {result.count(FAILED)} failed"
    )
    return result


def reset_role(db: Session, role: str) -> list[PermissionRule]:
    """Replace every rule of a built-in role with its template.

    Destructive: custom rules for the role are removed. Rules are written
    under the stored spelling of the role, so a roles row named "User" gets
    the "user" template.

    Raises:
        InvalidTemplateError: ``role`` has no built-in template.
    """
    key = _text(role).lower()
    if key not in ROLE_TEMPLATES:
        raise InvalidTemplateError(_text(role))

    role_name = role_service.canonical_role_name(db, key)
    try:
        removed = permission_store.delete_rules_for_role(db, role_name, commit=False)
        rules = [
            permission_store.upsert_rule(
                db, role_name, resource, action, scope, description="", commit=False
            )
            for resource, action, scope in template_entries(key)
        ]
        with translate_store_errors():
            db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Role {role_name} reset to template: {removed} removed, {len(rules)} created"
    )
    return rules


def seed_defaults(db: Session) -> SeedSummary:
    """Create missing resource types and roles, then upsert template rules.

    Safe to re-run: existing custom rules for other triples are kept.
    """
    summary = SeedSummary()
    try:
        for resource in CANONICAL_RESOURCE_TYPES:
            _, created = permission_store.ensure_resource_type(
                db, resource["name"], resource["description"]
            )
            if created:
                summary.resource_types_created.append(resource["name"])

        for role_data in DEFAULT_ROLES:
            if role_service.resolve_role(db, role_data["name"]) is None:
                with translate_store_errors():
                    db.add(Role(**role_data))
                    db.flush()
                summary.roles_created.append(role_data["name"])

        for key in ROLE_TEMPLATES:
            role_name = role_service.canonical_role_name(db, key)
            for resource, action, scope in template_entries(key):
                permission_store.upsert_rule(
                    db, role_name, resource, action, scope, commit=False
                )
                summary.rules_upserted += 1
        with translate_store_errors():
            db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Default permissions seeded: {len(summary.resource_types_created)} resource "
        f"types and {len(summary.roles_created)} roles created, "
        f"{summary.rules_upserted} rules upserted"
    )
    return summary
