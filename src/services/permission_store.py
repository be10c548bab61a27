# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Persistence for permission rules and resource types.

Upserts are find-then-update-or-create. Under concurrent admin writes to the
same (role, resource_type, action) triple the last write wins; the unique
constraint on ``permission_rules`` is the authoritative duplicate guard.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

from sqlalchemy import func
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from src.exceptions import (
    ConflictError,
    DuplicateRuleError,
    NotFoundError,
    ResourceInUseError,
    StoreUnavailableError,
)
from src.models import PermissionRule, ResourceType
from src.models.enums import Action, Scope
from src.rbac.permissions import canonical_resource_name

logger = logging.getLogger(__name__)


@contextmanager
def translate_store_errors() -> Iterator[None]:
    """Re-raise driver-level failures as StoreUnavailableError.

    Integrity violations are data errors, not outages, and pass through.
    """
    try:
        yield
    except IntegrityError:
        raise
    except DBAPIError as e:
        logger.error(f"Permission store call failed: {e}")
        raise StoreUnavailableError(f"Permission store unavailable: {e.orig}") from e


def _value(item: Enum | str) -> str:
    return item.value if isinstance(item, Enum) else str(item)


def _action(action: Action | str) -> str:
    return Action(_value(action).strip().lower()).value


def _scope(scope: Scope | str) -> str:
    return Scope(_value(scope).strip().lower()).value


def _resource(resource_type: str) -> str:
    return canonical_resource_name(resource_type)


# Permission rules


def get_rule(db: Session, rule_id: int) -> PermissionRule | None:
    with translate_store_errors():
        return db.get(PermissionRule, rule_id)


def find_rule(
    db: Session, role: str, resource_type: str, action: Action | str
) -> PermissionRule | None:
    """Return the single rule for a (role, resource_type, action) triple."""
    with translate_store_errors():
        return (
            db.query(PermissionRule)
            .filter(
                PermissionRule.role == role,
                PermissionRule.resource_type == resource_type,
                PermissionRule.action == _action(action),
            )
            .first()
        )


def list_rules(
    db: Session,
    role: str | None = None,
    resource_type: str | None = None,
    action: Action | str | None = None,
) -> list[PermissionRule]:
    with translate_store_errors():
        query = db.query(PermissionRule)
        if role is not None:
            query = query.filter(PermissionRule.role == role)
        if resource_type is not None:
            query = query.filter(
                PermissionRule.resource_type == _resource(resource_type)
            )
        if action is not None:
            query = query.filter(PermissionRule.action == _action(action))
        return query.order_by(
            PermissionRule.role, PermissionRule.resource_type, PermissionRule.action
        ).all()


def _commit(db: Session, rule: PermissionRule, commit: bool) -> None:
    try:
        if commit:
            db.commit()
            db.refresh(rule)
        else:
            db.flush()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateRuleError(rule.role, rule.resource_type, rule.action) from e


def create_rule(
    db: Session,
    role: str,
    resource_type: str,
    action: Action | str,
    scope: Scope | str = Scope.OWN,
    description: str | None = None,
    commit: bool = True,
) -> PermissionRule:
    """Insert a new rule. Raises DuplicateRuleError if the triple exists."""
    action_value = _action(action)
    resource_type = _resource(resource_type)
    if find_rule(db, role, resource_type, action_value) is not None:
        raise DuplicateRuleError(role, resource_type, action_value)

    rule = PermissionRule(
        role=role,
        resource_type=resource_type,
        action=action_value,
        scope=_scope(scope),
        description=description or "",
    )
    with translate_store_errors():
        db.add(rule)
        _commit(db, rule, commit)
    return rule


def upsert_rule(
    db: Session,
    role: str,
    resource_type: str,
    action: Action | str,
    scope: Scope | str,
    description: str | None = None,
    commit: bool = True,
) -> PermissionRule:
    """Update the rule for the triple if present, otherwise create it.

    ``description`` is left untouched on update when None.
    """
    action_value = _action(action)
    resource_type = _resource(resource_type)
    scope_value = _scope(scope)
    rule = find_rule(db, role, resource_type, action_value)
    with translate_store_errors():
        if rule is None:
            rule = PermissionRule(
                role=role,
                resource_type=resource_type,
                action=action_value,
                scope=scope_value,
                description=description or "",
            )
            db.add(rule)
        else:
            rule.scope = scope_value
            if description is not None:
                rule.description = description
        _commit(db, rule, commit)
    return rule


def update_rule(
    db: Session,
    rule_id: int,
    role: str | None = None,
    resource_type: str | None = None,
    action: Action | str | None = None,
    scope: Scope | str | None = None,
    description: str | None = None,
) -> PermissionRule:
    """Edit a rule by id. Moving it onto an existing triple is refused."""
    rule = get_rule(db, rule_id)
    if rule is None:
        raise NotFoundError(f"Permission rule {rule_id} not found", {"id": rule_id})

    new_role = role if role is not None else rule.role
    new_resource = (
        _resource(resource_type) if resource_type is not None else rule.resource_type
    )
    new_action = _action(action) if action is not None else rule.action
    clash = find_rule(db, new_role, new_resource, new_action)
    if clash is not None and clash.id != rule.id:
        raise DuplicateRuleError(new_role, new_resource, new_action)

    with translate_store_errors():
        rule.role = new_role
        rule.resource_type = new_resource
        rule.action = new_action
        if scope is not None:
            rule.scope = _scope(scope)
        if description is not None:
            rule.description = description
        _commit(db, rule, commit=True)
    return rule


def delete_rule(db: Session, rule_id: int, commit: bool = True) -> bool:
    """Delete a rule by id. Returns False if it did not exist."""
    rule = get_rule(db, rule_id)
    if rule is None:
        return False
    with translate_store_errors():
        db.delete(rule)
        if commit:
            db.commit()
        else:
            db.flush()
    return True


def delete_rules_for_role(db: Session, role: str, commit: bool = True) -> int:
    """Delete every rule held by ``role``, under any spelling of its name.

    Returns the number removed.
    """
    with translate_store_errors():
        removed = (
            db.query(PermissionRule)
            .filter(func.lower(PermissionRule.role) == role.strip().lower())
            .delete(synchronize_session="fetch")
        )
        if commit:
            db.commit()
        else:
            db.flush()
    return removed


def count_rules_for_resource(db: Session, resource_type: str) -> int:
    with translate_store_errors():
        return (
            db.query(PermissionRule)
            .filter(PermissionRule.resource_type == resource_type)
            .count()
        )


# Resource types


def list_resource_types(db: Session) -> list[ResourceType]:
    with translate_store_errors():
        return db.query(ResourceType).order_by(ResourceType.name).all()


def get_resource_type(db: Session, resource_type_id: int) -> ResourceType | None:
    with translate_store_errors():
        return db.get(ResourceType, resource_type_id)


def find_resource_type(db: Session, name: str) -> ResourceType | None:
    with translate_store_errors():
        return db.query(ResourceType).filter(ResourceType.name == name).first()


def create_resource_type(
    db: Session, name: str, description: str | None = None
) -> ResourceType:
    name = name.strip()
    if find_resource_type(db, name) is not None:
        raise ConflictError(
            f"Resource type '{name}' already exists", {"resource_type": name}
        )
    resource_type = ResourceType(name=name, description=description)
    with translate_store_errors():
        db.add(resource_type)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ConflictError(
                f"Resource type '{name}' already exists", {"resource_type": name}
            ) from e
        db.refresh(resource_type)
    return resource_type


def ensure_resource_type(
    db: Session, name: str, description: str | None = None
) -> tuple[ResourceType, bool]:
    """Return the named resource type, creating and flushing it if absent.

    The caller owns the commit.

    Returns a tuple of (resource_type, created).
    """
    existing = find_resource_type(db, name)
    if existing is not None:
        return existing, False
    resource_type = ResourceType(name=name, description=description or name)
    with translate_store_errors():
        db.add(resource_type)
        db.flush()
    return resource_type, True


def update_resource_type(
    db: Session,
    resource_type_id: int,
    name: str | None = None,
    description: str | None = None,
) -> ResourceType:
    """Edit a resource type. Renaming is refused while rules reference it."""
    resource_type = get_resource_type(db, resource_type_id)
    if resource_type is None:
        raise NotFoundError(
            f"Resource type {resource_type_id} not found", {"id": resource_type_id}
        )

    if name is not None and name.strip() != resource_type.name:
        name = name.strip()
        usage = count_rules_for_resource(db, resource_type.name)
        if usage:
            raise ResourceInUseError(resource_type.name, usage)
        if find_resource_type(db, name) is not None:
            raise ConflictError(
                f"Resource type '{name}' already exists", {"resource_type": name}
            )
        resource_type.name = name
    if description is not None:
        resource_type.description = description

    with translate_store_errors():
        db.commit()
        db.refresh(resource_type)
    return resource_type


def delete_resource_type(db: Session, resource_type_id: int) -> None:
    """Delete a resource type that no rule references.

    Raises:
        NotFoundError: No resource type with this id.
        ResourceInUseError: Rules still reference the type; it is kept.
    """
    resource_type = get_resource_type(db, resource_type_id)
    if resource_type is None:
        raise NotFoundError(
            f"Resource type {resource_type_id} not found", {"id": resource_type_id}
        )

    usage = count_rules_for_resource(db, resource_type.name)
    if usage:
        logger.info(
            f"Refusing to delete resource type {resource_type.name}: "
            f"{usage} rule(s) reference it"
        )
        raise ResourceInUseError(resource_type.name, usage)

    with translate_store_errors():
        db.delete(resource_type)
        db.commit()
