# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Role lookup and canonicalization."""

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.exceptions import ConflictError
from src.models import Role
from src.services.permission_store import translate_store_errors


def resolve_role(db: Session, name: str) -> Role | None:
    """Find a role by exact name, falling back to a case-insensitive match."""
    if not name:
        return None
    name = name.strip()
    with translate_store_errors():
        role = db.query(Role).filter(Role.name == name).first()
        if role is None:
            role = db.query(Role).filter(func.lower(Role.name) == name.lower()).first()
    return role


def canonical_role_name(db: Session, name: str) -> str:
    """Return the stored spelling of a role, or the raw name when unknown.

    Unresolved roles are passed through so rules for roles that were never
    seeded into the roles table still apply.
    """
    role = resolve_role(db, name)
    return role.name if role else name.strip()


def list_roles(db: Session, include_inactive: bool = True) -> list[Role]:
    with translate_store_errors():
        query = db.query(Role)
        if not include_inactive:
            query = query.filter(Role.is_active.is_(True))
        return query.order_by(Role.name).all()


def create_role(
    db: Session, name: str, display_name: str | None = None, is_active: bool = True
) -> Role:
    """Create a role. Names are unique regardless of case."""
    name = name.strip()
    if resolve_role(db, name) is not None:
        raise ConflictError(f"Role '{name}' already exists", {"role": name})

    role = Role(name=name, display_name=display_name or name, is_active=is_active)
    with translate_store_errors():
        db.add(role)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ConflictError(f"Role '{name}' already exists", {"role": name}) from e
        db.refresh(role)
    return role
