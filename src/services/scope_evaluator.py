# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Decide whether a rule's scope covers a caller and a target resource."""

import logging

from src.models.enums import Scope
from src.rbac.context import Ownership, SessionIdentity

logger = logging.getLogger(__name__)


def _normalize_owner_id(owner_id: object) -> str | None:
    if owner_id is None:
        return None
    text = str(owner_id).strip()
    return text or None


def _normalize_group_id(owner_group_id: object) -> int | None:
    if owner_group_id is None or isinstance(owner_group_id, bool):
        return None
    if isinstance(owner_group_id, int):
        group_id = owner_group_id
    else:
        text = str(owner_group_id).strip()
        if not text:
            return None
        try:
            group_id = int(text)
        except ValueError:
            logger.warning(f"Ignoring non-numeric owner group id: {owner_group_id!r}")
            return None
    # 0 is the "no group assigned" marker, not a real group
    return group_id or None


def normalize_ownership(
    owner_id: object = None, owner_group_id: object = None
) -> Ownership:
    """Coerce request-supplied owner hints into an Ownership.

    Empty or whitespace-only strings become unknown (None) instead of being
    compared literally. Group ids arrive as ints or numeric strings.
    """
    return Ownership(
        owner_id=_normalize_owner_id(owner_id),
        owner_group_id=_normalize_group_id(owner_group_id),
    )


def _owns(caller: SessionIdentity, ownership: Ownership) -> bool:
    return ownership.owner_id is not None and ownership.owner_id == str(caller.user_id)


def evaluate_scope(
    scope: Scope | str, caller: SessionIdentity, ownership: Ownership
) -> bool:
    """Return True when ``scope`` grants the caller access to the resource.

    - none: deny
    - own: the caller must be the known owner
    - group: the resource's known group must be the caller's group; with no
      group information it falls back to ownership
    - all: allow

    Unknown ownership fails closed. Resolving the owner is the checking
    party's job.
    """
    try:
        scope = Scope(scope)
    except ValueError:
        logger.warning(f"Unknown scope value {scope!r}; denying")
        return False

    if scope is Scope.ALL:
        return True
    if scope is Scope.NONE:
        return False
    if scope is Scope.OWN:
        return _owns(caller, ownership)

    if ownership.owner_group_id is not None:
        return ownership.owner_group_id == caller.group_id
    return _owns(caller, ownership)
