# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Enumeration types for access-control models."""

from enum import Enum


class Action(str, Enum):
    """Operation a caller wants to perform on a resource."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    EXPORT = "export"


class Scope(str, Enum):
    """Breadth of resources a permission rule grants.

    Ordered from narrowest to broadest:
        NONE < OWN < GROUP < ALL
    """

    NONE = "none"  # No access
    OWN = "own"  # Resources the caller owns
    GROUP = "group"  # Resources owned by the caller's group
    ALL = "all"  # Any resource

    @property
    def rank(self) -> int:
        return _SCOPE_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Scope):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Scope):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Scope):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Scope):
            return NotImplemented
        return self.rank >= other.rank


_SCOPE_RANK = {Scope.NONE: 0, Scope.OWN: 1, Scope.GROUP: 2, Scope.ALL: 3}