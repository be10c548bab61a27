# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Value objects passed between the request gate and the check services."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionIdentity:
    """Who is asking. ``group_id`` is 0 while the user has no group."""

    user_id: str
    role: str
    group_id: int = 0

    @property
    def has_group(self) -> bool:
        return bool(self.group_id)


@dataclass(frozen=True)
class Ownership:
    """Owner metadata of the target resource. None means unknown."""

    owner_id: str | None = None
    owner_group_id: int | None = None
