# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Database models package."""

from src.models.base import Base, TimestampMixin
from src.models.enums import Action, Scope
from src.models.menu_item import MenuItem
from src.models.menu_role_permission import MenuRolePermission
from src.models.permission_rule import PermissionRule
from src.models.resource_type import ResourceType
from src.models.role import Role
from src.models.user import User

__all__ = [
    "Action",
    "Base",
    "MenuItem",
    "MenuRolePermission",
    "PermissionRule",
    "ResourceType",
    "Role",
    "Scope",
    "TimestampMixin",
    "User",
]
