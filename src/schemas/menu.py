# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Menu tree and menu permission schemas."""

from pydantic import BaseModel, ConfigDict, Field


class MenuNodeSchema(BaseModel):
    """One node of a menu tree, children nested."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    internal_id: int
    name: str
    path: str | None
    icon: str | None
    is_group: bool
    is_accessible: bool
    children: list["MenuNodeSchema"] = []


class MenuItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    menu_id: str
    name: str
    path: str | None
    icon: str | None
    parent_id: int | None
    sort_order: int
    is_active: bool
    is_group: bool


class MenuItemCreateSchema(BaseModel):
    menu_id: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=200)
    path: str | None = None
    parent_id: int | None = None
    icon: str | None = None
    sort_order: int = 0
    is_group: bool = False
    is_active: bool = True


class MenuPermissionSaveSchema(BaseModel):
    """Upsert for the single (role, menu item) row.

    ``is_accessible`` is tri-state: null inherits ``can_view``, true grants,
    false revokes.
    """

    role: str = Field(min_length=1)
    menu_item_id: int
    can_view: bool = False
    is_accessible: bool | None = None


class MenuPermissionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    role_id: int | None
    role_name: str
    menu_item_id: int
    can_view: bool
    is_accessible: bool | None
