# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Schemas for roles, resource types, permission rules and checks."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import Action, Scope


class RoleSchema(BaseModel):
    """Schema representing a role."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: str | None
    is_active: bool


class RoleCreateSchema(BaseModel):
    """Schema for creating a role."""

    name: str = Field(min_length=1, max_length=100)
    display_name: str | None = None
    is_active: bool = True


class ResourceTypeSchema(BaseModel):
    """Schema representing a resource type."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ResourceTypeCreateSchema(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None


class ResourceTypeUpdateSchema(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None


class PermissionRuleSchema(BaseModel):
    """Schema representing a permission rule."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    role: str
    resource_type: str
    action: str
    scope: str
    description: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PermissionRuleCreateSchema(BaseModel):
    role: str = Field(min_length=1)
    resource_type: str = Field(min_length=1)
    action: Action
    scope: Scope = Scope.OWN
    description: str | None = None


class PermissionRuleUpdateSchema(BaseModel):
    role: str | None = None
    resource_type: str | None = None
    action: Action | None = None
    scope: Scope | None = None
    description: str | None = None


class PermissionRuleUpsertSchema(BaseModel):
    """Set the scope of a (role, resource_type, action) triple."""

    role: str = Field(min_length=1)
    resource_type: str = Field(min_length=1)
    action: Action
    scope: Scope
    description: str | None = None


class BulkPermissionItem(BaseModel):
    """One bulk entry. Fields are validated per entry, not per request."""

    role: str | None = None
    resource_type: str | None = None
    action: str | None = None
    scope: str | None = None
    description: str | None = None


class BulkPermissionRequest(BaseModel):
    items: list[BulkPermissionItem]


class BulkEntryOutcomeSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    index: int
    status: str
    role: str | None = None
    resource_type: str | None = None
    action: str | None = None
    scope: str | None = None
    rule_id: int | None = None
    error: str | None = None


class BulkPermissionResponse(BaseModel):
    """Rules that exist after the bulk edit plus the outcome of every entry."""

    data: list[PermissionRuleSchema]
    results: list[BulkEntryOutcomeSchema]


class RoleResetRequest(BaseModel):
    role: str


class SeedResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    resource_types_created: list[str]
    roles_created: list[str]
    rules_upserted: int


class PermissionCheckRequest(BaseModel):
    """Permission check input.

    Empty-string owner fields are accepted and treated as unknown.
    """

    resource_type: str = Field(min_length=1)
    action: Action
    owner_id: str | None = None
    owner_group_id: int | str | None = None


class PermissionCheckResponse(BaseModel):
    has_permission: bool


class PathPermissionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    path: str
    requires_permission: bool
    allowed: bool
    reason: str | None = None
    menu_id: str | None = None
