# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Administration of roles, resource types and permission rules."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from src.api.deps import get_current_admin, get_db, get_settings
from src.config import Settings
from src.exceptions import NotFoundError
from src.models.enums import Action
from src.rbac.context import SessionIdentity
from src.schemas.rbac import (
    BulkEntryOutcomeSchema,
    BulkPermissionRequest,
    BulkPermissionResponse,
    PermissionRuleCreateSchema,
    PermissionRuleSchema,
    PermissionRuleUpdateSchema,
    PermissionRuleUpsertSchema,
    ResourceTypeCreateSchema,
    ResourceTypeSchema,
    ResourceTypeUpdateSchema,
    RoleCreateSchema,
    RoleResetRequest,
    RoleSchema,
    SeedResponse,
)
from src.services import permission_store, reconciliation_service, role_service

router = APIRouter()


# Roles


@router.get("/roles", response_model=list[RoleSchema], summary="List all roles")
def list_roles(
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
) -> list[RoleSchema]:
    return [RoleSchema.model_validate(r) for r in role_service.list_roles(db)]


@router.post(
    "/roles",
    response_model=RoleSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Create a role",
)
def create_role(
    data: RoleCreateSchema,
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
) -> RoleSchema:
    """Create a role. Names are unique regardless of case."""
    role = role_service.create_role(db, data.name, data.display_name, data.is_active)
    return RoleSchema.model_validate(role)


# Resource types


@router.get("/resource-types", response_model=list[ResourceTypeSchema])
def list_resource_types(
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
) -> list[ResourceTypeSchema]:
    return [
        ResourceTypeSchema.model_validate(rt)
        for rt in permission_store.list_resource_types(db)
    ]


@router.post(
    "/resource-types",
    response_model=ResourceTypeSchema,
    status_code=status.HTTP_201_CREATED,
)
def create_resource_type(
    data: ResourceTypeCreateSchema,
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
) -> ResourceTypeSchema:
    resource_type = permission_store.create_resource_type(
        db, data.name, data.description
    )
    return ResourceTypeSchema.model_validate(resource_type)


@router.put("/resource-types/{resource_type_id}", response_model=ResourceTypeSchema)
def update_resource_type(
    resource_type_id: int,
    data: ResourceTypeUpdateSchema,
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
) -> ResourceTypeSchema:
    """Update a resource type. Renaming is refused while rules use it."""
    resource_type = permission_store.update_resource_type(
        db, resource_type_id, name=data.name, description=data.description
    )
    return ResourceTypeSchema.model_validate(resource_type)


@router.delete(
    "/resource-types/{resource_type_id}", status_code=status.HTTP_204_NO_CONTENT
)
def delete_resource_type(
    resource_type_id: int,
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
) -> None:
    """Delete a resource type that no permission rule references."""
    permission_store.delete_resource_type(db, resource_type_id)


# Permission rules


@router.get("/role-permissions", response_model=list[PermissionRuleSchema])
def list_role_permissions(
    role: str | None = None,
    resource_type: str | None = None,
    action: Action | None = None,
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
) -> list[PermissionRuleSchema]:
    """List permission rules, optionally filtered."""
    if role:
        role = role_service.canonical_role_name(db, role)
    rules = permission_store.list_rules(db, role, resource_type, action)
    return [PermissionRuleSchema.model_validate(r) for r in rules]


@router.post(
    "/role-permissions",
    response_model=PermissionRuleSchema,
    status_code=status.HTTP_201_CREATED,
)
def create_role_permission(
    data: PermissionRuleCreateSchema,
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
) -> PermissionRuleSchema:
    """Create a rule. Fails with 409 if the triple already has one."""
    rule = permission_store.create_rule(
        db,
        role_service.canonical_role_name(db, data.role),
        data.resource_type,
        data.action,
        data.scope,
        data.description,
    )
    return PermissionRuleSchema.model_validate(rule)


@router.put("/role-permissions", response_model=PermissionRuleSchema)
def upsert_role_permission(
    data: PermissionRuleUpsertSchema,
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
) -> PermissionRuleSchema:
    """Set the scope for a (role, resource type, action) triple."""
    rule = permission_store.upsert_rule(
        db,
        role_service.canonical_role_name(db, data.role),
        data.resource_type,
        data.action,
        data.scope,
        data.description,
    )
    return PermissionRuleSchema.model_validate(rule)


@router.put("/role-permissions/{rule_id}", response_model=PermissionRuleSchema)
def update_role_permission(
    rule_id: int,
    data: PermissionRuleUpdateSchema,
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
) -> PermissionRuleSchema:
    role = role_service.canonical_role_name(db, data.role) if data.role else None
    rule = permission_store.update_rule(
        db,
        rule_id,
        role=role,
        resource_type=data.resource_type or None,
        action=data.action,
        scope=data.scope,
        description=data.description,
    )
    return PermissionRuleSchema.model_validate(rule)


@router.delete(
    "/role-permissions/{rule_id}", status_code=status.HTTP_204_NO_CONTENT
)
def delete_role_permission(
    rule_id: int,
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
) -> None:
    if not permission_store.delete_rule(db, rule_id):
        raise NotFoundError(f"Permission rule {rule_id} not found", {"id": rule_id})


@router.post("/role-permissions/bulk", response_model=BulkPermissionResponse)
def bulk_role_permissions(
    data: BulkPermissionRequest,
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
    config: Settings = Depends(get_settings),
) -> BulkPermissionResponse:
    """Apply many rule edits; each entry succeeds or fails on its own."""
    result = reconciliation_service.bulk_upsert(
        db, [item.model_dump() for item in data.items], config
    )
    return BulkPermissionResponse(
        data=[PermissionRuleSchema.model_validate(r) for r in result.rules],
        results=[BulkEntryOutcomeSchema.model_validate(o) for o in result.outcomes],
    )


@router.post("/role-permissions/reset", response_model=list[PermissionRuleSchema])
def reset_role_permissions(
    data: RoleResetRequest,
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
) -> list[PermissionRuleSchema]:
    """Replace all rules of a built-in role with its template."""
    rules = reconciliation_service.reset_role(db, data.role)
    return [PermissionRuleSchema.model_validate(r) for r in rules]


@router.post("/role-permissions/seed", response_model=SeedResponse)
def seed_role_permissions(
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
) -> SeedResponse:
    """Create missing resource types, roles and template rules."""
    summary = reconciliation_service.seed_defaults(db)
    return SeedResponse.model_validate(summary)
