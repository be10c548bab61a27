"""Pydantic schemas package."""
from src.schemas.common import HealthResponse, MessageResponse
from src.schemas.menu import (
    MenuItemCreateSchema,
    MenuItemSchema,
    MenuNodeSchema,
    MenuPermissionSaveSchema,
    MenuPermissionSchema,
)
from src.schemas.rbac import (
    BulkEntryOutcomeSchema,
    BulkPermissionItem,
    BulkPermissionRequest,
    BulkPermissionResponse,
    PathPermissionSchema,
    PermissionCheckRequest,
    PermissionCheckResponse,
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

__all__ = [
    "BulkEntryOutcomeSchema",
    "BulkPermissionItem",
    "BulkPermissionRequest",
    "BulkPermissionResponse",
    "HealthResponse",
    "MenuItemCreateSchema",
    "MenuItemSchema",
    "MenuNodeSchema",
    "MenuPermissionSaveSchema",
    "MenuPermissionSchema",
    "MessageResponse",
    "PathPermissionSchema",
    "PermissionCheckRequest",
    "PermissionCheckResponse",
    "PermissionRuleCreateSchema",
    "PermissionRuleSchema",
    "PermissionRuleUpdateSchema",
    "PermissionRuleUpsertSchema",
    "ResourceTypeCreateSchema",
    "ResourceTypeSchema",
    "ResourceTypeUpdateSchema",
    "RoleCreateSchema",
    "RoleResetRequest",
    "RoleSchema",
    "SeedResponse",
]
