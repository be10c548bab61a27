# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Permission check endpoints used by the frontend."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from src.api.deps import (
    get_access_caches,
    get_current_identity,
    get_db,
    get_settings,
)
from src.config import Settings
from src.rbac.context import SessionIdentity
from src.schemas.rbac import (
    PathPermissionSchema,
    PermissionCheckRequest,
    PermissionCheckResponse,
)
from src.services import path_permission_service, permission_service
from src.services.menu_service import AccessCaches
from src.services.permission_service import PermissionCheck

router = APIRouter()


@router.post("/check", response_model=PermissionCheckResponse)
def check_permission(
    data: PermissionCheckRequest,
    db: Session = Depends(get_db),
    identity: SessionIdentity = Depends(get_current_identity),
    config: Settings = Depends(get_settings),
) -> PermissionCheckResponse:
    """Check whether the caller may perform an action on a resource."""
    check = PermissionCheck.for_identity(
        identity,
        data.resource_type,
        data.action,
        owner_id=data.owner_id,
        owner_group_id=data.owner_group_id,
    )
    return PermissionCheckResponse(
        has_permission=permission_service.check_permission(db, check, config)
    )


@router.get("/path", response_model=PathPermissionSchema)
def check_path(
    path: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    identity: SessionIdentity = Depends(get_current_identity),
    caches: AccessCaches = Depends(get_access_caches),
    config: Settings = Depends(get_settings),
) -> PathPermissionSchema:
    """Check whether the caller may navigate to a page path."""
    result = path_permission_service.check_path_permission(
        db, path, identity.role, caches.paths, config
    )
    return PathPermissionSchema(
        path=path_permission_service.normalize_path(path),
        requires_permission=result.requires_permission,
        allowed=result.allowed,
        reason=result.reason,
        menu_id=result.menu_id,
    )
