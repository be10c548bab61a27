# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Menu structure and menu permission endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from src.api.deps import (
    get_access_caches,
    get_current_admin,
    get_current_identity,
    get_db,
    get_settings,
)
from src.config import Settings
from src.rbac.context import SessionIdentity
from src.schemas.common import MessageResponse
from src.schemas.menu import (
    MenuItemCreateSchema,
    MenuItemSchema,
    MenuNodeSchema,
    MenuPermissionSaveSchema,
    MenuPermissionSchema,
)
from src.services import menu_service
from src.services.menu_service import AccessCaches

router = APIRouter()


@router.get("/menus/structure", response_model=list[MenuNodeSchema])
def get_menu_structure(
    db: Session = Depends(get_db),
    identity: SessionIdentity = Depends(get_current_identity),
    caches: AccessCaches = Depends(get_access_caches),
    config: Settings = Depends(get_settings),
) -> list[MenuNodeSchema]:
    """Active menu tree for the caller's role with per-node accessibility."""
    tree = menu_service.get_menu_tree_for_role(db, identity.role, caches, config)
    return [MenuNodeSchema.model_validate(node) for node in tree]


@router.get("/admin/menu-items", response_model=list[MenuNodeSchema])
def list_menu_items(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
) -> list[MenuNodeSchema]:
    """Full menu tree without role filtering."""
    tree = menu_service.get_full_menu_tree(db, include_inactive)
    return [MenuNodeSchema.model_validate(node) for node in tree]


@router.post(
    "/admin/menu-items",
    response_model=MenuItemSchema,
    status_code=status.HTTP_201_CREATED,
)
def create_menu_item(
    data: MenuItemCreateSchema,
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
    caches: AccessCaches = Depends(get_access_caches),
) -> MenuItemSchema:
    item = menu_service.create_menu_item(db, **data.model_dump(), caches=caches)
    return MenuItemSchema.model_validate(item)


@router.put("/admin/menu-permissions", response_model=MenuPermissionSchema)
def save_menu_permission(
    data: MenuPermissionSaveSchema,
    db: Session = Depends(get_db),
    current_admin: SessionIdentity = Depends(get_current_admin),
    caches: AccessCaches = Depends(get_access_caches),
) -> MenuPermissionSchema:
    """Create or update the permission row for one role and menu item."""
    row = menu_service.save_menu_permission(
        db,
        data.role,
        data.menu_item_id,
        data.can_view,
        data.is_accessible,
        caches=caches,
    )
    return MenuPermissionSchema.model_validate(row)


@router.post("/admin/menu-items/refresh", response_model=MessageResponse)
def refresh_menu_cache(
    current_admin: SessionIdentity = Depends(get_current_admin),
    caches: AccessCaches = Depends(get_access_caches),
) -> MessageResponse:
    """Drop cached path maps and menu trees so the next request reloads."""
    caches.invalidate()
    return MessageResponse(message="Menu caches cleared")
