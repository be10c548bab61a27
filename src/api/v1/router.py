# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Main API router for v1 endpoints."""

from fastapi import APIRouter

from src.api.v1 import menus, permissions, rbac

api_router = APIRouter()

# Permission check routes
api_router.include_router(
    permissions.router, prefix="/permissions", tags=["permissions"]
)

# Menu routes (caller structure and admin management)
api_router.include_router(menus.router, tags=["menus"])

# RBAC administration routes
api_router.include_router(rbac.router, prefix="/admin", tags=["rbac"])
