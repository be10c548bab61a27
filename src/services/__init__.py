"""Services package."""
from src.services import (
    menu_service,
    path_permission_service,
    permission_service,
    permission_store,
    reconciliation_service,
    role_service,
    scope_evaluator,
)

__all__ = [
    "menu_service",
    "path_permission_service",
    "permission_service",
    "permission_store",
    "reconciliation_service",
    "role_service",
    "scope_evaluator",
]
