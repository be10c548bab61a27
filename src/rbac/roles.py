# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Built-in role templates used by role reset and seeding."""

from src.models.enums import Action, Scope
from src.rbac.permissions import ACTIONS, CANONICAL_RESOURCE_NAMES

ScopeMatrix = dict[str, dict[Action, Scope]]


def _row(*scopes: str) -> dict[Action, Scope]:
    """Build one template row from scopes in ACTIONS order."""
    return {action: Scope(scope) for action, scope in zip(ACTIONS, scopes, strict=True)}


# Admin gets scope "all" for every action on every canonical resource
ADMIN_TEMPLATE: ScopeMatrix = {
    resource: {action: Scope.ALL for action in ACTIONS}
    for resource in CANONICAL_RESOURCE_NAMES
}

USER_TEMPLATE: ScopeMatrix = {
    "qr_code": _row("own", "group", "own", "own", "group"),
    "qr_category": _row("own", "group", "own", "own", "group"),
    "short_url": _row("own", "group", "own", "own", "group"),
    "url_category": _row("own", "group", "own", "own", "group"),
    # analytics aggregates and raw events are read/export only
    "qr_analytics": _row("none", "group", "none", "none", "group"),
    "url_analytics": _row("none", "group", "none", "none", "group"),
    "qr_event_scans": _row("none", "group", "none", "none", "group"),
    "url_event_clicks": _row("none", "group", "none", "none", "group"),
    "profile": _row("none", "own", "own", "none", "none"),
    "user_setting": _row("none", "own", "own", "none", "none"),
    "users": _row("none", "group", "none", "none", "none"),
    "group_users": _row("none", "group", "none", "none", "none"),
}

ROLE_TEMPLATES: dict[str, ScopeMatrix] = {
    "admin": ADMIN_TEMPLATE,
    "user": USER_TEMPLATE,
}

# Role rows created by seeding
DEFAULT_ROLES = [
    {"name": "admin", "display_name": "Administrator"},
    {"name": "user", "display_name": "User"},
]


def template_entries(role: str) -> list[tuple[str, Action, Scope]]:
    """Flatten a role template to (resource, action, scope), skipping ``none``."""
    matrix = ROLE_TEMPLATES[role]
    return [
        (resource, action, scope)
        for resource, row in matrix.items()
        for action in ACTIONS
        if (scope := row.get(action, Scope.NONE)) is not Scope.NONE
    ]
