# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Canonical actions and resource types."""

from src.models.enums import Action

ACTIONS: list[Action] = [
    Action.CREATE,
    Action.READ,
    Action.UPDATE,
    Action.DELETE,
    Action.EXPORT,
]

# Resource types seeded on every install, in display order
CANONICAL_RESOURCE_TYPES = [
    {"name": "qr_code", "description": "QR codes"},
    {"name": "qr_category", "description": "QR code categories"},
    {"name": "short_url", "description": "Short URLs"},
    {"name": "url_category", "description": "Short URL categories"},
    {"name": "qr_analytics", "description": "Aggregated QR scan analytics"},
    {"name": "qr_event_scans", "description": "Raw QR scan events"},
    {"name": "url_analytics", "description": "Aggregated short URL analytics"},
    {"name": "url_event_clicks", "description": "Raw short URL click events"},
    {"name": "profile", "description": "User profile"},
    {"name": "user_setting", "description": "Per-user settings"},
    {"name": "users", "description": "User accounts"},
    {"name": "group_users", "description": "Members of a group"},
]

CANONICAL_RESOURCE_NAMES = [r["name"] for r in CANONICAL_RESOURCE_TYPES]

# Legacy and plural spellings used by older handlers
RESOURCE_ALIASES = {
    "qr_codes": "qr_code",
    "qr": "qr_code",
    "short_urls": "short_url",
    "urls": "short_url",
    "url": "short_url",
    "user_analytics": "users",
}


def canonical_resource_name(name: str) -> str:
    """Lowercase a resource name and resolve known aliases."""
    lowered = name.strip().lower()
    return RESOURCE_ALIASES.get(lowered, lowered)
