# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application settings loaded from the environment."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Deployment-time configuration for the access-control core."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./scanly.db"
    log_level: str = "INFO"

    # Roles that skip rule evaluation entirely (compared case-insensitively)
    admin_roles: list[str] = ["admin", "administrator", "superadmin"]

    # Resources readable by users without a group; handlers return empty sets
    analytics_resources: list[str] = [
        "analytics",
        "qr_analytics",
        "url_analytics",
        "scan_events",
        "click_events",
    ]

    # Menu gating: PERMISSION_ENFORCEMENT_MODE / PERMISSION_MISSING_ROW_MODE
    permission_enforcement_mode: Literal["strict", "non-strict"] = "non-strict"
    permission_missing_row_mode: Literal["deny", "allow"] = "deny"
    path_cache_ttl_seconds: float = 60.0

    # Allow read checks through when the store cannot be reached, for the
    # listed resources only
    fail_open_reads: bool = False
    fail_open_resources: list[str] = ["qr_analytics", "url_analytics"]

    seed_on_startup: bool = False

    @property
    def strict_enforcement(self) -> bool:
        return self.permission_enforcement_mode == "strict"

    @property
    def allow_missing_rows(self) -> bool:
        return self.permission_missing_row_mode == "allow"

    def is_admin_role(self, role: str | None) -> bool:
        """Check a role name against the configured administrator set."""
        if not role:
            return False
        return role.lower() in {r.lower() for r in self.admin_roles}

    def allows_fail_open_read(self, resource: str) -> bool:
        """Check whether reads of ``resource`` may pass during a store outage."""
        if not self.fail_open_reads:
            return False
        allowed = {r.lower() for r in self.fail_open_resources}
        return resource.strip().lower() in allowed


settings = Settings()
