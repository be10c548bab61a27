# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Error kinds raised by the access-control core.

Each error carries a stable ``code`` and the HTTP status the API layer maps it
to. A denial is a normal ``False`` result from the check functions; these
exceptions are for conditions the caller must handle differently.
"""

from typing import Any


class AccessControlError(Exception):
    """Base exception for access-control errors."""

    code = "ACCESS_CONTROL_ERROR"
    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details: dict[str, Any] = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"_error": self.code, "message": self.message, **self.details}


class AuthRequiredError(AccessControlError):
    """No identity could be resolved for the request."""

    code = "AUTH_REQUIRED"
    status_code = 401

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class PermissionDeniedError(AccessControlError):
    """Identity resolved but the rule or scope evaluation denied access."""

    code = "PERMISSION_DENIED"
    status_code = 403

    def __init__(
        self,
        resource: str,
        action: str,
        message: str | None = None,
        hint: str = "Add a permission rule or adjust its scope",
    ) -> None:
        super().__init__(
            message or f"Not allowed to {action} {resource}",
            {"resource": resource, "action": action, "hint": hint},
        )
        self.resource = resource
        self.action = action


class NotFoundError(AccessControlError):
    code = "NOT_FOUND"
    status_code = 404


class ResourceInUseError(AccessControlError):
    """A resource type cannot be deleted while rules reference it."""

    code = "RESOURCE_IN_USE"
    status_code = 409

    def __init__(self, resource_type: str, usage: int) -> None:
        super().__init__(
            f"Cannot delete resource type '{resource_type}': "
            f"it is used by {usage} permission rule(s)",
            {"resource_type": resource_type, "usage": usage},
        )


class DuplicateRuleError(AccessControlError):
    code = "DUPLICATE_RULE"
    status_code = 409

    def __init__(self, role: str, resource_type: str, action: str) -> None:
        super().__init__(
            f"A rule for ({role}, {resource_type}, {action}) already exists",
            {"role": role, "resource_type": resource_type, "action": action},
        )


class ConflictError(AccessControlError):
    """A uniquely named record (role, resource type, menu item) already exists."""

    code = "CONFLICT"
    status_code = 409


class InvalidTemplateError(AccessControlError):
    """Role reset was requested for a role without a built-in template."""

    code = "INVALID_TEMPLATE"
    status_code = 400

    def __init__(self, role: str) -> None:
        super().__init__(f"No template for role '{role}'", {"role": role})


class StoreUnavailableError(AccessControlError):
    """The permission store could not be reached.

    Never a denial: callers choose whether to fail open or closed.
    """

    code = "STORE_UNAVAILABLE"
    status_code = 503

    def __init__(self, message: str = "Permission store unavailable") -> None:
        super().__init__(message)
