"""Error taxonomy shared by the document, binding, action and rendering layers."""

from dataclasses import dataclass
from typing import Any

import pydantic


@dataclass(frozen=True)
class Issue:
    """Single validation problem, addressed by a dotted location."""

    location: str
    message: str

    def __str__(self) -> str:
        return f"{self.location}: {self.message}" if self.location else self.message

    def to_dict(self) -> dict[str, str]:
        return {"location": self.location, "message": self.message}


class StorefrontError(Exception):
    """Base class for all runtime errors."""

    code = "storefront_error"
    status_code = 500

    def to_dict(self) -> dict[str, Any]:
        """Serialise for API responses."""
        return {"error": self.code, "message": str(self)}


class ValidationError(StorefrontError):
    """Malformed style object, tree invariant violation or payload mismatch."""

    code = "validation_error"
    status_code = 400

    def __init__(self, message: str, issues: list[Issue] | None = None) -> None:
        super().__init__(message)
        self.issues = list(issues or [])

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["issues"] = [issue.to_dict() for issue in self.issues]
        return data


class NotFoundError(StorefrontError):
    """Referenced document, draft or prefab does not exist."""

    code = "not_found"
    status_code = 404

    def __init__(self, resource: str, identifier: str = "") -> None:
        message = f"{resource} not found" + (f": {identifier}" if identifier else "")
        super().__init__(message)
        self.resource = resource
        self.identifier = identifier


class UnknownActionError(StorefrontError):
    """Action id is not part of the registered catalogue."""

    code = "unknown_action"
    status_code = 422

    def __init__(self, action_id: str) -> None:
        super().__init__(f"Unknown action: {action_id}")
        self.action_id = action_id


class CrossTenantError(StorefrontError):
    """Attempt to act on, or reference, another store's resource."""

    code = "cross_tenant"
    status_code = 403

    def __init__(self, store_id: str, other_store_id: str | None = None) -> None:
        super().__init__(f"Resource does not belong to store {store_id}")
        self.store_id = store_id
        self.other_store_id = other_store_id


def issues_from_pydantic(exc: pydantic.ValidationError, prefix: str = "") -> list[Issue]:
    """Flatten a pydantic error into located issues (``styles.base.spacing.padding.top``)."""
    issues = []
    for error in exc.errors():
        parts = [prefix] if prefix else []
        for loc in error["loc"]:
            if isinstance(loc, int):
                parts.append(f"[{loc}]")
            else:
                parts.append(str(loc))
        location = ".".join(parts).replace(".[", "[")
        issues.append(Issue(location, error["msg"]))
    return issues


__all__ = [
    "Issue",
    "issues_from_pydantic",
    "StorefrontError",
    "ValidationError",
    "NotFoundError",
    "UnknownActionError",
    "CrossTenantError",
]
