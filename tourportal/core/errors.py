# tourportal/core/errors.py
"""
Error taxonomy shared by the policy, validation and route layers.

Every error renders as ``{"error": <message>, "details": <object?>}``.
"""

from typing import Any, Dict, List, Optional


class ApiError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None, **extra: Any):
        self.message = message or self.default_message
        self.details = details
        # Top-level fields merged into the body (e.g. tourCount)
        self.extra = extra
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        body.update(self.extra)
        return body


class Unauthenticated(ApiError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Insufficient permissions"


class InvalidInput(ApiError):
    status_code = 400
    default_message = "Invalid input"

    def __init__(self, violations: Optional[List[Any]] = None, message: Optional[str] = None):
        self.violations = list(violations or [])
        if message is None and self.violations:
            message = "Validation failed: " + ", ".join(
                f"{v.field}: {v.message}" for v in self.violations
            )
        details = None
        if self.violations:
            details = {"violations": [{"field": v.field, "message": v.message} for v in self.violations]}
        super().__init__(message, details)


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Resource already exists"


class InvalidOperation(ApiError):
    status_code = 400
    default_message = "Operation not allowed"


class Internal(ApiError):
    status_code = 500
    default_message = "Internal server error"
