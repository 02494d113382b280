"""Error Hierarchy — typed, categorized exceptions for every Task Manager failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors are 4xx; infrastructure errors are 5xx
    - to_response() produces the REST envelope; the transport never builds its own
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with TaskManagerError base: one FastAPI handler catches all
    - Kind is carried by the class, not by parsing the message text
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    ACCESS_DENIED = "access_denied"
    AUTHENTICATION = "authentication"
    CONFLICT = "conflict"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for observability."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: int | None = None
    resource: str | None = None
    field_errors: dict[str, str] | None = None


class TaskManagerError(Exception):
    """Base exception for all Task Manager errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        body = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
        }
        if self.context.field_errors:
            body["field_errors"] = dict(self.context.field_errors)
        return {"error": body}


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidArgumentError(TaskManagerError):
    """Malformed or out-of-range input, failed cross-field validation, bad sort/filter."""
    def __init__(
        self, message: str, field: str | None = None, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        if field and ctx.field_errors is None:
            ctx.field_errors = {field: message}
        super().__init__(
            message, "INVALID_ARGUMENT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.field = field


class AuthenticationError(TaskManagerError):
    """Missing, malformed or expired bearer credential."""
    def __init__(
        self, message: str = "Could not validate credentials",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class AccessDeniedError(TaskManagerError):
    """Principal is not the (transitive) owner of the target."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "ACCESS_DENIED", ErrorCategory.ACCESS_DENIED,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(TaskManagerError):
    """Referenced entity id does not exist."""
    def __init__(
        self, resource_type: str, resource_id: Any = None,
        message: str | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(
            message or f"{resource_type} not found.",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(TaskManagerError):
    """Uniqueness or state invariant would be violated."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class PayloadTooLargeError(TaskManagerError):
    """Request body rejected at the transport boundary before reaching a service."""
    def __init__(self, max_bytes: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        if ctx.field_errors is None:
            ctx.field_errors = {"file": f"Maximum allowed size is {max_bytes} bytes."}
        super().__init__(
            "File exceeds maximum allowed size.",
            "PAYLOAD_TOO_LARGE", ErrorCategory.PAYLOAD_TOO_LARGE,
            ErrorSeverity.WARNING, ctx, 413,
        )
        self.max_bytes = max_bytes


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(TaskManagerError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
