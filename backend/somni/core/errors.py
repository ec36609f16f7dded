"""Error Hierarchy — typed, categorized exceptions for all Somni failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with SomniError base: the FastAPI global handler catches all
    - ErrorContext carries ids only; no clock reads happen in core/
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    subject_id: str | None = None
    session_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class SomniError(Exception):
    """Base exception for all Somni errors."""

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
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "context": {
                    "subject_id": self.context.subject_id,
                    "session_id": self.context.session_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidArgumentError(SomniError):
    """Input outside the accepted domain (negative age, end before start)."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_ARGUMENT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class ResourceNotFoundError(SomniError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(SomniError):
    """Operation collides with existing state."""
    def __init__(self, message: str, code: str = "CONFLICT", context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class ActiveSessionConflictError(ConflictError):
    """Subject already has an open sleep session."""
    def __init__(
        self, subject_id: str, existing_session_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext(subject_id=subject_id, session_id=existing_session_id)
        super().__init__(
            f"Subject {subject_id} already has an active session "
            f"({existing_session_id}). End it before starting a new one.",
            "ACTIVE_SESSION_EXISTS", ctx,
        )
        self.subject_id = subject_id
        self.existing_session_id = existing_session_id


class InvalidStateError(SomniError):
    """Transition not allowed from the current lifecycle state."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_STATE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class PersistenceError(SomniError):
    """Repository operation failed. Opaque to the domain."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Persistence {operation} failed: {message}",
            "PERSISTENCE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
