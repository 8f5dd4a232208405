"""Error Hierarchy — typed, categorized exceptions for all Vanish failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages (store errors carry a generic message)

Design Decisions:
    - Single hierarchy with VanishError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
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
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    PERMISSION = "permission"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    message_id: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class VanishError(Exception):
    """Base exception for all Vanish errors."""

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
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "message_id": self.context.message_id,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class MessageValidationError(VanishError):
    """Message creation input failed validation."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class MessageNotFoundError(VanishError):
    """Message is absent or has already been destroyed."""
    def __init__(self, message_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.message_id = message_id
        super().__init__(
            "Message not found",
            "MESSAGE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )


class MessageExpiredError(VanishError):
    """Message exhausted its time or view budget."""
    def __init__(
        self, message_id: str, reason: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.message_id = message_id
        super().__init__(
            "This message has expired or reached its view limit",
            "MESSAGE_EXPIRED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 410,
        )
        self.reason = reason


class AccessDeniedError(VanishError):
    """Viewer does not satisfy the message allow-lists."""
    def __init__(self, message_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.message_id = message_id
        super().__init__(
            "You do not have permission to view this message",
            "ACCESS_DENIED", ErrorCategory.PERMISSION,
            ErrorSeverity.WARNING, ctx, 403,
        )


class ForbiddenError(VanishError):
    """Owner-only operation attempted by someone else."""
    def __init__(self, message_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.message_id = message_id
        super().__init__(
            "Only the owner can perform this operation",
            "FORBIDDEN", ErrorCategory.PERMISSION,
            ErrorSeverity.WARNING, ctx, 403,
        )


class SelfDestructNotConfiguredError(VanishError):
    """Timer arming requested for a message without a self-destruct timer."""
    def __init__(self, message_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.message_id = message_id
        super().__init__(
            "Message has no self-destruct timer",
            "SELF_DESTRUCT_NOT_CONFIGURED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx, 400,
        )


class SelfDestructNotArmedError(VanishError):
    """Deadline requested before any reveal armed the timer."""
    def __init__(self, message_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.message_id = message_id
        super().__init__(
            "Self-destruct timer starts on the first reveal",
            "SELF_DESTRUCT_NOT_ARMED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 409,
        )


class ConcurrencyError(VanishError):
    """Lost a concurrent transaction race — caller must re-fetch before retrying."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StoreUnavailableError(VanishError):
    """Message store call failed or timed out. Never retried internally."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = operation
        super().__init__(
            "Message store is temporarily unavailable, please try again",
            "STORE_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.operation = operation
