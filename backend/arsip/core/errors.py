"""Error Hierarchy — typed, categorized exceptions for every transfer failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Validation / approval errors are recoverable; execution and infrastructure errors are not
    - to_response() produces the REST envelope; to_result() produces the in-process
      result dict returned by workflow operations
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with ArsipError base: FastAPI global handler catches all (ADR: uniform error shape)
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
    DATABASE = "database"
    EXTERNAL = "external"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    process_id: str | None = None
    step: int | None = None
    record_id: str | None = None
    field_name: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class ArsipError(Exception):
    """Base exception for all archive transfer errors."""

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

    @property
    def recoverable(self) -> bool:
        return self.severity in (ErrorSeverity.INFO, ErrorSeverity.WARNING) or (
            self.category in (ErrorCategory.VALIDATION, ErrorCategory.BUSINESS_RULE)
        )

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
                    "process_id": self.context.process_id,
                    "step": self.context.step,
                    "record_id": self.context.record_id,
                    "field": self.context.field_name,
                },
            }
        }

    def to_result(self) -> dict:
        """Convert to the result dict returned by workflow operations."""
        return {
            "status": "error",
            "error_code": self.code,
            "message": self.context.user_message or self.message,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class TransferValidationError(ArsipError):
    """A required field is missing or invalid at a step boundary."""
    def __init__(
        self,
        message: str,
        field: str,
        record_id: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.record_id = record_id
        ctx.field_name = field
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.field = field
        self.record_id = record_id

    def to_result(self) -> dict:
        result = super().to_result()
        result["field"] = self.field
        if self.record_id:
            result["record_id"] = self.record_id
        return result


class ApprovalBlockedError(ArsipError):
    """Advancement past AwaitApproval refused — waiting or rejected."""
    def __init__(
        self,
        pending: list[str],
        rejected: list[str],
        context: ErrorContext | None = None,
    ):
        if rejected:
            message = (
                f"Transfer rejected by: {', '.join(rejected)}. "
                "Resolution is required outside this workflow."
            )
            code, severity = "APPROVAL_REJECTED", ErrorSeverity.WARNING
        else:
            message = f"Waiting for approval from: {', '.join(pending)}."
            code, severity = "APPROVAL_PENDING", ErrorSeverity.INFO
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE, severity, context, 409,
        )
        self.pending = pending
        self.rejected = rejected


class InvalidTransitionError(ArsipError):
    """Navigation or mutation not permitted from the current step."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class ResourceNotFoundError(ArsipError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class ConcurrencyError(ArsipError):
    """Concurrent modification detected."""
    def __init__(
        self, message: str, code: str = "CONCURRENCY_CONFLICT",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class MemoNumberTakenError(ConcurrencyError):
    """Memo number already used by another transfer."""
    def __init__(self, memo_number: str, context: ErrorContext | None = None):
        super().__init__(
            f"Memo number '{memo_number}' is already used. Choose a new number.",
            "MEMO_NUMBER_TAKEN", context,
        )
        self.memo_number = memo_number


# ─── Execution / Infrastructure Errors (500-level) ──────────────

class ExecutionError(ArsipError):
    """Migration failed after the memo record was created."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "MIGRATION_FAILED", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


class NotificationError(ArsipError):
    """Notification dispatch failed — always logged, never raised to callers."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "NOTIFICATION_FAILED", ErrorCategory.EXTERNAL,
            ErrorSeverity.WARNING, context, 502,
        )


class DatabaseError(ArsipError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class AccessDeniedError(ArsipError):
    """Actor's role may not run the transfer workflow."""
    def __init__(self, role: str, context: ErrorContext | None = None):
        super().__init__(
            f"Role '{role}' may not use the transfer workflow.",
            "ACCESS_DENIED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 403,
        )
        self.role = role
