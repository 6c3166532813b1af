"""Error Hierarchy: typed, categorized exceptions for every binding failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client-facing errors (NotFound, ValidationFailure, VersionConflict) are 4xx;
      server-facing errors (Configuration, StoreFailure) are 5xx
    - to_error() produces the error object of a failure envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with DocbindError base: Resource handlers catch one type at the boundary
    - http_status is the default code only; a ResourceBinding maps categories to its own codes
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for status mapping and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    CONFIGURATION = "configuration"
    STORE = "store"
    INTERNAL = "internal"


CLIENT_CATEGORIES = frozenset({
    ErrorCategory.VALIDATION,
    ErrorCategory.RESOURCE_NOT_FOUND,
    ErrorCategory.CONFLICT,
})


@dataclass
class ErrorContext:
    """Where a failure happened: which resource, which operation, which document."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    resource: str | None = None
    operation: str | None = None
    document_id: str | None = None


class DocbindError(Exception):
    """Base exception for all docbind errors."""

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
        self.details: list[dict] | None = None

    @property
    def client_facing(self) -> bool:
        return self.category in CLIENT_CATEGORIES

    def to_error(self) -> dict:
        """Convert to the error object carried by a failure envelope."""
        error = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "resource": self.context.resource,
                "operation": self.context.operation,
                "document_id": self.context.document_id,
            },
        }
        if self.details:
            error["details"] = self.details
        return error


# ─── Client Errors (400-level) ──────────────────────────────────

class NotFoundError(DocbindError):
    """Single-document operation targets an identifier with no document."""
    def __init__(
        self, resource_type: str, document_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.document_id = document_id
        super().__init__(
            f"{resource_type} '{document_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.document_id = document_id


class ValidationFailureError(DocbindError):
    """Payload rejected, either by the store's schema or for not being a document."""
    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.details = details


class VersionConflictError(DocbindError):
    """Replacement carried a version that no longer matches the stored document."""
    def __init__(
        self,
        document_id: str,
        expected: int,
        actual: int | None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.document_id = document_id
        super().__init__(
            f"Version conflict on '{document_id}': expected {expected}, found {actual}",
            "VERSION_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.expected = expected
        self.actual = actual


# ─── Server Errors (500-level) ──────────────────────────────────

class ConfigurationError(DocbindError):
    """Route does not provide the path parameter the handler was bound to."""
    def __init__(self, id_token: str, context: ErrorContext | None = None):
        super().__init__(
            f"Route is missing the '{id_token}' path parameter",
            "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.id_token = id_token


class StoreFailureError(DocbindError):
    """Any other document-store or driver failure."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Store {operation} failed: {message}",
            "STORE_ERROR", ErrorCategory.STORE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation
