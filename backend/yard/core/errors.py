"""Error Hierarchy — typed, categorized exceptions for every allocation failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Business outcomes (not found, invalid transition, overloaded) are 400-level and never retried
    - ContentionError is the only retryable error; failed attempts have no observable effect
    - StorageError is fatal to the request and surfaced as an internal error
    - to_response() produces the REST envelope; no internal details leak into messages

Design Decisions:
    - Single hierarchy with YardError base: FastAPI global handler catches all (uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - The ledger's "capacity exceeded" and the engine's "zone overloaded" are the same
      ZoneOverloadedError; raising it inside a unit of work rolls the whole unit back
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
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    container_id: int | None = None
    zone_id: int | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class YardError(Exception):
    """Base exception for all container yard errors."""

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
    def retryable(self) -> bool:
        return self.context.retry_after_ms is not None

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
                    "container_id": self.context.container_id,
                    "zone_id": self.context.zone_id,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ResourceNotFoundError(YardError):
    """Requested resource does not exist."""
    def __init__(
        self,
        resource_type: str,
        resource_id: int,
        code: str = "RESOURCE_NOT_FOUND",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            code, ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_id = resource_id


class ContainerNotFoundError(ResourceNotFoundError):
    def __init__(self, container_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.container_id = container_id
        super().__init__("Container", container_id, "CONTAINER_NOT_FOUND", ctx)


class ZoneNotFoundError(ResourceNotFoundError):
    def __init__(self, zone_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.zone_id = zone_id
        super().__init__("Zone", zone_id, "ZONE_NOT_FOUND", ctx)


class InvalidTransitionError(YardError):
    """Operation is not legal from the container's current status."""
    def __init__(
        self, current: str, attempted: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Cannot {attempted} a container in status '{current}'",
            "INVALID_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )
        self.current = current
        self.attempted = attempted


class ZoneOverloadedError(YardError):
    """Zone has no free slot, the capacity invariant would be violated."""
    def __init__(
        self, zone_id: int, capacity: int, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.zone_id = zone_id
        super().__init__(
            f"Zone Overloaded: zone '{zone_id}' is at capacity ({capacity})",
            "ZONE_OVERLOADED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.capacity = capacity


# ─── Infrastructure Errors ──────────────────────────────────────

class ContentionError(YardError):
    """Unit of work could not complete within its bound. Safe to retry."""
    def __init__(
        self,
        message: str,
        retry_after_ms: int = 250,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            message, "CONTENTION", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )


class StorageError(YardError):
    """Backing store unavailable or erroring. Not retried by the core."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_FAILURE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation
