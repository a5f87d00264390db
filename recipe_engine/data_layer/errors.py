"""Structured error types for the caching and scaling core.

Every failure carries an ``ErrorKind`` so callers can match on the kind
instead of on the exception class, and every error serialises to a dict
for API responses.

ERROR FLOW:
    ┌─────────────────────────────────────────────────────┐
    │ Fingerprint inputs → InvalidRequestError (fatal)    │
    └─────────────────────────────────────────────────────┘
                              │
                              ▼
    ┌─────────────────────────────────────────────────────┐
    │ Cache backend      → CacheUnavailableError          │
    │                      (recovered: miss / dropped)    │
    └─────────────────────────────────────────────────────┘
                              │
                              ▼
    ┌─────────────────────────────────────────────────────┐
    │ Payload boundary   → InvalidPayloadError (fatal)    │
    └─────────────────────────────────────────────────────┘
                              │
                              ▼
    ┌─────────────────────────────────────────────────────┐
    │ Scaling            → ScalingPreconditionError       │
    └─────────────────────────────────────────────────────┘
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """Enumeration of all failure kinds.

    Values are strings for easy serialisation and logging.
    """

    INVALID_REQUEST = "INVALID_REQUEST"
    CACHE_UNAVAILABLE = "CACHE_UNAVAILABLE"
    SCALING_PRECONDITION = "SCALING_PRECONDITION"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"


class RecipeEngineError(Exception):
    """Base exception for all recipe engine errors.

    Attributes:
        code: ErrorKind identifying the failure
        message: Human-readable description
        context: Dictionary of relevant debugging context
    """

    def __init__(
        self,
        code: ErrorKind,
        message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.context = context or {}
        super().__init__(f"[{code.value}] {message}")

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code!r}, "
            f"message={self.message!r}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API responses.

        Returns:
            Dictionary with error code, message, and context
        """
        return {
            "error_code": self.code.value,
            "message": self.message,
            "context": self.context
        }


class InvalidRequestError(RecipeEngineError):
    """Raised when fingerprint inputs are malformed.

    Context includes:
        - field: The offending input field
    """

    def __init__(self, message: str, field: Optional[str] = None):
        context = {"field": field} if field else {}
        super().__init__(
            code=ErrorKind.INVALID_REQUEST,
            message=message,
            context=context
        )
        self.field = field


class CacheUnavailableError(RecipeEngineError):
    """Raised by cache backends when the underlying store cannot be used.

    The cache store recovers from this error locally; it never reaches
    a user-facing request.

    Context includes:
        - operation: Backend operation that failed (load, save, ...)
        - fingerprint: Affected fingerprint, when there is one
    """

    def __init__(
        self,
        operation: str,
        reason: str,
        fingerprint: Optional[str] = None
    ):
        context = {"operation": operation, "reason": reason}
        if fingerprint:
            context["fingerprint"] = fingerprint

        super().__init__(
            code=ErrorKind.CACHE_UNAVAILABLE,
            message=f"Cache {operation} failed: {reason}",
            context=context
        )
        self.operation = operation
        self.reason = reason
        self.fingerprint = fingerprint


class ScalingPreconditionError(RecipeEngineError):
    """Raised when a serving size is zero, negative or not an integer.

    Context includes:
        - field: Which serving size was rejected
        - value: The rejected value
    """

    def __init__(self, field: str, value: Any):
        super().__init__(
            code=ErrorKind.SCALING_PRECONDITION,
            message=f"{field} must be a positive integer, got {value!r}",
            context={"field": field, "value": value}
        )
        self.field = field
        self.value = value


class InvalidPayloadError(RecipeEngineError):
    """Raised when a recipe or nutrition payload fails boundary validation.

    Context includes:
        - errors: Validation error details as reported by the schema layer
    """

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(
            code=ErrorKind.INVALID_PAYLOAD,
            message=message,
            context={"errors": errors or []}
        )
        self.errors = errors or []


@dataclass
class CacheLookupResult:
    """Tagged result of a cache lookup.

    A degraded lookup (backend unavailable) is still a miss, but carries
    ``error_code`` so the caller can tell it apart from a plain miss.

    Attributes:
        hit: Whether a cached payload was found
        payload: Rebuilt payload (None on miss)
        error_code: ErrorKind when the lookup degraded to a miss
        error_message: Human-readable reason for the degradation
    """
    hit: bool
    payload: Any = None
    error_code: Optional[ErrorKind] = None
    error_message: Optional[str] = None

    @classmethod
    def miss(cls) -> "CacheLookupResult":
        return cls(hit=False)

    @classmethod
    def degraded(cls, error: RecipeEngineError) -> "CacheLookupResult":
        """Create a miss that records why the cache could not answer."""
        return cls(
            hit=False,
            error_code=error.code,
            error_message=error.message
        )
