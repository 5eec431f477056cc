"""
Structured error types for relkeep.

Every failure the entity layer reports is a :class:`RelkeepError` carrying a
category, a retry flag and an :class:`ErrorContext`.  Callers can branch on
the concrete type (``ValidationError`` vs ``RestrictedDeletionError``) or
route on ``category`` without string matching.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        RelkeepError                           │
        │  (category, retryable, context, cause)                       │
        ├──────────────────────────────────────────────────────────────┤
        │  ValidationError          RestrictedDeletionError            │
        │  (VALIDATION)             (RESTRICTED)                       │
        │                                                              │
        │  NotFoundError            ConfigError                        │
        │  (NOT_FOUND)              (CONFIG)                           │
        │                                                              │
        │  DatabaseError                                               │
        │  (DATABASE)                                                  │
        │       │                                                      │
        │  IntegrityError                                              │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ValidationError("name can't be blank", field="name", value="")
    >>> error.retryable
    False
    >>> error.to_dict()["field"]
    'name'

    >>> error = RestrictedDeletionError("entity has holds", blockers={"holds": 2})
    >>> error.blockers
    {'holds': 2}

Tags:
    error-handling, exception-hierarchy, relkeep
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    VALIDATION = "VALIDATION"
    RESTRICTED = "RESTRICTED"
    NOT_FOUND = "NOT_FOUND"
    DATABASE = "DATABASE"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured context attached to an error.

    Attributes:
        operation: Repository or ops function that failed
        entity_id: Primary key of the entity involved, if any
        entity_name: Name of the entity involved, if any
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    entity_id: int | None = None
    entity_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "entity_id", "entity_name"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class RelkeepError(Exception):
    """
    Base exception for all relkeep errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    call sites only pass the message and whatever context they have.

    Examples:
        >>> error = RelkeepError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> error = RelkeepError("Fetch failed").with_context(operation="rename")
        >>> error.context.operation
        'rename'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RelkeepError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NotFoundError("Entity missing").with_context(entity_id=7)
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(RelkeepError):
    """
    A record failed validation before persistence.

    Never retryable - the input must change.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.constraint = constraint

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        if self.constraint:
            result["constraint"] = self.constraint
        return result


# =============================================================================
# DELETION ERRORS
# =============================================================================


class RestrictedDeletionError(RelkeepError):
    """
    Deletion refused because a restricting association is non-empty.

    Not retryable until the caller removes the blocking records.
    ``blockers`` maps association name to the number of blocking rows.
    """

    default_category = ErrorCategory.RESTRICTED
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        blockers: dict[str, int] | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.blockers = dict(blockers or {})

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.blockers:
            result["blockers"] = dict(self.blockers)
        return result


# =============================================================================
# LOOKUP / CONFIG / STORAGE ERRORS
# =============================================================================


class NotFoundError(RelkeepError):
    """Requested record does not exist."""

    default_category = ErrorCategory.NOT_FOUND
    default_retryable = False


class ConfigError(RelkeepError):
    """Invalid or missing configuration."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class DatabaseError(RelkeepError):
    """Database query or transaction error."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class IntegrityError(DatabaseError):
    """Database integrity constraint violation not mapped to a domain error."""

    pass


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, RelkeepError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, RelkeepError):
        return error.category
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    if isinstance(error, LookupError):
        return ErrorCategory.NOT_FOUND
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "RelkeepError",
    "ValidationError",
    "RestrictedDeletionError",
    "NotFoundError",
    "ConfigError",
    "DatabaseError",
    "IntegrityError",
    "is_retryable",
    "categorize_error",
]
