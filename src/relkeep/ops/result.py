"""
Result envelopes returned by the entity operations.

An operation never raises for a domain failure.  It returns an
:class:`OperationResult` whose ``error`` names one of four codes, derived
from the :class:`~relkeep.core.errors.RelkeepError` subclass that the
repository raised:

=====================  ===============================
code                   raised as
=====================  ===============================
``VALIDATION_FAILED``  ``ValidationError``
``DELETE_RESTRICTED``  ``RestrictedDeletionError``
``NOT_FOUND``          ``NotFoundError``
``INTERNAL``           anything else
=====================  ===============================

Listings use :class:`PagedResult`, which adds the paging window.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from relkeep.core.errors import (
    ErrorCategory,
    NotFoundError,
    RelkeepError,
    RestrictedDeletionError,
    ValidationError,
)

T = TypeVar("T")

ERROR_CODES: tuple[tuple[type[RelkeepError], str], ...] = (
    (ValidationError, "VALIDATION_FAILED"),
    (RestrictedDeletionError, "DELETE_RESTRICTED"),
    (NotFoundError, "NOT_FOUND"),
)


def error_code(exc: RelkeepError) -> str:
    """Code reported for *exc*; ``INTERNAL`` when its type has no mapping."""
    for error_type, code in ERROR_CODES:
        if isinstance(exc, error_type):
            return code
    return "INTERNAL"


@dataclass(frozen=True, slots=True)
class OperationError:
    """Why an operation failed.

    ``details`` holds the error's own fields (``field``/``constraint`` for
    validation, ``blockers`` for a refused delete, ``context``).
    """

    code: str
    message: str
    category: ErrorCategory | None = None
    details: dict[str, Any] = field(default_factory=dict)
    retryable: bool = False

    @classmethod
    def from_exception(cls, exc: RelkeepError) -> OperationError:
        details = exc.to_dict()
        for key in ("message", "category", "retryable"):
            details.pop(key, None)
        return cls(
            code=error_code(exc),
            message=exc.message,
            category=exc.category,
            details=details,
            retryable=exc.retryable,
        )


@dataclass
class OperationResult(Generic[T]):
    """Outcome of one operation: ``data`` on success, ``error`` otherwise."""

    success: bool
    data: T | None = None
    error: OperationError | None = None
    elapsed_ms: float = 0.0

    @classmethod
    def ok(cls, data: T, *, elapsed_ms: float = 0.0) -> OperationResult[T]:
        return cls(success=True, data=data, elapsed_ms=elapsed_ms)

    @classmethod
    def fail(
        cls,
        code: str,
        message: str,
        *,
        category: ErrorCategory | None = None,
        elapsed_ms: float = 0.0,
    ) -> OperationResult[T]:
        error = OperationError(code=code, message=message, category=category)
        return cls(success=False, error=error, elapsed_ms=elapsed_ms)

    @classmethod
    def from_exception(cls, exc: RelkeepError, *, elapsed_ms: float = 0.0) -> OperationResult[T]:
        """Failed result carrying the code, category and fields of *exc*."""
        return cls(success=False, error=OperationError.from_exception(exc), elapsed_ms=elapsed_ms)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            d["data"] = self.data
        if self.error is not None:
            error: dict[str, Any] = {
                "code": self.error.code,
                "message": self.error.message,
                "retryable": self.error.retryable,
            }
            if self.error.category is not None:
                error["category"] = self.error.category.value
            if self.error.details:
                error["details"] = self.error.details
            d["error"] = error
        if self.elapsed_ms:
            d["elapsed_ms"] = round(self.elapsed_ms, 2)
        return d


@dataclass
class PagedResult(OperationResult[list[T]]):
    """One page of a listing ordered by id."""

    total: int = 0
    limit: int = 50
    offset: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total

    @classmethod
    def from_items(
        cls,
        items: list[T],
        total: int,
        *,
        limit: int = 50,
        offset: int = 0,
        elapsed_ms: float = 0.0,
    ) -> PagedResult[T]:
        return cls(
            success=True,
            data=items,
            total=total,
            limit=limit,
            offset=offset,
            elapsed_ms=elapsed_ms,
        )

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d.update(total=self.total, limit=self.limit, offset=self.offset, has_more=self.has_more)
        return d


def start_timer() -> Callable[[], float]:
    """Return a zero-argument callable giving milliseconds since the call."""
    start = time.perf_counter()
    return lambda: (time.perf_counter() - start) * 1000
