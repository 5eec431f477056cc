"""Operation functions returning :class:`OperationResult` envelopes."""

from relkeep.ops.context import OperationContext
from relkeep.ops.result import OperationError, OperationResult, PagedResult

__all__ = [
    "OperationContext",
    "OperationError",
    "OperationResult",
    "PagedResult",
]
