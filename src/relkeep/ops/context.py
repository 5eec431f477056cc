"""
Request-scoped context for operations.

Every operation function receives an :class:`OperationContext` as its first
argument.  The context carries the ORM session, caller identity, dry-run
flag and arbitrary metadata.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session


@dataclass
class OperationContext:
    """Context passed to every operation function.

    Attributes:
        session: SQLAlchemy session the operation runs in.
        request_id: Unique ID for this operation invocation (auto-generated).
        caller: Origin of the request — ``"cli"`` or ``"sdk"``.
        dry_run: When ``True``, operations return a preview without side effects.
        metadata: Extra key/value pairs bound into the log context while the
            operation runs (``request_id`` and ``caller`` take precedence).
    """

    session: Session
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    caller: str = "sdk"
    dry_run: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
