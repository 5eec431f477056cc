"""
Typed response objects for operations.

Responses carry only domain data — no CLI formatting.  They decouple
callers from ORM instances, which stay bound to the operation's session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class ParentSummary:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class EntitySummary:
    """Row in entity listings."""

    id: int
    name: str
    parent_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class EntityDetail:
    """Full view of one entity and its associations."""

    id: int
    name: str
    parent_id: int
    child_ids: list[int] = field(default_factory=list)
    grandchild_ids: list[int] = field(default_factory=list)
    hold_ids: list[int] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class ChildSummary:
    id: int
    entity_id: int
    label: str | None = None


@dataclass(frozen=True, slots=True)
class GrandchildSummary:
    id: int
    child_id: int
    label: str | None = None


@dataclass(frozen=True, slots=True)
class HoldSummary:
    id: int
    entity_id: int
    label: str | None = None


@dataclass(frozen=True, slots=True)
class DeletionSummary:
    """Result payload for :func:`relkeep.ops.entities.delete_entity` and ``remove_child``."""

    table: str
    id: int
    deletes: dict[str, int] = field(default_factory=dict)
    blockers: dict[str, int] = field(default_factory=dict)
    dry_run: bool = False

    @classmethod
    def from_plan(cls, plan: dict[str, Any], *, dry_run: bool = False) -> DeletionSummary:
        return cls(
            table=plan["table"],
            id=plan["id"],
            deletes=plan["deletes"],
            blockers=plan["blockers"],
            dry_run=dry_run,
        )
