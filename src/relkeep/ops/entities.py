"""
Entity operations.

Transport-agnostic functions wiring :class:`EntityRepository` to the CLI
(or any other caller).  Each function takes an :class:`OperationContext`,
never raises for domain failures, and returns an :class:`OperationResult`
whose error code is one of ``VALIDATION_FAILED``, ``DELETE_RESTRICTED``,
``NOT_FOUND`` or ``INTERNAL``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from relkeep.core.errors import RelkeepError
from relkeep.core.logging import LogContext, get_logger
from relkeep.core.orm.tables import (
    ChildTable,
    EntityTable,
    GrandchildTable,
    HoldTable,
    ParentTable,
)
from relkeep.core.repositories import EntityRepository
from relkeep.ops.context import OperationContext
from relkeep.ops.responses import (
    ChildSummary,
    DeletionSummary,
    EntityDetail,
    EntitySummary,
    GrandchildSummary,
    HoldSummary,
    ParentSummary,
)
from relkeep.ops.result import OperationResult, PagedResult, start_timer

logger = get_logger(__name__)

T = TypeVar("T")


def _repo(ctx: OperationContext) -> EntityRepository:
    return EntityRepository(ctx.session)


def _run(ctx: OperationContext, operation: str, fn: Callable[[], T]) -> OperationResult[T]:
    elapsed = start_timer()
    with LogContext(**{**ctx.metadata, "request_id": ctx.request_id, "caller": ctx.caller}):
        try:
            data = fn()
        except RelkeepError as exc:
            return OperationResult.from_exception(exc, elapsed_ms=elapsed())
        except Exception as exc:
            logger.exception("op_failed", operation=operation, error=str(exc))
            return OperationResult.fail(
                "INTERNAL",
                f"Failed to {operation.replace('_', ' ')}: {exc}",
                elapsed_ms=elapsed(),
            )
    return OperationResult.ok(data, elapsed_ms=elapsed())


# ------------------------------------------------------------------ #
# Row mappers
# ------------------------------------------------------------------ #


def _parent_summary(parent: ParentTable) -> ParentSummary:
    return ParentSummary(id=parent.id, name=parent.name)


def _entity_summary(entity: EntityTable) -> EntitySummary:
    return EntitySummary(
        id=entity.id,
        name=entity.name,
        parent_id=entity.parent_id,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )


def _child_summary(child: ChildTable) -> ChildSummary:
    return ChildSummary(id=child.id, entity_id=child.entity_id, label=child.label)


def _grandchild_summary(grandchild: GrandchildTable) -> GrandchildSummary:
    return GrandchildSummary(id=grandchild.id, child_id=grandchild.child_id, label=grandchild.label)


def _hold_summary(hold: HoldTable) -> HoldSummary:
    return HoldSummary(id=hold.id, entity_id=hold.entity_id, label=hold.label)


# ------------------------------------------------------------------ #
# Parents
# ------------------------------------------------------------------ #


def create_parent(ctx: OperationContext, name: str) -> OperationResult[ParentSummary]:
    """Create a parent record."""
    return _run(ctx, "create_parent", lambda: _parent_summary(_repo(ctx).create_parent(name)))


# ------------------------------------------------------------------ #
# Entities
# ------------------------------------------------------------------ #


def create_entity(
    ctx: OperationContext,
    name: str,
    parent_id: int,
) -> OperationResult[EntitySummary]:
    """Create an entity under an existing parent."""
    return _run(
        ctx, "create_entity", lambda: _entity_summary(_repo(ctx).create(name, parent_id))
    )


def rename_entity(
    ctx: OperationContext,
    entity_id: int,
    new_name: str,
) -> OperationResult[EntitySummary]:
    """Rename an entity (presence and uniqueness are re-validated)."""

    def _rename() -> EntitySummary:
        repo = _repo(ctx)
        return _entity_summary(repo.rename(repo.get(entity_id), new_name))

    return _run(ctx, "rename_entity", _rename)


def get_entity(ctx: OperationContext, entity_id: int) -> OperationResult[EntityDetail]:
    """Get one entity with the ids of its children, grandchildren and holds."""

    def _get() -> EntityDetail:
        repo = _repo(ctx)
        entity = repo.get(entity_id)
        return EntityDetail(
            id=entity.id,
            name=entity.name,
            parent_id=entity.parent_id,
            child_ids=[c.id for c in repo.list_children(entity)],
            grandchild_ids=[g.id for g in repo.list_grandchildren(entity)],
            hold_ids=[h.id for h in repo.list_holds(entity)],
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    return _run(ctx, "get_entity", _get)


def list_entities(
    ctx: OperationContext,
    *,
    limit: int = 50,
    offset: int = 0,
) -> PagedResult[EntitySummary]:
    """List entities ordered by id."""
    elapsed = start_timer()
    try:
        rows, total = _repo(ctx).list_entities(limit=limit, offset=offset)
    except Exception as exc:
        logger.exception("op_failed", operation="list_entities", error=str(exc))
        return PagedResult.fail(
            "INTERNAL", f"Failed to list entities: {exc}", elapsed_ms=elapsed()
        )
    return PagedResult.from_items(
        [_entity_summary(r) for r in rows],
        total=total,
        limit=limit,
        offset=offset,
        elapsed_ms=elapsed(),
    )


def delete_entity(ctx: OperationContext, entity_id: int) -> OperationResult[DeletionSummary]:
    """Delete an entity with its children and grandchildren.

    Fails with ``DELETE_RESTRICTED`` while the entity has holds.  With
    ``ctx.dry_run`` the deletion is only planned and the plan returned.
    """

    def _delete() -> DeletionSummary:
        repo = _repo(ctx)
        entity = repo.get(entity_id)
        if ctx.dry_run:
            return DeletionSummary.from_plan(repo.plan_delete(entity).to_dict(), dry_run=True)
        return DeletionSummary.from_plan(repo.delete(entity).to_dict())

    return _run(ctx, "delete_entity", _delete)


def list_grandchildren(
    ctx: OperationContext,
    entity_id: int,
) -> OperationResult[list[GrandchildSummary]]:
    """Grandchildren reachable through the entity's children."""

    def _list() -> list[GrandchildSummary]:
        repo = _repo(ctx)
        return [_grandchild_summary(g) for g in repo.list_grandchildren(repo.get(entity_id))]

    return _run(ctx, "list_grandchildren", _list)


# ------------------------------------------------------------------ #
# Children / grandchildren / holds
# ------------------------------------------------------------------ #


def add_child(
    ctx: OperationContext,
    entity_id: int,
    label: str | None = None,
) -> OperationResult[ChildSummary]:
    def _add() -> ChildSummary:
        repo = _repo(ctx)
        return _child_summary(repo.add_child(repo.get(entity_id), label))

    return _run(ctx, "add_child", _add)


def remove_child(ctx: OperationContext, child_id: int) -> OperationResult[DeletionSummary]:
    """Remove a child and its grandchildren (honours ``ctx.dry_run``)."""

    def _remove() -> DeletionSummary:
        repo = _repo(ctx)
        child = repo.get_child(child_id)
        if ctx.dry_run:
            return DeletionSummary.from_plan(repo.plan_delete(child).to_dict(), dry_run=True)
        return DeletionSummary.from_plan(repo.remove_child(child).to_dict())

    return _run(ctx, "remove_child", _remove)


def add_grandchild(
    ctx: OperationContext,
    child_id: int,
    label: str | None = None,
) -> OperationResult[GrandchildSummary]:
    def _add() -> GrandchildSummary:
        repo = _repo(ctx)
        return _grandchild_summary(repo.add_grandchild(repo.get_child(child_id), label))

    return _run(ctx, "add_grandchild", _add)


def add_hold(
    ctx: OperationContext,
    entity_id: int,
    label: str | None = None,
) -> OperationResult[HoldSummary]:
    def _add() -> HoldSummary:
        repo = _repo(ctx)
        return _hold_summary(repo.add_hold(repo.get(entity_id), label))

    return _run(ctx, "add_hold", _add)


def remove_hold(ctx: OperationContext, hold_id: int) -> OperationResult[HoldSummary]:
    def _remove() -> HoldSummary:
        repo = _repo(ctx)
        hold = repo.get_hold(hold_id)
        summary = _hold_summary(hold)
        repo.remove_hold(hold)
        return summary

    return _run(ctx, "remove_hold", _remove)
