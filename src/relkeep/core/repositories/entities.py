"""
Entity repository — validation, association management and guarded deletion.

Every mutating method is one unit of work on the bound session: it commits
when the method returns and rolls back on any exception, so a failed create,
rename or delete never leaves partial state behind.

Tags:
    relkeep, repository, entities, validation, deletion
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import IntegrityError as SAIntegrityError
from sqlalchemy.orm import Session

from relkeep.core.errors import (
    IntegrityError,
    NotFoundError,
    RelkeepError,
    RestrictedDeletionError,
    ValidationError,
)
from relkeep.core.logging import get_logger
from relkeep.core.orm.tables import (
    ChildTable,
    EntityTable,
    GrandchildTable,
    HoldTable,
    ParentTable,
)
from relkeep.core.policies import DeletionPlan, execute_plan, plan_deletion

logger = get_logger(__name__)

_RECORD_KINDS: dict[type, tuple[str, str]] = {
    EntityTable: ("Entity", "entity_id"),
    ChildTable: ("Child", "child_id"),
    HoldTable: ("Hold", "hold_id"),
}


def _is_unique_violation(exc: SAIntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate key" in message


class EntityRepository:
    """Data access for entities and their parents, children, grandchildren and holds.

    Parameters:
        session: SQLAlchemy session the repository reads and commits through.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    @contextmanager
    def _unit_of_work(self, operation: str, **context: Any) -> Iterator[None]:
        try:
            yield
            self.session.commit()
        except RelkeepError as exc:
            self.session.rollback()
            exc.with_context(operation=operation, **context)
            raise
        except Exception:
            self.session.rollback()
            raise

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def _validate_name(self, name: Any, *, exclude_id: int | None = None) -> None:
        if not isinstance(name, str) or not name.strip():
            logger.warning("entity_validation_failed", field="name", constraint="presence")
            raise ValidationError(
                "name can't be blank", field="name", value=name, constraint="presence"
            )

        stmt = select(EntityTable.id).where(EntityTable.name == name)
        if exclude_id is not None:
            stmt = stmt.where(EntityTable.id != exclude_id)
        with self.session.no_autoflush:
            taken = self.session.scalar(stmt.limit(1)) is not None
        if taken:
            logger.warning(
                "entity_validation_failed", field="name", constraint="uniqueness", name=name
            )
            raise ValidationError(
                "name has already been taken", field="name", value=name, constraint="uniqueness"
            )

    def _resolve_parent(self, parent: ParentTable | int | None) -> ParentTable:
        if isinstance(parent, ParentTable):
            return parent
        resolved = self.session.get(ParentTable, parent) if parent is not None else None
        if resolved is None:
            logger.warning("entity_validation_failed", field="parent", constraint="presence")
            raise ValidationError(
                "parent must exist", field="parent", value=parent, constraint="presence"
            )
        return resolved

    def _require_stored(self, record: EntityTable | ChildTable | HoldTable, operation: str) -> None:
        """Raise ``NotFoundError`` unless *record* still has a row in the database."""
        state = inspect(record)
        record_id = state.identity[0] if state.identity else None
        model = type(record)
        gone = (
            record_id is None
            or state.deleted
            or state.was_deleted
            or self.session.scalar(select(model.id).where(model.id == record_id)) is None
        )
        if gone:
            label, key = _RECORD_KINDS[model]
            raise NotFoundError(f"{label} {record_id} not found").with_context(
                operation=operation, **{key: record_id}
            )

    def _flush_name(self, name: str) -> None:
        """Flush pending changes, mapping a storage-level uniqueness race to ``ValidationError``."""
        try:
            self.session.flush()
        except SAIntegrityError as exc:
            if _is_unique_violation(exc):
                logger.warning(
                    "entity_validation_failed", field="name", constraint="uniqueness", name=name
                )
                raise ValidationError(
                    "name has already been taken",
                    field="name",
                    value=name,
                    constraint="uniqueness",
                    cause=exc,
                ) from exc
            raise IntegrityError(f"Integrity violation: {exc.orig}", cause=exc) from exc

    # ------------------------------------------------------------------ #
    # Parents
    # ------------------------------------------------------------------ #

    def create_parent(self, name: str) -> ParentTable:
        """Persist a new parent record."""
        with self._unit_of_work("create_parent"):
            if not isinstance(name, str) or not name.strip():
                raise ValidationError(
                    "name can't be blank", field="name", value=name, constraint="presence"
                )
            parent = ParentTable(name=name)
            self.session.add(parent)
            self.session.flush()
        logger.info("parent_created", parent_id=parent.id, name=name)
        return parent

    # ------------------------------------------------------------------ #
    # Entities
    # ------------------------------------------------------------------ #

    def create(self, name: str, parent: ParentTable | int) -> EntityTable:
        """Validate *name* and *parent*, then persist a new entity.

        Raises:
            ValidationError: blank or already-used name, or missing parent.
        """
        with self._unit_of_work("create", entity_name=name):
            self._validate_name(name)
            owner = self._resolve_parent(parent)
            entity = EntityTable(name=name, parent=owner)
            self.session.add(entity)
            self._flush_name(name)
        logger.info("entity_created", entity_id=entity.id, name=name, parent_id=owner.id)
        return entity

    def rename(self, entity: EntityTable, new_name: str) -> EntityTable:
        """Change the name of *entity*; the uniqueness check ignores *entity* itself.

        Raises:
            ValidationError: blank name or a name used by another entity.
        """
        old_name = entity.name
        with self._unit_of_work("rename", entity_id=entity.id, entity_name=old_name):
            self._validate_name(new_name, exclude_id=entity.id)
            entity.name = new_name
            self._flush_name(new_name)
        logger.info("entity_renamed", entity_id=entity.id, old_name=old_name, name=new_name)
        return entity

    def get(self, entity_id: int) -> EntityTable:
        """Fetch an entity by primary key.

        Raises:
            NotFoundError: no entity with that id.
        """
        entity = self.session.get(EntityTable, entity_id)
        if entity is None:
            raise NotFoundError(f"Entity {entity_id} not found").with_context(
                entity_id=entity_id
            )
        return entity

    def get_by_name(self, name: str) -> EntityTable | None:
        return self.session.scalar(select(EntityTable).where(EntityTable.name == name))

    def list_entities(self, *, limit: int = 50, offset: int = 0) -> tuple[list[EntityTable], int]:
        """Page through entities ordered by id; returns ``(entities, total)``."""
        total = self.session.scalar(select(func.count()).select_from(EntityTable)) or 0
        rows = self.session.scalars(
            select(EntityTable).order_by(EntityTable.id).limit(limit).offset(offset)
        ).all()
        return list(rows), total

    def plan_delete(self, record: EntityTable | ChildTable) -> DeletionPlan:
        """Describe what deleting *record* would remove, or why it would be refused."""
        return plan_deletion(self.session, record)

    def delete(self, entity: EntityTable) -> DeletionPlan:
        """Delete *entity*, its children and their grandchildren.

        Raises:
            RestrictedDeletionError: the entity has holds.  Nothing is deleted.
            NotFoundError: the entity was already deleted.
        """
        self._require_stored(entity, "delete")
        entity_id, name, parent = entity.id, entity.name, entity.parent
        with self._unit_of_work("delete", entity_id=entity_id, entity_name=name):
            plan = plan_deletion(self.session, entity)
            if not plan.allowed:
                logger.warning(
                    "entity_delete_restricted", entity_id=entity_id, blockers=plan.blockers
                )
            try:
                execute_plan(self.session, plan)
            except SAIntegrityError as exc:
                # a hold committed between planning and the flush
                logger.warning("entity_delete_restricted", entity_id=entity_id, error=str(exc.orig))
                raise RestrictedDeletionError(
                    "Cannot delete relkeep_entities record because of dependent holds",
                    blockers={"holds": 1},
                    cause=exc,
                ) from exc
        self.session.expire(parent, ["entities"])
        logger.info("entity_deleted", entity_id=entity_id, name=name, deleted=plan.counts())
        return plan

    def list_grandchildren(self, entity: EntityTable) -> list[GrandchildTable]:
        """Grandchildren reachable through the entity's children, queried now."""
        stmt = (
            select(GrandchildTable)
            .join(ChildTable, GrandchildTable.child_id == ChildTable.id)
            .where(ChildTable.entity_id == entity.id)
            .order_by(GrandchildTable.id)
        )
        return list(self.session.scalars(stmt))

    # ------------------------------------------------------------------ #
    # Children / grandchildren
    # ------------------------------------------------------------------ #

    def list_children(self, entity: EntityTable) -> list[ChildTable]:
        stmt = select(ChildTable).where(ChildTable.entity_id == entity.id).order_by(ChildTable.id)
        return list(self.session.scalars(stmt))

    def get_child(self, child_id: int) -> ChildTable:
        child = self.session.get(ChildTable, child_id)
        if child is None:
            raise NotFoundError(f"Child {child_id} not found")
        return child

    def add_child(self, entity: EntityTable, label: str | None = None) -> ChildTable:
        with self._unit_of_work("add_child", entity_id=entity.id):
            child = ChildTable(entity=entity, label=label)
            self.session.add(child)
            self.session.flush()
        logger.debug("child_added", entity_id=entity.id, child_id=child.id)
        return child

    def remove_child(self, child: ChildTable) -> DeletionPlan:
        """Delete *child* together with its grandchildren."""
        self._require_stored(child, "remove_child")
        entity = child.entity
        with self._unit_of_work("remove_child", entity_id=child.entity_id):
            plan = plan_deletion(self.session, child)
            execute_plan(self.session, plan)
        self.session.expire(entity, ["children"])
        logger.debug("child_removed", entity_id=entity.id, deleted=plan.counts())
        return plan

    def add_grandchild(self, child: ChildTable, label: str | None = None) -> GrandchildTable:
        with self._unit_of_work("add_grandchild", entity_id=child.entity_id):
            grandchild = GrandchildTable(child=child, label=label)
            self.session.add(grandchild)
            self.session.flush()
        logger.debug("grandchild_added", child_id=child.id, grandchild_id=grandchild.id)
        return grandchild

    # ------------------------------------------------------------------ #
    # Holds
    # ------------------------------------------------------------------ #

    def list_holds(self, entity: EntityTable) -> list[HoldTable]:
        stmt = select(HoldTable).where(HoldTable.entity_id == entity.id).order_by(HoldTable.id)
        return list(self.session.scalars(stmt))

    def get_hold(self, hold_id: int) -> HoldTable:
        hold = self.session.get(HoldTable, hold_id)
        if hold is None:
            raise NotFoundError(f"Hold {hold_id} not found")
        return hold

    def add_hold(self, entity: EntityTable, label: str | None = None) -> HoldTable:
        with self._unit_of_work("add_hold", entity_id=entity.id):
            hold = HoldTable(entity=entity, label=label)
            self.session.add(hold)
            self.session.flush()
        logger.debug("hold_added", entity_id=entity.id, hold_id=hold.id)
        return hold

    def remove_hold(self, hold: HoldTable) -> None:
        self._require_stored(hold, "remove_hold")
        entity = hold.entity
        with self._unit_of_work("remove_hold", entity_id=hold.entity_id):
            execute_plan(self.session, plan_deletion(self.session, hold))
        self.session.expire(entity, ["holds"])
        logger.debug("hold_removed", entity_id=entity.id, hold_id=hold.id)


__all__ = [
    "EntityRepository",
]
