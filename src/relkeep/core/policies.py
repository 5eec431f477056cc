"""
Per-association deletion policies and the deletion planner.

Deletion behaviour is declared, not coded into callbacks: every mapped class
lists its associations in :data:`ASSOCIATIONS`, each tagged with a
:class:`DeletePolicy`.  :func:`plan_deletion` walks that registry *before*
anything is mutated and returns a :class:`DeletionPlan` holding either the
full list of rows to remove or the restricting associations that block the
delete.  :func:`execute_plan` applies an unblocked plan inside the caller's
transaction.

Registry::

    EntityTable
      ├── children       CASCADE   → ChildTable.entity_id
      ├── grandchildren  IGNORE    (derived through children, no storage)
      └── holds          RESTRICT  → HoldTable.entity_id
    ChildTable
      └── grandchildren  CASCADE   → GrandchildTable.child_id

Examples:
    >>> plan = plan_deletion(session, entity)
    >>> plan.allowed
    True
    >>> plan.counts()
    {'relkeep_grandchildren': 3, 'relkeep_children': 2, 'relkeep_entities': 1}
    >>> execute_plan(session, plan)

Tags:
    relkeep, deletion, cascade, restrict, policy
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from relkeep.core.errors import RestrictedDeletionError
from relkeep.core.orm.base import RelkeepBase
from relkeep.core.orm.tables import ChildTable, EntityTable, GrandchildTable, HoldTable


class DeletePolicy(str, Enum):
    """What deleting the owner does to an association."""

    CASCADE = "cascade"
    RESTRICT = "restrict"
    IGNORE = "ignore"


@dataclass(frozen=True, slots=True)
class Association:
    """One owner → dependents association and its deletion policy.

    Attributes:
        name: Association name on the owner (``children``, ``holds``, ...).
        target: Mapped class of the dependent rows.
        foreign_key: Column on *target* referencing the owner's ``id``.
            Only ``IGNORE`` associations (derived views) may omit it.
        policy: Deletion policy tag.
    """

    name: str
    target: type[RelkeepBase]
    foreign_key: InstrumentedAttribute[Any] | None
    policy: DeletePolicy

    def __post_init__(self) -> None:
        if self.foreign_key is None and self.policy is not DeletePolicy.IGNORE:
            raise ValueError(
                f"association {self.name!r} needs a foreign key for policy {self.policy.value!r}"
            )


ASSOCIATIONS: dict[type[RelkeepBase], tuple[Association, ...]] = {
    EntityTable: (
        Association("children", ChildTable, ChildTable.entity_id, DeletePolicy.CASCADE),
        Association("grandchildren", GrandchildTable, None, DeletePolicy.IGNORE),
        Association("holds", HoldTable, HoldTable.entity_id, DeletePolicy.RESTRICT),
    ),
    ChildTable: (
        Association(
            "grandchildren", GrandchildTable, GrandchildTable.child_id, DeletePolicy.CASCADE
        ),
    ),
}


def associations_for(model: type[RelkeepBase]) -> tuple[Association, ...]:
    """Associations declared for *model* (empty for leaf tables)."""
    return ASSOCIATIONS.get(model, ())


@dataclass
class DeletionPlan:
    """Outcome of planning the deletion of one record.

    Attributes:
        root: The record whose deletion was planned.
        doomed: Rows to delete, dependents first and ``root`` last.
        blockers: Restricting association path → number of blocking rows.
    """

    root: RelkeepBase
    doomed: list[RelkeepBase] = field(default_factory=list)
    blockers: dict[str, int] = field(default_factory=dict)

    @property
    def allowed(self) -> bool:
        return not self.blockers

    def counts(self) -> dict[str, int]:
        """Rows to delete per table, in deletion order."""
        counts: dict[str, int] = {}
        for record in self.doomed:
            table = record.__tablename__
            counts[table] = counts.get(table, 0) + 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "table": self.root.__tablename__,
            "id": getattr(self.root, "id", None),
            "allowed": self.allowed,
            "deletes": self.counts(),
            "blockers": dict(self.blockers),
        }


def plan_deletion(session: Session, record: RelkeepBase) -> DeletionPlan:
    """Plan the deletion of *record* without mutating anything.

    Dependents are queried from the database at call time, so collections
    already loaded on *record* never hide rows.
    """
    plan = DeletionPlan(root=record)
    _walk(session, record, plan, prefix="")
    plan.doomed.append(record)
    return plan


def _walk(session: Session, record: RelkeepBase, plan: DeletionPlan, prefix: str) -> None:
    for association in associations_for(type(record)):
        if association.policy is DeletePolicy.IGNORE:
            continue

        path = f"{prefix}{association.name}"
        condition = association.foreign_key == record.id  # type: ignore[attr-defined]

        if association.policy is DeletePolicy.RESTRICT:
            count = session.scalar(
                select(func.count()).select_from(association.target).where(condition)
            )
            if count:
                plan.blockers[path] = plan.blockers.get(path, 0) + count
            continue

        dependents = session.scalars(
            select(association.target)
            .where(condition)
            .order_by(association.target.id)  # type: ignore[attr-defined]
        ).all()
        for dependent in dependents:
            _walk(session, dependent, plan, prefix=f"{path}.")
            plan.doomed.append(dependent)


def execute_plan(session: Session, plan: DeletionPlan) -> None:
    """Delete every row in *plan* and flush.

    Raises:
        RestrictedDeletionError: the plan has blockers; nothing is deleted.
    """
    if not plan.allowed:
        raise RestrictedDeletionError(
            f"Cannot delete {plan.root.__tablename__} record because of dependent "
            f"{', '.join(sorted(plan.blockers))}",
            blockers=plan.blockers,
        )

    for record in plan.doomed:
        session.delete(record)
    session.flush()


__all__ = [
    "DeletePolicy",
    "Association",
    "ASSOCIATIONS",
    "associations_for",
    "DeletionPlan",
    "plan_deletion",
    "execute_plan",
]
