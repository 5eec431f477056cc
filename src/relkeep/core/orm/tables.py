"""Table definitions — parents, entities and the entity's associations.

Relationship map::

    Parent ──< Entity ──< Child ──< Grandchild
                  │
                  └──< Hold

* ``Entity.children``      cascade delete-orphan, ``ON DELETE CASCADE``
* ``Child.grandchildren``  cascade delete-orphan, ``ON DELETE CASCADE``
* ``Entity.holds``         restricting, ``ON DELETE RESTRICT``
* grandchildren of an entity are a join through ``Child`` (see
  :meth:`relkeep.core.repositories.EntityRepository.list_grandchildren`)

Tags:
    relkeep, orm, sqlalchemy, tables

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from relkeep.core.orm.base import RelkeepBase, TimestampMixin


class ParentTable(TimestampMixin, RelkeepBase):
    __tablename__ = "relkeep_parents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)

    # --- relationships ---
    entities: Mapped[list[EntityTable]] = relationship(
        "EntityTable", back_populates="parent"
    )

    def __repr__(self) -> str:
        return f"ParentTable(id={self.id!r}, name={self.name!r})"


class EntityTable(TimestampMixin, RelkeepBase):
    __tablename__ = "relkeep_entities"
    __table_args__ = (
        CheckConstraint("length(trim(name)) > 0", name="ck_relkeep_entities_name_present"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    parent_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("relkeep_parents.id"), nullable=False
    )

    # --- relationships ---
    parent: Mapped[ParentTable] = relationship("ParentTable", back_populates="entities")
    children: Mapped[list[ChildTable]] = relationship(
        "ChildTable",
        back_populates="entity",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChildTable.id",
    )
    holds: Mapped[list[HoldTable]] = relationship(
        "HoldTable",
        back_populates="entity",
        passive_deletes="all",
        order_by="HoldTable.id",
    )

    def __repr__(self) -> str:
        return f"EntityTable(id={self.id!r}, name={self.name!r})"


class ChildTable(RelkeepBase):
    __tablename__ = "relkeep_children"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entity_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("relkeep_entities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    label: Mapped[str | None] = mapped_column(Text)

    # --- relationships ---
    entity: Mapped[EntityTable] = relationship("EntityTable", back_populates="children")
    grandchildren: Mapped[list[GrandchildTable]] = relationship(
        "GrandchildTable",
        back_populates="child",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="GrandchildTable.id",
    )

    def __repr__(self) -> str:
        return f"ChildTable(id={self.id!r}, entity_id={self.entity_id!r})"


class GrandchildTable(RelkeepBase):
    __tablename__ = "relkeep_grandchildren"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    child_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("relkeep_children.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    label: Mapped[str | None] = mapped_column(Text)

    # --- relationships ---
    child: Mapped[ChildTable] = relationship("ChildTable", back_populates="grandchildren")

    def __repr__(self) -> str:
        return f"GrandchildTable(id={self.id!r}, child_id={self.child_id!r})"


class HoldTable(RelkeepBase):
    __tablename__ = "relkeep_holds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entity_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("relkeep_entities.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    label: Mapped[str | None] = mapped_column(Text)

    # --- relationships ---
    entity: Mapped[EntityTable] = relationship("EntityTable", back_populates="holds")

    def __repr__(self) -> str:
        return f"HoldTable(id={self.id!r}, entity_id={self.entity_id!r})"


__all__ = [
    "ParentTable",
    "EntityTable",
    "ChildTable",
    "GrandchildTable",
    "HoldTable",
]
