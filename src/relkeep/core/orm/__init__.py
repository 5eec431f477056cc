"""SQLAlchemy 2.0 ORM layer for relkeep.

Modules
-------
base        RelkeepBase (declarative base) + TimestampMixin
session     Engine factory, RelkeepSession, init_db
tables      Mapped table classes (ParentTable, EntityTable, ...)
"""

from __future__ import annotations

from relkeep.core.orm.base import RelkeepBase, TimestampMixin
from relkeep.core.orm.session import (
    RelkeepSession,
    create_relkeep_engine,
    init_db,
    relkeep_session_factory,
)
from relkeep.core.orm.tables import (
    ChildTable,
    EntityTable,
    GrandchildTable,
    HoldTable,
    ParentTable,
)

__all__ = [
    "RelkeepBase",
    "TimestampMixin",
    "create_relkeep_engine",
    "RelkeepSession",
    "relkeep_session_factory",
    "init_db",
    "ParentTable",
    "EntityTable",
    "ChildTable",
    "GrandchildTable",
    "HoldTable",
]
