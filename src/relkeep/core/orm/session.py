"""SQLAlchemy engine factory and pre-configured session.

This module provides:

* ``create_relkeep_engine``   -- Create a SA engine from a URL.
* ``RelkeepSession``          -- ``Session`` subclass with ``expire_on_commit=False``.
* ``relkeep_session_factory`` -- ``sessionmaker`` producing ``RelkeepSession``.
* ``init_db``                 -- Create every mapped table.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from relkeep.core.logging import get_logger

logger = get_logger(__name__)


def create_relkeep_engine(
    url: str = "sqlite:///relkeep.db",
    *,
    echo: bool = False,
    **kwargs: Any,
) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    SQLite connections get ``PRAGMA foreign_keys=ON`` so that the
    ``ON DELETE CASCADE`` / ``ON DELETE RESTRICT`` clauses on the relkeep
    tables are enforced by the database as well as by the repository.
    """
    if not url.startswith("sqlite"):
        return _sa_create_engine(url, echo=echo, **kwargs)

    kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = _sa_create_engine(url, echo=echo, **kwargs)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


class RelkeepSession(Session):
    """Pre-configured session with ``expire_on_commit=False``.

    Prevents lazy-load surprises after the repository commits a unit of work.
    """

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


def relkeep_session_factory(engine: Engine) -> sessionmaker[RelkeepSession]:
    """Return a ``sessionmaker`` bound to *engine* that produces ``RelkeepSession`` instances."""
    return sessionmaker(bind=engine, class_=RelkeepSession)


def init_db(engine: Engine) -> list[str]:
    """Create all relkeep tables that do not exist yet; return their names."""
    from relkeep.core.orm import tables  # noqa: F401  registers the mappers
    from relkeep.core.orm.base import RelkeepBase

    RelkeepBase.metadata.create_all(engine)
    table_names = sorted(RelkeepBase.metadata.tables)
    logger.info("db_initialized", url=str(engine.url), tables=table_names)
    return table_names
