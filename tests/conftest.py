"""
Shared pytest fixtures for relkeep tests.

This module provides:
- An in-memory SQLite engine with every relkeep table created
- A session and an ``EntityRepository`` bound to it
- A small entity family (two children, three grandchildren) for cascade tests
"""

import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

# Ensure relkeep package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from relkeep.core.logging import clear_context
from relkeep.core.orm import (
    ChildTable,
    EntityTable,
    GrandchildTable,
    ParentTable,
    RelkeepBase,
    RelkeepSession,
    create_relkeep_engine,
)
from relkeep.core.repositories import EntityRepository
from relkeep.core.settings import clear_settings_cache


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_state():
    """Reset cached settings and bound log context around every test."""
    clear_settings_cache()
    clear_context()
    yield
    clear_settings_cache()
    clear_context()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    eng = create_relkeep_engine("sqlite:///:memory:")
    RelkeepBase.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    """RelkeepSession bound to the in-memory engine."""
    with RelkeepSession(bind=engine) as sess:
        yield sess


@pytest.fixture
def repo(session) -> EntityRepository:
    return EntityRepository(session)


@pytest.fixture
def parent(repo) -> ParentTable:
    return repo.create_parent("orchard")


@dataclass
class Family:
    """Entity E with children a1 → {b1, b2} and a2 → {b3}."""

    entity: EntityTable
    a1: ChildTable
    a2: ChildTable
    b1: GrandchildTable
    b2: GrandchildTable
    b3: GrandchildTable


@pytest.fixture
def family(repo, parent) -> Family:
    entity = repo.create("E", parent)
    a1 = repo.add_child(entity, "a1")
    a2 = repo.add_child(entity, "a2")
    b1 = repo.add_grandchild(a1, "b1")
    b2 = repo.add_grandchild(a1, "b2")
    b3 = repo.add_grandchild(a2, "b3")
    return Family(entity=entity, a1=a1, a2=a2, b1=b1, b2=b2, b3=b3)
