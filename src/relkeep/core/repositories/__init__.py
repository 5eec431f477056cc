"""Repositories over the relkeep ORM session."""

from relkeep.core.repositories.entities import EntityRepository

__all__ = ["EntityRepository"]
