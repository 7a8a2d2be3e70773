"""
Base Repository implementation.
Provides common data access patterns over a SQLAlchemy session.

Repositories never commit: the domain service owning the unit of work
calls safe_commit once its writes are done.
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic

from sqlalchemy.orm import Session


ModelT = TypeVar("ModelT")


class BaseRepository(ABC, Generic[ModelT]):
    """
    Abstract base repository with common operations.

    Subclasses must implement:
    - model: Return the SQLAlchemy model class
    """

    def __init__(self, db: Session):
        self._db = db

    @property
    @abstractmethod
    def model(self) -> type[ModelT]:
        """Return the SQLAlchemy model class."""
        ...

    def find_by_id(self, entity_id: int | str) -> ModelT | None:
        """Find entity by primary key."""
        return self._db.get(self.model, entity_id)

    def add(self, entity: ModelT) -> ModelT:
        """Stage a new entity and flush it so generated keys are available."""
        self._db.add(entity)
        self._db.flush()
        return entity

    def delete(self, entity: ModelT) -> None:
        self._db.delete(entity)
        self._db.flush()
