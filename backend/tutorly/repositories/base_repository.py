# backend/tutorly/repositories/base_repository.py
"""
Base Repository Pattern for the Tutorly platform.

Provides the foundation for all repository classes with:
- Common CRUD operations
- Type safety with generics
- Translation of storage errors into repository exceptions

Repositories never commit. Transactions are owned by the service layer.
"""

import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException, SlotStorageConflictError

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE for exclusion constraint violations
EXCLUSION_VIOLATION = "23P01"


def is_exclusion_violation(exc: IntegrityError) -> bool:
    """True when the database rejected a row because of an EXCLUDE constraint."""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == EXCLUSION_VIOLATION:
        return True
    return "no_overlap" in str(orig or exc)


class BaseRepository(Generic[T]):
    """
    Concrete base repository implementation with common data access patterns.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model.

        Args:
            db: SQLAlchemy session (managed by service layer)
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key."""
        try:
            return self.db.query(self.model).filter(self.model.id == id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting {self.model.__name__} by id {id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve {self.model.__name__}: {str(e)}")

    def create(self, **kwargs: Any) -> T:
        """
        Create a new entity.

        Note: Does NOT commit - transaction management is handled by service layer.

        Raises:
            SlotStorageConflictError: if an overlap constraint rejected the row
            RepositoryException: for any other storage failure
        """
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()  # Get ID without committing
            return entity
        except IntegrityError as exc:
            self.db.rollback()
            if is_exclusion_violation(exc):
                self.logger.warning(
                    "Overlap constraint rejected %s insert: %s", self.model.__name__, exc.orig
                )
                raise SlotStorageConflictError(str(exc.orig)) from exc
            self.logger.error(
                "Integrity error creating %s: %s", self.model.__name__, exc, exc_info=True
            )
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}")

    def bulk_create(self, entities: List[Dict[str, Any]]) -> List[T]:
        """
        Create multiple entities in one flush.

        Args:
            entities: List of entity data dictionaries

        Returns:
            List of created entities
        """
        if not entities:
            return []
        try:
            db_entities = [self.model(**data) for data in entities]
            self.db.add_all(db_entities)
            self.db.flush()
            return db_entities
        except IntegrityError as exc:
            self.db.rollback()
            if is_exclusion_violation(exc):
                raise SlotStorageConflictError(str(exc.orig)) from exc
            self.logger.error(f"Integrity error bulk creating: {str(exc)}")
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error bulk creating: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to bulk create: {str(e)}")

    def update(self, entity: T, **kwargs: Any) -> T:
        """Update only the provided fields of an entity."""
        try:
            for key, value in kwargs.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)
            self.db.flush()
            return entity
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating {self.model.__name__}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to update {self.model.__name__}: {str(e)}")

    def delete(self, id: str) -> bool:
        """
        Delete an entity by its primary key.

        Returns False if entity not found, raises exception for constraint violations.
        """
        try:
            entity = self.get_by_id(id)
            if not entity:
                return False

            self.db.delete(entity)
            self.db.flush()
            return True
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting {self.model.__name__} {id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to delete {self.model.__name__}: {str(e)}")

    def find_one_by(self, **kwargs: Any) -> Optional[T]:
        """Find a single entity by exact-match criteria."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding one by criteria: {str(e)}")
            raise RepositoryException(f"Failed to find record: {str(e)}")

    def flush(self) -> None:
        """Flush pending ORM changes."""
        self.db.flush()

    # Protected helper methods for use by subclasses

    def _build_query(self) -> Query:
        """Get base query for the model."""
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[T]:
        """Execute query with error handling."""
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Query execution error: {str(e)}")
            raise RepositoryException(f"Query failed: {str(e)}")

    def _execute_delete(self, query: Query) -> int:
        """Bulk-delete the rows matched by a query and return how many went."""
        try:
            deleted = query.delete()
            self.db.flush()
            return int(deleted)
        except SQLAlchemyError as e:
            self.logger.error(f"Bulk delete error on {self.model.__name__}: {str(e)}")
            raise RepositoryException(f"Failed to delete {self.model.__name__} rows: {str(e)}")
