"""Base repository class with common CRUD operations."""

from typing import Generic, TypeVar, Type, Optional
from uuid import UUID

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import structlog

from portal_backend.core.base import Base
from portal_backend.core.error_handling import ConflictError

logger = structlog.get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository class with common CRUD operations."""

    conflict_message = "Record already exists"

    def __init__(self, model: Type[ModelType]):
        """Initialize repository with model class.

        Args:
            model: SQLAlchemy model class
        """
        self.model = model

    def create(self, db: Session, **kwargs) -> ModelType:
        """Create a new record.

        Args:
            db: Database session
            **kwargs: Model field values

        Returns:
            Created model instance

        Raises:
            ConflictError: If a unique constraint rejects the record
        """
        instance = self.model(**kwargs)
        db.add(instance)
        self._commit(db, "create")
        db.refresh(instance)

        logger.debug("Record created", model=self.model.__name__, id=str(instance.id))
        return instance

    def get_by_id(self, db: Session, id: UUID) -> Optional[ModelType]:
        """Get record by ID.

        Args:
            db: Database session
            id: Record UUID

        Returns:
            Model instance if found, None otherwise
        """
        return db.query(self.model).filter(self.model.id == id).first()

    def update(self, db: Session, instance: ModelType, **kwargs) -> ModelType:
        """Assign the given attributes and persist them.

        ``None`` values are assigned too; callers pass only the fields the
        client actually sent.

        Raises:
            ConflictError: If a unique constraint rejects the change
        """
        for field, value in kwargs.items():
            if hasattr(instance, field):
                setattr(instance, field, value)

        self._commit(db, "update")
        db.refresh(instance)

        logger.debug("Record updated", model=self.model.__name__, id=str(instance.id))
        return instance

    def delete(self, db: Session, instance: ModelType) -> None:
        db.delete(instance)
        self._commit(db, "delete")
        logger.debug("Record deleted", model=self.model.__name__, id=str(instance.id))

    def _commit(self, db: Session, operation: str) -> None:
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(
                "Record write rejected",
                model=self.model.__name__,
                operation=operation,
                error=str(e.orig),
            )
            raise ConflictError(self.conflict_message, original_error=e)
