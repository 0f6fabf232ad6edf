"""
Base repository with the CRUD operations shared by all forum tables.
"""

from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from repositories.database import Base

T = TypeVar("T", bound=Base)  # type: ignore[type-arg]


class BaseRepository(Generic[T]):
    """
    Generic repository over one SQLAlchemy model.

    create and update commit immediately. add leaves the
    transaction open so a service can stage several changes and commit once.
    """

    def __init__(self, model: type[T], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> T | None:
        """Get entity by primary key, or None."""
        return self.db.query(self.model).filter(self.model.id == id).first()

    def add(self, entity: T) -> None:
        """Stage an entity without committing."""
        self.db.add(entity)

    def create(self, entity: T) -> T:
        """
        Insert an entity and commit.

        Args:
            entity: Entity to create

        Returns:
            The refreshed entity with generated fields populated
        """
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: T) -> T:
        """Commit pending changes to an entity and refresh it."""
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def count(self) -> int:
        """Count all rows of the model."""
        return self.db.query(self.model).count()

    def commit(self) -> None:
        """Commit the current transaction."""
        self.db.commit()

    def refresh(self, entity: T) -> None:
        """Reload an entity from the database."""
        self.db.refresh(entity)
