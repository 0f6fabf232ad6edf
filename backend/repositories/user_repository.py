"""
User repository for database operations.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class UserRepository(BaseRepository[db_models.User]):
    """Repository for User entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize user repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.User, db)

    def get_by_username(self, username: str) -> Optional[db_models.User]:
        """
        Get user by exact username.

        Args:
            username: Username

        Returns:
            User if found, None otherwise
        """
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.username == username)
            .first()
        )

    def get_by_username_ci(self, username: str) -> Optional[db_models.User]:
        """
        Get user by username, ignoring case.

        Usernames are unique case-insensitively, so at most one row matches.
        """
        return (
            self.db.query(db_models.User)
            .filter(func.lower(db_models.User.username) == username.lower())
            .first()
        )

    def get_by_email(self, email: str) -> Optional[db_models.User]:
        """Get user by email."""
        return (
            self.db.query(db_models.User).filter(db_models.User.email == email).first()
        )

    def username_exists(self, username: str, exclude_user_id: int | None = None) -> bool:
        """
        Check if a username is taken (case-insensitive).

        Args:
            username: Username to check
            exclude_user_id: User allowed to hold the name (profile updates)

        Returns:
            True if another user already has the name
        """
        query = self.db.query(db_models.User.id).filter(
            func.lower(db_models.User.username) == username.lower()
        )
        if exclude_user_id is not None:
            query = query.filter(db_models.User.id != exclude_user_id)
        return query.first() is not None

    def email_exists(self, email: str, exclude_user_id: int | None = None) -> bool:
        """Check if an email is registered to another user."""
        query = self.db.query(db_models.User.id).filter(db_models.User.email == email)
        if exclude_user_id is not None:
            query = query.filter(db_models.User.id != exclude_user_id)
        return query.first() is not None

    def list_users(self, skip: int = 0, limit: int = 100) -> List[db_models.User]:
        """List users ordered by registration date (oldest first)."""
        return (
            self.db.query(db_models.User)
            .order_by(db_models.User.created_at.asc(), db_models.User.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )
