"""
Repository for per-user navigation state.
"""

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import UserViewState


class ViewStateRepository(BaseRepository[UserViewState]):
    """Repository for UserViewState rows (one per user)."""

    def __init__(self, db: Session):
        super().__init__(UserViewState, db)

    def get_by_user(self, user_id: int) -> UserViewState | None:
        """Get a user's stored view state, or None."""
        return (
            self.db.query(UserViewState)
            .filter(UserViewState.user_id == user_id)
            .first()
        )
