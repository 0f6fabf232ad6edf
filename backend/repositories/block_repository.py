"""
Repository for the blocked users registry.
"""

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import BlockedUser


class BlockRepository(BaseRepository[BlockedUser]):
    """Repository for block record data access."""

    def __init__(self, db: Session):
        """
        Initialize block repository.

        Args:
            db: Database session
        """
        super().__init__(BlockedUser, db)

    def get_by_username(self, username: str) -> BlockedUser | None:
        """Get the active block record for a username, or None."""
        return (
            self.db.query(BlockedUser).filter(BlockedUser.username == username).first()
        )

    def exists(self, username: str) -> bool:
        """Check whether a username has an active block record."""
        return (
            self.db.query(BlockedUser.id)
            .filter(BlockedUser.username == username)
            .first()
            is not None
        )

    def rename_user(self, old_username: str, new_username: str) -> None:
        """Carry a user's block record and issued blocks over to a new username."""
        self.db.query(BlockedUser).filter(BlockedUser.username == old_username).update(
            {BlockedUser.username: new_username}, synchronize_session=False
        )
        self.db.query(BlockedUser).filter(
            BlockedUser.blocked_by == old_username
        ).update({BlockedUser.blocked_by: new_username}, synchronize_session=False)

    def get_blocked_usernames(self) -> set[str]:
        """Get the set of all blocked usernames."""
        return {row[0] for row in self.db.query(BlockedUser.username).all()}

    def list_blocked(self) -> list[BlockedUser]:
        """List block records, most recent first."""
        return (
            self.db.query(BlockedUser)
            .order_by(BlockedUser.blocked_at.desc(), BlockedUser.id.desc())
            .all()
        )

    def delete_by_username(self, username: str) -> int:
        """
        Delete the block record of a username.

        Returns:
            Number of deleted rows (0 or 1)
        """
        count = (
            self.db.query(BlockedUser)
            .filter(BlockedUser.username == username)
            .delete()
        )
        self.db.commit()
        return count
