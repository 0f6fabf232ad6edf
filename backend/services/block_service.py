"""
Block Service - the registry of users blocked by admins.

A block record snapshots the user's activity counts at block time; the
snapshot is never refreshed. Whether a user is blocked is always read
from this registry, never from the user row.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from models.exceptions import UserNotFoundException
from repositories.block_repository import BlockRepository
from repositories.post_repository import PostRepository
from repositories.report_repository import ReportRepository
from repositories.topic_repository import TopicRepository
from repositories.user_repository import UserRepository


class BlockService:
    """Service for blocking and unblocking users."""

    @staticmethod
    def is_blocked(db: Session, username: str) -> bool:
        return BlockRepository(db).exists(username)

    @staticmethod
    def block(db: Session, username: str, blocked_by: str, reason: str = "") -> bool:
        """
        Block a user.

        Args:
            db: Database session
            username: User to block
            blocked_by: Username of the admin performing the block
            reason: Free-text reason shown in the admin panel

        Returns:
            True if a block record was created, False if the user was
            already blocked

        Raises:
            UserNotFoundException: If no user has this username
        """
        block_repo = BlockRepository(db)
        user = UserRepository(db).get_by_username(username)
        if user is None:
            raise UserNotFoundException(f"User {username} not found")

        if block_repo.exists(user.username):
            logger.info(f"User {user.username} is already blocked")
            return False

        record = db_models.BlockedUser(
            username=user.username,
            user_id=user.id,
            email=user.email,
            blocked_by=blocked_by,
            reason=sanitize_plain_text(reason) or "",
            topics_created=TopicRepository(db).count_by_author(user.id),
            posts_created=PostRepository(db).count_by_author(user.id),
            reports_received=ReportRepository(db).count_for_reported(user.username),
        )
        block_repo.create(record)

        logger.info(
            f"User {user.username} blocked by {blocked_by}",
            extra={
                "topics_created": record.topics_created,
                "posts_created": record.posts_created,
                "reports_received": record.reports_received,
            },
        )
        return True

    @staticmethod
    def unblock(db: Session, username: str) -> bool:
        """
        Remove a user's block record if there is one.

        Returns:
            Always True
        """
        removed = BlockRepository(db).delete_by_username(username)
        if removed:
            logger.info(f"User {username} unblocked")
        return True

    @staticmethod
    def get_block(db: Session, username: str) -> Optional[schemas.BlockedUser]:
        record = BlockRepository(db).get_by_username(username)
        if record is None:
            return None
        return BlockService._to_schema(record)

    @staticmethod
    def list_blocked(db: Session) -> list[schemas.BlockedUser]:
        """List every active block, most recent first."""
        return [
            BlockService._to_schema(record)
            for record in BlockRepository(db).list_blocked()
        ]

    @staticmethod
    def _to_schema(record: db_models.BlockedUser) -> schemas.BlockedUser:
        return schemas.BlockedUser(
            username=record.username,
            user_id=record.user_id,
            email=record.email,
            blocked_by=record.blocked_by,
            reason=record.reason,
            blocked_at=record.blocked_at,
            user_stats=schemas.BlockedUserStats(
                topics_created=record.topics_created,
                posts_created=record.posts_created,
                reports_received=record.reports_received,
            ),
        )
