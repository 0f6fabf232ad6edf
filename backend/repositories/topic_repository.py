"""
Topic repository for database operations.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Query, Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository

# Sort keys accepted by list_topics
SORT_NEW = "new"
SORT_TOP = "top"
SORT_POPULAR = "popular"


class TopicRepository(BaseRepository[db_models.Topic]):
    """Repository for Topic entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize topic repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Topic, db)

    def _active(self) -> Query:
        return (
            self.db.query(db_models.Topic)
            .options(joinedload(db_models.Topic.author))
            .filter(db_models.Topic.deleted_at.is_(None))
        )

    @staticmethod
    def _without_blocked_authors(query: Query) -> Query:
        blocked_ids = select(db_models.BlockedUser.user_id)
        return query.filter(db_models.Topic.user_id.not_in(blocked_ids))

    def get_active_by_id(self, topic_id: int) -> Optional[db_models.Topic]:
        """
        Get a topic that has not been soft-deleted.

        Args:
            topic_id: Topic ID

        Returns:
            Topic if found and not deleted, None otherwise
        """
        return self._active().filter(db_models.Topic.id == topic_id).first()

    def list_topics(
        self,
        category: Optional[str] = None,
        sort_by: str = SORT_NEW,
        skip: int = 0,
        limit: int = 20,
        hide_blocked: bool = True,
    ) -> List[db_models.Topic]:
        """
        List non-deleted topics.

        Args:
            category: Optional category filter
            sort_by: "new" (creation date), "top" (score) or "popular" (replies, views)
            skip: Number of records to skip
            limit: Maximum number of records to return
            hide_blocked: Exclude topics whose author is blocked

        Returns:
            List of topics
        """
        query = self._active()
        if category:
            query = query.filter(db_models.Topic.category == category)
        if hide_blocked:
            query = self._without_blocked_authors(query)

        if sort_by == SORT_TOP:
            query = query.order_by(
                (db_models.Topic.upvotes - db_models.Topic.downvotes).desc(),
                db_models.Topic.created_at.desc(),
            )
        elif sort_by == SORT_POPULAR:
            query = query.order_by(
                db_models.Topic.reply_count.desc(),
                db_models.Topic.view_count.desc(),
                db_models.Topic.created_at.desc(),
            )
        else:
            query = query.order_by(
                db_models.Topic.created_at.desc(), db_models.Topic.id.desc()
            )

        return query.offset(skip).limit(limit).all()

    def get_changed_since(
        self, since: datetime, limit: int, hide_blocked: bool = True
    ) -> List[db_models.Topic]:
        """
        Get topics modified after a point in time, oldest change first.

        Soft-deleted topics are included so pollers can drop them.
        """
        query = (
            self.db.query(db_models.Topic)
            .options(joinedload(db_models.Topic.author))
            .filter(db_models.Topic.updated_at > since)
        )
        if hide_blocked:
            query = self._without_blocked_authors(query)
        return (
            query.order_by(db_models.Topic.updated_at.asc(), db_models.Topic.id.asc())
            .limit(limit)
            .all()
        )

    def get_by_author(self, user_id: int) -> List[db_models.Topic]:
        """Get all non-deleted topics authored by a user."""
        return (
            self._active()
            .filter(db_models.Topic.user_id == user_id)
            .order_by(db_models.Topic.id.asc())
            .all()
        )

    def count_by_author(self, user_id: int) -> int:
        """Count non-deleted topics authored by a user."""
        return (
            self.db.query(db_models.Topic)
            .filter(
                db_models.Topic.user_id == user_id,
                db_models.Topic.deleted_at.is_(None),
            )
            .count()
        )

    def count_active(self) -> int:
        """Count all non-deleted topics."""
        return (
            self.db.query(db_models.Topic)
            .filter(db_models.Topic.deleted_at.is_(None))
            .count()
        )

    def get_titles(self, topic_ids: set[int]) -> dict[int, str]:
        """Map topic IDs to titles, deleted topics included."""
        if not topic_ids:
            return {}
        rows = (
            self.db.query(db_models.Topic.id, db_models.Topic.title)
            .filter(db_models.Topic.id.in_(topic_ids))
            .all()
        )
        return {topic_id: title for topic_id, title in rows}
