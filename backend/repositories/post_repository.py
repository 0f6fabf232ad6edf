"""
Post repository for database operations.

Posts and replies share the posts table; a reply has a parent_id.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Query, Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class PostRepository(BaseRepository[db_models.Post]):
    """Repository for Post entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize post repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Post, db)

    def _visible(self, with_author: bool = True) -> Query:
        """Posts that are not deleted and whose topic is not deleted."""
        query = self.db.query(db_models.Post).join(
            db_models.Topic, db_models.Post.topic_id == db_models.Topic.id
        )
        if with_author:
            query = query.options(joinedload(db_models.Post.author))
        return query.filter(
            db_models.Post.deleted_at.is_(None),
            db_models.Topic.deleted_at.is_(None),
        )

    @staticmethod
    def _without_blocked_authors(query: Query) -> Query:
        blocked_ids = select(db_models.BlockedUser.user_id)
        return query.filter(db_models.Post.user_id.not_in(blocked_ids))

    def get_visible_by_id(self, post_id: int) -> Optional[db_models.Post]:
        """
        Get a post whose post and topic are not deleted.

        Args:
            post_id: Post ID

        Returns:
            Post if found, None otherwise
        """
        return self._visible().filter(db_models.Post.id == post_id).first()

    def list_posts(
        self,
        topic_id: Optional[int] = None,
        author_id: Optional[int] = None,
        top_level_only: bool = True,
        hide_blocked: bool = True,
        newest_first: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> List[db_models.Post]:
        """
        List visible posts.

        Args:
            topic_id: Optional topic filter
            author_id: Optional author filter
            top_level_only: Exclude replies
            hide_blocked: Exclude posts whose author is blocked
            newest_first: Order by creation date descending instead of ascending
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of posts
        """
        query = self._visible()
        if topic_id is not None:
            query = query.filter(db_models.Post.topic_id == topic_id)
        if author_id is not None:
            query = query.filter(db_models.Post.user_id == author_id)
        if top_level_only:
            query = query.filter(db_models.Post.parent_id.is_(None))
        if hide_blocked:
            query = self._without_blocked_authors(query)

        if newest_first:
            query = query.order_by(
                db_models.Post.created_at.desc(), db_models.Post.id.desc()
            )
        else:
            query = query.order_by(
                db_models.Post.created_at.asc(), db_models.Post.id.asc()
            )
        return query.offset(skip).limit(limit).all()

    def get_replies(
        self, parent_id: int, hide_blocked: bool = True
    ) -> List[db_models.Post]:
        """Get the visible direct replies to a post, oldest first."""
        query = self._visible().filter(db_models.Post.parent_id == parent_id)
        if hide_blocked:
            query = self._without_blocked_authors(query)
        return query.order_by(
            db_models.Post.created_at.asc(), db_models.Post.id.asc()
        ).all()

    def get_by_author(self, user_id: int) -> List[db_models.Post]:
        """Get all visible posts and replies written by a user."""
        return (
            self._visible()
            .filter(db_models.Post.user_id == user_id)
            .order_by(db_models.Post.id.asc())
            .all()
        )

    def count_by_author(self, user_id: int) -> int:
        """Count visible posts and replies written by a user."""
        return (
            self._visible(with_author=False)
            .filter(db_models.Post.user_id == user_id)
            .count()
        )

    def count_visible(self) -> int:
        """Count all visible posts and replies."""
        return self._visible(with_author=False).count()


class PostReactionRepository(BaseRepository[db_models.PostReaction]):
    """Repository for post like/dislike records."""

    def __init__(self, db: Session):
        super().__init__(db_models.PostReaction, db)

    def get_by_post_and_user(
        self, post_id: int, user_id: int
    ) -> Optional[db_models.PostReaction]:
        """Get a user's reaction to a post, or None."""
        return (
            self.db.query(db_models.PostReaction)
            .filter(
                db_models.PostReaction.post_id == post_id,
                db_models.PostReaction.user_id == user_id,
            )
            .first()
        )
