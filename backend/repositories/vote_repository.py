"""
Topic vote repository for database operations.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class VoteRepository(BaseRepository[db_models.TopicVote]):
    """Repository for TopicVote entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize vote repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.TopicVote, db)

    def get_by_topic_and_user(
        self, topic_id: int, user_id: int
    ) -> Optional[db_models.TopicVote]:
        """
        Get the vote a user holds on a topic.

        Args:
            topic_id: Topic ID
            user_id: User ID

        Returns:
            Vote if found, None otherwise
        """
        return (
            self.db.query(db_models.TopicVote)
            .filter(
                db_models.TopicVote.topic_id == topic_id,
                db_models.TopicVote.user_id == user_id,
            )
            .first()
        )

    def get_votes_for_topic(
        self, topic_id: int, vote_type: Optional[db_models.VoteType] = None
    ) -> List[db_models.TopicVote]:
        """
        Get all votes on a topic.

        Args:
            topic_id: Topic ID
            vote_type: Optional filter by vote type

        Returns:
            List of votes
        """
        query = self.db.query(db_models.TopicVote).filter(
            db_models.TopicVote.topic_id == topic_id
        )
        if vote_type:
            query = query.filter(db_models.TopicVote.vote_type == vote_type)
        return query.all()

    def count_votes(self, topic_id: int) -> tuple[int, int]:
        """
        Count stored up and down votes on a topic.

        Returns:
            Tuple of (upvotes, downvotes)
        """
        votes = self.get_votes_for_topic(topic_id)
        up = sum(1 for v in votes if v.vote_type == db_models.VoteType.UP)
        return up, len(votes) - up

    def remove(self, vote: db_models.TopicVote) -> None:
        """Stage deletion of a vote without committing."""
        self.db.delete(vote)
