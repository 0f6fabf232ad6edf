"""
Vote service for topic up/down votes.

One vote per user per topic with toggle semantics: repeating a vote removes
it, voting the other way switches it. A topic's score never goes below zero
because of a stored downvote.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import TopicNotFoundException, VoteWouldBeNegativeException
from repositories.topic_repository import TopicRepository
from repositories.vote_repository import VoteRepository
from services.permission_service import Capability, PermissionService

VOTE_MESSAGES = {
    db_models.VoteType.UP: "Upvote recorded",
    db_models.VoteType.DOWN: "Downvote recorded",
    None: "Vote removed",
}


class VoteService:
    """Service for vote-related business logic."""

    @staticmethod
    def apply_vote(
        db: Session,
        topic_id: int,
        vote_type: db_models.VoteType,
        user: Optional[db_models.User],
    ) -> schemas.TopicVoteResult:
        """
        Apply an upvote or downvote to a topic.

        Transitions (previous vote -> request):
            none -> up/down: add the vote
            up -> up, down -> down: remove the vote
            up -> down, down -> up: switch the vote

        Counters and the vote row are committed together.

        Args:
            db: Database session
            topic_id: Topic ID
            vote_type: Requested vote
            user: Current user, None if anonymous

        Returns:
            Updated topic, the action taken and the stored vote

        Raises:
            UnauthenticatedException: If nobody is logged in
            UserBlockedException: If the user is blocked
            InsufficientPermissionsException: If the user may not vote
            TopicNotFoundException: If the topic is missing or deleted
            VoteWouldBeNegativeException: If a stored downvote would make
                the score negative
        """
        voter = PermissionService.require(db, user, Capability.VOTE_TOPICS)

        topic_repo = TopicRepository(db)
        vote_repo = VoteRepository(db)

        topic = topic_repo.get_active_by_id(topic_id)
        if topic is None:
            raise TopicNotFoundException(topic_id)

        existing = vote_repo.get_by_topic_and_user(topic_id, voter.id)
        previous = existing.vote_type if existing else None

        upvotes, downvotes = topic.upvotes, topic.downvotes
        if previous == db_models.VoteType.UP:
            upvotes = max(0, upvotes - 1)
        elif previous == db_models.VoteType.DOWN:
            downvotes = max(0, downvotes - 1)

        new_vote: Optional[db_models.VoteType] = None
        if previous != vote_type:
            new_vote = vote_type
            if new_vote == db_models.VoteType.UP:
                upvotes += 1
            else:
                downvotes += 1

        if new_vote == db_models.VoteType.DOWN and upvotes - downvotes < 0:
            logger.warning(
                f"Downvote by {voter.username} rejected on topic {topic_id}: "
                f"score would be {upvotes - downvotes}"
            )
            raise VoteWouldBeNegativeException(topic_id)

        if existing is not None and new_vote is None:
            vote_repo.remove(existing)
        elif existing is not None and new_vote is not None:
            existing.vote_type = new_vote
        elif new_vote is not None:
            vote_repo.add(
                db_models.TopicVote(
                    topic_id=topic_id, user_id=voter.id, vote_type=new_vote
                )
            )

        topic.upvotes = upvotes
        topic.downvotes = downvotes
        topic_repo.commit()
        topic_repo.refresh(topic)

        action = "remove" if new_vote is None else "add"
        logger.info(
            f"Vote on topic {topic_id} by {voter.username}: "
            f"{previous.value if previous else 'none'} -> "
            f"{new_vote.value if new_vote else 'none'}",
            extra={"upvotes": topic.upvotes, "downvotes": topic.downvotes},
        )

        return schemas.TopicVoteResult(
            topic=schemas.Topic.model_validate(topic),
            action=action,
            vote_type=new_vote,
            message=VOTE_MESSAGES[new_vote],
        )

    @staticmethod
    def get_user_vote(
        db: Session, topic_id: int, user: db_models.User
    ) -> Optional[db_models.VoteType]:
        """Get the vote a user currently holds on a topic, if any."""
        vote = VoteRepository(db).get_by_topic_and_user(topic_id, user.id)
        return vote.vote_type if vote else None
