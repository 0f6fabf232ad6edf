"""Tests for VoteService."""

from datetime import datetime

import pytest

import repositories.db_models as db_models
from models.exceptions import (
    InsufficientPermissionsException,
    TopicNotFoundException,
    UnauthenticatedException,
    UserBlockedException,
    VoteWouldBeNegativeException,
)
from repositories.vote_repository import VoteRepository
from services.vote_service import VoteService

UP = db_models.VoteType.UP
DOWN = db_models.VoteType.DOWN


class TestVoteService:
    """Test cases for topic vote transitions."""

    def test_upvote_adds_vote(self, db_session, test_user, test_topic):
        """none -> up increments upvotes and stores the vote."""
        result = VoteService.apply_vote(db_session, test_topic.id, UP, test_user)

        assert result.action == "add"
        assert result.vote_type == UP
        assert result.message == "Upvote recorded"
        assert result.topic.upvotes == 1
        assert result.topic.score == 1
        assert VoteService.get_user_vote(db_session, test_topic.id, test_user) == UP

    def test_repeat_upvote_removes_vote(self, db_session, test_user, test_topic):
        """up then up restores the original counters."""
        VoteService.apply_vote(db_session, test_topic.id, UP, test_user)
        result = VoteService.apply_vote(db_session, test_topic.id, UP, test_user)

        assert result.action == "remove"
        assert result.vote_type is None
        assert result.message == "Vote removed"
        assert result.topic.upvotes == 0
        assert VoteService.get_user_vote(db_session, test_topic.id, test_user) is None

    def test_switch_up_to_down(self, db_session, test_user, make_topic, other_user):
        topic = make_topic(other_user, upvotes=2)
        VoteService.apply_vote(db_session, topic.id, UP, test_user)

        result = VoteService.apply_vote(db_session, topic.id, DOWN, test_user)

        assert result.action == "add"
        assert result.message == "Downvote recorded"
        assert (result.topic.upvotes, result.topic.downvotes) == (2, 1)
        assert len(VoteRepository(db_session).get_votes_for_topic(topic.id)) == 1

    def test_switch_down_to_up(self, db_session, test_user, make_topic, other_user):
        topic = make_topic(other_user, upvotes=1)
        VoteService.apply_vote(db_session, topic.id, DOWN, test_user)

        result = VoteService.apply_vote(db_session, topic.id, UP, test_user)

        assert (result.topic.upvotes, result.topic.downvotes) == (2, 0)

    def test_repeat_downvote_removes_vote(
        self, db_session, test_user, make_topic, other_user
    ):
        topic = make_topic(other_user, upvotes=1)
        first = VoteService.apply_vote(db_session, topic.id, DOWN, test_user)
        second = VoteService.apply_vote(db_session, topic.id, DOWN, test_user)

        assert first.topic.score == 0
        assert second.action == "remove"
        assert (second.topic.upvotes, second.topic.downvotes) == (1, 0)

    def test_downvote_on_zero_score_rejected(self, db_session, test_user, test_topic):
        """A downvote may not push the score below zero; nothing is written."""
        with pytest.raises(VoteWouldBeNegativeException):
            VoteService.apply_vote(db_session, test_topic.id, DOWN, test_user)

        db_session.refresh(test_topic)
        assert (test_topic.upvotes, test_topic.downvotes) == (0, 0)
        assert VoteService.get_user_vote(db_session, test_topic.id, test_user) is None

    def test_switch_to_down_that_goes_negative_keeps_upvote(
        self, db_session, test_user, test_topic
    ):
        VoteService.apply_vote(db_session, test_topic.id, UP, test_user)

        with pytest.raises(VoteWouldBeNegativeException):
            VoteService.apply_vote(db_session, test_topic.id, DOWN, test_user)

        db_session.refresh(test_topic)
        assert test_topic.upvotes == 1
        assert VoteService.get_user_vote(db_session, test_topic.id, test_user) == UP

    def test_counters_clamped_at_zero(self, db_session, test_user, test_topic):
        """Removing a vote never drives a counter below zero."""
        db_session.add(
            db_models.TopicVote(topic_id=test_topic.id, user_id=test_user.id, vote_type=UP)
        )
        db_session.commit()

        result = VoteService.apply_vote(db_session, test_topic.id, UP, test_user)

        assert result.action == "remove"
        assert result.topic.upvotes == 0

    def test_anonymous_rejected(self, db_session, test_topic):
        with pytest.raises(UnauthenticatedException):
            VoteService.apply_vote(db_session, test_topic.id, UP, None)

    def test_blocked_user_rejected(self, db_session, test_user, test_topic, block_user):
        block_user(test_user)
        with pytest.raises(UserBlockedException):
            VoteService.apply_vote(db_session, test_topic.id, UP, test_user)

    def test_role_without_capability_rejected(
        self, db_session, test_user, test_topic, monkeypatch
    ):
        from services import permission_service

        monkeypatch.setitem(
            permission_service.ROLE_CAPABILITIES,
            db_models.UserRole.USER,
            permission_service.PUBLIC_CAPABILITIES,
        )
        with pytest.raises(InsufficientPermissionsException):
            VoteService.apply_vote(db_session, test_topic.id, UP, test_user)

    def test_missing_topic(self, db_session, test_user):
        with pytest.raises(TopicNotFoundException):
            VoteService.apply_vote(db_session, 99999, UP, test_user)

    def test_deleted_topic(self, db_session, test_user, test_topic):
        test_topic.deleted_at = datetime.now()
        db_session.commit()
        with pytest.raises(TopicNotFoundException):
            VoteService.apply_vote(db_session, test_topic.id, UP, test_user)
