"""Tests for ActivityService."""

from datetime import datetime

import pytest

import repositories.db_models as db_models
from models.exceptions import UserNotFoundException
from services.activity_service import ActivityService
from services.block_service import BlockService

SAME_TIME = datetime(2026, 4, 2, 9, 30)


@pytest.fixture
def alice_history(db_session, test_user, other_user, make_topic, make_post):
    """Alice authors a topic, a post and a reply, and is reported by bob."""
    topic = make_topic(test_user, title="Alice's Topic", upvotes=3, downvotes=1)
    bobs_topic = make_topic(other_user, title="Bob's Topic")
    post = make_post(test_user, bobs_topic, "Alice's post")
    reply = make_post(test_user, topic, "Alice's reply", parent=post)
    reply.likes = 2
    post.dislikes = 1
    report = db_models.UserReport(
        reporter_username="bob",
        reported_username="alice",
        reason=db_models.ReportReason.SPAM,
        description="posting ads",
        content_type=db_models.ReportContentType.REPLY,
        reply_content="buy now",
        created_at=SAME_TIME,
    )
    db_session.add(report)
    for row in (topic, post, reply):
        row.created_at = SAME_TIME
    db_session.commit()
    return {"topic": topic, "post": post, "reply": reply, "report": report}


class TestActivityFor:
    def test_contains_every_event_kind(self, db_session, alice_history):
        events = ActivityService.activity_for(db_session, "alice")

        assert [e.type for e in events] == [
            "post_created",
            "reply_created",
            "reported",
            "topic_created",
        ]

    def test_is_deterministic(self, db_session, alice_history):
        first = ActivityService.activity_for(db_session, "alice")
        second = ActivityService.activity_for(db_session, "alice")

        assert [e.model_dump() for e in first] == [e.model_dump() for e in second]

    def test_newest_first(self, db_session, test_user, test_topic, make_post):
        older = make_post(test_user, test_topic, "older")
        newer = make_post(test_user, test_topic, "newer")
        older.created_at = datetime(2026, 1, 1)
        newer.created_at = datetime(2026, 1, 2)
        db_session.commit()

        events = ActivityService.activity_for(db_session, "alice")

        assert [e.id for e in events] == [newer.id, older.id]

    def test_event_fields(self, db_session, alice_history):
        events = {e.type: e for e in ActivityService.activity_for(db_session, "alice")}

        topic_event = events["topic_created"]
        assert topic_event.title == "Alice's Topic"
        assert topic_event.category == "General"
        assert topic_event.replies == 1

        post_event = events["post_created"]
        assert post_event.topic_title == "Bob's Topic"
        assert post_event.post_id == alice_history["post"].id

        reported = events["reported"]
        assert reported.title == "Reported by bob"
        assert reported.content == "buy now"
        assert reported.reason == db_models.ReportReason.SPAM

    def test_report_content_falls_back_to_description(
        self, db_session, test_user, other_user
    ):
        db_session.add(
            db_models.UserReport(
                reporter_username="alice",
                reported_username="bob",
                reason=db_models.ReportReason.OTHER,
                description="see topic",
                content_type=db_models.ReportContentType.TOPIC,
            )
        )
        db_session.commit()

        events = ActivityService.activity_for(db_session, "bob")

        assert events[0].content == "see topic"

    def test_deleted_topics_are_left_out(self, db_session, test_user, make_topic):
        topic = make_topic(test_user)
        topic.deleted_at = datetime.now()
        db_session.commit()

        assert ActivityService.activity_for(db_session, "alice") == []

    def test_unknown_user(self, db_session):
        with pytest.raises(UserNotFoundException):
            ActivityService.activity_for(db_session, "ghost")


class TestStatsFor:
    def test_stats(self, db_session, alice_history):
        stats = ActivityService.stats_for(db_session, "alice")

        assert stats.topics_created == 1
        assert stats.posts_created == 2
        assert stats.replies_created == 1
        assert stats.topics_participated == 2
        # (3 - 1) from the topic, (0 - 1) + (2 - 0) from the posts
        assert stats.reputation == 3

    def test_empty_user(self, db_session, other_user):
        stats = ActivityService.stats_for(db_session, "bob")
        assert stats.topics_created == 0
        assert stats.reputation == 0


class TestUserDetails:
    def test_details_include_block(self, db_session, alice_history):
        BlockService.block(db_session, "alice", "mod1", "spam")

        details = ActivityService.user_details(db_session, "alice")

        assert details.user.username == "alice"
        assert details.user.is_blocked is True
        assert details.block is not None
        assert details.block.blocked_by == "mod1"
        assert len(details.reports_received) == 1
        assert len(details.activity) == 4

    def test_details_without_block(self, db_session, other_user):
        details = ActivityService.user_details(db_session, "bob")
        assert details.user.is_blocked is False
        assert details.block is None
