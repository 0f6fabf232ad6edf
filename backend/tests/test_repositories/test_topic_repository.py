"""Tests for TopicRepository."""

from datetime import datetime, timedelta

import repositories.db_models as db_models
from repositories.topic_repository import SORT_POPULAR, SORT_TOP, TopicRepository


class TestTopicRepository:
    """Test cases for TopicRepository."""

    def test_get_active_by_id_skips_deleted(self, db_session, test_topic):
        repo = TopicRepository(db_session)
        assert repo.get_active_by_id(test_topic.id) is not None

        test_topic.deleted_at = datetime.now()
        db_session.commit()

        assert repo.get_active_by_id(test_topic.id) is None

    def test_list_topics_newest_first(self, db_session, make_topic, other_user):
        first = make_topic(other_user, title="First")
        second = make_topic(other_user, title="Second")
        first.created_at = datetime(2026, 1, 1)
        second.created_at = datetime(2026, 1, 2)
        db_session.commit()

        topics = TopicRepository(db_session).list_topics()

        assert [t.title for t in topics] == ["Second", "First"]

    def test_list_topics_sort_by_score(self, make_topic, other_user, db_session):
        make_topic(other_user, title="Low", upvotes=1)
        make_topic(other_user, title="High", upvotes=5, downvotes=1)

        topics = TopicRepository(db_session).list_topics(sort_by=SORT_TOP)

        assert topics[0].title == "High"

    def test_list_topics_sort_by_popularity(self, make_topic, other_user, db_session):
        quiet = make_topic(other_user, title="Quiet")
        busy = make_topic(other_user, title="Busy")
        busy.reply_count = 4
        quiet.view_count = 100
        db_session.commit()

        topics = TopicRepository(db_session).list_topics(sort_by=SORT_POPULAR)

        assert topics[0].title == "Busy"

    def test_list_topics_category_filter(self, make_topic, other_user, db_session):
        make_topic(other_user, title="Help me", category="Support")
        make_topic(other_user, title="Hello", category="General")

        topics = TopicRepository(db_session).list_topics(category="Support")

        assert [t.title for t in topics] == ["Help me"]

    def test_hide_blocked_authors(
        self, db_session, make_topic, test_user, other_user, block_user
    ):
        make_topic(test_user, title="Visible")
        make_topic(other_user, title="Hidden")
        block_user(other_user)
        repo = TopicRepository(db_session)

        assert [t.title for t in repo.list_topics()] == ["Visible"]
        assert len(repo.list_topics(hide_blocked=False)) == 2

    def test_get_changed_since_includes_deleted(
        self, db_session, make_topic, other_user
    ):
        old = make_topic(other_user, title="Old")
        changed = make_topic(other_user, title="Changed")
        old.updated_at = datetime(2026, 1, 1)
        changed.updated_at = datetime(2026, 2, 1)
        changed.deleted_at = datetime(2026, 2, 1)
        db_session.commit()

        topics = TopicRepository(db_session).get_changed_since(
            datetime(2026, 1, 15), limit=10
        )

        assert [t.title for t in topics] == ["Changed"]

    def test_get_changed_since_respects_limit(
        self, db_session, make_topic, other_user
    ):
        for i in range(3):
            make_topic(other_user, title=f"T{i}")

        topics = TopicRepository(db_session).get_changed_since(
            datetime.now() - timedelta(days=1), limit=2
        )

        assert len(topics) == 2

    def test_counts_ignore_deleted(self, db_session, make_topic, other_user):
        make_topic(other_user)
        deleted = make_topic(other_user)
        deleted.deleted_at = datetime.now()
        db_session.commit()
        repo = TopicRepository(db_session)

        assert repo.count_active() == 1
        assert repo.count_by_author(other_user.id) == 1

    def test_get_titles(self, db_session, make_topic, other_user):
        topic = make_topic(other_user, title="Named")
        repo = TopicRepository(db_session)

        assert repo.get_titles({topic.id}) == {topic.id: "Named"}
        assert repo.get_titles(set()) == {}

    def test_score_property(self, make_topic, other_user):
        topic = make_topic(other_user, upvotes=3, downvotes=1)
        assert topic.score == 2
        assert topic.author_username == "bob"
        assert isinstance(topic, db_models.Topic)
