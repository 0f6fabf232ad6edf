"""Tests for PostRepository and BlockRepository."""

from datetime import datetime

from repositories.block_repository import BlockRepository
from repositories.post_repository import PostRepository


class TestPostRepository:
    def test_list_posts_top_level_only(
        self, db_session, test_topic, test_user, other_user, make_post
    ):
        post = make_post(test_user, test_topic, "Top level")
        make_post(other_user, test_topic, "A reply", parent=post)
        repo = PostRepository(db_session)

        top_level = repo.list_posts(topic_id=test_topic.id)
        everything = repo.list_posts(topic_id=test_topic.id, top_level_only=False)

        assert [p.content for p in top_level] == ["Top level"]
        assert len(everything) == 2

    def test_posts_of_deleted_topic_are_hidden(
        self, db_session, test_topic, test_user, make_post
    ):
        post = make_post(test_user, test_topic)
        test_topic.deleted_at = datetime.now()
        db_session.commit()
        repo = PostRepository(db_session)

        assert repo.get_visible_by_id(post.id) is None
        assert repo.count_visible() == 0
        assert repo.count_by_author(test_user.id) == 0

    def test_get_replies_hides_blocked(
        self, db_session, test_topic, test_user, other_user, make_post, block_user
    ):
        post = make_post(test_user, test_topic)
        make_post(other_user, test_topic, "Blocked reply", parent=post)
        block_user(other_user)
        repo = PostRepository(db_session)

        assert repo.get_replies(post.id) == []
        assert len(repo.get_replies(post.id, hide_blocked=False)) == 1

    def test_get_by_author(self, db_session, test_topic, test_user, make_post):
        first = make_post(test_user, test_topic)
        reply = make_post(test_user, test_topic, parent=first)

        posts = PostRepository(db_session).get_by_author(test_user.id)

        assert [p.id for p in posts] == [first.id, reply.id]
        assert posts[1].is_reply


class TestBlockRepository:
    def test_exists_and_delete(self, db_session, other_user, block_user):
        block_user(other_user)
        repo = BlockRepository(db_session)

        assert repo.exists("bob")
        assert repo.get_blocked_usernames() == {"bob"}
        assert repo.delete_by_username("bob") == 1
        assert not repo.exists("bob")
        assert repo.delete_by_username("bob") == 0
