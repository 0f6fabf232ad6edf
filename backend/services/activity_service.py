"""
Activity Service - per-user activity feed and statistics.

Everything here is recomputed from the database on each call.
"""

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.time_utils import ensure_utc
from models.exceptions import UserNotFoundException
from repositories.block_repository import BlockRepository
from repositories.post_repository import PostRepository
from repositories.report_repository import ReportRepository
from repositories.topic_repository import TopicRepository
from repositories.user_repository import UserRepository
from services.block_service import BlockService


class ActivityService:
    """Builds activity feeds and user statistics."""

    @staticmethod
    def _get_user(db: Session, username: str) -> db_models.User:
        user = UserRepository(db).get_by_username(username)
        if user is None:
            raise UserNotFoundException(f"User {username} not found")
        return user

    @staticmethod
    def activity_for(db: Session, username: str) -> list[schemas.ActivityEvent]:
        """
        Build the activity feed of a user.

        Includes topics created, posts and replies written, and reports
        received. Events are ordered newest first; events with the same
        timestamp are ordered by type, then by id.

        Args:
            db: Database session
            username: User whose activity to build

        Returns:
            List of activity events

        Raises:
            UserNotFoundException: If the user does not exist
        """
        user = ActivityService._get_user(db, username)

        topics = TopicRepository(db).get_by_author(user.id)
        posts = PostRepository(db).get_by_author(user.id)
        reports = ReportRepository(db).get_for_reported(user.username)
        titles = TopicRepository(db).get_titles({post.topic_id for post in posts})

        events: list[schemas.ActivityEvent] = []
        for topic in topics:
            events.append(
                schemas.ActivityEvent(
                    type="topic_created",
                    id=topic.id,
                    title=topic.title,
                    content=topic.description,
                    timestamp=ensure_utc(topic.created_at),
                    topic_id=topic.id,
                    category=topic.category,
                    replies=topic.reply_count,
                )
            )

        for post in posts:
            topic_title = titles.get(post.topic_id, "")
            events.append(
                schemas.ActivityEvent(
                    type="reply_created" if post.is_reply else "post_created",
                    id=post.id,
                    title=topic_title,
                    content=post.content,
                    timestamp=ensure_utc(post.created_at),
                    topic_id=post.topic_id,
                    topic_title=topic_title,
                    post_id=post.id,
                )
            )

        for report in reports:
            if report.content_type == db_models.ReportContentType.REPLY:
                content = report.reply_content or ""
            else:
                content = report.description
            events.append(
                schemas.ActivityEvent(
                    type="reported",
                    id=report.id,
                    title=f"Reported by {report.reporter_username}",
                    content=content,
                    timestamp=ensure_utc(report.created_at),
                    topic_id=report.topic_id,
                    post_id=report.post_id,
                    reason=report.reason,
                    content_type=report.content_type,
                )
            )

        # Two stable sorts: tie-breakers first, then timestamp descending
        events.sort(key=lambda event: (event.type, event.id))
        events.sort(key=lambda event: event.timestamp, reverse=True)
        return events

    @staticmethod
    def stats_for(db: Session, username: str) -> schemas.UserStats:
        """
        Compute a user's forum statistics.

        reputation is the sum of (upvotes - downvotes) over the user's topics
        plus (likes - dislikes) over the user's posts and replies.
        """
        user = ActivityService._get_user(db, username)

        topics = TopicRepository(db).get_by_author(user.id)
        posts = PostRepository(db).get_by_author(user.id)
        replies_created = sum(1 for post in posts if post.is_reply)
        participated = {topic.id for topic in topics} | {
            post.topic_id for post in posts
        }
        reputation = sum(topic.upvotes - topic.downvotes for topic in topics) + sum(
            post.likes - post.dislikes for post in posts
        )

        return schemas.UserStats(
            username=user.username,
            topics_created=len(topics),
            posts_created=len(posts),
            replies_created=replies_created,
            topics_participated=len(participated),
            reputation=reputation,
        )

    @staticmethod
    def user_details(db: Session, username: str) -> schemas.UserDetails:
        """Collect everything the admin panel shows about a user."""
        user = ActivityService._get_user(db, username)
        block = BlockRepository(db).get_by_username(user.username)

        logger.debug(f"Building admin details for {user.username}")
        return schemas.UserDetails(
            user=schemas.UserList.model_validate(user).model_copy(
                update={"is_blocked": block is not None}
            ),
            stats=ActivityService.stats_for(db, user.username),
            reports_received=[
                schemas.Report.model_validate(report)
                for report in ReportRepository(db).get_for_reported(user.username)
            ],
            activity=ActivityService.activity_for(db, user.username),
            block=BlockService.get_block(db, user.username) if block else None,
        )
