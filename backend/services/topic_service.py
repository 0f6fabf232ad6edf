"""
Topic service for business logic.
"""

from datetime import datetime
from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_html, sanitize_plain_text
from helpers.time_utils import ensure_utc, utc_now
from models.config import settings
from models.exceptions import (
    CannotModifyOthersContentException,
    TopicNotFoundException,
)
from repositories.block_repository import BlockRepository
from repositories.topic_repository import SORT_NEW, TopicRepository
from services.permission_service import Capability, PermissionService


def hides_blocked_content(viewer: Optional[db_models.User]) -> bool:
    """Blocked users' content is hidden from everyone but admins."""
    return viewer is None or not viewer.is_admin


class TopicService:
    """Service for topic-related business logic."""

    @staticmethod
    def create_topic(
        db: Session, data: schemas.TopicCreate, user: Optional[db_models.User]
    ) -> db_models.Topic:
        """
        Create a new topic.

        Args:
            db: Database session
            data: Topic payload
            user: Current user, None if anonymous

        Returns:
            Created topic

        Raises:
            UnauthenticatedException: If nobody is logged in
            UserBlockedException: If the user is blocked
        """
        author = PermissionService.require(db, user, Capability.CREATE_TOPICS)

        topic = db_models.Topic(
            title=sanitize_plain_text(data.title),
            description=sanitize_html(data.description),
            category=sanitize_plain_text(data.category) or "General",
            user_id=author.id,
        )
        topic = TopicRepository(db).create(topic)
        logger.info(f"Topic {topic.id} created by {author.username}")
        return topic

    @staticmethod
    def list_topics(
        db: Session,
        viewer: Optional[db_models.User] = None,
        category: Optional[str] = None,
        sort_by: str = SORT_NEW,
        skip: int = 0,
        limit: int = 20,
    ) -> List[db_models.Topic]:
        return TopicRepository(db).list_topics(
            category=category,
            sort_by=sort_by,
            skip=skip,
            limit=limit,
            hide_blocked=hides_blocked_content(viewer),
        )

    @staticmethod
    def get_topic(
        db: Session, topic_id: int, viewer: Optional[db_models.User] = None
    ) -> db_models.Topic:
        """
        Get a visible topic.

        Raises:
            TopicNotFoundException: If the topic is missing, deleted, or
                written by a blocked user and the viewer is not an admin
        """
        topic = TopicRepository(db).get_active_by_id(topic_id)
        if topic is None:
            raise TopicNotFoundException(topic_id)
        if hides_blocked_content(viewer) and BlockRepository(db).exists(
            topic.author_username
        ):
            raise TopicNotFoundException(topic_id)
        return topic

    @staticmethod
    def _get_owned_topic(
        db: Session, topic_id: int, user: db_models.User
    ) -> db_models.Topic:
        topic = TopicRepository(db).get_active_by_id(topic_id)
        if topic is None:
            raise TopicNotFoundException(topic_id)
        if topic.user_id != user.id and not user.is_admin:
            raise CannotModifyOthersContentException()
        return topic

    @staticmethod
    def update_topic(
        db: Session,
        topic_id: int,
        data: schemas.TopicUpdate,
        user: Optional[db_models.User],
    ) -> db_models.Topic:
        """
        Edit a topic (author or admin).

        Raises:
            TopicNotFoundException: If the topic is missing or deleted
            CannotModifyOthersContentException: If the user is neither the
                author nor an admin
        """
        editor = PermissionService.require(db, user, Capability.CREATE_TOPICS)
        topic = TopicService._get_owned_topic(db, topic_id, editor)

        if data.title is not None:
            topic.title = sanitize_plain_text(data.title) or topic.title
        if data.description is not None:
            topic.description = sanitize_html(data.description) or topic.description
        if data.category is not None:
            topic.category = sanitize_plain_text(data.category) or topic.category

        return TopicRepository(db).update(topic)

    @staticmethod
    def delete_topic(
        db: Session, topic_id: int, user: Optional[db_models.User]
    ) -> None:
        """
        Soft-delete a topic (author or admin).

        The row is kept and flagged; its posts disappear from every listing.
        """
        deleter = PermissionService.require(db, user, Capability.CREATE_TOPICS)
        topic = TopicService._get_owned_topic(db, topic_id, deleter)

        topic.deleted_at = utc_now()
        topic.deleted_by = deleter.id
        TopicRepository(db).commit()
        logger.info(f"Topic {topic_id} deleted by {deleter.username}")

    @staticmethod
    def record_view(db: Session, topic_id: int) -> db_models.Topic:
        """Increment a topic's view counter."""
        repo = TopicRepository(db)
        topic = repo.get_active_by_id(topic_id)
        if topic is None:
            raise TopicNotFoundException(topic_id)
        topic.view_count += 1
        return repo.update(topic)

    @staticmethod
    def get_changes(
        db: Session, since: datetime, viewer: Optional[db_models.User] = None
    ) -> schemas.TopicChanges:
        """
        Get topics changed after `since`, for polling clients.

        Deleted topics are included (with deleted_at set) so clients can
        drop them. next_since is the cursor for the following poll.
        """
        since = ensure_utc(since)
        topics = TopicRepository(db).get_changed_since(
            since.replace(tzinfo=None),
            limit=settings.CHANGES_MAX_RESULTS,
            hide_blocked=hides_blocked_content(viewer),
        )
        next_since = since
        if topics:
            next_since = max(ensure_utc(topic.updated_at) for topic in topics)
        return schemas.TopicChanges(
            topics=[schemas.Topic.model_validate(topic) for topic in topics],
            next_since=next_since,
        )
