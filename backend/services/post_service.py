"""
Post service for business logic.

Posts and nested replies live in one table. Every post or reply added to a
topic increments the topic's reply counter.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_html
from helpers.time_utils import utc_now
from models.exceptions import (
    CannotModifyOthersContentException,
    PostNotFoundException,
    TopicNotFoundException,
)
from repositories.block_repository import BlockRepository
from repositories.post_repository import PostReactionRepository, PostRepository
from repositories.topic_repository import TopicRepository
from services.permission_service import Capability, PermissionService
from services.topic_service import hides_blocked_content


class PostService:
    """Service for post, reply and reaction business logic."""

    @staticmethod
    def create_post(
        db: Session, data: schemas.PostCreate, user: Optional[db_models.User]
    ) -> db_models.Post:
        """
        Create a post in a topic, or a reply when parent_id is set.

        Args:
            db: Database session
            data: Post payload
            user: Current user, None if anonymous

        Returns:
            Created post

        Raises:
            UnauthenticatedException: If nobody is logged in
            UserBlockedException: If the user is blocked
            TopicNotFoundException: If the topic is missing or deleted
            PostNotFoundException: If the parent post is missing or belongs
                to another topic
        """
        if data.parent_id is not None:
            return PostService.create_reply(
                db, data.parent_id, schemas.ReplyCreate(content=data.content), user
            )

        author = PermissionService.require(db, user, Capability.CREATE_POSTS)
        topic = TopicRepository(db).get_active_by_id(data.topic_id)
        if topic is None:
            raise TopicNotFoundException(data.topic_id)

        return PostService._insert(db, topic, author, data.content, parent_id=None)

    @staticmethod
    def create_reply(
        db: Session,
        post_id: int,
        data: schemas.ReplyCreate,
        user: Optional[db_models.User],
    ) -> db_models.Post:
        """
        Reply to a post; the reply joins the parent's topic.

        Threads are one level deep: replying to a reply attaches the new
        reply to the same top-level post.
        """
        author = PermissionService.require(db, user, Capability.REPLY_POSTS)
        parent = PostRepository(db).get_visible_by_id(post_id)
        if parent is None:
            raise PostNotFoundException(post_id)

        root_id = parent.parent_id if parent.parent_id is not None else parent.id
        return PostService._insert(
            db, parent.topic, author, data.content, parent_id=root_id
        )

    @staticmethod
    def _insert(
        db: Session,
        topic: db_models.Topic,
        author: db_models.User,
        content: str,
        parent_id: Optional[int],
    ) -> db_models.Post:
        post_repo = PostRepository(db)
        post = db_models.Post(
            topic_id=topic.id,
            user_id=author.id,
            parent_id=parent_id,
            content=sanitize_html(content),
        )
        post_repo.add(post)
        topic.reply_count += 1
        post_repo.commit()
        post_repo.refresh(post)

        kind = "Reply" if parent_id is not None else "Post"
        logger.info(
            f"{kind} {post.id} created by {author.username} in topic {topic.id}"
        )
        return post

    @staticmethod
    def _with_replies(
        db: Session, post: db_models.Post, hide_blocked: bool
    ) -> schemas.PostWithReplies:
        replies = PostRepository(db).get_replies(post.id, hide_blocked=hide_blocked)
        return schemas.PostWithReplies(
            **schemas.Post.model_validate(post).model_dump(),
            replies=[schemas.Post.model_validate(reply) for reply in replies],
        )

    @staticmethod
    def list_posts(
        db: Session,
        viewer: Optional[db_models.User] = None,
        topic_id: Optional[int] = None,
        author_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[schemas.PostWithReplies]:
        """
        List top-level posts with their direct replies nested.

        Blocked users' posts and replies are left out unless the viewer is
        an admin.
        """
        hide_blocked = hides_blocked_content(viewer)
        posts = PostRepository(db).list_posts(
            topic_id=topic_id,
            author_id=author_id,
            top_level_only=True,
            hide_blocked=hide_blocked,
            skip=skip,
            limit=limit,
        )
        return [PostService._with_replies(db, post, hide_blocked) for post in posts]

    @staticmethod
    def get_post(
        db: Session, post_id: int, viewer: Optional[db_models.User] = None
    ) -> schemas.PostWithReplies:
        hide_blocked = hides_blocked_content(viewer)
        post = PostRepository(db).get_visible_by_id(post_id)
        if post is None:
            raise PostNotFoundException(post_id)
        if hide_blocked and BlockRepository(db).exists(post.author_username):
            raise PostNotFoundException(post_id)
        return PostService._with_replies(db, post, hide_blocked)

    @staticmethod
    def get_replies(
        db: Session, post_id: int, viewer: Optional[db_models.User] = None
    ) -> List[db_models.Post]:
        repo = PostRepository(db)
        if repo.get_visible_by_id(post_id) is None:
            raise PostNotFoundException(post_id)
        return repo.get_replies(post_id, hide_blocked=hides_blocked_content(viewer))

    @staticmethod
    def delete_post(
        db: Session, post_id: int, user: Optional[db_models.User]
    ) -> None:
        """
        Soft-delete a post or reply (author or admin).

        Raises:
            PostNotFoundException: If the post is missing or hidden
            CannotModifyOthersContentException: If the user is neither the
                author nor an admin
        """
        deleter = PermissionService.require(db, user, Capability.CREATE_POSTS)
        repo = PostRepository(db)
        post = repo.get_visible_by_id(post_id)
        if post is None:
            raise PostNotFoundException(post_id)
        if post.user_id != deleter.id and not deleter.is_admin:
            raise CannotModifyOthersContentException()

        post.deleted_at = utc_now()
        post.topic.reply_count = max(0, post.topic.reply_count - 1)
        repo.commit()
        logger.info(f"Post {post_id} deleted by {deleter.username}")

    @staticmethod
    def react(
        db: Session,
        post_id: int,
        reaction: db_models.ReactionType,
        user: Optional[db_models.User],
    ) -> schemas.PostVoteResult:
        """
        Like or dislike a post with toggle semantics.

        Repeating a reaction removes it; the opposite reaction replaces it.
        """
        reactor = PermissionService.require(db, user, Capability.VOTE_TOPICS)
        post_repo = PostRepository(db)
        reaction_repo = PostReactionRepository(db)

        post = post_repo.get_visible_by_id(post_id)
        if post is None:
            raise PostNotFoundException(post_id)

        existing = reaction_repo.get_by_post_and_user(post_id, reactor.id)
        previous = existing.reaction_type if existing else None

        if previous == db_models.ReactionType.LIKE:
            post.likes = max(0, post.likes - 1)
        elif previous == db_models.ReactionType.DISLIKE:
            post.dislikes = max(0, post.dislikes - 1)

        stored: Optional[db_models.ReactionType] = None
        if previous != reaction:
            stored = reaction
            if stored == db_models.ReactionType.LIKE:
                post.likes += 1
            else:
                post.dislikes += 1

        if existing is not None and stored is None:
            db.delete(existing)
        elif existing is not None and stored is not None:
            existing.reaction_type = stored
        elif stored is not None:
            reaction_repo.add(
                db_models.PostReaction(
                    post_id=post_id, user_id=reactor.id, reaction_type=stored
                )
            )

        post_repo.commit()
        post_repo.refresh(post)

        return schemas.PostVoteResult(
            post=schemas.Post.model_validate(post),
            action="remove" if stored is None else "add",
            reaction=stored,
        )
