"""
Database models using SQLAlchemy 2.0 style with Mapped type hints.

Topics, posts, votes, reports and block records are proper tables; the
"is blocked" status of a user is derived from the blocked_users table and
never stored on the user row.
"""

import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repositories.database import Base


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class VoteType(str, enum.Enum):
    UP = "up"
    DOWN = "down"


class ReactionType(str, enum.Enum):
    LIKE = "like"
    DISLIKE = "dislike"


# Moderation Enums


class ReportReason(str, enum.Enum):
    """Reasons a user can be reported for."""

    SPAM = "spam"
    HARASSMENT = "harassment"
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    OFFENSIVE_LANGUAGE = "offensive_language"
    OTHER = "other"


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    DISMISSED = "dismissed"


class ReportContentType(str, enum.Enum):
    """What the reporter was looking at when filing the report."""

    POST = "post"
    REPLY = "reply"
    TOPIC = "topic"


class ReportAction(str, enum.Enum):
    """Action recorded by the admin who resolved a report."""

    WARNING = "warning"
    TEMPORARY_BAN = "temporary_ban"
    PERMANENT_BAN = "permanent_ban"
    DISMISSED = "dismissed"


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(
        String(50), unique=True, index=True, nullable=False
    )
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole), default=UserRole.USER, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    topics: Mapped[List["Topic"]] = relationship(
        "Topic", back_populates="author", foreign_keys="Topic.user_id"
    )
    posts: Mapped[List["Post"]] = relationship(
        "Post", back_populates="author", foreign_keys="Post.user_id"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def registered_at(self) -> datetime:
        return self.created_at


class Topic(Base):
    __tablename__ = "topics"
    __table_args__ = (
        Index("ix_topics_category", "category"),
        Index("ix_topics_updated", "updated_at"),
        Index("ix_topics_deleted", "deleted_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), default="General", nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    upvotes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    downvotes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reply_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    # Soft delete: topics are flagged, never removed
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    deleted_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )

    # Relationships
    author: Mapped["User"] = relationship(
        "User", back_populates="topics", foreign_keys=[user_id]
    )
    posts: Mapped[List["Post"]] = relationship("Post", back_populates="topic")
    votes: Mapped[List["TopicVote"]] = relationship(
        "TopicVote", back_populates="topic", cascade="all, delete-orphan"
    )

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes

    @property
    def author_username(self) -> str:
        return self.author.username


class Post(Base):
    """A message in a topic; replies point at their parent post."""

    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_topic", "topic_id"),
        Index("ix_posts_parent", "parent_id"),
        Index("ix_posts_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    topic_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("topics.id"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("posts.id"), nullable=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    likes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    dislikes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    topic: Mapped["Topic"] = relationship("Topic", back_populates="posts")
    author: Mapped["User"] = relationship(
        "User", back_populates="posts", foreign_keys=[user_id]
    )
    parent: Mapped[Optional["Post"]] = relationship(
        "Post", remote_side=[id], back_populates="replies"
    )
    replies: Mapped[List["Post"]] = relationship(
        "Post", back_populates="parent", order_by="Post.created_at"
    )

    @property
    def author_username(self) -> str:
        return self.author.username

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None


class TopicVote(Base):
    """One vote per (user, topic); toggling the same type removes the row."""

    __tablename__ = "topic_votes"
    __table_args__ = (
        UniqueConstraint("user_id", "topic_id", name="uq_topic_vote_user_topic"),
        Index("ix_topic_votes_topic", "topic_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    topic_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("topics.id"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    vote_type: Mapped[VoteType] = mapped_column(Enum(VoteType), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    topic: Mapped["Topic"] = relationship("Topic", back_populates="votes")
    user: Mapped["User"] = relationship("User")


class PostReaction(Base):
    """Like/dislike of a post, one per (user, post)."""

    __tablename__ = "post_reactions"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_post_reaction_user_post"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    reaction_type: Mapped[ReactionType] = mapped_column(
        Enum(ReactionType), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)


class UserReport(Base):
    """
    A report filed by one user against another.

    Usernames are rewritten when a user renames; the cooldown is keyed on
    the (reporter_username, reported_username) pair.
    """

    __tablename__ = "user_reports"
    __table_args__ = (
        Index("ix_user_reports_pair", "reporter_username", "reported_username"),
        Index("ix_user_reports_reported", "reported_username"),
        Index("ix_user_reports_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    reporter_username: Mapped[str] = mapped_column(String(50), nullable=False)
    reported_username: Mapped[str] = mapped_column(String(50), nullable=False)
    reason: Mapped[ReportReason] = mapped_column(Enum(ReportReason), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    post_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    topic_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    content_type: Mapped[ReportContentType] = mapped_column(
        Enum(ReportContentType), default=ReportContentType.POST, nullable=False
    )
    reply_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus), default=ReportStatus.PENDING, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Resolution metadata
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    action: Mapped[Optional[ReportAction]] = mapped_column(
        Enum(ReportAction), nullable=True
    )


class BlockedUser(Base):
    """
    Active block of a user by an admin.

    The user_stats snapshot is captured once at block time for audit.
    """

    __tablename__ = "blocked_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(
        String(50), unique=True, index=True, nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    email: Mapped[str] = mapped_column(String, default="", nullable=False)
    blocked_by: Mapped[str] = mapped_column(String(50), nullable=False)
    reason: Mapped[str] = mapped_column(Text, default="", nullable=False)
    blocked_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Snapshot of the user's stats at block time
    topics_created: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    posts_created: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reports_received: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class UserViewState(Base):
    """Per-user navigation pointers restored by clients after a reload."""

    __tablename__ = "user_view_states"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True
    )
    current_section: Mapped[str] = mapped_column(
        String(50), default="home", nullable=False
    )
    active_topic_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    active_post_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )
