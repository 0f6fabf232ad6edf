from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from models.config import settings
from repositories.db_models import (
    ReactionType,
    ReportAction,
    ReportContentType,
    ReportReason,
    ReportStatus,
    UserRole,
    VoteType,
)


# Auth Schemas
class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    username: Optional[str] = None


# User Schemas
class UserBase(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)


class User(UserBase):
    id: int
    role: UserRole
    registered_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None


class UserList(User):
    """User row in the admin panel; is_blocked is derived from the block registry."""

    is_blocked: bool = False


class UserPublic(BaseModel):
    id: int
    username: str
    role: UserRole

    model_config = ConfigDict(from_attributes=True)


# Topic Schemas
class TopicBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: str = Field(default="General", max_length=50)


class TopicCreate(TopicBase):
    pass


class TopicUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, max_length=50)


class Topic(TopicBase):
    id: int
    user_id: int
    author_username: str
    upvotes: int
    downvotes: int
    score: int
    reply_count: int
    view_count: int
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TopicChanges(BaseModel):
    """Change feed page: topics modified after `since`, plus the cursor to poll with next."""

    topics: List[Topic]
    next_since: datetime


# Vote Schemas
class TopicVoteRequest(BaseModel):
    vote_type: VoteType


class TopicVoteResult(BaseModel):
    topic: Topic
    action: Literal["add", "remove"]
    vote_type: Optional[VoteType] = None
    message: str


class MyVote(BaseModel):
    topic_id: int
    vote_type: Optional[VoteType] = None


# Post Schemas
class ReplyCreate(BaseModel):
    content: str = Field(..., min_length=1)


class PostCreate(ReplyCreate):
    topic_id: int
    parent_id: Optional[int] = None


class Post(BaseModel):
    id: int
    topic_id: int
    parent_id: Optional[int] = None
    user_id: int
    author_username: str
    content: str
    likes: int
    dislikes: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PostWithReplies(Post):
    replies: List[Post] = []


class PostVoteRequest(BaseModel):
    reaction: ReactionType


class PostVoteResult(BaseModel):
    post: Post
    action: Literal["add", "remove"]
    reaction: Optional[ReactionType] = None


# Report Schemas
class ReportCreate(BaseModel):
    reported_username: str
    reason: ReportReason
    description: str = Field(
        default="", max_length=settings.REPORT_DESCRIPTION_MAX_LENGTH
    )
    post_id: Optional[int] = None
    topic_id: Optional[int] = None
    content_type: ReportContentType = ReportContentType.POST
    reply_content: Optional[str] = None


class Report(BaseModel):
    id: int
    reporter_username: str
    reported_username: str
    reason: ReportReason
    description: str
    post_id: Optional[int] = None
    topic_id: Optional[int] = None
    content_type: ReportContentType
    reply_content: Optional[str] = None
    status: ReportStatus
    created_at: datetime
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    action: Optional[ReportAction] = None

    model_config = ConfigDict(from_attributes=True)


class ReportReview(BaseModel):
    status: ReportStatus
    action: Optional[ReportAction] = None

    @field_validator("status")
    @classmethod
    def status_must_resolve(cls, v: ReportStatus) -> ReportStatus:
        if v == ReportStatus.PENDING:
            raise ValueError("A review must mark the report reviewed or dismissed")
        return v


class ReportCooldown(BaseModel):
    reported_username: str
    can_report: bool
    remaining_ms: int
    formatted: str


class ReportStatusCounts(BaseModel):
    total: int = 0
    pending: int = 0
    reviewed: int = 0
    dismissed: int = 0


class ReportStats(BaseModel):
    total: int
    by_status: dict[str, int]
    by_reason: dict[str, int]


# Block Schemas
class BlockCreate(BaseModel):
    username: str
    reason: str = ""


class BlockedUserStats(BaseModel):
    topics_created: int
    posts_created: int
    reports_received: int


class BlockedUser(BaseModel):
    username: str
    user_id: int
    email: str
    blocked_by: str
    reason: str
    blocked_at: datetime
    user_stats: BlockedUserStats


class BlockResult(BaseModel):
    username: str
    success: bool
    message: str


# Activity Schemas
ActivityType = Literal["topic_created", "post_created", "reply_created", "reported"]


class ActivityEvent(BaseModel):
    type: ActivityType
    id: int
    title: str
    content: str
    timestamp: datetime
    topic_id: Optional[int] = None
    topic_title: Optional[str] = None
    post_id: Optional[int] = None
    category: Optional[str] = None
    replies: Optional[int] = None
    reason: Optional[ReportReason] = None
    content_type: Optional[ReportContentType] = None


class UserStats(BaseModel):
    username: str
    topics_created: int
    posts_created: int
    replies_created: int
    topics_participated: int
    reputation: int


class UserDetails(BaseModel):
    """Everything the admin panel shows about one user."""

    user: UserList
    stats: UserStats
    reports_received: List[Report]
    activity: List[ActivityEvent]
    block: Optional[BlockedUser] = None


# Dashboard Schemas
class ForumStats(BaseModel):
    total_users: int
    total_topics: int
    total_posts: int
    total_reports: int
    blocked_users: int


class Dashboard(BaseModel):
    stats: ForumStats
    recent_topics: List[Topic]
    recent_posts: List[Post]


# View State Schemas
class ViewState(BaseModel):
    current_section: str = "home"
    active_topic_id: Optional[int] = None
    active_post_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class ViewStateUpdate(BaseModel):
    current_section: Optional[str] = Field(default=None, max_length=50)
    active_topic_id: Optional[int] = None
    active_post_id: Optional[int] = None
    clear_active_thread: bool = False
