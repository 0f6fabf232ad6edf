"""
Repository pattern implementation for data access layer.
"""

from .base import BaseRepository
from .block_repository import BlockRepository
from .post_repository import PostReactionRepository, PostRepository
from .report_repository import ReportRepository
from .topic_repository import TopicRepository
from .user_repository import UserRepository
from .view_state_repository import ViewStateRepository
from .vote_repository import VoteRepository

__all__ = [
    "BaseRepository",
    "BlockRepository",
    "PostReactionRepository",
    "PostRepository",
    "ReportRepository",
    "TopicRepository",
    "UserRepository",
    "ViewStateRepository",
    "VoteRepository",
]
