"""
Services layer for business logic.

This package contains service modules that encapsulate business logic
separate from the API routes.
"""

from .permission_service import Capability, PermissionService
from .block_service import BlockService
from .user_service import UserService
from .topic_service import TopicService
from .post_service import PostService
from .vote_service import VoteService
from .vote_guard_service import VoteGuardService
from .report_service import ReportService
from .activity_service import ActivityService
from .view_state_service import ViewStateService

__all__ = [
    "Capability",
    "PermissionService",
    "BlockService",
    "UserService",
    "TopicService",
    "PostService",
    "VoteService",
    "VoteGuardService",
    "ReportService",
    "ActivityService",
    "ViewStateService",
]
