"""
Permission Service - capability table for forum roles.

Every content-producing action checks three things in order: a user is
logged in, the user is not blocked, and the user's role grants the
capability. Blocked users keep read access only.
"""

import enum
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import (
    InsufficientPermissionsException,
    UnauthenticatedException,
    UserBlockedException,
)
from repositories.block_repository import BlockRepository


class Capability(str, enum.Enum):
    VIEW_FORUMS = "view_forums"
    VIEW_TOPICS = "view_topics"
    CREATE_TOPICS = "create_topics"
    CREATE_POSTS = "create_posts"
    REPLY_POSTS = "reply_posts"
    VOTE_TOPICS = "vote_topics"
    REPORT_USERS = "report_users"
    EDIT_PROFILE = "edit_profile"
    VIEW_ADMIN_PANEL = "view_admin_panel"
    VIEW_REPORTS = "view_reports"
    BLOCK_USERS = "block_users"
    UNBLOCK_USERS = "unblock_users"
    VIEW_USER_HISTORY = "view_user_history"


PUBLIC_CAPABILITIES = frozenset({Capability.VIEW_FORUMS, Capability.VIEW_TOPICS})

MEMBER_CAPABILITIES = PUBLIC_CAPABILITIES | frozenset(
    {
        Capability.CREATE_TOPICS,
        Capability.CREATE_POSTS,
        Capability.REPLY_POSTS,
        Capability.VOTE_TOPICS,
        Capability.REPORT_USERS,
        Capability.EDIT_PROFILE,
    }
)

ROLE_CAPABILITIES: dict[db_models.UserRole, frozenset[Capability]] = {
    db_models.UserRole.USER: MEMBER_CAPABILITIES,
    db_models.UserRole.ADMIN: frozenset(Capability),
}


class PermissionService:
    """Resolves what a (possibly anonymous) user may do."""

    @staticmethod
    def capabilities_for(
        db: Session, user: Optional[db_models.User]
    ) -> frozenset[Capability]:
        """
        Get the capabilities a user holds right now.

        Args:
            db: Database session
            user: Current user, None for anonymous visitors

        Returns:
            Set of capabilities
        """
        if user is None:
            return PUBLIC_CAPABILITIES
        if BlockRepository(db).exists(user.username):
            return PUBLIC_CAPABILITIES
        return ROLE_CAPABILITIES.get(user.role, PUBLIC_CAPABILITIES)

    @staticmethod
    def can_perform(
        db: Session, user: Optional[db_models.User], capability: Capability
    ) -> bool:
        """Check a capability without raising."""
        return capability in PermissionService.capabilities_for(db, user)

    @staticmethod
    def require(
        db: Session, user: Optional[db_models.User], capability: Capability
    ) -> db_models.User:
        """
        Require a logged-in, unblocked user holding a capability.

        Args:
            db: Database session
            user: Current user, None for anonymous visitors
            capability: Capability the action needs

        Returns:
            The user, narrowed to non-None

        Raises:
            UnauthenticatedException: If nobody is logged in
            UserBlockedException: If the user is blocked
            InsufficientPermissionsException: If the role lacks the capability
        """
        if user is None:
            raise UnauthenticatedException()

        if BlockRepository(db).exists(user.username):
            logger.warning(
                f"Blocked user {user.username} attempted {capability.value}"
            )
            raise UserBlockedException(user.username)

        if capability not in ROLE_CAPABILITIES.get(user.role, PUBLIC_CAPABILITIES):
            raise InsufficientPermissionsException(
                f"You do not have permission to {capability.value.replace('_', ' ')}"
            )
        return user
