"""
User Service

Handles registration, login, profile updates and forum-wide statistics.
"""

from datetime import timedelta
from typing import List

from loguru import logger
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from models.config import settings
from models.exceptions import (
    CannotModifyOthersContentException,
    InsufficientPermissionsException,
    InvalidCredentialsException,
    UserAlreadyExistsException,
    UserBlockedException,
    UserNotFoundException,
    ValidationException,
)
from repositories.block_repository import BlockRepository
from repositories.post_repository import PostRepository
from repositories.report_repository import ReportRepository
from repositories.topic_repository import TopicRepository
from repositories.user_repository import UserRepository
from services.permission_service import Capability, PermissionService


class UserService:
    """Service for managing users."""

    @staticmethod
    def _clean_username(raw: str) -> str:
        """Strip markup from a username; reject names that change or get too short."""
        username = (sanitize_plain_text(raw) or "").strip()
        if username != raw.strip() or len(username) < 3:
            raise ValidationException("Invalid username")
        return username

    @staticmethod
    def register_user(db: Session, data: schemas.UserCreate) -> db_models.User:
        """
        Register a new user with the user role.

        Args:
            db: Database session
            data: Registration payload

        Returns:
            Created user

        Raises:
            ValidationException: If the username contains markup
            UserAlreadyExistsException: If username or email is taken
        """
        user_repo = UserRepository(db)
        username = UserService._clean_username(data.username)

        if user_repo.username_exists(username):
            raise UserAlreadyExistsException("Username already taken")
        if user_repo.email_exists(data.email):
            raise UserAlreadyExistsException("Email already registered")

        user = db_models.User(
            username=username,
            email=data.email,
            hashed_password=auth.get_password_hash(data.password),
            role=db_models.UserRole.USER,
        )
        user = user_repo.create(user)
        logger.info(f"User registered: {user.username}")
        return user

    @staticmethod
    def login(db: Session, login: str, password: str) -> schemas.Token:
        """
        Authenticate a user and create an access token.

        Args:
            db: Database session
            login: Username or email
            password: User password

        Returns:
            Token object with access_token and token_type

        Raises:
            InvalidCredentialsException: If the credentials are wrong
            UserBlockedException: If the account is blocked
        """
        user = auth.authenticate_user(db, login, password)
        if not user:
            logger.warning(f"Failed login for {login}")
            raise InvalidCredentialsException("Incorrect username or password")

        if BlockRepository(db).exists(user.username):
            logger.warning(f"Blocked user {user.username} tried to log in")
            raise UserBlockedException(user.username)

        access_token = auth.create_access_token(
            data={"sub": user.username},
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
        # nosec B106: "bearer" is OAuth2 token type, not a password
        return schemas.Token(access_token=access_token, token_type="bearer")  # nosec B106

    @staticmethod
    def get_user_by_id_or_raise(db: Session, user_id: int) -> db_models.User:
        user = UserRepository(db).get_by_id(user_id)
        if user is None:
            raise UserNotFoundException(f"User with ID {user_id} not found")
        return user

    @staticmethod
    def update_user(
        db: Session,
        user_id: int,
        data: schemas.UserUpdate,
        current_user: db_models.User,
    ) -> db_models.User:
        """
        Update a user's profile.

        Users may edit themselves; admins may edit anyone and change roles.
        Blocked users cannot edit profiles. A rename carries the user's
        block record and reports over to the new username.

        Raises:
            UserBlockedException: If the acting user is blocked
            UserNotFoundException: If the user does not exist
            CannotModifyOthersContentException: If a non-admin edits someone else
            InsufficientPermissionsException: If a non-admin changes a role
            ValidationException: If the new username contains markup
            UserAlreadyExistsException: If the new username or email is taken
        """
        PermissionService.require(db, current_user, Capability.EDIT_PROFILE)
        user_repo = UserRepository(db)
        user = UserService.get_user_by_id_or_raise(db, user_id)

        if user.id != current_user.id and not current_user.is_admin:
            raise CannotModifyOthersContentException(
                "You can only edit your own profile"
            )
        if data.role is not None and not current_user.is_admin:
            raise InsufficientPermissionsException("Only admins can change roles")

        if data.username is not None and data.username != user.username:
            username = UserService._clean_username(data.username)
            if user_repo.username_exists(username, exclude_user_id=user.id):
                raise UserAlreadyExistsException("Username already taken")
            old_username = user.username
            BlockRepository(db).rename_user(old_username, username)
            ReportRepository(db).rename_user(old_username, username)
            user.username = username
            logger.info(f"User {old_username} renamed to {username}")
        if data.email is not None and data.email != user.email:
            if user_repo.email_exists(data.email, exclude_user_id=user.id):
                raise UserAlreadyExistsException("Email already registered")
            user.email = data.email
        if data.role is not None:
            user.role = data.role

        return user_repo.update(user)

    @staticmethod
    def list_users(
        db: Session, skip: int = 0, limit: int = 100
    ) -> List[schemas.UserList]:
        """List users for the admin panel with their blocked flag."""
        blocked = BlockRepository(db).get_blocked_usernames()
        return [
            schemas.UserList(
                id=user.id,
                username=user.username,
                email=user.email,
                role=user.role,
                registered_at=user.registered_at,
                is_blocked=user.username in blocked,
            )
            for user in UserRepository(db).list_users(skip=skip, limit=limit)
        ]

    @staticmethod
    def get_forum_stats(db: Session) -> schemas.ForumStats:
        return schemas.ForumStats(
            total_users=UserRepository(db).count(),
            total_topics=TopicRepository(db).count_active(),
            total_posts=PostRepository(db).count_visible(),
            total_reports=ReportRepository(db).count(),
            blocked_users=BlockRepository(db).count(),
        )

    @staticmethod
    def get_dashboard(
        db: Session, viewer: db_models.User | None = None, limit: int = 5
    ) -> schemas.Dashboard:
        """Forum statistics plus the most recent topics and posts."""
        hide_blocked = viewer is None or not viewer.is_admin
        topics = TopicRepository(db).list_topics(limit=limit, hide_blocked=hide_blocked)
        posts = PostRepository(db).list_posts(
            top_level_only=False,
            hide_blocked=hide_blocked,
            newest_first=True,
            limit=limit,
        )
        return schemas.Dashboard(
            stats=UserService.get_forum_stats(db),
            recent_topics=[schemas.Topic.model_validate(t) for t in topics],
            recent_posts=[schemas.Post.model_validate(p) for p in posts],
        )
