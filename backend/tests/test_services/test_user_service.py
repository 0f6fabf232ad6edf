"""
Unit tests for UserService and ViewStateService.
"""

import jwt
import pytest
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
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
from services.user_service import UserService
from services.view_state_service import ViewStateService

TEST_PASSWORD = "testpassword123"


class TestRegisterUser:
    def test_register(self, db_session: Session):
        user = UserService.register_user(
            db_session,
            schemas.UserCreate(
                username="carol", email="carol@example.com", password="secret123"
            ),
        )

        assert user.id is not None
        assert user.role == db_models.UserRole.USER
        assert user.hashed_password != "secret123"

    def test_username_taken_case_insensitive(self, db_session: Session, test_user):
        with pytest.raises(UserAlreadyExistsException):
            UserService.register_user(
                db_session,
                schemas.UserCreate(
                    username="ALICE", email="other@example.com", password="secret123"
                ),
            )

    def test_email_taken(self, db_session: Session, test_user):
        with pytest.raises(UserAlreadyExistsException):
            UserService.register_user(
                db_session,
                schemas.UserCreate(
                    username="alice2", email="alice@example.com", password="secret123"
                ),
            )

    def test_markup_in_username_rejected(self, db_session: Session):
        with pytest.raises(ValidationException):
            UserService.register_user(
                db_session,
                schemas.UserCreate(
                    username="<b>eve</b>", email="eve@example.com", password="secret123"
                ),
            )


class TestLogin:
    def test_login_by_username_or_email(self, db_session: Session, test_user):
        token = UserService.login(db_session, "alice", TEST_PASSWORD)
        payload = jwt.decode(
            token.access_token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )

        assert token.token_type == "bearer"
        assert payload["sub"] == "alice"
        assert UserService.login(db_session, "alice@example.com", TEST_PASSWORD)

    def test_wrong_password(self, db_session: Session, test_user):
        with pytest.raises(InvalidCredentialsException):
            UserService.login(db_session, "alice", "wrong-password")

    def test_blocked_user_cannot_login(self, db_session: Session, test_user, block_user):
        block_user(test_user)
        with pytest.raises(UserBlockedException):
            UserService.login(db_session, "alice", TEST_PASSWORD)


class TestUpdateUser:
    def test_user_updates_self(self, db_session: Session, test_user):
        user = UserService.update_user(
            db_session,
            test_user.id,
            schemas.UserUpdate(email="alice@new.example.com"),
            test_user,
        )
        assert user.email == "alice@new.example.com"

    def test_cannot_edit_others(self, db_session: Session, test_user, other_user):
        with pytest.raises(CannotModifyOthersContentException):
            UserService.update_user(
                db_session, other_user.id, schemas.UserUpdate(username="robert"), test_user
            )

    def test_only_admin_changes_roles(self, db_session: Session, test_user, admin_user):
        with pytest.raises(InsufficientPermissionsException):
            UserService.update_user(
                db_session,
                test_user.id,
                schemas.UserUpdate(role=db_models.UserRole.ADMIN),
                test_user,
            )

        user = UserService.update_user(
            db_session,
            test_user.id,
            schemas.UserUpdate(role=db_models.UserRole.ADMIN),
            admin_user,
        )
        assert user.role == db_models.UserRole.ADMIN

    def test_username_collision(self, db_session: Session, test_user, other_user):
        with pytest.raises(UserAlreadyExistsException):
            UserService.update_user(
                db_session, test_user.id, schemas.UserUpdate(username="Bob"), test_user
            )

    def test_blocked_user_cannot_edit_profile(
        self, db_session: Session, test_user, block_user
    ):
        block_user(test_user)

        with pytest.raises(UserBlockedException):
            UserService.update_user(
                db_session, test_user.id, schemas.UserUpdate(username="alice2"), test_user
            )

        db_session.refresh(test_user)
        assert test_user.username == "alice"

    def test_rename_keeps_block_and_reports(
        self, db_session: Session, test_user, other_user, admin_user, block_user
    ):
        db_session.add(
            db_models.UserReport(
                reporter_username="alice",
                reported_username="bob",
                reason=db_models.ReportReason.SPAM,
            )
        )
        db_session.commit()
        block_user(other_user)

        UserService.update_user(
            db_session, other_user.id, schemas.UserUpdate(username="robert"), admin_user
        )
        UserService.update_user(
            db_session, admin_user.id, schemas.UserUpdate(username="mod2"), admin_user
        )

        block = db_session.query(db_models.BlockedUser).one()
        assert (block.username, block.blocked_by) == ("robert", "mod2")
        report = db_session.query(db_models.UserReport).one()
        assert report.reported_username == "robert"

    def test_rename_rejects_markup(self, db_session: Session, test_user):
        with pytest.raises(ValidationException):
            UserService.update_user(
                db_session,
                test_user.id,
                schemas.UserUpdate(username="<i>alice</i>"),
                test_user,
            )

    def test_missing_user(self, db_session: Session, admin_user):
        with pytest.raises(UserNotFoundException):
            UserService.update_user(
                db_session, 9999, schemas.UserUpdate(username="nobody"), admin_user
            )


class TestForumStats:
    def test_list_users_marks_blocked(
        self, db_session: Session, test_user, other_user, block_user
    ):
        block_user(other_user)

        users = {u.username: u for u in UserService.list_users(db_session)}

        assert users["bob"].is_blocked is True
        assert users["alice"].is_blocked is False

    def test_forum_stats(
        self, db_session: Session, test_user, test_topic, make_post, block_user
    ):
        make_post(test_user, test_topic)
        block_user(test_user)

        stats = UserService.get_forum_stats(db_session)

        assert stats.total_users == 2
        assert stats.total_topics == 1
        assert stats.total_posts == 1
        assert stats.total_reports == 0
        assert stats.blocked_users == 1

    def test_dashboard_limits_recent_items(
        self, db_session: Session, other_user, make_topic
    ):
        for i in range(7):
            make_topic(other_user, title=f"Topic {i}")

        dashboard = UserService.get_dashboard(db_session, limit=5)

        assert len(dashboard.recent_topics) == 5
        assert dashboard.stats.total_topics == 7


class TestViewStateService:
    def test_default_state(self, db_session: Session, test_user):
        state = ViewStateService.get_state(db_session, test_user)
        assert state == schemas.ViewState()

    def test_update_and_clear(self, db_session: Session, test_user, test_topic):
        ViewStateService.update_state(
            db_session,
            test_user,
            schemas.ViewStateUpdate(
                current_section="forum", active_topic_id=test_topic.id
            ),
        )
        state = ViewStateService.update_state(
            db_session, test_user, schemas.ViewStateUpdate(active_post_id=3)
        )
        assert state.current_section == "forum"
        assert state.active_topic_id == test_topic.id
        assert state.active_post_id == 3

        cleared = ViewStateService.update_state(
            db_session, test_user, schemas.ViewStateUpdate(clear_active_thread=True)
        )
        assert cleared.current_section == "forum"
        assert cleared.active_topic_id is None
        assert cleared.active_post_id is None
