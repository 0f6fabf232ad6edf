"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["CORS_ORIGINS"] = '["http://localhost:3000"]'
os.environ["ADMIN_EMAIL"] = "admin@test.com"
os.environ["ADMIN_PASSWORD"] = "TestAdmin123!"
# Vote debounce is exercised explicitly in the vote guard tests
os.environ["VOTE_DEBOUNCE_MS"] = "0"

from authentication.auth import create_access_token, get_password_hash  # noqa: E402
from repositories.database import Base, get_db  # noqa: E402
import repositories.db_models as db_models  # noqa: E402
from services.vote_guard_service import VoteGuardService  # noqa: E402

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Hashing is slow; every fixture user shares one password
TEST_PASSWORD = "testpassword123"
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest.fixture(autouse=True)
def reset_vote_guard():
    """Clear the in-memory vote guard between tests."""
    VoteGuardService.reset()
    yield
    VoteGuardService.reset()


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with overridden database dependency."""
    from main import app
    from helpers.rate_limiter import limiter

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Factory fixture to create users."""

    def _make_user(
        username: str, role: db_models.UserRole = db_models.UserRole.USER
    ) -> db_models.User:
        user = db_models.User(
            username=username,
            email=f"{username.lower()}@example.com",
            hashed_password=TEST_PASSWORD_HASH,
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def test_user(make_user) -> db_models.User:
    """Regular user 'alice'."""
    return make_user("alice")


@pytest.fixture
def other_user(make_user) -> db_models.User:
    """Regular user 'bob'."""
    return make_user("bob")


@pytest.fixture
def admin_user(make_user) -> db_models.User:
    """Admin user 'mod1'."""
    return make_user("mod1", role=db_models.UserRole.ADMIN)


@pytest.fixture
def make_topic(db_session):
    """Factory fixture to create topics."""

    def _make_topic(
        author: db_models.User,
        title: str = "Test Topic",
        upvotes: int = 0,
        downvotes: int = 0,
        category: str = "General",
    ) -> db_models.Topic:
        topic = db_models.Topic(
            title=title,
            description=f"Description of {title}",
            category=category,
            user_id=author.id,
            upvotes=upvotes,
            downvotes=downvotes,
        )
        db_session.add(topic)
        db_session.commit()
        db_session.refresh(topic)
        return topic

    return _make_topic


@pytest.fixture
def make_post(db_session):
    """Factory fixture to create posts and replies."""

    def _make_post(
        author: db_models.User,
        topic: db_models.Topic,
        content: str = "A post",
        parent: db_models.Post | None = None,
    ) -> db_models.Post:
        post = db_models.Post(
            topic_id=topic.id,
            user_id=author.id,
            parent_id=parent.id if parent else None,
            content=content,
        )
        db_session.add(post)
        topic.reply_count += 1
        db_session.commit()
        db_session.refresh(post)
        return post

    return _make_post


@pytest.fixture
def test_topic(make_topic, other_user) -> db_models.Topic:
    """Topic by bob with a score of zero."""
    return make_topic(other_user, title="Bob's Topic")


@pytest.fixture
def block_user(db_session):
    """Factory fixture to insert a block record directly."""

    def _block_user(
        user: db_models.User, blocked_by: str = "mod1"
    ) -> db_models.BlockedUser:
        record = db_models.BlockedUser(
            username=user.username,
            user_id=user.id,
            email=user.email,
            blocked_by=blocked_by,
            reason="spam",
        )
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record

    return _block_user


def headers_for(user: db_models.User) -> dict:
    """Bearer headers for a user."""
    token = create_access_token(data={"sub": user.username})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_user) -> dict:
    """Get authentication headers for test user."""
    return headers_for(test_user)


@pytest.fixture
def other_auth_headers(other_user) -> dict:
    return headers_for(other_user)


@pytest.fixture
def admin_auth_headers(admin_user) -> dict:
    """Get authentication headers for admin user."""
    return headers_for(admin_user)


@pytest.fixture
def headers_of():
    """Factory fixture returning bearer headers for any user."""
    return headers_for
