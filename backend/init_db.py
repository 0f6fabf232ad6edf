"""Initialize the database with the forum tables and the default admin user."""

from pathlib import Path

from loguru import logger

from authentication.auth import get_password_hash
from models.config import settings
from repositories.database import Base, SessionLocal, engine
from repositories.db_models import User, UserRole


def ensure_data_dir() -> None:
    """Create the directory of a file-based SQLite database if needed."""
    prefix = "sqlite:///"
    if settings.DATABASE_URL.startswith(prefix) and ":memory:" not in settings.DATABASE_URL:
        Path(settings.DATABASE_URL[len(prefix) :]).parent.mkdir(
            parents=True, exist_ok=True
        )


def init_db() -> None:
    """Create tables and the default admin user."""
    ensure_data_dir()
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        existing_admin = (
            db.query(User)
            .filter(
                (User.email == settings.ADMIN_EMAIL)
                | (User.username == settings.ADMIN_USERNAME)
            )
            .first()
        )
        if not existing_admin:
            admin = User(
                username=settings.ADMIN_USERNAME,
                email=settings.ADMIN_EMAIL,
                hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
                role=UserRole.ADMIN,
            )
            db.add(admin)
            db.commit()
            logger.info(f"Admin user created: {settings.ADMIN_USERNAME}")
            logger.info("Password taken from ADMIN_PASSWORD; change it in production")

        logger.info("Database initialization complete")

    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
