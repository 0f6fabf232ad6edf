from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import (
    HTTPAuthorizationCredentials,
    HTTPBearer,
)
import jwt
from sqlalchemy import func
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.config import settings
from models.exceptions import (
    InsufficientPermissionsException,
    UnauthenticatedException,
)
from repositories.database import get_db

# auto_error=False so a missing token surfaces as UnauthenticatedException
# and goes through the domain exception handlers
bearer_scheme = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=15)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM
    )
    return encoded_jwt


def authenticate_user(
    db: Session, login: str, password: str
) -> db_models.User | None:
    """Match a username (any case) or an email against a password."""
    user = (
        db.query(db_models.User)
        .filter(
            (func.lower(db_models.User.username) == login.lower())
            | (db_models.User.email == login)
        )
        .first()
    )
    if not user:
        return None
    if not verify_password(password, str(user.hashed_password)):
        return None
    return user


def _user_from_token(db: Session, token: str) -> db_models.User | None:
    """
    Resolve the user a token was issued to.

    Raises:
        UnauthenticatedException: If the token has expired
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except jwt.exceptions.ExpiredSignatureError:
        raise UnauthenticatedException("Session expired. Please log in again.")
    except jwt.exceptions.InvalidTokenError:
        return None

    username_value = payload.get("sub")
    if username_value is None:
        return None
    token_data = schemas.TokenData(username=str(username_value))
    return (
        db.query(db_models.User)
        .filter(db_models.User.username == token_data.username)
        .first()
    )


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[db_models.User]:
    """
    Get current user if authenticated, otherwise return None.

    Used by public reads and by actions whose services decide how to treat
    anonymous callers. Malformed tokens count as anonymous; expired tokens
    raise so the client knows to log in again.
    """
    if credentials is None:
        return None
    return _user_from_token(db, credentials.credentials)


async def get_current_user(
    user: Optional[db_models.User] = Depends(get_current_user_optional),
) -> db_models.User:
    """
    Get the current authenticated user from the JWT token.

    Raises:
        UnauthenticatedException: If credentials are missing or invalid.
    """
    if user is None:
        raise UnauthenticatedException("Could not validate credentials")
    return user


async def get_admin_user(
    current_user: db_models.User = Depends(get_current_user),
) -> db_models.User:
    """
    Require the admin role.

    Raises:
        InsufficientPermissionsException: If user is not an admin.
    """
    if not current_user.is_admin:
        raise InsufficientPermissionsException("Not enough permissions")
    return current_user
