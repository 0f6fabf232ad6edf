"""Authentication router endpoints."""

from fastapi import APIRouter, Depends, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.rate_limiter import limiter
from repositories.database import get_db
from services import UserService, ViewStateService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=schemas.User)
@limiter.limit("10/minute")
def register(
    request: Request, user: schemas.UserCreate, db: Session = Depends(get_db)
) -> db_models.User:
    """Register a new user. Rate limited to 10 per minute."""
    return UserService.register_user(db, user)


@router.post("/login", response_model=schemas.Token)
@limiter.limit("10/minute")
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
) -> schemas.Token:
    """
    Login with username (or email) and password.

    Blocked users are refused. Domain exceptions are caught by centralized
    exception handlers.
    """
    return UserService.login(db, form_data.username, form_data.password)


@router.get("/me", response_model=schemas.User)
async def read_users_me(
    current_user: db_models.User = Depends(auth.get_current_user),
) -> db_models.User:
    """Get current user."""
    return current_user


@router.get("/state", response_model=schemas.ViewState)
def get_view_state(
    current_user: db_models.User = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.ViewState:
    """Get the navigation section and open thread saved for the current user."""
    return ViewStateService.get_state(db, current_user)


@router.put("/state", response_model=schemas.ViewState)
def update_view_state(
    state: schemas.ViewStateUpdate,
    current_user: db_models.User = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.ViewState:
    return ViewStateService.update_state(db, current_user, state)
