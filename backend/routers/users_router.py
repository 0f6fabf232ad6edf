from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimitLarge, PaginationSkip
from repositories.database import get_db
from services import ActivityService, UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[schemas.UserList])
def list_users(
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 100,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> List[schemas.UserList]:
    """List users with their blocked flag (admin only)."""
    return UserService.list_users(db, skip=skip, limit=limit)


@router.get("/stats", response_model=schemas.ForumStats)
def get_forum_stats(db: Session = Depends(get_db)) -> schemas.ForumStats:
    return UserService.get_forum_stats(db)


@router.put("/{user_id}", response_model=schemas.User)
def update_user(
    user_id: int,
    user_update: schemas.UserUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
) -> db_models.User:
    """Update a profile. Users edit themselves; admins edit anyone."""
    return UserService.update_user(db, user_id, user_update, current_user)


@router.get("/{username}/activity", response_model=List[schemas.ActivityEvent])
def get_user_activity(
    username: str, db: Session = Depends(get_db)
) -> List[schemas.ActivityEvent]:
    """Activity feed of a user, newest first."""
    return ActivityService.activity_for(db, username)


@router.get("/{username}/stats", response_model=schemas.UserStats)
def get_user_stats(username: str, db: Session = Depends(get_db)) -> schemas.UserStats:
    return ActivityService.stats_for(db, username)
