from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services import ActivityService, BlockService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/blocked", response_model=List[schemas.BlockedUser])
def list_blocked_users(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> List[schemas.BlockedUser]:
    """List blocked users with the stats captured when they were blocked."""
    return BlockService.list_blocked(db)


@router.post("/blocked", response_model=schemas.BlockResult)
def block_user(
    block: schemas.BlockCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> schemas.BlockResult:
    """
    Block a user.

    success is false when the user was already blocked. Domain exceptions
    are caught by centralized exception handlers.
    """
    created = BlockService.block(
        db, block.username, blocked_by=current_user.username, reason=block.reason
    )
    return schemas.BlockResult(
        username=block.username,
        success=created,
        message="User blocked" if created else "User is already blocked",
    )


@router.delete("/blocked/{username}", response_model=schemas.BlockResult)
def unblock_user(
    username: str,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> schemas.BlockResult:
    BlockService.unblock(db, username)
    return schemas.BlockResult(
        username=username, success=True, message="User unblocked"
    )


@router.get("/users/{username}", response_model=schemas.UserDetails)
def get_user_details(
    username: str,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> schemas.UserDetails:
    """User profile, stats, reports received and activity (admin panel)."""
    return ActivityService.user_details(db, username)
