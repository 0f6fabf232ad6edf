"""Post and reply router endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimit, PaginationSkip
from repositories.database import get_db
from services import PostService

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=List[schemas.PostWithReplies])
def list_posts(
    topic_id: Optional[int] = None,
    author_id: Optional[int] = None,
    skip: PaginationSkip = 0,
    limit: PaginationLimit = 100,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
) -> List[schemas.PostWithReplies]:
    """List top-level posts, oldest first, each with its direct replies."""
    return PostService.list_posts(
        db,
        viewer=current_user,
        topic_id=topic_id,
        author_id=author_id,
        skip=skip,
        limit=limit,
    )


@router.get("/{post_id}", response_model=schemas.PostWithReplies)
def get_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
) -> schemas.PostWithReplies:
    return PostService.get_post(db, post_id, viewer=current_user)


@router.post("", response_model=schemas.Post, status_code=201)
def create_post(
    post: schemas.PostCreate,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
) -> db_models.Post:
    return PostService.create_post(db, post, current_user)


@router.post("/{post_id}/reply", response_model=schemas.Post, status_code=201)
def reply_to_post(
    post_id: int,
    reply: schemas.ReplyCreate,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
) -> db_models.Post:
    return PostService.create_reply(db, post_id, reply, current_user)


@router.get("/{post_id}/replies", response_model=List[schemas.Post])
def get_replies(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
) -> List[db_models.Post]:
    return PostService.get_replies(db, post_id, viewer=current_user)


@router.delete("/{post_id}")
def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
) -> dict[str, str]:
    PostService.delete_post(db, post_id, current_user)
    return {"message": "Post deleted successfully"}


@router.post("/{post_id}/vote", response_model=schemas.PostVoteResult)
def react_to_post(
    post_id: int,
    vote: schemas.PostVoteRequest,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
) -> schemas.PostVoteResult:
    """Like or dislike a post. Repeating the same reaction removes it."""
    return PostService.react(db, post_id, vote.reaction, current_user)
