"""Topic router endpoints, including topic votes and the change feed."""

from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimit, PaginationSkip
from repositories.database import get_db
from services import TopicService, VoteGuardService, VoteService

router = APIRouter(prefix="/topics", tags=["topics"])


@router.get("", response_model=List[schemas.Topic])
def list_topics(
    skip: PaginationSkip = 0,
    limit: PaginationLimit = 20,
    category: Optional[str] = None,
    sort_by: Literal["new", "top", "popular"] = "new",
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
) -> List[db_models.Topic]:
    """
    List topics.

    Topics by blocked users are hidden unless the caller is an admin.
    """
    return TopicService.list_topics(
        db,
        viewer=current_user,
        category=category,
        sort_by=sort_by,
        skip=skip,
        limit=limit,
    )


@router.get("/changes", response_model=schemas.TopicChanges)
def get_topic_changes(
    since: datetime = Query(..., description="Return topics changed after this time"),
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
) -> schemas.TopicChanges:
    """
    Poll for topics created, edited, voted on or deleted since a timestamp.

    Pass the returned next_since as `since` on the following poll.
    """
    return TopicService.get_changes(db, since, viewer=current_user)


@router.get("/{topic_id}", response_model=schemas.Topic)
def get_topic(
    topic_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
) -> db_models.Topic:
    return TopicService.get_topic(db, topic_id, viewer=current_user)


@router.post("", response_model=schemas.Topic, status_code=201)
def create_topic(
    topic: schemas.TopicCreate,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
) -> db_models.Topic:
    return TopicService.create_topic(db, topic, current_user)


@router.put("/{topic_id}", response_model=schemas.Topic)
def update_topic(
    topic_id: int,
    topic: schemas.TopicUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
) -> db_models.Topic:
    return TopicService.update_topic(db, topic_id, topic, current_user)


@router.delete("/{topic_id}")
def delete_topic(
    topic_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
) -> dict[str, str]:
    """Soft-delete a topic. Its posts are hidden with it."""
    TopicService.delete_topic(db, topic_id, current_user)
    return {"message": "Topic deleted successfully"}


@router.put("/{topic_id}/view", response_model=schemas.Topic)
def record_topic_view(topic_id: int, db: Session = Depends(get_db)) -> db_models.Topic:
    return TopicService.record_view(db, topic_id)


@router.post("/{topic_id}/vote", response_model=schemas.TopicVoteResult)
def vote_on_topic(
    topic_id: int,
    vote: schemas.TopicVoteRequest,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
) -> schemas.TopicVoteResult:
    """
    Upvote or downvote a topic.

    Repeating the same vote removes it. A downvote that would take the
    score below zero is rejected with 400. A second vote on the same topic
    within the debounce window is rejected with 429.
    """
    if current_user is None:
        return VoteService.apply_vote(db, topic_id, vote.vote_type, None)

    with VoteGuardService.guard(current_user.id, topic_id):
        return VoteService.apply_vote(db, topic_id, vote.vote_type, current_user)


@router.get("/{topic_id}/my-vote", response_model=schemas.MyVote)
def get_my_vote(
    topic_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
) -> schemas.MyVote:
    """Get the current user's vote on a topic (null when none)."""
    return schemas.MyVote(
        topic_id=topic_id,
        vote_type=VoteService.get_user_vote(db, topic_id, current_user),
    )
