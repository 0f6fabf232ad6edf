"""
View State Service - per-user navigation pointers.

Stores the section a user was on and the discussion thread they had open,
so clients can restore it after a reload.
"""

from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from repositories.view_state_repository import ViewStateRepository


class ViewStateService:
    """Service for reading and saving a user's view state."""

    @staticmethod
    def get_state(db: Session, user: db_models.User) -> schemas.ViewState:
        state = ViewStateRepository(db).get_by_user(user.id)
        if state is None:
            return schemas.ViewState()
        return schemas.ViewState.model_validate(state)

    @staticmethod
    def update_state(
        db: Session, user: db_models.User, data: schemas.ViewStateUpdate
    ) -> schemas.ViewState:
        """
        Save a user's view state.

        Fields left out of the update keep their stored value.
        clear_active_thread drops the open topic and post.
        """
        repo = ViewStateRepository(db)
        state = repo.get_by_user(user.id)
        if state is None:
            state = db_models.UserViewState(user_id=user.id)
            repo.add(state)

        if data.current_section is not None:
            state.current_section = data.current_section
        if data.clear_active_thread:
            state.active_topic_id = None
            state.active_post_id = None
        else:
            if data.active_topic_id is not None:
                state.active_topic_id = data.active_topic_id
            if data.active_post_id is not None:
                state.active_post_id = data.active_post_id

        repo.commit()
        repo.refresh(state)
        return schemas.ViewState.model_validate(state)
