"""
Vote Guard Service - per-(user, topic) debounce for topic votes.

Rejects a vote that arrives while an earlier vote from the same user on the
same topic is still being processed, or within VOTE_DEBOUNCE_MS of it.

Note: state is in-memory and per-process. Run a single instance, or move
this to a shared store before scaling out.
"""

import threading
import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Set, Tuple

from loguru import logger

from models.config import settings
from models.exceptions import RateLimitExceededException

GuardKey = Tuple[int, int]


class VoteGuardService:
    """Service guarding topic votes against double submission."""

    _lock = threading.Lock()
    _last_vote_at: Dict[GuardKey, float] = {}
    _in_flight: Set[GuardKey] = set()

    @staticmethod
    def acquire(
        user_id: int,
        topic_id: int,
        debounce_ms: Optional[int] = None,
        now: Optional[float] = None,
    ) -> None:
        """
        Mark a vote as in flight.

        Args:
            user_id: Voting user
            topic_id: Topic being voted on
            debounce_ms: Minimum gap between two votes (defaults to settings)
            now: Monotonic time in seconds (defaults to time.monotonic())

        Raises:
            RateLimitExceededException: If a vote is in flight or too recent
        """
        if debounce_ms is None:
            debounce_ms = settings.VOTE_DEBOUNCE_MS
        if now is None:
            now = time.monotonic()
        key = (user_id, topic_id)

        with VoteGuardService._lock:
            VoteGuardService._prune(now, debounce_ms)

            if key in VoteGuardService._in_flight:
                logger.warning(
                    f"Vote rejected, previous vote in flight: "
                    f"user={user_id} topic={topic_id}"
                )
                raise RateLimitExceededException(
                    message="Your previous vote on this topic is still being processed",
                    retry_after=1,
                )

            last = VoteGuardService._last_vote_at.get(key)
            if last is not None and (now - last) * 1000 < debounce_ms:
                logger.warning(
                    f"Vote rejected, debounce: user={user_id} topic={topic_id}"
                )
                raise RateLimitExceededException(
                    message="You are voting too fast. Please wait a moment.",
                    retry_after=1,
                )

            VoteGuardService._in_flight.add(key)
            VoteGuardService._last_vote_at[key] = now

    @staticmethod
    def _prune(now: float, debounce_ms: int) -> None:
        """Forget votes older than the debounce window. Caller holds the lock."""
        window_start = now - debounce_ms / 1000
        VoteGuardService._last_vote_at = {
            key: voted_at
            for key, voted_at in VoteGuardService._last_vote_at.items()
            if voted_at > window_start
        }

    @staticmethod
    def release(user_id: int, topic_id: int) -> None:
        with VoteGuardService._lock:
            VoteGuardService._in_flight.discard((user_id, topic_id))

    @staticmethod
    @contextmanager
    def guard(user_id: int, topic_id: int) -> Iterator[None]:
        """Hold the guard for the duration of a vote."""
        VoteGuardService.acquire(user_id, topic_id)
        try:
            yield
        finally:
            VoteGuardService.release(user_id, topic_id)

    @staticmethod
    def reset() -> None:
        """
        Forget all recorded votes.

        Useful for testing.
        """
        with VoteGuardService._lock:
            VoteGuardService._last_vote_at.clear()
            VoteGuardService._in_flight.clear()
