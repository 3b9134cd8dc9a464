from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional, Protocol, Set

from codechallenge.models.challenge import (
    DEFAULT_DIFFICULTY,
    DIFFICULTIES,
    Challenge,
    QuotaStatus,
)
from codechallenge.services.errors import QUOTA_EXCEEDED, ChallengeError, QuotaExceededError

log = logging.getLogger(__name__)

GENERATE_FAILED_MSG = "Failed to generate challenge."


class Pipeline(Protocol):
    async def call(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        body: Any = None,
        headers: Optional[dict] = None,
    ) -> Any: ...


class SessionState(str, Enum):
    IDLE = "idle"
    FETCHING_QUOTA = "fetching_quota"
    GENERATING = "generating"
    READY = "ready"
    BLOCKED = "blocked"


class Event(str, Enum):
    ENTER = "enter"
    QUOTA_LOADED = "quota_loaded"
    QUOTA_EMPTY = "quota_empty"
    QUOTA_FAILED = "quota_failed"
    GENERATE = "generate"
    GENERATED = "generated"
    GENERATE_FAILED = "generate_failed"
    QUOTA_EXCEEDED = "quota_exceeded"


_TRANSITIONS = {
    (SessionState.IDLE, Event.ENTER): SessionState.FETCHING_QUOTA,
    (SessionState.FETCHING_QUOTA, Event.QUOTA_LOADED): SessionState.READY,
    (SessionState.FETCHING_QUOTA, Event.QUOTA_EMPTY): SessionState.BLOCKED,
    # best-effort read: a failed quota fetch never blocks generation
    (SessionState.FETCHING_QUOTA, Event.QUOTA_FAILED): SessionState.READY,
    (SessionState.READY, Event.QUOTA_EMPTY): SessionState.BLOCKED,
    (SessionState.READY, Event.GENERATE): SessionState.GENERATING,
    (SessionState.GENERATING, Event.GENERATED): SessionState.READY,
    (SessionState.GENERATING, Event.GENERATE_FAILED): SessionState.READY,
    (SessionState.GENERATING, Event.QUOTA_EXCEEDED): SessionState.BLOCKED,
}


def transition(state: SessionState, event: Event) -> SessionState:
    """Pure reducer. Pairs not in the table leave the state unchanged."""
    return _TRANSITIONS.get((state, event), state)


class ChallengeSession:
    """
    Transient state of one challenge-generator view.

    Lifecycle:
    - enter(): fetch quota (best effort)
    - generate(): one request at a time, then a background quota refresh
    - close(): view is gone, late results are dropped
    """

    def __init__(self, api: Pipeline, *, difficulty: str = DEFAULT_DIFFICULTY):
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"unknown difficulty: {difficulty!r}")

        self.api = api
        self.state = SessionState.IDLE
        self.difficulty = difficulty
        self.current_challenge: Optional[Challenge] = None
        self.quota: Optional[QuotaStatus] = None
        self.last_error: Optional[str] = None
        self.closed = False

        self._quota_seq = 0
        self._quota_applied_seq = 0
        self._background: Set[asyncio.Task] = set()

    # -----------------------------
    # derived values
    # -----------------------------
    @property
    def pending(self) -> bool:
        return self.state in (SessionState.FETCHING_QUOTA, SessionState.GENERATING)

    @property
    def can_generate(self) -> bool:
        return not self.closed and self.state is SessionState.READY

    @property
    def quota_remaining(self) -> int:
        return self.quota.quota_remaining if self.quota else 0

    @property
    def next_reset(self) -> Optional[datetime]:
        return self.quota.next_reset if self.quota else None

    def time_until_reset(self, now: Optional[datetime] = None) -> Optional[timedelta]:
        if not self.quota:
            return None
        return self.quota.time_until_reset(now or datetime.now(timezone.utc))

    def _dispatch(self, event: Event) -> None:
        new_state = transition(self.state, event)
        if new_state is not self.state:
            log.debug("session %s --%s--> %s", self.state.value, event.value, new_state.value)
        self.state = new_state

    # -----------------------------
    # operations
    # -----------------------------
    def select_difficulty(self, difficulty: str) -> bool:
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"unknown difficulty: {difficulty!r}")
        if self.state is SessionState.GENERATING:
            return False
        self.difficulty = difficulty
        return True

    async def enter(self) -> None:
        if self.state is not SessionState.IDLE:
            return
        self._dispatch(Event.ENTER)
        await self.refresh_quota()

    async def refresh_quota(self) -> Optional[QuotaStatus]:
        self._quota_seq += 1
        seq = self._quota_seq

        try:
            data = await self.api.call("quota")
            quota = QuotaStatus.from_payload(data)
        except ChallengeError as e:
            log.warning("Quota refresh #%d failed: %s", seq, e, exc_info=True)
            if not self.closed:
                self._dispatch(Event.QUOTA_FAILED)
            return None
        except Exception:
            log.exception("Quota refresh #%d crashed", seq)
            if not self.closed:
                self._dispatch(Event.QUOTA_FAILED)
            return None

        if self.closed:
            log.debug("Quota refresh #%d resolved after close, dropped", seq)
            return None
        if seq <= self._quota_applied_seq:
            log.debug("Quota refresh #%d is stale (applied #%d), dropped", seq, self._quota_applied_seq)
            return None

        self._quota_applied_seq = seq
        self.quota = quota
        self._dispatch(Event.QUOTA_EMPTY if quota.quota_remaining == 0 else Event.QUOTA_LOADED)
        return quota

    async def generate(self) -> Optional[Challenge]:
        if not self.can_generate:
            log.debug("generate ignored in state=%s closed=%s", self.state.value, self.closed)
            return None

        self._dispatch(Event.GENERATE)
        difficulty = self.difficulty
        previous = self.current_challenge
        log.info("Generating %s challenge", difficulty)

        try:
            data = await self.api.call(
                "generate-challenge",
                method="POST",
                body={"difficulty": difficulty},
            )
            challenge = Challenge.from_payload(data)
        except QuotaExceededError:
            if self.closed:
                return None
            log.info("Generation blocked: quota exceeded")
            self.last_error = QUOTA_EXCEEDED
            self._dispatch(Event.QUOTA_EXCEEDED)
            return None
        except ChallengeError as e:
            if self.closed:
                return None
            log.warning("Generation failed: %s", e)
            self.last_error = str(e) or GENERATE_FAILED_MSG
            self._dispatch(Event.GENERATE_FAILED)
            return None
        except Exception:
            # never leave the session stuck in GENERATING
            log.exception("Generation crashed")
            if self.closed:
                return None
            self.last_error = GENERATE_FAILED_MSG
            self._dispatch(Event.GENERATE_FAILED)
            return None

        if self.closed:
            log.debug("Challenge resolved after close, dropped")
            return None

        if previous is not None and previous.title == challenge.title:
            log.warning("Same challenge title returned twice: %r", challenge.title)

        self.current_challenge = challenge
        self.last_error = None
        self._dispatch(Event.GENERATED)
        self._spawn_quota_refresh()
        return challenge

    # -----------------------------
    # background refresh
    # -----------------------------
    def _spawn_quota_refresh(self) -> None:
        task = asyncio.create_task(self.refresh_quota())
        self._background.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("Background quota refresh crashed", exc_info=exc)

    async def settle(self) -> None:
        """Wait for outstanding background refreshes."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def close(self) -> None:
        self.closed = True
