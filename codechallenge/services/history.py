from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from codechallenge.models.challenge import Challenge
from codechallenge.services.errors import ChallengeError, MalformedDataError, ServerError
from codechallenge.services.evaluation import AnswerState, initial_state, select
from codechallenge.services.session import Pipeline

log = logging.getLogger(__name__)

HISTORY_ERROR = "Failed to load history."


@dataclass
class HistoryItem:
    """One past challenge, replayed in review mode (explanation already shown)."""

    challenge: Optional[Challenge]
    answer: AnswerState = field(default_factory=lambda: initial_state(show_explanation=True))
    error: Optional[str] = None
    raw_id: Any = None

    def pick(self, index: int) -> bool:
        if self.challenge is None:
            return False
        before = self.answer
        self.answer = select(before, index, option_count=len(self.challenge.options))
        return self.answer is not before


def _build_item(payload: Any) -> HistoryItem:
    raw_id = payload.get("id") if isinstance(payload, dict) else None
    try:
        return HistoryItem(challenge=Challenge.from_payload(payload), raw_id=raw_id)
    except MalformedDataError as e:
        log.warning("History item %s is malformed: %s", raw_id, e)
        return HistoryItem(challenge=None, error=f"This challenge could not be displayed ({e}).", raw_id=raw_id)


class HistoryFlow:
    def __init__(self, api: Pipeline):
        self.api = api
        self.items: List[HistoryItem] = []
        self.loading = False
        self.error: Optional[str] = None
        self.requests = 0

    async def load(self) -> List[HistoryItem]:
        self.loading = True
        self.error = None
        self.requests += 1

        try:
            data = await self.api.call("my-history")
            if not isinstance(data, dict) or not isinstance(data.get("challenges"), list):
                raise ServerError("Malformed history response")
        except ChallengeError:
            log.exception("History load failed")
            self.error = HISTORY_ERROR
            raise
        finally:
            self.loading = False

        # server order is kept as-is
        self.items = [_build_item(c) for c in data["challenges"]]
        log.info("History loaded: %d challenges", len(self.items))
        return self.items

    async def retry(self) -> List[HistoryItem]:
        return await self.load()
