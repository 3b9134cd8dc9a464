import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, List, Mapping, Optional

from codechallenge.services.errors import MalformedDataError

DIFFICULTIES = ("easy", "medium", "hard")
DEFAULT_DIFFICULTY = "easy"

MIN_OPTIONS = 2
MAX_OPTIONS = 4
RESET_PERIOD = timedelta(hours=24)


def decode_options(raw: Any) -> List[str]:
    """
    `options` arrives either as a list or as a JSON string holding that list.
    Anything else is a MalformedDataError, never an empty list.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise MalformedDataError(f"options is not valid JSON: {e}") from e

    if not isinstance(raw, (list, tuple)):
        raise MalformedDataError(f"options must be a list, got {type(raw).__name__}")

    if not all(isinstance(o, str) for o in raw):
        raise MalformedDataError("options must only contain strings")

    return list(raw)


def parse_instant(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        raise MalformedDataError(f"not an ISO-8601 timestamp: {value!r}")
    s = value.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(s)
    except ValueError as e:
        raise MalformedDataError(f"not an ISO-8601 timestamp: {value!r}") from e
    # naive timestamps from the service are UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_instant(value: datetime) -> str:
    if value.tzinfo is not None and value.utcoffset() == timedelta(0):
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    return value.isoformat()


@dataclass
class Challenge:
    title: str
    options: List[str]
    correct_answer_id: int
    explanation: str
    difficulty: str
    id: Optional[Any] = None

    def __post_init__(self):
        if not (MIN_OPTIONS <= len(self.options) <= MAX_OPTIONS):
            raise MalformedDataError(
                f"Challenge must have {MIN_OPTIONS}-{MAX_OPTIONS} options, got {len(self.options)}"
            )
        if not (0 <= self.correct_answer_id < len(self.options)):
            raise MalformedDataError("correct_answer_id out of range")

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Challenge":
        if not isinstance(data, Mapping):
            raise MalformedDataError("challenge payload must be an object")

        options = decode_options(data.get("options"))

        correct = data.get("correct_answer_id")
        if isinstance(correct, bool) or not isinstance(correct, int):
            raise MalformedDataError(f"correct_answer_id must be an integer, got {correct!r}")

        return cls(
            id=data.get("id"),
            title=str(data.get("title") or ""),
            options=options,
            correct_answer_id=correct,
            explanation=str(data.get("explanation") or ""),
            difficulty=str(data.get("difficulty") or ""),
        )


@dataclass(frozen=True)
class QuotaStatus:
    quota_remaining: int
    last_reset: datetime

    @property
    def next_reset(self) -> datetime:
        return self.last_reset + RESET_PERIOD

    def time_until_reset(self, now: datetime) -> timedelta:
        return max(timedelta(0), self.next_reset - now)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "QuotaStatus":
        if not isinstance(data, Mapping):
            raise MalformedDataError("quota payload must be an object")

        remaining = data.get("quota_remaining")
        if isinstance(remaining, bool) or not isinstance(remaining, int) or remaining < 0:
            raise MalformedDataError(f"quota_remaining must be a non-negative integer, got {remaining!r}")

        return cls(
            quota_remaining=remaining,
            last_reset=parse_instant(data.get("last_reset_data")),
        )
