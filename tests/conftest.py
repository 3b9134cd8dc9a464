import asyncio
from collections import defaultdict, deque

import pytest

from codechallenge.models.challenge import Challenge


def challenge_payload(**overrides):
    data = {
        "id": 1,
        "title": "What does len([1, 2, 3]) return?",
        "options": ["1", "2", "3", "4"],
        "correct_answer_id": 2,
        "explanation": "len counts the items in the list.",
        "difficulty": "easy",
    }
    data.update(overrides)
    return data


def quota_payload(remaining, last_reset="2024-01-01T00:00:00Z"):
    return {"quota_remaining": remaining, "last_reset_data": last_reset}


class FakePipeline:
    """
    Scripted stand-in for ApiClient.

    Each endpoint has a queue of steps. A step is a value to return,
    an exception to raise, or a (gate, step) pair that waits on the
    asyncio.Event first.
    """

    def __init__(self):
        self.steps = defaultdict(deque)
        self.calls = []

    def script(self, endpoint, *steps):
        self.steps[endpoint].extend(steps)
        return self

    def count(self, endpoint):
        return sum(1 for c in self.calls if c[0] == endpoint)

    async def call(self, endpoint, *, method="GET", body=None, headers=None):
        self.calls.append((endpoint, method, body))
        queue = self.steps[endpoint]
        if not queue:
            raise AssertionError(f"unexpected call to {endpoint}")
        step = queue.popleft()

        if isinstance(step, tuple) and isinstance(step[0], asyncio.Event):
            gate, step = step
            await gate.wait()

        if isinstance(step, BaseException):
            raise step
        return step


@pytest.fixture
def api():
    return FakePipeline()


@pytest.fixture
def challenge():
    return Challenge.from_payload(challenge_payload())
