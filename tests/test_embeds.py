from codechallenge.constants import NO_HISTORY
from codechallenge.services.evaluation import initial_state, select
from codechallenge.services.history import HISTORY_ERROR, HistoryFlow
from codechallenge.services.session import ChallengeSession
from codechallenge.views.generator_view import generator_embed, quota_lines
from codechallenge.views.history_view import history_embed

from conftest import challenge_payload, quota_payload


def field_names(embed):
    return [f.name for f in embed.fields]


async def test_generator_shows_remaining_quota(api):
    api.script("quota", quota_payload(3))
    session = ChallengeSession(api)
    await session.enter()

    e = generator_embed(session, initial_state())

    assert "Challenges remaining today: **3**" in e.description
    assert "Next reset" not in e.description
    assert field_names(e) == []


async def test_generator_shows_next_reset_when_blocked(api):
    api.script("quota", quota_payload(0))
    session = ChallengeSession(api)
    await session.enter()

    lines = quota_lines(session)

    assert lines[0] == "Challenges remaining today: **0**"
    assert lines[1].startswith("Next reset:")


async def test_generator_hides_explanation_until_answered(api):
    api.script("quota", quota_payload(3), quota_payload(2))
    api.script("generate-challenge", challenge_payload())
    session = ChallengeSession(api)
    await session.enter()
    await session.generate()
    await session.settle()

    unanswered = generator_embed(session, initial_state())
    assert "Explanation" not in field_names(unanswered)
    assert "Result" not in field_names(unanswered)

    answered = generator_embed(session, select(initial_state(), 2, option_count=4))
    assert "Explanation" in field_names(answered)
    assert "Correct" in answered.fields[field_names(answered).index("Result")].value


async def test_generator_surfaces_last_error(api):
    api.script("quota", quota_payload(3))
    session = ChallengeSession(api)
    await session.enter()
    session.last_error = "model offline"

    e = generator_embed(session, initial_state())

    assert e.fields[0].name == "Error"
    assert e.fields[0].value == "model offline"


def test_history_loading_and_error_screens(api):
    flow = HistoryFlow(api)

    flow.loading = True
    assert "Loading" in history_embed(flow, 0).description

    flow.loading = False
    flow.error = HISTORY_ERROR
    e = history_embed(flow, 0)
    assert HISTORY_ERROR in e.description
    assert "Retry" in e.footer.text


async def test_history_empty_and_item_screens(api):
    api.script("my-history", {"challenges": []}, {"challenges": [challenge_payload()]})
    flow = HistoryFlow(api)

    await flow.load()
    assert history_embed(flow, 0).description == NO_HISTORY

    await flow.retry()
    e = history_embed(flow, 0)
    assert "Challenge 1/1" in e.description
    assert "Explanation" in field_names(e)
    assert "Result" not in field_names(e)
