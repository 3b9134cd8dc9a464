from datetime import datetime, timedelta, timezone

import pytest

from codechallenge.models.challenge import (
    Challenge,
    QuotaStatus,
    decode_options,
    format_instant,
    parse_instant,
)
from codechallenge.services.errors import ChallengeError, MalformedDataError

from conftest import challenge_payload, quota_payload


def test_options_as_list_and_as_json_string_decode_the_same():
    as_list = Challenge.from_payload(challenge_payload(options=["a", "b", "c"], correct_answer_id=0))
    as_text = Challenge.from_payload(challenge_payload(options='["a", "b", "c"]', correct_answer_id=0))

    assert as_list.options == ["a", "b", "c"]
    assert as_text.options == as_list.options


@pytest.mark.parametrize("raw", ["not json", '{"a": 1}', "42", None, 7, ["a", 2]])
def test_undecodable_options_raise(raw):
    with pytest.raises(MalformedDataError):
        decode_options(raw)


def test_malformed_data_is_a_challenge_error():
    assert issubclass(MalformedDataError, ChallengeError)


@pytest.mark.parametrize("options", [["only one"], ["a", "b", "c", "d", "e"]])
def test_option_count_outside_two_to_four_is_rejected(options):
    with pytest.raises(MalformedDataError):
        Challenge.from_payload(challenge_payload(options=options, correct_answer_id=0))


@pytest.mark.parametrize("correct", [-1, 4, "2", True, None])
def test_correct_answer_id_must_be_an_index_into_options(correct):
    with pytest.raises(MalformedDataError):
        Challenge.from_payload(challenge_payload(correct_answer_id=correct))


def test_challenge_keeps_payload_fields():
    c = Challenge.from_payload(challenge_payload(difficulty="hard", id="abc"))

    assert c.title == "What does len([1, 2, 3]) return?"
    assert c.correct_answer_id == 2
    assert c.difficulty == "hard"
    assert c.id == "abc"
    assert c.explanation.startswith("len counts")


def test_next_reset_is_last_reset_plus_one_day():
    q = QuotaStatus.from_payload(quota_payload(3, "2024-01-01T00:00:00Z"))

    assert q.quota_remaining == 3
    assert format_instant(q.next_reset) == "2024-01-02T00:00:00Z"


def test_time_until_reset_never_goes_negative():
    q = QuotaStatus.from_payload(quota_payload(0, "2024-01-01T00:00:00Z"))

    assert q.time_until_reset(datetime(2024, 1, 1, 18, tzinfo=timezone.utc)) == timedelta(hours=6)
    assert q.time_until_reset(datetime(2024, 1, 5, tzinfo=timezone.utc)) == timedelta(0)


@pytest.mark.parametrize(
    "payload",
    [
        {"quota_remaining": -1, "last_reset_data": "2024-01-01T00:00:00Z"},
        {"quota_remaining": "3", "last_reset_data": "2024-01-01T00:00:00Z"},
        {"quota_remaining": 3},
        {"quota_remaining": 3, "last_reset_data": "yesterday"},
        ["not", "an", "object"],
    ],
)
def test_bad_quota_payloads_raise(payload):
    with pytest.raises(MalformedDataError):
        QuotaStatus.from_payload(payload)


def test_naive_timestamps_are_read_as_utc():
    assert parse_instant("2024-01-01T12:00:00") == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)


def test_offset_timestamps_keep_their_instant():
    parsed = parse_instant("2024-01-01T02:00:00+02:00")
    assert parsed == datetime(2024, 1, 1, 0, tzinfo=timezone.utc)
