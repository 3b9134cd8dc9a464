import json

import httpx
import pytest

from config import ApiConfig
from codechallenge.services.api import ApiClient
from codechallenge.services.errors import (
    GENERIC_ERROR,
    QUOTA_EXCEEDED,
    ApiError,
    AuthError,
    QuotaExceededError,
    ServerError,
    TransportError,
)

BASE = "http://challenges.test/api"


class Recorder:
    def __init__(self, responder):
        self.responder = responder
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)


def make_client(responder, tokens=("tok-1",)):
    recorder = Recorder(responder)
    issued = list(tokens)
    fetched = []

    async def get_token():
        token = issued.pop(0) if issued else None
        fetched.append(token)
        return token

    client = ApiClient(
        ApiConfig(base_url=BASE, timeout=5),
        get_token,
        transport=httpx.MockTransport(recorder),
    )
    return client, recorder, fetched


async def test_defaults_to_json_and_bearer_headers():
    client, rec, _ = make_client(lambda r: httpx.Response(200, json={"ok": True}))

    assert await client.call("quota") == {"ok": True}

    req = rec.requests[0]
    assert req.method == "GET"
    assert str(req.url) == f"{BASE}/quota"
    assert req.headers["content-type"] == "application/json"
    assert req.headers["authorization"] == "Bearer tok-1"


async def test_caller_headers_override_defaults():
    client, rec, _ = make_client(lambda r: httpx.Response(200, json={}))

    await client.call("quota", headers={"content-type": "text/plain", "X-Trace": "abc"})

    req = rec.requests[0]
    assert req.headers["content-type"] == "text/plain"
    assert req.headers["x-trace"] == "abc"
    assert req.headers["authorization"] == "Bearer tok-1"


async def test_post_body_is_sent_as_json():
    client, rec, _ = make_client(lambda r: httpx.Response(200, json={}))

    await client.call("generate-challenge", method="POST", body={"difficulty": "medium"})

    req = rec.requests[0]
    assert req.method == "POST"
    assert str(req.url) == f"{BASE}/generate-challenge"
    assert json.loads(req.content) == {"difficulty": "medium"}


async def test_token_is_fetched_for_every_call():
    client, rec, fetched = make_client(
        lambda r: httpx.Response(200, json={}), tokens=("first", "second")
    )

    await client.call("quota")
    await client.call("quota")

    assert fetched == ["first", "second"]
    assert [r.headers["authorization"] for r in rec.requests] == ["Bearer first", "Bearer second"]


async def test_missing_token_raises_auth_error_without_network():
    client, rec, _ = make_client(lambda r: httpx.Response(200, json={}), tokens=())

    with pytest.raises(AuthError):
        await client.call("quota")
    assert rec.requests == []


async def test_429_maps_to_quota_exceeded():
    client, _, _ = make_client(lambda r: httpx.Response(429, json={}))

    with pytest.raises(QuotaExceededError) as exc:
        await client.call("generate-challenge", method="POST", body={"difficulty": "easy"})

    assert str(exc.value) == QUOTA_EXCEEDED
    assert exc.value.status_code == 429


async def test_server_detail_is_used_as_error_message():
    client, _, _ = make_client(lambda r: httpx.Response(500, json={"detail": "model offline"}))

    with pytest.raises(ServerError) as exc:
        await client.call("generate-challenge", method="POST", body={"difficulty": "easy"})

    assert str(exc.value) == "model offline"
    assert exc.value.status_code == 500


async def test_server_error_without_detail_uses_generic_message():
    client, _, _ = make_client(lambda r: httpx.Response(502, text="<html>bad gateway</html>"))

    with pytest.raises(ServerError) as exc:
        await client.call("my-history")

    assert str(exc.value) == GENERIC_ERROR
    assert exc.value.status_code == 502


async def test_non_json_success_body_is_a_server_error():
    client, _, _ = make_client(lambda r: httpx.Response(200, text="not json"))

    with pytest.raises(ServerError):
        await client.call("quota")


async def test_network_failure_maps_to_transport_error():
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    client, _, _ = make_client(boom)

    with pytest.raises(TransportError) as exc:
        await client.call("quota")
    assert isinstance(exc.value, ApiError)
