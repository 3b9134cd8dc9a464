import httpx
import pytest

from config import AuthConfig
from codechallenge.db import KeyStore
from codechallenge.services.auth import ClerkTokenProvider
from codechallenge.services.errors import AuthError


@pytest.fixture
def store(tmp_path):
    return KeyStore(str(tmp_path / "data" / "test.sqlite3"))


def provider(store, responder):
    seen = []

    def handler(request):
        seen.append(request)
        return responder(request)

    tokens = ClerkTokenProvider(
        AuthConfig(secret_key="sk_test", api_url="https://idp.test/v1"),
        store,
        transport=httpx.MockTransport(handler),
    )
    return tokens, seen


def test_store_links_and_unlinks_sessions(store):
    assert store.get_session(42) is None

    store.set_session(42, "sess_a")
    store.set_session(42, "sess_b")
    assert store.get_session(42) == "sess_b"

    store.delete_session(42)
    assert store.get_session(42) is None


async def test_fetch_token_exchanges_linked_session(store):
    store.set_session(1, "sess_123")
    tokens, seen = provider(store, lambda r: httpx.Response(200, json={"jwt": "eyJ.abc"}))

    assert tokens.is_signed_in(1)
    assert await tokens.getter(1)() == "eyJ.abc"

    req = seen[0]
    assert req.method == "POST"
    assert str(req.url) == "https://idp.test/v1/sessions/sess_123/tokens"
    assert req.headers["authorization"] == "Bearer sk_test"


async def test_each_fetch_hits_the_provider(store):
    store.set_session(1, "sess_123")
    tokens, seen = provider(store, lambda r: httpx.Response(200, json={"jwt": "t"}))

    await tokens.fetch_token(1)
    await tokens.fetch_token(1)

    assert len(seen) == 2


async def test_unlinked_user_raises_without_network(store):
    tokens, seen = provider(store, lambda r: httpx.Response(200, json={"jwt": "t"}))

    assert not tokens.is_signed_in(9)
    with pytest.raises(AuthError):
        await tokens.fetch_token(9)
    assert seen == []


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={}),
        httpx.Response(404, json={}),
        httpx.Response(500, text="oops"),
        httpx.Response(200, json={}),
        httpx.Response(200, text="not json"),
    ],
)
async def test_provider_failures_are_auth_errors(store, response):
    store.set_session(1, "sess_123")
    tokens, _ = provider(store, lambda r: response)

    with pytest.raises(AuthError):
        await tokens.fetch_token(1)


async def test_unreachable_provider_is_auth_error(store):
    store.set_session(1, "sess_123")

    def boom(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    tokens, _ = provider(store, boom)

    with pytest.raises(AuthError):
        await tokens.fetch_token(1)
