import pytest

from config import ConfigError, load_api_config, load_auth_config


def test_api_config_strips_trailing_slash():
    cfg = load_api_config(base_url="https://challenges.example.com/api/", timeout="30")

    assert cfg.base_url == "https://challenges.example.com/api"
    assert cfg.timeout == 30.0


@pytest.mark.parametrize("url", ["", "   ", "ftp://example.com", "localhost:8000/api"])
def test_api_config_rejects_bad_urls(url):
    with pytest.raises(ConfigError):
        load_api_config(base_url=url, timeout=10)


@pytest.mark.parametrize("timeout", ["abc", "0", -5])
def test_api_config_rejects_bad_timeouts(timeout):
    with pytest.raises(ConfigError):
        load_api_config(base_url="http://localhost:8000/api", timeout=timeout)


def test_auth_config_requires_secret_key():
    with pytest.raises(ConfigError):
        load_auth_config(secret_key="", api_url="https://api.clerk.com/v1")

    cfg = load_auth_config(secret_key=" sk_live ", api_url="https://api.clerk.com/v1/")
    assert cfg.secret_key == "sk_live"
    assert cfg.api_url == "https://api.clerk.com/v1"
