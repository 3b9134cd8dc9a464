import os
import logging
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

log = logging.getLogger("config")

BASE_DIR = Path(__file__).resolve().parent
ENV_PATH = BASE_DIR / ".env"

load_dotenv(dotenv_path=ENV_PATH, override=True)
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN", "")
DB_PATH = os.getenv("DB_PATH", "./data/codechallenge.sqlite3")
GUILD_ID = int(os.getenv("GUILD_ID", "0"))

CHALLENGE_API_URL = os.getenv("CHALLENGE_API_URL", "http://localhost:8000/api")
CHALLENGE_API_TIMEOUT = os.getenv("CHALLENGE_API_TIMEOUT", "60")

CLERK_SECRET_KEY = os.getenv("CLERK_SECRET_KEY", "")
CLERK_API_URL = os.getenv("CLERK_API_URL", "https://api.clerk.com/v1")

LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

log.debug("BASE_DIR=%s", BASE_DIR)
log.debug("ENV_PATH=%s exists=%s", ENV_PATH, ENV_PATH.exists())
log.debug("TOKEN_LEN=%s", len(DISCORD_TOKEN or ""))
log.debug("DB_PATH=%s", DB_PATH)
log.debug("CHALLENGE_API_URL=%s", CHALLENGE_API_URL)
log.debug("GUILD_ID=%s", GUILD_ID)


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ApiConfig:
    base_url: str
    timeout: float = 60.0


@dataclass(frozen=True)
class AuthConfig:
    secret_key: str
    api_url: str


def load_api_config(
    base_url: str | None = None, timeout: str | float | None = None
) -> ApiConfig:
    url = (CHALLENGE_API_URL if base_url is None else base_url).strip().rstrip("/")
    if not url:
        raise ConfigError("CHALLENGE_API_URL missing in .env")
    if not url.startswith(("http://", "https://")):
        raise ConfigError(f"CHALLENGE_API_URL must be an http(s) URL, got {url!r}")

    raw_timeout = CHALLENGE_API_TIMEOUT if timeout is None else timeout
    try:
        seconds = float(raw_timeout)
    except (TypeError, ValueError):
        raise ConfigError(f"CHALLENGE_API_TIMEOUT is not a number: {raw_timeout!r}")
    if seconds <= 0:
        raise ConfigError("CHALLENGE_API_TIMEOUT must be positive")

    return ApiConfig(base_url=url, timeout=seconds)


def load_auth_config(
    secret_key: str | None = None, api_url: str | None = None
) -> AuthConfig:
    key = (CLERK_SECRET_KEY if secret_key is None else secret_key).strip()
    if not key:
        raise ConfigError("CLERK_SECRET_KEY missing in .env")

    url = (CLERK_API_URL if api_url is None else api_url).strip().rstrip("/")
    if not url:
        raise ConfigError("CLERK_API_URL missing in .env")

    return AuthConfig(secret_key=key, api_url=url)
