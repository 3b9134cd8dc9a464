import logging

import discord
from discord import app_commands

from codechallenge.commands import (
    register_auth_commands,
    register_challenge_commands,
)
from codechallenge.constants import BOT_MODE, BOT_VERSION
from codechallenge.db import KeyStore
from codechallenge.services.api import ApiClient
from codechallenge.services.auth import ClerkTokenProvider
from codechallenge.utils.logger_setup import setup_logging
from codechallenge.utils.startup_banner import startup_banner

from config import (
    DB_PATH,
    DISCORD_TOKEN,
    GUILD_ID,
    LOG_DIR,
    LOG_LEVEL,
    ApiConfig,
    AuthConfig,
    ConfigError,
    load_api_config,
    load_auth_config,
)

log = logging.getLogger(__name__)


def build_client(api_config: ApiConfig, auth_config: AuthConfig) -> discord.Client:
    intents = discord.Intents.default()

    store = KeyStore(DB_PATH)
    tokens = ClerkTokenProvider(auth_config, store)

    def api_for(user_id: int) -> ApiClient:
        # one pipeline per caller; the token getter is bound to that user
        return ApiClient(api_config, tokens.getter(user_id))

    class ChallengeBot(discord.Client):
        def __init__(self) -> None:
            super().__init__(intents=intents)
            self.tree = app_commands.CommandTree(self)

        async def setup_hook(self) -> None:
            register_auth_commands(self, store)
            register_challenge_commands(self, tokens, api_for)

            if GUILD_ID:
                guild = discord.Object(id=GUILD_ID)
                self.tree.copy_global_to(guild=guild)
                await self.tree.sync(guild=guild)
            else:
                await self.tree.sync()

    client = ChallengeBot()

    @client.event
    async def on_ready() -> None:
        if getattr(client, "_ready_once", False):
            return
        client._ready_once = True

        startup_banner(
            api=api_config.base_url.replace("http://", "").replace("https://", ""),
            auth=auth_config.api_url.replace("https://", ""),
            commands=len(client.tree.get_commands()),
            version=BOT_VERSION,
            mode=BOT_MODE,
        )

        await client.change_presence(
            status=discord.Status.online,
            activity=discord.Game(name="🧩 /challenge"),
        )

    return client


def main() -> None:
    setup_logging(log_dir=LOG_DIR, console_level=LOG_LEVEL, file_level="DEBUG")

    if not DISCORD_TOKEN:
        raise SystemExit("DISCORD_TOKEN missing in .env")

    try:
        api_config = load_api_config()
        auth_config = load_auth_config()
    except ConfigError as e:
        raise SystemExit(f"Invalid configuration: {e}")

    log.info("Starting ChallengeBot v%s against %s", BOT_VERSION, api_config.base_url)
    client = build_client(api_config, auth_config)
    client.run(DISCORD_TOKEN, log_handler=None)


if __name__ == "__main__":
    main()
