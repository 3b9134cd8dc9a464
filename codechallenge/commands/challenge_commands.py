from __future__ import annotations

import logging
from typing import Callable

import discord
from discord import app_commands

from codechallenge.constants import AI_FOOTER, SIGN_IN_HINT
from codechallenge.models.challenge import DEFAULT_DIFFICULTY, QuotaStatus, format_instant
from codechallenge.services.api import ApiClient
from codechallenge.services.errors import AuthError, ChallengeError
from codechallenge.services.history import HistoryFlow
from codechallenge.services.session import ChallengeSession
from codechallenge.utils.discord_ui import human_delta
from codechallenge.utils.embeds import reply_api_error, reply_embed, reply_error
from codechallenge.utils.loading import start_loading, stop_loading
from codechallenge.views.generator_view import GeneratorView
from codechallenge.views.history_view import HistoryView

log = logging.getLogger(__name__)

ApiFactory = Callable[[int], ApiClient]

DIFFICULTY_CHOICES = [
    app_commands.Choice(name="Easy", value="easy"),
    app_commands.Choice(name="Medium", value="medium"),
    app_commands.Choice(name="Hard", value="hard"),
]


def register_challenge_commands(client: discord.Client, tokens, api_for: ApiFactory) -> None:
    async def _require_sign_in(interaction: discord.Interaction) -> bool:
        if tokens.is_signed_in(interaction.user.id):
            return True
        await reply_error(interaction, "You are not signed in.", hint=SIGN_IN_HINT, ephemeral=True)
        return False

    # -----------------------------
    # /challenge
    # -----------------------------
    @client.tree.command(
        name="challenge",
        description="Generate an AI coding challenge (limited per day).",
    )
    @app_commands.describe(difficulty="Starting difficulty (you can change it later)")
    @app_commands.choices(difficulty=DIFFICULTY_CHOICES)
    async def challenge(
        interaction: discord.Interaction,
        difficulty: app_commands.Choice[str] | None = None,
    ) -> None:
        if not await _require_sign_in(interaction):
            return

        try:
            await interaction.response.defer(thinking=True)
        except (discord.NotFound, discord.InteractionResponded):
            return

        loading_msg = await start_loading(interaction, "challenge")

        session = ChallengeSession(
            api_for(interaction.user.id),
            difficulty=difficulty.value if difficulty else DEFAULT_DIFFICULTY,
        )
        await session.enter()
        await stop_loading(loading_msg)

        view = GeneratorView(session=session, owner_id=interaction.user.id)
        try:
            msg = await interaction.followup.send(embed=view.build_embed(), view=view, wait=True)
        except discord.HTTPException:
            log.exception("Sending challenge view failed")
            session.close()
            return

        view.attach_message(msg)

    # -----------------------------
    # /quota
    # -----------------------------
    @client.tree.command(name="quota", description="Show how many challenges you have left today.")
    async def quota(interaction: discord.Interaction) -> None:
        if not await _require_sign_in(interaction):
            return

        await interaction.response.defer(ephemeral=True, thinking=True)

        try:
            data = await api_for(interaction.user.id).call("quota")
            status = QuotaStatus.from_payload(data)
        except ChallengeError as e:
            if not isinstance(e, AuthError):
                log.exception("/quota failed")
            await reply_api_error(interaction, e, fallback="Failed to load quota.", sign_in_hint=SIGN_IN_HINT)
            return

        fields = [
            {"name": "Remaining today", "value": f"• {status.quota_remaining}", "inline": True},
            {
                "name": "Next reset",
                "value": (
                    f"• {discord.utils.format_dt(status.next_reset, 'f')}\n"
                    f"• in {human_delta(status.time_until_reset(discord.utils.utcnow()))}"
                ),
                "inline": True,
            },
        ]
        await reply_embed(
            interaction,
            title="📊 Daily quota",
            description=f"Last reset: `{format_instant(status.last_reset)}`",
            fields=fields,
            footer=AI_FOOTER,
            ephemeral=True,
        )

    # -----------------------------
    # /history
    # -----------------------------
    @client.tree.command(name="history", description="Review the challenges you generated.")
    async def history(interaction: discord.Interaction) -> None:
        if not await _require_sign_in(interaction):
            return

        try:
            await interaction.response.defer(thinking=True)
        except (discord.NotFound, discord.InteractionResponded):
            return

        loading_msg = await start_loading(interaction, "history")

        flow = HistoryFlow(api_for(interaction.user.id))
        try:
            await flow.load()
        except ChallengeError:
            # the view shows the error with a Retry button
            pass
        finally:
            await stop_loading(loading_msg)

        view = HistoryView(flow=flow, owner_id=interaction.user.id)
        try:
            msg = await interaction.followup.send(embed=view.current_embed(), view=view, wait=True)
        except discord.HTTPException:
            log.exception("Sending history view failed")
            return

        view.attach_message(msg)
