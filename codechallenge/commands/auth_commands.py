import logging

import discord

from codechallenge.utils.embeds import reply_embed

log = logging.getLogger(__name__)


def register_auth_commands(client: discord.Client, store) -> None:
    # -----------------------------
    # /signin
    # -----------------------------
    @client.tree.command(
        name="signin", description="Link your challenge account to Discord."
    )
    async def signin(interaction: discord.Interaction):
        from codechallenge.commands.ui_modals import SignInModal

        await interaction.response.send_modal(SignInModal(store))

    # -----------------------------
    # /signout
    # -----------------------------
    @client.tree.command(
        name="signout", description="Unlink your challenge account."
    )
    async def signout(interaction: discord.Interaction):
        store.delete_session(interaction.user.id)
        log.info("Unlinked identity session for user=%s", interaction.user.id)
        await reply_embed(
            interaction,
            title="👋 Signed out",
            description="Use **/signin** to link your account again.",
            ephemeral=True,
        )
