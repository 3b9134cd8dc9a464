import logging

import discord

from codechallenge.utils.embeds import make_embed

log = logging.getLogger(__name__)


class SignInModal(discord.ui.Modal, title="Link your challenge account"):
    session_id = discord.ui.TextInput(
        label="Session ID (from the web app)",
        style=discord.TextStyle.short,
        placeholder="sess_...",
        required=True,
        min_length=4,
        max_length=200,
    )

    def __init__(self, store):
        super().__init__()
        self.store = store

    async def on_submit(self, interaction: discord.Interaction):
        sid = str(self.session_id.value).strip()
        self.store.set_session(interaction.user.id, sid)
        log.info("Linked identity session for user=%s", interaction.user.id)

        e = make_embed(
            title="✅ Signed in",
            description="You can now use **/challenge**, **/quota** and **/history**.",
            footer="Tip: use /signout to unlink it anytime.",
        )
        await interaction.response.send_message(embed=e, ephemeral=True)
