import logging
from typing import List, Optional

import discord

from codechallenge.constants import AI_FOOTER, NO_HISTORY
from codechallenge.services.errors import ChallengeError
from codechallenge.services.evaluation import initial_state
from codechallenge.services.history import HistoryFlow, HistoryItem
from codechallenge.utils.discord_ui import OPTION_LABELS, not_yours, pretty_bar
from codechallenge.utils.embeds import difficulty_color
from codechallenge.views.challenge_card import add_challenge_fields, style_answer_buttons
from codechallenge.views.components.challenge_buttons import (
    AnswerButton,
    BackButton,
    NextButton,
    RetryButton,
)

log = logging.getLogger(__name__)


def history_embed(flow: HistoryFlow, index: int) -> discord.Embed:
    if flow.loading:
        return discord.Embed(title="📜 History", description="Loading history...")

    if flow.error:
        e = discord.Embed(title="📜 History", description=f"⚠️ {flow.error}")
        e.set_footer(text="Press Retry to try again.")
        return e

    if not flow.items:
        return discord.Embed(title="📜 History", description=NO_HISTORY)

    item = flow.items[index]
    total = len(flow.items)
    e = discord.Embed(
        title="📜 History",
        description=f"**Challenge {index + 1}/{total}**",
        color=difficulty_color(item.challenge.difficulty if item.challenge else None),
    )

    if item.challenge is None:
        e.add_field(name="Error", value=item.error or "This challenge could not be displayed.", inline=False)
    else:
        add_challenge_fields(e, item.challenge, item.answer)

    e.set_footer(text=f"{index + 1}/{total} {pretty_bar(index + 1, total, width=10)}\n{AI_FOOTER}")
    return e


class HistoryView(discord.ui.View):
    """Past challenges, one per page, explanations already revealed."""

    def __init__(self, *, flow: HistoryFlow, owner_id: int):
        super().__init__(timeout=900)

        self.flow = flow
        self.owner_id = owner_id
        self.i = 0
        self._message: Optional[discord.Message] = None

        self.answer_buttons: List[AnswerButton] = []
        for i, label in enumerate(OPTION_LABELS):
            btn = AnswerButton(label=label, idx=i)
            btn.row = 0
            self.answer_buttons.append(btn)
            self.add_item(btn)

        self.btn_back = BackButton()
        self.btn_next = NextButton()
        self.btn_retry = RetryButton()
        for btn in (self.btn_back, self.btn_next, self.btn_retry):
            btn.row = 1
            self.add_item(btn)

        self.refresh()

    def attach_message(self, msg: discord.Message) -> None:
        self._message = msg

    def _owner_only(self, interaction: discord.Interaction) -> bool:
        return getattr(interaction.user, "id", None) == self.owner_id

    def current_item(self) -> Optional[HistoryItem]:
        if self.flow.loading or self.flow.error or not self.flow.items:
            return None
        return self.flow.items[self.i]

    def refresh(self) -> None:
        total = len(self.flow.items)
        self.i = max(0, min(self.i, total - 1)) if total else 0

        item = self.current_item()
        browsing = item is not None

        self.btn_back.disabled = not browsing or self.i == 0
        self.btn_next.disabled = not browsing or self.i >= total - 1
        self.btn_retry.disabled = self.flow.loading or not self.flow.error

        challenge = item.challenge if item else None
        answer = item.answer if item else initial_state(show_explanation=True)
        style_answer_buttons(self.answer_buttons, challenge, answer)

    def current_embed(self) -> discord.Embed:
        return history_embed(self.flow, self.i)

    async def _show(self, interaction: discord.Interaction) -> None:
        self.refresh()
        embed = self.current_embed()

        if not interaction.response.is_done():
            try:
                await interaction.response.edit_message(embed=embed, view=self)
                return
            except discord.HTTPException:
                log.debug("edit_message failed, falling back", exc_info=True)

        if self._message:
            try:
                await self._message.edit(embed=embed, view=self)
                return
            except discord.HTTPException:
                log.debug("message.edit failed, falling back", exc_info=True)

        try:
            await interaction.edit_original_response(embed=embed, view=self)
        except discord.HTTPException:
            log.warning("Could not update history message")

    async def pick(self, interaction: discord.Interaction, idx: int) -> None:
        if not self._owner_only(interaction):
            return await not_yours(interaction, "history")

        item = self.current_item()
        if item is not None:
            item.pick(idx)
        await self._show(interaction)

    async def go_next(self, interaction: discord.Interaction) -> None:
        if not self._owner_only(interaction):
            return await not_yours(interaction, "history")
        self.i += 1
        await self._show(interaction)

    async def go_back(self, interaction: discord.Interaction) -> None:
        if not self._owner_only(interaction):
            return await not_yours(interaction, "history")
        self.i -= 1
        await self._show(interaction)

    async def retry(self, interaction: discord.Interaction) -> None:
        if not self._owner_only(interaction):
            return await not_yours(interaction, "history")

        if self.flow.loading:
            await interaction.response.defer()
            return

        # loading screen first
        self.flow.loading = True
        try:
            await self._show(interaction)
            await self.flow.retry()
        except ChallengeError:
            # already stored on the flow and logged
            pass
        finally:
            self.flow.loading = False

        self.i = 0
        await self._show(interaction)

    async def on_timeout(self):
        for item in self.children:
            item.disabled = True
        if self._message:
            try:
                await self._message.edit(view=self)
            except discord.HTTPException:
                pass
