import asyncio
import logging
from typing import List, Optional

import discord

from codechallenge.constants import AI_FOOTER, DIFFICULTY_LABELS
from codechallenge.models.challenge import Challenge
from codechallenge.services.evaluation import AnswerState, initial_state, select
from codechallenge.services.session import ChallengeSession, SessionState
from codechallenge.utils.discord_ui import OPTION_LABELS, human_delta, not_yours, silent_ack
from codechallenge.utils.embeds import difficulty_color, ellipsize
from codechallenge.views.challenge_card import add_challenge_fields, style_answer_buttons
from codechallenge.views.components.challenge_buttons import (
    GENERATE_LABEL,
    GENERATING_LABEL,
    AnswerButton,
    DifficultySelect,
    GenerateButton,
)

log = logging.getLogger(__name__)


def quota_lines(session: ChallengeSession) -> List[str]:
    lines = [f"Challenges remaining today: **{session.quota_remaining}**"]
    if session.quota is not None and session.quota_remaining == 0 and session.next_reset:
        lines.append(
            f"Next reset: {discord.utils.format_dt(session.next_reset, 'f')} "
            f"(in {human_delta(session.time_until_reset())})"
        )
    return lines


def generator_embed(
    session: ChallengeSession,
    answer: AnswerState,
    *,
    generating: bool = False,
) -> discord.Embed:
    current = session.current_challenge
    e = discord.Embed(
        title="🧩 Coding Challenge Generator",
        color=difficulty_color(current.difficulty if current else session.difficulty),
    )

    status = DIFFICULTY_LABELS.get(session.difficulty, session.difficulty)
    desc = quota_lines(session) + ["", f"**Selected difficulty:** {status}"]
    if generating or session.state is SessionState.GENERATING:
        desc.append("⏳ Generating your challenge…")
    elif session.state is SessionState.BLOCKED:
        desc.append("🔒 Daily quota used up. Come back after the reset.")
    e.description = "\n".join(desc)

    if session.last_error:
        e.add_field(name="Error", value=ellipsize(session.last_error, 1000), inline=False)

    if session.current_challenge is not None:
        add_challenge_fields(e, session.current_challenge, answer)

    e.set_footer(text=AI_FOOTER)
    return e


class GeneratorView(discord.ui.View):
    """
    One generator screen = one ChallengeSession.

    Row 0: difficulty select, row 1: A-D answers, row 2: generate.
    """

    def __init__(self, *, session: ChallengeSession, owner_id: int):
        super().__init__(timeout=1200)

        self.session = session
        self.owner_id = owner_id
        self.answer: AnswerState = initial_state()

        self._shown: Optional[Challenge] = None
        self._message: Optional[discord.Message] = None
        self._lock = asyncio.Lock()
        self._generating = False

        self.difficulty_select = DifficultySelect(session.difficulty)
        self.difficulty_select.row = 0
        self.add_item(self.difficulty_select)

        self.answer_buttons: List[AnswerButton] = []
        for i, label in enumerate(OPTION_LABELS):
            btn = AnswerButton(label=label, idx=i)
            btn.row = 1
            self.answer_buttons.append(btn)
            self.add_item(btn)

        self.generate_button = GenerateButton()
        self.generate_button.row = 2
        self.add_item(self.generate_button)

        self.refresh()

    # -----------------------------
    # helpers / guards
    # -----------------------------
    def _is_owner(self, interaction: discord.Interaction) -> bool:
        return getattr(interaction.user, "id", None) == self.owner_id

    def attach_message(self, message: discord.Message) -> None:
        self._message = message

    def refresh(self, *, generating: bool = False) -> None:
        s = self.session

        # a new challenge gets a fresh, unanswered selection state
        if s.current_challenge is not self._shown:
            self._shown = s.current_challenge
            self.answer = initial_state()

        in_flight = generating or self._generating or s.state is SessionState.GENERATING
        busy = in_flight or s.pending
        self.difficulty_select.disabled = busy or s.closed
        self.difficulty_select.mark_current(s.difficulty)

        self.generate_button.disabled = busy or not s.can_generate
        self.generate_button.label = GENERATING_LABEL if in_flight else GENERATE_LABEL

        style_answer_buttons(self.answer_buttons, s.current_challenge, self.answer)

    def build_embed(self, *, generating: bool = False) -> discord.Embed:
        return generator_embed(self.session, self.answer, generating=generating)

    async def _edit(self, interaction: discord.Interaction, *, embed: discord.Embed) -> None:
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
            log.warning("Could not update generator message")

    # -----------------------------
    # interactions
    # -----------------------------
    async def choose_difficulty(self, interaction: discord.Interaction, value: str) -> None:
        if not self._is_owner(interaction):
            return await not_yours(interaction)

        try:
            self.session.select_difficulty(value)
        except ValueError:
            log.warning("Unknown difficulty from select: %r", value)

        self.refresh()
        await self._edit(interaction, embed=self.build_embed())

    async def generate(self, interaction: discord.Interaction) -> None:
        if not self._is_owner(interaction):
            return await not_yours(interaction)

        if self._generating or not self.session.can_generate:
            # double click while a request is in flight
            await silent_ack(interaction)
            return

        # claimed before the first await so a second click is rejected
        self._generating = True
        try:
            self.refresh()
            await self._edit(interaction, embed=self.build_embed(generating=True))
            challenge = await self.session.generate()
        finally:
            self._generating = False

        if self.session.closed:
            return

        self.refresh()
        await self._edit(interaction, embed=self.build_embed())

        if challenge is not None:
            await self.session.settle()
            if not self.session.closed:
                self.refresh()
                await self._edit(interaction, embed=self.build_embed())

    async def pick(self, interaction: discord.Interaction, idx: int) -> None:
        if not self._is_owner(interaction):
            return await not_yours(interaction)

        async with self._lock:
            challenge = self.session.current_challenge
            if challenge is None or self.answer.answered:
                await silent_ack(interaction)
                return

            self.answer = select(self.answer, idx, option_count=len(challenge.options))
            log.debug(
                "Answer picked idx=%s correct=%s", idx, idx == challenge.correct_answer_id
            )
            self.refresh()
            await self._edit(interaction, embed=self.build_embed())

    async def on_timeout(self):
        self.session.close()
        for item in self.children:
            item.disabled = True
        if self._message:
            try:
                await self._message.edit(view=self)
            except discord.HTTPException:
                pass
