from typing import List

import discord

from codechallenge.constants import DIFFICULTY_LABELS
from codechallenge.models.challenge import Challenge
from codechallenge.services.evaluation import AnswerState, is_correct, option_style
from codechallenge.utils.discord_ui import OPTION_LABELS, button_style
from codechallenge.utils.embeds import ellipsize

QUESTION_MAX = 1000
OPTION_MAX = 200
EXPLANATION_MAX = 1000


def _one_line(text: str) -> str:
    return " ".join((text or "").split())


def options_block(challenge: Challenge) -> str:
    lines: List[str] = []
    for i, option in enumerate(challenge.options):
        lines.append(f"**{OPTION_LABELS[i]}.**  {ellipsize(_one_line(option), OPTION_MAX)}")
    return "\n".join(lines) or "-"


def result_line(challenge: Challenge, answer: AnswerState) -> str:
    verdict = is_correct(challenge, answer)
    if verdict is None:
        return ""
    correct_label = OPTION_LABELS[challenge.correct_answer_id]
    if verdict:
        return f"✅ **Correct** ({correct_label})"
    return f"❌ **Wrong** - Correct: **{correct_label}**"


def add_challenge_fields(e: discord.Embed, challenge: Challenge, answer: AnswerState) -> discord.Embed:
    difficulty = DIFFICULTY_LABELS.get(challenge.difficulty, challenge.difficulty or "-")
    e.add_field(name="Difficulty", value=difficulty, inline=True)
    e.add_field(
        name="Challenge",
        value=ellipsize(challenge.title, QUESTION_MAX) or "-",
        inline=False,
    )
    e.add_field(name="Options", value=options_block(challenge), inline=False)

    verdict = result_line(challenge, answer)
    if verdict:
        e.add_field(name="Result", value=verdict, inline=False)

    if answer.explanation_visible:
        e.add_field(
            name="Explanation",
            value=ellipsize(challenge.explanation, EXPLANATION_MAX) or "-",
            inline=False,
        )
    return e


def style_answer_buttons(buttons, challenge: Challenge | None, answer: AnswerState) -> None:
    n = len(challenge.options) if challenge else 0
    for i, btn in enumerate(buttons):
        btn.disabled = challenge is None or i >= n or answer.answered
        if challenge is None or i >= n:
            btn.style = discord.ButtonStyle.secondary
        else:
            btn.style = button_style(option_style(challenge, answer, i))
