from datetime import timedelta
from typing import Optional

import discord

from codechallenge.services.evaluation import CORRECT, INCORRECT, NEUTRAL

OPTION_LABELS = ("A", "B", "C", "D")

BUTTON_STYLES = {
    NEUTRAL: discord.ButtonStyle.secondary,
    CORRECT: discord.ButtonStyle.success,
    INCORRECT: discord.ButtonStyle.danger,
}


def button_style(option_style: str) -> discord.ButtonStyle:
    return BUTTON_STYLES.get(option_style, discord.ButtonStyle.secondary)


def pretty_bar(current_1based: int, total: int, width: int = 12, max_width: int = 12) -> str:
    if total <= 0:
        return ""

    w = min(width, max_width)
    w = max(3, min(int(w), 16))

    current = max(0, min(int(current_1based), int(total)))
    ratio = current / total if total else 0.0
    filled = int(round(ratio * w))
    filled = max(0, min(filled, w))

    return f"[{'#' * filled + '-' * (w - filled)}]"


def human_delta(delta: Optional[timedelta]) -> str:
    if delta is None:
        return "-"
    total = max(0, int(delta.total_seconds()))
    hours, rem = divmod(total, 3600)
    minutes = rem // 60
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"


async def silent_ack(interaction: discord.Interaction) -> None:
    try:
        if not interaction.response.is_done():
            await interaction.response.defer()
    except discord.HTTPException:
        pass


async def internal_error(interaction: discord.Interaction) -> None:
    if not interaction.response.is_done():
        await interaction.response.send_message("❌ Internal error.", ephemeral=True)


async def not_yours(interaction: discord.Interaction, what: str = "challenge") -> None:
    await interaction.response.send_message(f"❌ This {what} is not yours.", ephemeral=True)

