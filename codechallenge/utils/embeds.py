from typing import Any, Dict, List, Optional

import discord

from codechallenge.services.errors import AuthError, ChallengeError, QuotaExceededError

TITLE_MAX = 256
DESCRIPTION_MAX = 4096
FIELD_NAME_MAX = 256
FIELD_VALUE_MAX = 1024
FOOTER_MAX = 2048
MAX_FIELDS = 25

DIFFICULTY_COLORS = {
    "easy": discord.Color.green(),
    "medium": discord.Color.gold(),
    "hard": discord.Color.red(),
}


def ellipsize(s: str, max_len: int) -> str:
    s = (s or "").strip()
    if max_len <= 0:
        return ""
    if len(s) <= max_len:
        return s
    return s[: max_len - 1].rstrip() + "…"


def difficulty_color(difficulty: Optional[str]) -> discord.Color:
    return DIFFICULTY_COLORS.get(difficulty or "", discord.Color.blurple())


def make_embed(
    title: str,
    description: str = "",
    *,
    footer: str = "",
    fields: Optional[List[Dict[str, Any]]] = None,
    color: Optional[discord.Color] = None,
) -> discord.Embed:
    e = discord.Embed(
        title=ellipsize(title, TITLE_MAX),
        description=ellipsize(description, DESCRIPTION_MAX),
        color=color or discord.Color.dark_grey(),
        timestamp=discord.utils.utcnow(),
    )

    for f in (fields or [])[:MAX_FIELDS]:
        e.add_field(
            name=ellipsize(str(f.get("name", "")), FIELD_NAME_MAX) or "-",
            value=ellipsize(str(f.get("value", "")), FIELD_VALUE_MAX) or "-",
            inline=bool(f.get("inline", False)),
        )

    if footer:
        e.set_footer(text=ellipsize(footer, FOOTER_MAX))
    return e


async def reply_embed(
    interaction: discord.Interaction,
    *,
    title: str,
    description: str = "",
    footer: str = "",
    fields: Optional[List[Dict[str, Any]]] = None,
    color: Optional[discord.Color] = None,
    ephemeral: bool = False,
) -> None:
    e = make_embed(title=title, description=description, footer=footer, fields=fields, color=color)
    if interaction.response.is_done():
        await interaction.followup.send(embed=e, ephemeral=ephemeral)
    else:
        await interaction.response.send_message(embed=e, ephemeral=ephemeral)


async def reply_error(
    interaction: discord.Interaction,
    message: str,
    *,
    hint: str = "",
    ephemeral: bool = True,
) -> None:
    fields = [{"name": "Error", "value": message, "inline": False}]
    if hint:
        fields.append({"name": "Hint", "value": hint, "inline": False})
    await reply_embed(
        interaction,
        title="⚠️ Something went wrong",
        fields=fields,
        color=discord.Color.red(),
        footer="If this keeps happening, the challenge service may be down.",
        ephemeral=ephemeral,
    )


async def reply_api_error(
    interaction: discord.Interaction,
    err: ChallengeError,
    *,
    fallback: str,
    sign_in_hint: str = "",
) -> None:
    """Render a pipeline failure; auth failures point the user at /signin."""
    if isinstance(err, AuthError):
        await reply_error(interaction, str(err), hint=sign_in_hint)
    elif isinstance(err, QuotaExceededError):
        await reply_error(interaction, str(err), hint="Your quota resets 24h after the last reset.")
    else:
        await reply_error(interaction, str(err) or fallback)
