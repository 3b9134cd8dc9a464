from __future__ import annotations

import discord

LOADING_TEXT = {
    "challenge": "🧩 Checking your quota…",
    "history": "📜 Loading history…",
    "default": "⚙️ Working…",
}


async def start_loading(interaction: discord.Interaction, kind: str = "default") -> discord.Message | None:
    text = LOADING_TEXT.get(kind, LOADING_TEXT["default"])
    try:
        return await interaction.followup.send(text, ephemeral=True)
    except discord.HTTPException:
        return None


async def stop_loading(msg: discord.Message | None) -> None:
    if not msg:
        return
    try:
        await msg.delete()
    except discord.HTTPException:
        pass
