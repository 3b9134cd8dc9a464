import discord

from codechallenge.constants import DIFFICULTY_LABELS
from codechallenge.models.challenge import DIFFICULTIES
from codechallenge.utils.discord_ui import internal_error

GENERATE_LABEL = "Generate Challenge"
GENERATING_LABEL = "Generating..."


class AnswerButton(discord.ui.Button):
    def __init__(self, label: str, idx: int):
        super().__init__(label=label, style=discord.ButtonStyle.secondary)
        self.idx = idx

    async def callback(self, interaction: discord.Interaction):
        view = self.view
        if not view or not hasattr(view, "pick"):
            return await internal_error(interaction)
        await view.pick(interaction, self.idx)


class GenerateButton(discord.ui.Button):
    def __init__(self):
        super().__init__(label=GENERATE_LABEL, style=discord.ButtonStyle.primary)

    async def callback(self, interaction: discord.Interaction):
        view = self.view
        if not view or not hasattr(view, "generate"):
            return await internal_error(interaction)
        await view.generate(interaction)


class DifficultySelect(discord.ui.Select):
    def __init__(self, current: str):
        options = [
            discord.SelectOption(
                label=DIFFICULTY_LABELS.get(d, d), value=d, default=(d == current)
            )
            for d in DIFFICULTIES
        ]
        super().__init__(
            placeholder="Select Difficulty",
            min_values=1,
            max_values=1,
            options=options,
        )

    def mark_current(self, current: str) -> None:
        for option in self.options:
            option.default = option.value == current

    async def callback(self, interaction: discord.Interaction):
        view = self.view
        if not view or not hasattr(view, "choose_difficulty"):
            return await internal_error(interaction)
        await view.choose_difficulty(interaction, self.values[0])


class BackButton(discord.ui.Button):
    def __init__(self):
        super().__init__(label="⬅ Back", style=discord.ButtonStyle.secondary)

    async def callback(self, interaction: discord.Interaction):
        view = self.view
        if not view or not hasattr(view, "go_back"):
            return await internal_error(interaction)
        await view.go_back(interaction)


class NextButton(discord.ui.Button):
    def __init__(self):
        super().__init__(label="Next ➜", style=discord.ButtonStyle.secondary)

    async def callback(self, interaction: discord.Interaction):
        view = self.view
        if not view or not hasattr(view, "go_next"):
            return await internal_error(interaction)
        await view.go_next(interaction)


class RetryButton(discord.ui.Button):
    def __init__(self):
        super().__init__(label="Retry", style=discord.ButtonStyle.danger)

    async def callback(self, interaction: discord.Interaction):
        view = self.view
        if not view or not hasattr(view, "retry"):
            return await internal_error(interaction)
        await view.retry(interaction)
