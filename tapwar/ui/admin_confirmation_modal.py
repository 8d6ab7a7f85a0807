"""
Typed confirmation for destructive owner commands.

The owner must type an exact phrase before the wrapped operation runs;
anything else cancels it.
"""

import logging
from typing import Awaitable, Callable

import discord

from tapwar.utils.error_embeds import ErrorEmbeds

logger = logging.getLogger(__name__)

ConfirmedAction = Callable[[discord.Interaction], Awaitable[None]]


class AdminConfirmationModal(discord.ui.Modal):
    """Runs `on_confirmed` only when the typed phrase matches exactly."""

    def __init__(self, title: str, phrase: str, on_confirmed: ConfirmedAction, timeout: float = 300):
        super().__init__(title=title, timeout=timeout)
        self.phrase = phrase
        self.on_confirmed = on_confirmed
        self.answer = discord.ui.TextInput(
            label=f'Type "{phrase}" to confirm',
            placeholder=phrase,
            min_length=len(phrase),
            max_length=len(phrase) + 10
        )
        self.add_item(self.answer)

    def is_confirmed(self) -> bool:
        return self.answer.value.strip() == self.phrase

    async def on_submit(self, interaction: discord.Interaction):
        if not self.is_confirmed():
            logger.info(f"Confirmation for '{self.title}' rejected for {interaction.user.id}")
            await interaction.response.send_message(
                embed=ErrorEmbeds.command_error(
                    f"You typed `{self.answer.value.strip()}` instead of `{self.phrase}`. Nothing was changed."
                ),
                ephemeral=True
            )
            return

        logger.warning(f"'{self.title}' confirmed by {interaction.user.id}")
        await self.on_confirmed(interaction)

    async def on_error(self, interaction: discord.Interaction, error: Exception):
        logger.error(f"Confirmation modal '{self.title}' failed: {error}", exc_info=error)
        embed = ErrorEmbeds.command_error("The operation failed before completing. Check the logs.")
        if interaction.response.is_done():
            await interaction.followup.send(embed=embed, ephemeral=True)
        else:
            await interaction.response.send_message(embed=embed, ephemeral=True)
