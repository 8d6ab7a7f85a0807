"""
Tap view: the button users smash to fight for their country.
"""

import logging

import discord
from discord.ui import View, Button

from tapwar.constants import UIConstants
from tapwar.utils.embeds import build_tap_embed
from tapwar.utils.backend_exceptions import TapWarException
from tapwar.utils.error_embeds import ErrorEmbeds

logger = logging.getLogger(__name__)


class TapView(View):
    """Single-user tap surface. Flushes the user's session on timeout."""
    
    def __init__(self, tap_service, owner_id: int, *, timeout: int = UIConstants.TAP_VIEW_TIMEOUT):
        super().__init__(timeout=timeout)
        self.tap_service = tap_service
        self.owner_id = owner_id
        self.message = None
        
        tap_button = Button(
            label="TAP!",
            emoji=UIConstants.TAP_EMOJI,
            style=discord.ButtonStyle.danger,
            custom_id=f"tap:{owner_id}"
        )
        tap_button.callback = self.on_tap
        self.add_item(tap_button)
    
    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.owner_id:
            await interaction.response.send_message(
                "This isn't your tap button! Use `/tap` to get your own.",
                ephemeral=True
            )
            return False
        return True
    
    async def on_tap(self, interaction: discord.Interaction):
        """Count a tap and redraw progress."""
        try:
            _, accumulator = await self.tap_service.tap(self.owner_id)
        except TapWarException as e:
            await interaction.response.send_message(embed=ErrorEmbeds.backend_error(e), ephemeral=True)
            return

        await interaction.response.edit_message(embed=build_tap_embed(accumulator), view=self)
    
    async def on_timeout(self):
        """Persist the lifetime counter and disable the button."""
        try:
            await self.tap_service.end_session(self.owner_id)
        except Exception as e:
            logger.error(f"Failed to flush tap session for {self.owner_id}: {e}", exc_info=True)
        
        for item in self.children:
            item.disabled = True
        if self.message:
            try:
                await self.message.edit(view=self)
            except discord.HTTPException as e:
                logger.debug(f"Could not disable tap view for {self.owner_id}: {e}")
