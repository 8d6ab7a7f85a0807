"""
Leaderboard view components.

Provides the auto-refreshing country leaderboard with Total / Intensity
tabs. The owning cog polls the backend and calls refresh_message() on every
live view.
"""

import logging
from typing import Optional

import discord
from discord.ui import View, Button

from tapwar.constants import UIConstants
from tapwar.data_models.country import Country
from tapwar.data_models.leaderboard import RankCriterion
from tapwar.utils.embeds import build_leaderboard_embed

logger = logging.getLogger(__name__)


class LeaderboardView(View):
    """Leaderboard with criterion tabs."""
    
    def __init__(
        self,
        leaderboard_service,
        criterion: RankCriterion,
        user_country: Optional[Country],
        *,
        on_close=None,
        timeout: int = UIConstants.LEADERBOARD_VIEW_TIMEOUT
    ):
        super().__init__(timeout=timeout)
        self.leaderboard_service = leaderboard_service
        self.criterion = criterion
        self.user_country = user_country
        self.on_close = on_close
        self.message: Optional[discord.Message] = None
        
        self._update_buttons()
    
    def _update_buttons(self):
        """Highlight the active tab."""
        self.clear_items()
        
        for criterion in RankCriterion:
            button = Button(
                label=criterion.label,
                style=discord.ButtonStyle.primary if criterion is self.criterion else discord.ButtonStyle.secondary,
                custom_id=f"leaderboard:{criterion.value}"
            )
            button.callback = self._make_tab_callback(criterion)
            self.add_item(button)
    
    def _make_tab_callback(self, criterion: RankCriterion):
        async def callback(interaction: discord.Interaction):
            self.criterion = criterion
            self._update_buttons()
            await interaction.response.edit_message(embed=self.build_embed(), view=self)
        return callback
    
    def build_embed(self) -> discord.Embed:
        snapshot = self.leaderboard_service.ranked_by(self.criterion)
        return build_leaderboard_embed(snapshot, self.user_country)
    
    async def refresh_message(self):
        """Redraw with the service's latest snapshot."""
        if not self.message:
            return
        try:
            await self.message.edit(embed=self.build_embed(), view=self)
        except discord.NotFound:
            logger.debug("Leaderboard message deleted, stopping its refresh")
            self.stop()
            if self.on_close:
                self.on_close(self)
    
    async def on_timeout(self):
        if self.on_close:
            self.on_close(self)
        for item in self.children:
            item.disabled = True
        if self.message:
            try:
                await self.message.edit(view=self)
            except discord.HTTPException as e:
                logger.debug(f"Could not disable leaderboard view: {e}")
