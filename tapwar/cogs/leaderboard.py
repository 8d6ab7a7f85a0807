"""
Leaderboard cog - live country standings

Shows the leaderboard and keeps every open leaderboard message fresh. One
polling task serves all open messages; it starts with the first one and
stops once none are left.
"""

from typing import Optional, Set

import discord
from discord import app_commands
from discord.ext import commands, tasks

from tapwar.config import Config
from tapwar.data_models.leaderboard import RankCriterion
from tapwar.services.leaderboard import LeaderboardService
from tapwar.utils.logger import setup_logger
from tapwar.views.leaderboard import LeaderboardView

logger = setup_logger(__name__)


class LeaderboardCog(commands.Cog):
    """Leaderboard display and polling"""

    def __init__(self, bot):
        self.bot = bot
        self.leaderboard_service = LeaderboardService(bot.backend)
        self.live_views: Set[LeaderboardView] = set()
        self._poll_stopping = False
        self.logger = logger

    def cog_unload(self):
        self.poll_leaderboard.cancel()
        for view in list(self.live_views):
            view.stop()
        self.live_views.clear()

    def track(self, view: LeaderboardView):
        self.live_views.add(view)
        if not self.poll_leaderboard.is_running():
            self.poll_leaderboard.start()
            self.logger.info("Leaderboard polling started")
        elif self._poll_stopping:
            # stop() lets the current task run one more sleep before exiting
            self.poll_leaderboard.get_task().add_done_callback(self._resume_polling)
        self._poll_stopping = False

    def untrack(self, view: LeaderboardView):
        self.live_views.discard(view)
        if not self.live_views and self.poll_leaderboard.is_running():
            self.poll_leaderboard.stop()
            self._poll_stopping = True
            self.logger.info("Leaderboard polling stopped")

    def _resume_polling(self, _task):
        if self.live_views and not self.poll_leaderboard.is_running():
            self.poll_leaderboard.start()
            self.logger.info("Leaderboard polling resumed")

    @app_commands.command(name="leaderboard", description="Show the global country leaderboard")
    @app_commands.describe(mode="Rank by total taps or by taps per player")
    @app_commands.choices(mode=[
        app_commands.Choice(name="Total Taps", value=RankCriterion.TOTAL_TAPS.value),
        app_commands.Choice(name="Intensity", value=RankCriterion.INTENSITY.value),
    ])
    async def leaderboard(self, interaction: discord.Interaction, mode: Optional[app_commands.Choice[str]] = None):
        """Show the leaderboard and keep it refreshed"""
        await interaction.response.defer()

        criterion = RankCriterion(mode.value) if mode else RankCriterion.TOTAL_TAPS
        stored = await self.bot.preference_service.get_stored_country(interaction.user.id)

        # Fetch now so the first render isn't a poll interval behind
        await self.leaderboard_service.refresh()

        view = LeaderboardView(
            self.leaderboard_service,
            criterion,
            stored.country if stored else None,
            on_close=self.untrack
        )
        view.message = await interaction.followup.send(embed=view.build_embed(), view=view, wait=True)
        self.track(view)

    @tasks.loop(seconds=Config.LEADERBOARD_REFRESH_SECONDS)
    async def poll_leaderboard(self):
        """Fetch once, then redraw every open leaderboard"""
        try:
            await self.leaderboard_service.refresh()
            for view in list(self.live_views):
                await view.refresh_message()
        except Exception as e:
            self.logger.error(f"Error in leaderboard polling task: {e}", exc_info=True)

    @poll_leaderboard.before_loop
    async def before_poll_leaderboard(self):
        await self.bot.wait_until_ready()


async def setup(bot):
    await bot.add_cog(LeaderboardCog(bot))
