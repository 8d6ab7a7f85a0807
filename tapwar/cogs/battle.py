"""
Battle cog - tapping and battle status

Provides the /tap surface, the /battle status command and the hourly
announcement of each new battle.
"""

import discord
from discord import app_commands
from discord.ext import commands, tasks

from tapwar.config import Config
from tapwar.utils.battle_clock import BattleClock
from tapwar.utils.embeds import build_battle_embed, build_tap_embed
from tapwar.utils.error_embeds import ErrorEmbeds
from tapwar.utils.backend_exceptions import CountryNotSetError
from tapwar.utils.logger import setup_logger
from tapwar.views.country import CountrySelectView
from tapwar.views.tap import TapView

logger = setup_logger(__name__)


class BattleCog(commands.Cog):
    """Tap commands and battle announcements"""

    def __init__(self, bot):
        self.bot = bot
        self.logger = logger

    async def cog_load(self):
        if Config.BATTLE_CHANNEL_ID:
            self.announce_battles.start()
            self.logger.info("BattleCog: hourly announcements enabled")

    def cog_unload(self):
        self.announce_battles.cancel()

    @app_commands.command(name="tap", description="Open your tap button and fight for your country")
    async def tap(self, interaction: discord.Interaction):
        """Open a tap surface for the calling user"""
        try:
            accumulator = await self.bot.tap_service.start_session(interaction.user.id)
        except CountryNotSetError:
            await interaction.response.send_message(
                embed=ErrorEmbeds.country_not_set(),
                view=CountrySelectView(self.bot),
                ephemeral=True
            )
            return

        view = TapView(self.bot.tap_service, interaction.user.id)
        await interaction.response.send_message(
            embed=build_tap_embed(accumulator),
            view=view,
            ephemeral=True
        )
        view.message = await interaction.original_response()

    @app_commands.command(name="battle", description="Show the current battle and when the next one starts")
    async def battle(self, interaction: discord.Interaction):
        now = BattleClock.now()
        await interaction.response.send_message(
            embed=build_battle_embed(BattleClock.battle_window(now), now)
        )

    @tasks.loop(hours=1)
    async def announce_battles(self):
        """Post the battle that just started"""
        try:
            channel = self.bot.get_channel(Config.BATTLE_CHANNEL_ID)
            if channel is None:
                self.logger.warning(f"Battle channel {Config.BATTLE_CHANNEL_ID} not found")
                return

            now = BattleClock.now()
            window = BattleClock.battle_window(now)
            embed = build_battle_embed(window, now)
            embed.title = f"A new battle has begun! {embed.title}"
            await channel.send(embed=embed)
            self.logger.info(f"Announced battle {window.battle_id}")
        except Exception as e:
            self.logger.error(f"Error in battle announcement task: {e}", exc_info=True)

    @announce_battles.before_loop
    async def before_announce_battles(self):
        """Line the loop up with the top of the next hour"""
        await self.bot.wait_until_ready()
        now = BattleClock.now()
        self.logger.info(f"First battle announcement in {BattleClock.seconds_until_next_battle(now):.0f}s")
        await discord.utils.sleep_until(BattleClock.next_battle_boundary(now))


async def setup(bot):
    await bot.add_cog(BattleCog(bot))
