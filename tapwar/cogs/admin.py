"""
Admin cog - owner-only maintenance commands
"""

from datetime import datetime, timezone

import discord
from discord import app_commands
from discord.ext import commands

from tapwar.config import Config
from tapwar.ui.admin_confirmation_modal import AdminConfirmationModal
from tapwar.utils.backend_exceptions import TapWarException
from tapwar.utils.error_embeds import ErrorEmbeds
from tapwar.utils.logger import setup_logger

logger = setup_logger(__name__)


class AdminCog(commands.Cog):
    """Administrative commands (owner only)"""

    def __init__(self, bot):
        self.bot = bot

    @app_commands.command(
        name="admin-reset-stats",
        description="Wipe all battles, country stats and user taps (Owner only)"
    )
    async def admin_reset_stats(self, interaction: discord.Interaction):
        """Reset every backend table after typed confirmation"""
        if interaction.user.id != Config.OWNER_DISCORD_ID:
            await interaction.response.send_message(embed=ErrorEmbeds.permission_denied(), ephemeral=True)
            return

        modal = AdminConfirmationModal(
            title="Reset ALL TapWar Stats",
            phrase="RESET",
            on_confirmed=self._do_reset
        )
        await interaction.response.send_modal(modal)

    async def _do_reset(self, interaction: discord.Interaction):
        await interaction.response.defer(ephemeral=True)
        logger.warning(f"Stats reset requested by {interaction.user.id}")

        try:
            cleared = await self.bot.backend.reset_all_stats()
        except TapWarException as e:
            logger.error(f"Stats reset failed: {e}")
            await interaction.followup.send(embed=ErrorEmbeds.backend_error(e), ephemeral=True)
            return

        embed = discord.Embed(
            title="✅ Reset Complete",
            description="Cleared: " + ", ".join(f"`{table}`" for table in cleared),
            color=discord.Color.green(),
            timestamp=datetime.now(timezone.utc)
        )
        await interaction.followup.send(embed=embed, ephemeral=True)

    @commands.command(name="shutdown")
    @commands.is_owner()
    async def shutdown(self, ctx):
        """Flush tap sessions and stop the bot"""
        await ctx.send("👋 Shutting down TapWar...")
        await self.bot.close()


async def setup(bot):
    await bot.add_cog(AdminCog(bot))
