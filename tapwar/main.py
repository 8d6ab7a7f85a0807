import asyncio
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from tapwar.config import Config
from tapwar.database.database import Database
from tapwar.services.backend import BackendClient
from tapwar.services.geolocation import GeolocationService
from tapwar.services.preferences import PreferenceService
from tapwar.services.rate_limiter import SimpleRateLimiter
from tapwar.services.tap_session import TapSessionService
from tapwar.utils.backend_exceptions import TapWarException
from tapwar.utils.error_embeds import ErrorEmbeds
from tapwar.utils.logger import setup_logger

logger = setup_logger('tapwar.main')

COGS = (
    'tapwar.cogs.battle',
    'tapwar.cogs.leaderboard',
    'tapwar.cogs.country',
    'tapwar.cogs.admin',
)


class TapWarBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        intents.message_content = True  # for the !shutdown prefix command

        super().__init__(
            command_prefix=Config.COMMAND_PREFIX,
            intents=intents,
            help_command=None,
            owner_id=Config.OWNER_DISCORD_ID or None
        )
        self.tree.on_error = self.on_app_command_error

        # Nothing here touches the network until first use
        self.backend = BackendClient()
        self.geolocation = GeolocationService()
        self.rate_limiter = SimpleRateLimiter()

        self.db: Optional[Database] = None
        self.preference_service: Optional[PreferenceService] = None
        self.tap_service: Optional[TapSessionService] = None

    async def setup_hook(self):
        logger.info("Setting up TapWar Bot...")
        await self._init_services()

        for cog in COGS:
            try:
                await self.load_extension(cog)
                logger.info(f"Loaded cog: {cog}")
            except Exception as e:
                logger.error(f"Failed to load cog {cog}: {e}", exc_info=True)

        await self._sync_commands()
        logger.info("TapWar Bot setup complete!")

    async def _init_services(self):
        self.db = Database()
        await self.db.initialize()
        self.preference_service = PreferenceService(self.db.session_factory)
        self.tap_service = TapSessionService(self.preference_service, self.backend)

    async def _sync_commands(self):
        """Sync slash commands to the configured guilds, or globally"""
        if not self.tree.get_commands():
            logger.warning("No application commands registered; check the cog load errors above")
            return

        try:
            guild_ids = Config.get_guild_ids()
        except ValueError as e:
            logger.error(f"Not syncing commands: {e}")
            return

        if not guild_ids:
            # Global commands can take up to an hour to show up
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} command(s) globally")
            return

        for guild_id in guild_ids:
            guild = discord.Object(id=guild_id)
            self.tree.copy_global_to(guild=guild)
            try:
                synced = await self.tree.sync(guild=guild)
            except discord.Forbidden:
                logger.error(f"Missing applications.commands scope in guild {guild_id}")
            except discord.HTTPException as e:
                logger.error(f"Syncing to guild {guild_id} failed with {e.status}: {e.text}")
            else:
                logger.info(f"Synced {len(synced)} command(s) to guild {guild_id}")

    async def on_ready(self):
        logger.info(f'{self.user} connected to Discord, in {len(self.guilds)} guild(s)')
        await self.change_presence(activity=discord.Game(name="TapWar | /tap to fight!"))

    async def on_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        """Reply to every failed slash command with an error embed"""
        command_name = interaction.command.name if interaction.command else 'unknown'
        cause = error.original if isinstance(error, app_commands.CommandInvokeError) else error

        if isinstance(cause, TapWarException):
            logger.warning(f"/{command_name} by {interaction.user.id} failed: {cause}")
            embed = ErrorEmbeds.backend_error(cause)
        elif isinstance(cause, app_commands.CommandOnCooldown):
            embed = ErrorEmbeds.command_error(f"Command is on cooldown. Try again in {cause.retry_after:.0f}s.")
        elif isinstance(cause, app_commands.CheckFailure):
            logger.info(f"Permission denied for /{command_name} by {interaction.user.id}")
            embed = ErrorEmbeds.permission_denied()
        else:
            logger.error(f"Unhandled error in /{command_name}: {cause}", exc_info=cause)
            embed = ErrorEmbeds.command_error("An unexpected error occurred while processing your command.")

        try:
            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException as e:
            logger.error(f"Could not deliver error reply for /{command_name}: {e}")

    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError):
        if isinstance(error, commands.CommandNotFound):
            return
        if isinstance(error, commands.CheckFailure):
            await ctx.send(embed=ErrorEmbeds.permission_denied())
            return
        logger.error(f"Unhandled error in {ctx.command}: {error}", exc_info=error)
        await ctx.send(embed=ErrorEmbeds.command_error("An unexpected error occurred while processing your command."))

    async def close(self):
        """Flush open tap sessions before disconnecting"""
        logger.info("Shutting down TapWar Bot...")
        if self.tap_service:
            await self.tap_service.close()
        await self.backend.close()
        await self.geolocation.close()
        if self.db:
            await self.db.close()
        await super().close()


async def main():
    Config.validate()
    async with TapWarBot() as bot:
        await bot.start(Config.DISCORD_TOKEN)


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")


if __name__ == "__main__":
    run()
