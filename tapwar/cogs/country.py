"""
Country cog - joining a side

Users either name their country directly or let the bot detect it. A failed
detection always falls back to manual selection.
"""

import discord
from discord import app_commands
from discord.ext import commands

from tapwar.constants import CountryConstants, UIConstants
from tapwar.data_models.country import Country, DetectionMethod
from tapwar.services.rate_limiter import rate_limit
from tapwar.utils.backend_exceptions import GeolocationError
from tapwar.utils.error_embeds import ErrorEmbeds
from tapwar.utils.logger import setup_logger
from tapwar.views.country import CountrySelectView, DetectedCountryView

logger = setup_logger(__name__)


class CountryCog(commands.Cog):
    """Country selection commands"""

    def __init__(self, bot):
        self.bot = bot

    @app_commands.command(name="country", description="Choose the country you tap for")
    @app_commands.describe(code="Two-letter country code, e.g. US or IL")
    async def country(self, interaction: discord.Interaction, code: str):
        """Set the user's country manually"""
        code = code.strip().upper()
        if len(code) != 2 or not code.isalpha():
            await interaction.response.send_message(embed=ErrorEmbeds.unknown_country(code), ephemeral=True)
            return

        country = Country.from_code(code)
        await self.bot.preference_service.save_country(interaction.user.id, country, DetectionMethod.MANUAL)
        await self.bot.tap_service.change_country(interaction.user.id, country)

        embed = discord.Embed(
            title=f"{country.flag} Welcome to team {country.display_name}!",
            description="Use `/tap` to start fighting for your country.",
            color=UIConstants.SUCCESS_COLOR
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    @country.autocomplete('code')
    async def code_autocomplete(self, interaction: discord.Interaction, current: str) -> list[app_commands.Choice[str]]:
        current = current.strip().lower()
        return [
            app_commands.Choice(name=f"{name} ({code})", value=code)
            for code, name in CountryConstants.KNOWN_COUNTRIES.items()
            if current in code.lower() or current in name.lower()
        ][:25]

    @app_commands.command(name="country-detect", description="Detect your country automatically")
    @rate_limit("country-detect", limit=3, window=60)
    async def country_detect(self, interaction: discord.Interaction):
        """Detect the country and ask the user to confirm it"""
        await interaction.response.defer(ephemeral=True)

        try:
            detected = await self.bot.geolocation.detect_country()
        except GeolocationError as e:
            logger.warning(f"Country detection failed for {interaction.user.id}: {e}")
            await interaction.followup.send(
                embed=ErrorEmbeds.geolocation_failed(),
                view=CountrySelectView(self.bot),
                ephemeral=True
            )
            return

        embed = discord.Embed(
            title=f"{detected.flag} Are you in {detected.display_name}?",
            description="Confirm to join their side, or choose manually.",
            color=UIConstants.DEFAULT_EMBED_COLOR
        )
        await interaction.followup.send(embed=embed, view=DetectedCountryView(self.bot, detected), ephemeral=True)


async def setup(bot):
    await bot.add_cog(CountryCog(bot))
