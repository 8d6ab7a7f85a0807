"""
Country selection components.

Covers both paths to a confirmed country: confirming an automatically
detected one, or picking one manually from the known list.
"""

import logging

import discord
from discord.ui import View, Button, Select

from tapwar.constants import CountryConstants, UIConstants
from tapwar.data_models.country import Country, DetectionMethod

logger = logging.getLogger(__name__)


async def confirm_country(bot, interaction: discord.Interaction, country: Country, method: DetectionMethod):
    """Save the user's country and point any live tap session at it."""
    await bot.preference_service.save_country(interaction.user.id, country, method)
    await bot.tap_service.change_country(interaction.user.id, country)

    embed = discord.Embed(
        title=f"{country.flag} Welcome to team {country.display_name}!",
        description="Use `/tap` to start fighting for your country.",
        color=UIConstants.SUCCESS_COLOR
    )
    await interaction.response.edit_message(embed=embed, view=None)


class CountrySelect(Select):
    """Dropdown of the countries offered for manual selection."""

    def __init__(self, bot):
        self.bot = bot
        options = [
            discord.SelectOption(
                label=name,
                value=code,
                emoji=Country(code, name).flag
            )
            for code, name in CountryConstants.KNOWN_COUNTRIES.items()
        ]
        super().__init__(
            placeholder="Choose your country...",
            options=options,
            custom_id="country:select"
        )

    async def callback(self, interaction: discord.Interaction):
        country = Country.from_code(self.values[0])
        await confirm_country(self.bot, interaction, country, DetectionMethod.MANUAL)
        self.view.stop()


class CountrySelectView(View):
    """Manual selection fallback."""

    def __init__(self, bot, *, timeout: int = UIConstants.COUNTRY_VIEW_TIMEOUT):
        super().__init__(timeout=timeout)
        self.add_item(CountrySelect(bot))


class DetectedCountryView(View):
    """Confirm an automatically detected country or switch to manual selection."""

    def __init__(self, bot, detected: Country, *, timeout: int = UIConstants.COUNTRY_VIEW_TIMEOUT):
        super().__init__(timeout=timeout)
        self.bot = bot
        self.detected = detected

    @discord.ui.button(label="That's me!", style=discord.ButtonStyle.success)
    async def confirm(self, interaction: discord.Interaction, button: Button):
        await confirm_country(self.bot, interaction, self.detected, DetectionMethod.IP)
        self.stop()

    @discord.ui.button(label="Choose manually", style=discord.ButtonStyle.secondary)
    async def choose_manually(self, interaction: discord.Interaction, button: Button):
        embed = discord.Embed(
            title="Pick Your Country",
            description="Select the country you want to fight for.",
            color=UIConstants.DEFAULT_EMBED_COLOR
        )
        await interaction.response.edit_message(embed=embed, view=CountrySelectView(self.bot))
        self.stop()
