"""
Centralized error embeds for consistent error handling across the TapWar bot.
"""

import discord

from tapwar.utils.backend_exceptions import TapWarException


class ErrorEmbeds:
    """Error embed factory; every user-facing failure goes through here."""
    
    @staticmethod
    def _error(title: str, description: str, color: discord.Color = None) -> discord.Embed:
        return discord.Embed(title=title, description=description, color=color or discord.Color.red())
    
    @staticmethod
    def country_not_set() -> discord.Embed:
        """Shown when a user taps before joining a side."""
        return ErrorEmbeds._error(
            "Country Not Set",
            "You need to join a country before tapping!\n\n"
            "Pick one below, or use `/country` or `/country-detect`."
        )
    
    @staticmethod
    def unknown_country(code: str) -> discord.Embed:
        return ErrorEmbeds._error("Unknown Country", f"`{code}` is not a valid two-letter country code.")
    
    @staticmethod
    def geolocation_failed() -> discord.Embed:
        return ErrorEmbeds._error(
            "Couldn't Detect Your Country",
            "Automatic detection failed. Pick your country from the menu below.",
            discord.Color.orange()
        )
    
    @staticmethod
    def backend_error(error: TapWarException) -> discord.Embed:
        """Shown when a backend or lookup call fails; uses the exception's user_message."""
        return ErrorEmbeds._error("Battle Server Error", error.user_message, discord.Color.orange())
    
    @staticmethod
    def command_error(error: str) -> discord.Embed:
        return ErrorEmbeds._error(
            "Command Error",
            f"An error occurred: {error}\n\nPlease try again or contact the bot owner."
        )
    
    @staticmethod
    def permission_denied() -> discord.Embed:
        return ErrorEmbeds._error("Permission Denied", "This command is restricted to the bot owner.")
