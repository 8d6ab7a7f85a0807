"""
Bot-wide constants for the TapWar Discord bot.

This module contains the fixed tables and display values used throughout
the codebase to improve maintainability and clarity.
"""

class BackendConstants:
    """Constants describing the hosted backend's REST surface."""
    
    BATTLES_TABLE = "battles"
    LEADERBOARD_VIEW = "current_leaderboard"
    INCREMENT_RPC = "increment_country_taps"
    
    # Tables cleared by the administrative reset, in dependency order
    RESET_TABLES = ("user_taps", "country_stats", "battles")
    
    # 201 = created, 409 = already exists
    BATTLE_CREATE_OK_STATUSES = (201, 409)

class CountryConstants:
    """Countries offered for manual selection."""
    
    KNOWN_COUNTRIES = {
        "US": "United States",
        "IL": "Israel",
        "IN": "India",
        "GB": "United Kingdom",
        "CA": "Canada",
        "AU": "Australia",
        "DE": "Germany",
        "FR": "France",
        "BR": "Brazil",
        "MX": "Mexico",
    }
    
    # Offset from 'A' to the regional indicator symbol letter A
    FLAG_CODEPOINT_BASE = 127397

class UIConstants:
    """Constants for Discord UI elements."""
    
    # Embed colors
    DEFAULT_EMBED_COLOR = 0x3498db  # Blue
    GOLD_RANK_COLOR = 0xffd700     # Gold for the #1 country
    ERROR_COLOR = 0xe74c3c         # Red for errors
    SUCCESS_COLOR = 0x2ecc71       # Green for success
    LIVE_COLOR = 0xe67e22          # Orange while a battle is live
    
    # Emoji for UI elements
    TAP_EMOJI = "👆"
    TROPHY_EMOJI = "🏆"
    FIRE_EMOJI = "🔥"
    SWORDS_EMOJI = "⚔️"
    
    # View timeouts (seconds)
    TAP_VIEW_TIMEOUT = 600
    LEADERBOARD_VIEW_TIMEOUT = 300
    COUNTRY_VIEW_TIMEOUT = 120
