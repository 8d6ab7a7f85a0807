"""
Services package for the TapWar bot.

Backend and geolocation clients talk HTTP; the preference and tap session
services sit on the local preference store.
"""

from .base import BaseService
from .rate_limiter import SimpleRateLimiter
from .backend import BackendClient, LeaderboardRow
from .geolocation import GeolocationService
from .preferences import PreferenceService
from .leaderboard import LeaderboardService
from .tap_session import TapSessionService

__all__ = [
    'BaseService',
    'SimpleRateLimiter',
    'BackendClient',
    'LeaderboardRow',
    'GeolocationService',
    'PreferenceService',
    'LeaderboardService',
    'TapSessionService',
]
