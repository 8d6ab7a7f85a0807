"""
Per-user rate limiting for commands that call rate-limited third parties.

Sliding window kept in memory: each (user, command) key holds the times of
its recent calls. Keys whose window has emptied are dropped, so memory is
bounded by the number of recently active users.
"""

import asyncio
import logging
import time
from collections import deque
from functools import wraps
from typing import Deque, Dict, Tuple

from tapwar.config import Config

logger = logging.getLogger(__name__)


class SimpleRateLimiter:
    """In-memory sliding-window rate limiter keyed by user and command."""

    def __init__(self):
        self._calls: Dict[Tuple[int, str], Deque[float]] = {}
        self._lock = asyncio.Lock()

    async def retry_after(self, user_id: int, command: str, limit: int, window: int) -> float:
        """
        Record a call if the user is under the limit.

        Returns:
            0.0 when the call is allowed, otherwise the seconds until the
            oldest call in the window expires
        """
        if limit <= 0 or window <= 0:
            return float('inf')

        key = (user_id, command)
        now = time.monotonic()

        async with self._lock:
            calls = self._calls.get(key)
            if calls is not None:
                while calls and calls[0] <= now - window:
                    calls.popleft()
                if not calls:
                    del self._calls[key]
                    calls = None

            if calls is None:
                self._calls[key] = deque([now])
                return 0.0
            if len(calls) < limit:
                calls.append(now)
                return 0.0
            return calls[0] + window - now

    async def is_allowed(self, user_id: int, command: str, limit: int, window: int) -> bool:
        return await self.retry_after(user_id, command, limit, window) == 0.0


def rate_limit(command: str, limit: int = 1, window: int = 60):
    """Decorator for cog app commands; the bot owner is never limited."""
    def decorator(func):
        @wraps(func)
        async def wrapper(self, interaction, *args, **kwargs):
            if interaction.user.id != Config.OWNER_DISCORD_ID:
                wait = await self.bot.rate_limiter.retry_after(interaction.user.id, command, limit, window)
                if wait:
                    logger.info(f"Rate limit hit for {interaction.user.id} on /{command} ({wait:.0f}s left)")
                    await interaction.response.send_message(
                        f"⏰ Slow down! You can use `/{command}` again in {wait:.0f}s.",
                        ephemeral=True
                    )
                    return
            return await func(self, interaction, *args, **kwargs)
        return wrapper
    return decorator
