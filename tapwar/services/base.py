"""
Base service class for the TapWar bot.

Services backed by the local preference store get a unit-of-work session
helper and a retry wrapper for SQLite's transient "database is locked"
failures.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)

RETRY_ATTEMPTS = 3
RETRY_BASE_DELAY = 0.1


class BaseService:
    """Base class for services that read or write the preference store."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    @asynccontextmanager
    async def get_session(self) -> AsyncIterator[AsyncSession]:
        """
        One unit of work: committed when the block exits cleanly, rolled
        back when it raises.
        """
        async with self.session_factory() as session:
            async with session.begin():
                yield session

    async def execute_with_retry(self, operation: Callable[[], Awaitable[Any]], attempts: int = RETRY_ATTEMPTS) -> Any:
        """
        Run `operation`, retrying on OperationalError with exponential backoff.

        Other errors propagate immediately; they will not go away on retry.
        """
        for attempt in range(1, attempts + 1):
            try:
                return await operation()
            except OperationalError as e:
                if attempt == attempts:
                    raise
                delay = RETRY_BASE_DELAY * 2 ** (attempt - 1)
                logger.warning(f"{operation.__name__} failed (attempt {attempt}/{attempts}), retrying in {delay:.1f}s: {e}")
                await asyncio.sleep(delay)
