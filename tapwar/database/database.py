"""
Local preference store.

A single SQLite file (through aiosqlite) holding per-user preferences. The
backend never sees it.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from tapwar.config import Config
from tapwar.database.models import Base
from tapwar.utils.logger import setup_logger

logger = setup_logger(__name__)


class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or Config.DATABASE_URL
        self.engine: Optional[AsyncEngine] = None
        self._sessions: Optional[async_sessionmaker] = None

    @staticmethod
    def async_url(url: str) -> str:
        """Point plain sqlite URLs at the aiosqlite driver"""
        if url.startswith('sqlite:///'):
            return 'sqlite+aiosqlite:///' + url[len('sqlite:///'):]
        return url

    async def initialize(self):
        """Open the engine and create missing tables"""
        url = self.async_url(self.database_url)
        logger.info(f"Opening preference store at {url}")

        self.engine = create_async_engine(url, echo=Config.DEBUG)
        self._sessions = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Preference store ready")

    @property
    def session_factory(self) -> async_sessionmaker:
        if self._sessions is None:
            raise RuntimeError("Database.initialize() has not been called")
        return self._sessions

    async def close(self):
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
