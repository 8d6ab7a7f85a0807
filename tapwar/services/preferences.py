"""
Preference service for the TapWar bot.

Local key-value style store for each Discord user: the stable anonymous id
submitted to the backend, the confirmed country and the lifetime tap count.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select

from tapwar.data_models.country import Country, DetectionMethod, UserCountry
from tapwar.database.models import PlayerPreference
from tapwar.services.base import BaseService

logger = logging.getLogger(__name__)


class PreferenceService(BaseService):
    """Reads and writes per-user preferences."""
    
    async def _get_or_create(self, session, discord_id: int) -> PlayerPreference:
        result = await session.execute(
            select(PlayerPreference).where(PlayerPreference.discord_id == discord_id)
        )
        preference = result.scalar_one_or_none()
        if preference is None:
            preference = PlayerPreference(
                discord_id=discord_id,
                anonymous_id=str(uuid.uuid4()),
                total_taps_all_time=0
            )
            session.add(preference)
            await session.flush()
            logger.info(f"Created anonymous id for Discord user {discord_id}")
        return preference
    
    async def get_user_id(self, discord_id: int) -> str:
        """
        Get the anonymous user id, creating it on first use.
        
        The id is stable for the lifetime of the preference row.
        """
        async with self.get_session() as session:
            preference = await self._get_or_create(session, discord_id)
            return preference.anonymous_id
    
    async def get_stored_country(self, discord_id: int) -> Optional[UserCountry]:
        """Get the user's confirmed country, or None if never confirmed."""
        async with self.get_session() as session:
            result = await session.execute(
                select(PlayerPreference).where(PlayerPreference.discord_id == discord_id)
            )
            preference = result.scalar_one_or_none()
            
            if preference is None or not preference.country_code:
                return None
            
            try:
                method = DetectionMethod(preference.detection_method)
            except ValueError:
                logger.warning(f"Unknown detection method '{preference.detection_method}' for {discord_id}, treating as manual")
                method = DetectionMethod.MANUAL
            
            confirmed_at = preference.confirmed_at
            if confirmed_at is not None and confirmed_at.tzinfo is None:
                # SQLite hands back naive datetimes; they were written as UTC
                confirmed_at = confirmed_at.replace(tzinfo=timezone.utc)

            return UserCountry(
                country=Country(preference.country_code, preference.country_name or preference.country_code),
                detection_method=method,
                confirmed_at=confirmed_at
            )
    
    async def save_country(self, discord_id: int, country: Country, method: DetectionMethod) -> UserCountry:
        """Persist the user's confirmed country."""
        confirmed_at = datetime.now(timezone.utc)
        
        async def _save():
            async with self.get_session() as session:
                preference = await self._get_or_create(session, discord_id)
                preference.country_code = country.code
                preference.country_name = country.display_name
                preference.detection_method = method.value
                preference.confirmed_at = confirmed_at
        
        await self.execute_with_retry(_save)
        logger.info(f"Saved country {country.code} ({method.value}) for Discord user {discord_id}")
        return UserCountry(country=country, detection_method=method, confirmed_at=confirmed_at)
    
    async def get_total_taps(self, discord_id: int) -> int:
        async with self.get_session() as session:
            result = await session.execute(
                select(PlayerPreference.total_taps_all_time).where(PlayerPreference.discord_id == discord_id)
            )
            total = result.scalar_one_or_none()
            return total or 0
    
    async def save_total_taps(self, discord_id: int, total: int):
        """Persist the lifetime tap counter."""
        if total < 0:
            raise ValueError("Total taps must be non-negative")
        
        async def _save():
            async with self.get_session() as session:
                preference = await self._get_or_create(session, discord_id)
                preference.total_taps_all_time = total
        
        await self.execute_with_retry(_save)
