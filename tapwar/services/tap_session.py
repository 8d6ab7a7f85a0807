"""
Tap session service for the TapWar bot.

Owns one TapBatchAccumulator per active Discord user. All taps for a user
go through that user's asyncio.Lock, so the accumulator sees them one at a
time and in order. Filled batches are dispatched as background tasks: the
tap path never waits on the network, and a failed submission is logged and
dropped.
"""

import asyncio
import logging
from datetime import datetime
from typing import Dict, Optional, Set, Tuple

from sqlalchemy.exc import SQLAlchemyError

from tapwar.config import Config
from tapwar.data_models.battle import SubmissionRequest
from tapwar.data_models.country import Country
from tapwar.services.backend import BackendClient
from tapwar.services.preferences import PreferenceService
from tapwar.utils.backend_exceptions import CountryNotSetError, TapWarException
from tapwar.utils.tap_batch import TapBatchAccumulator, TapOutcome

logger = logging.getLogger(__name__)


class TapSessionService:
    """Routes taps into per-user accumulators and submits full batches."""

    def __init__(self, preferences: PreferenceService, backend: BackendClient, batch_size: Optional[int] = None):
        self.preferences = preferences
        self.backend = backend
        self.batch_size = Config.TAP_BATCH_SIZE if batch_size is None else batch_size
        self._accumulators: Dict[int, TapBatchAccumulator] = {}
        self._locks: Dict[int, asyncio.Lock] = {}
        self._pending: Set[asyncio.Task] = set()

    def _lock_for(self, discord_id: int) -> asyncio.Lock:
        lock = self._locks.get(discord_id)
        if lock is None:
            lock = self._locks[discord_id] = asyncio.Lock()
        return lock

    def get_accumulator(self, discord_id: int) -> Optional[TapBatchAccumulator]:
        return self._accumulators.get(discord_id)

    async def start_session(self, discord_id: int) -> TapBatchAccumulator:
        """
        Get or create the user's accumulator.

        Raises:
            CountryNotSetError: if the user has not confirmed a country
        """
        async with self._lock_for(discord_id):
            return await self._open_session(discord_id)

    async def _open_session(self, discord_id: int) -> TapBatchAccumulator:
        # Caller holds the user's lock
        accumulator = self._accumulators.get(discord_id)
        if accumulator is not None:
            return accumulator

        stored = await self.preferences.get_stored_country(discord_id)
        if stored is None:
            raise CountryNotSetError(discord_id)

        accumulator = TapBatchAccumulator(
            user_id=await self.preferences.get_user_id(discord_id),
            country=stored.country,
            batch_size=self.batch_size,
            total_taps=await self.preferences.get_total_taps(discord_id)
        )
        self._accumulators[discord_id] = accumulator
        logger.info(f"Tap session started for {discord_id} ({stored.country.code})")
        return accumulator

    async def tap(self, discord_id: int, now: Optional[datetime] = None) -> Tuple[TapOutcome, TapBatchAccumulator]:
        """
        Record one tap for a user, starting a session if needed.

        Returns:
            The tap outcome and the accumulator that counted it
        """
        async with self._lock_for(discord_id):
            accumulator = await self._open_session(discord_id)
            outcome = accumulator.tap(now)

            # The batch has already left the accumulator
            if outcome.submission is not None:
                self._dispatch(outcome.submission)

            if outcome.should_persist:
                try:
                    await self.preferences.save_total_taps(discord_id, outcome.total_taps)
                except SQLAlchemyError as e:
                    logger.error(f"Failed to save lifetime taps for {discord_id}: {e}")

        return outcome, accumulator

    async def change_country(self, discord_id: int, country: Country):
        """Point an active session at a newly confirmed country."""
        async with self._lock_for(discord_id):
            accumulator = self._accumulators.get(discord_id)
            if accumulator is not None:
                accumulator.country = country

    def _dispatch(self, submission: SubmissionRequest) -> asyncio.Task:
        task = asyncio.create_task(self._submit(submission))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _submit(self, submission: SubmissionRequest):
        try:
            await self.backend.submit_battle(submission)
            logger.info(
                f"Submitted {submission.tap_count} taps for {submission.country_code} "
                f"in battle {submission.battle_id}"
            )
        except TapWarException as e:
            # At-most-once: the batch is gone once dispatched
            logger.error(f"Failed to submit taps for {submission.country_code}: {e}")
        except Exception as e:
            logger.error(f"Unexpected error submitting taps for {submission.country_code}: {e}", exc_info=True)

    async def end_session(self, discord_id: int) -> Optional[int]:
        """
        Flush and drop the user's accumulator.

        Returns:
            Persisted lifetime total, or None if there was no session
        """
        async with self._lock_for(discord_id):
            accumulator = self._accumulators.pop(discord_id, None)
            if accumulator is None:
                return None
            total = accumulator.flush()
            await self.preferences.save_total_taps(discord_id, total)

        logger.info(f"Tap session ended for {discord_id} (lifetime taps: {total})")
        return total

    async def wait_for_pending(self):
        """Let in-flight submissions finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self):
        """Flush every session and wait for in-flight submissions."""
        for discord_id in list(self._accumulators):
            try:
                await self.end_session(discord_id)
            except Exception as e:
                logger.error(f"Failed to flush tap session for {discord_id}: {e}")
        await self.wait_for_pending()
