"""
Leaderboard service for the TapWar bot.

Polls the backend for aggregate rows and ranks them locally. The current
snapshot is an immutable object replaced by a single assignment, so readers
always see either the previous leaderboard or the new one in full.
"""

import logging
from typing import Optional

from tapwar.config import Config
from tapwar.data_models.leaderboard import LeaderboardSnapshot, RankCriterion
from tapwar.services.backend import BackendClient
from tapwar.utils.battle_clock import BattleClock
from tapwar.utils.backend_exceptions import TapWarException
from tapwar.utils.ranking import LeaderboardRanker

logger = logging.getLogger(__name__)


class LeaderboardService:
    """Fetches, ranks and holds the latest leaderboard snapshot."""

    def __init__(self, backend: BackendClient, fetch_limit: Optional[int] = None):
        self.backend = backend
        self.fetch_limit = Config.LEADERBOARD_FETCH_LIMIT if fetch_limit is None else fetch_limit
        self._snapshot = LeaderboardSnapshot(
            entries=(),
            criterion=RankCriterion.TOTAL_TAPS,
            battle_id=BattleClock.current_battle_id(BattleClock.now()),
            fetched_at=BattleClock.now()
        )

    @property
    def snapshot(self) -> LeaderboardSnapshot:
        return self._snapshot

    async def refresh(self, criterion: RankCriterion = RankCriterion.TOTAL_TAPS) -> LeaderboardSnapshot:
        """
        Fetch fresh rows and replace the snapshot.

        On any backend failure the snapshot becomes empty (with the error
        recorded) rather than mixing stale rows with new ones.
        """
        now = BattleClock.now()
        battle_id = BattleClock.current_battle_id(now)

        try:
            rows = await self.backend.fetch_leaderboard(limit=self.fetch_limit)
        except TapWarException as e:
            logger.error(f"Failed to fetch leaderboard: {e}")
            snapshot = LeaderboardSnapshot(
                entries=(),
                criterion=criterion,
                battle_id=battle_id,
                fetched_at=now,
                error=e.user_message
            )
        else:
            pairs = tuple(LeaderboardRanker.deduplicate(row.to_pair() for row in rows))
            snapshot = LeaderboardSnapshot(
                entries=tuple(LeaderboardRanker.rank(pairs, criterion)),
                criterion=criterion,
                battle_id=battle_id,
                fetched_at=now,
                pairs=pairs
            )

        self._snapshot = snapshot
        return snapshot

    def ranked_by(self, criterion: RankCriterion) -> LeaderboardSnapshot:
        """
        The current snapshot ranked under `criterion`, without fetching.

        Ranking always starts from the rows in backend order, so ties fall
        the same way whichever tab was ranked first.
        """
        current = self._snapshot
        if current.criterion is criterion:
            return current
        return LeaderboardSnapshot(
            entries=tuple(LeaderboardRanker.rank(current.pairs, criterion)),
            criterion=criterion,
            battle_id=current.battle_id,
            fetched_at=current.fetched_at,
            error=current.error,
            pairs=current.pairs
        )

    def country_rank(self, country_code: str, criterion: RankCriterion = RankCriterion.TOTAL_TAPS) -> Optional[int]:
        return LeaderboardRanker.find_rank(self.ranked_by(criterion).entries, country_code)
