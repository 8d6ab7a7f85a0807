"""
Leaderboard data models.

Provides immutable data transfer objects for ranked country standings.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from tapwar.data_models.country import Country, CountryStats


class RankCriterion(Enum):
    TOTAL_TAPS = "total"
    INTENSITY = "intensity"

    @property
    def label(self) -> str:
        return "Total Taps" if self is RankCriterion.TOTAL_TAPS else "Intensity"


@dataclass(frozen=True)
class LeaderboardEntry:
    """Single leaderboard row."""
    rank: int
    country: Country
    stats: CountryStats
    criterion: RankCriterion = RankCriterion.TOTAL_TAPS

    @property
    def country_code(self) -> str:
        return self.country.code

    @property
    def score(self) -> float:
        """Value the entry was ranked by."""
        if self.criterion is RankCriterion.INTENSITY:
            return self.stats.intensity
        return self.stats.taps


@dataclass(frozen=True)
class LeaderboardSnapshot:
    """A complete ranked leaderboard as displayed at one moment."""
    entries: Tuple[LeaderboardEntry, ...]
    criterion: RankCriterion
    battle_id: str
    fetched_at: datetime
    error: Optional[str] = None
    # Deduplicated (country, stats) pairs in backend order; re-ranking starts here
    pairs: Tuple[Tuple[Country, CountryStats], ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def top(self, limit: int) -> Tuple[LeaderboardEntry, ...]:
        """First `limit` entries; ranks are those of the full list."""
        return self.entries[:max(limit, 0)]
