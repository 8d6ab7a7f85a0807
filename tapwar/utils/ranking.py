"""
Leaderboard ranking utilities.

Ranks per-country aggregates by total taps or by intensity (taps per
player). Sorting is stable, so countries with equal scores keep the order in
which they were supplied, and every entry gets its own consecutive rank.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from tapwar.data_models.country import Country, CountryStats
from tapwar.data_models.leaderboard import LeaderboardEntry, RankCriterion

logger = logging.getLogger(__name__)

RankInput = Union[LeaderboardEntry, Tuple[Country, CountryStats]]


class LeaderboardRanker:
    """Shared ranking logic for every leaderboard display."""
    
    @staticmethod
    def deduplicate(entries: Iterable[RankInput]) -> List[Tuple[Country, CountryStats]]:
        """
        Collapse entries sharing a country code.
        
        The last stats seen for a code win; the code keeps the position of its
        first appearance.
        """
        by_code = {}
        for item in entries:
            if isinstance(item, LeaderboardEntry):
                country, stats = item.country, item.stats
            else:
                country, stats = item
            if country.code in by_code:
                logger.warning(f"Duplicate leaderboard entry for {country.code}, keeping the latest stats")
            by_code[country.code] = (country, stats)
        return list(by_code.values())
    
    @staticmethod
    def sort_key(stats: CountryStats, criterion: RankCriterion) -> float:
        if criterion is RankCriterion.INTENSITY:
            return stats.intensity
        return stats.taps
    
    @staticmethod
    def rank(entries: Iterable[RankInput], criterion: RankCriterion = RankCriterion.TOTAL_TAPS) -> List[LeaderboardEntry]:
        """
        Rank countries under a criterion.
        
        Args:
            entries: (Country, CountryStats) pairs or previously ranked entries
            criterion: TOTAL_TAPS or INTENSITY
            
        Returns:
            Entries in descending score order with 1-based ranks
        """
        pairs = LeaderboardRanker.deduplicate(entries)
        # sorted() stays stable with reverse=True
        ordered = sorted(
            pairs,
            key=lambda pair: LeaderboardRanker.sort_key(pair[1], criterion),
            reverse=True
        )
        return [
            LeaderboardEntry(rank=position, country=country, stats=stats, criterion=criterion)
            for position, (country, stats) in enumerate(ordered, start=1)
        ]
    
    @staticmethod
    def find_rank(sorted_entries: Sequence[LeaderboardEntry], country_code: str) -> Optional[int]:
        """1-based rank of a country in an already ranked sequence, if present."""
        code = country_code.strip().upper()
        for entry in sorted_entries:
            if entry.country.code == code:
                return entry.rank
        return None
    
    @staticmethod
    def top(sorted_entries: Sequence[LeaderboardEntry], limit: int) -> List[LeaderboardEntry]:
        """Display truncation; ranks are left as computed over the full list."""
        return list(sorted_entries[:max(limit, 0)])
