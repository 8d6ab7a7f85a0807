import pytest

from tapwar.data_models.country import Country, CountryStats
from tapwar.data_models.leaderboard import RankCriterion
from tapwar.utils.ranking import LeaderboardRanker


def pair(code, taps, players=1):
    return Country.from_code(code), CountryStats(taps=taps, players=players)


def order(entries):
    return [(e.country.code, e.rank) for e in entries]


@pytest.fixture()
def scenario():
    return [pair("US", 1000, 50), pair("IL", 500, 10), pair("IN", 1000, 200)]


def test_equal_taps_keep_input_order():
    entries = LeaderboardRanker.rank([pair("AU", 10), pair("BR", 10), pair("CA", 5)], RankCriterion.TOTAL_TAPS)
    assert order(entries) == [("AU", 1), ("BR", 2), ("CA", 3)]


def test_total_taps_scenario(scenario):
    entries = LeaderboardRanker.rank(scenario, RankCriterion.TOTAL_TAPS)
    assert order(entries) == [("US", 1), ("IN", 2), ("IL", 3)]
    assert [e.score for e in entries] == [1000, 1000, 500]


def test_intensity_scenario(scenario):
    entries = LeaderboardRanker.rank(scenario, RankCriterion.INTENSITY)
    assert order(entries) == [("IL", 1), ("US", 2), ("IN", 3)]
    assert [e.score for e in entries] == [50, 20, 5]


def test_zero_players_sorts_to_the_bottom_by_intensity():
    entries = LeaderboardRanker.rank(
        [pair("DE", 5, 0), pair("FR", 3, 3), pair("GB", 0, 0)],
        RankCriterion.INTENSITY
    )
    assert entries[0].country.code == "FR"
    assert entries[1].stats.intensity == 0
    assert order(entries) == [("FR", 1), ("DE", 2), ("GB", 3)]


def test_ties_get_distinct_consecutive_ranks():
    entries = LeaderboardRanker.rank([pair("US", 7), pair("IL", 7), pair("IN", 7)])
    assert [e.rank for e in entries] == [1, 2, 3]


def test_reranking_is_idempotent(scenario):
    for criterion in RankCriterion:
        once = LeaderboardRanker.rank(scenario, criterion)
        twice = LeaderboardRanker.rank(once, criterion)
        assert order(twice) == order(once)


def test_switching_criterion_reranks_ranked_entries(scenario):
    by_taps = LeaderboardRanker.rank(scenario, RankCriterion.TOTAL_TAPS)
    by_intensity = LeaderboardRanker.rank(by_taps, RankCriterion.INTENSITY)
    assert order(by_intensity) == [("IL", 1), ("US", 2), ("IN", 3)]
    assert all(e.criterion is RankCriterion.INTENSITY for e in by_intensity)


def test_duplicates_keep_latest_stats_without_crashing():
    entries = LeaderboardRanker.rank([pair("US", 1), pair("IL", 5), pair("US", 9)])
    assert order(entries) == [("US", 1), ("IL", 2)]
    assert entries[0].stats.taps == 9


def test_empty_input():
    assert LeaderboardRanker.rank([], RankCriterion.INTENSITY) == []


def test_find_rank(scenario):
    entries = LeaderboardRanker.rank(scenario, RankCriterion.INTENSITY)
    assert LeaderboardRanker.find_rank(entries, "IN") == 3
    assert LeaderboardRanker.find_rank(entries, "il") == 1
    assert LeaderboardRanker.find_rank(entries, "FR") is None


def test_top_truncation_keeps_full_ranks():
    pairs = [pair(code, taps) for code, taps in zip(["US", "IL", "IN", "GB", "CA"], [50, 40, 30, 20, 10])]
    entries = LeaderboardRanker.rank(pairs)
    top = LeaderboardRanker.top(entries, 2)
    assert order(top) == [("US", 1), ("IL", 2)]
    assert LeaderboardRanker.find_rank(entries, "CA") == 5
    assert LeaderboardRanker.top(entries, 0) == []
