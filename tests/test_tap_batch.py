from datetime import datetime, timezone

import pytest

from tapwar.data_models.country import Country
from tapwar.utils.tap_batch import TapBatchAccumulator, TapState

NOW = datetime(2025, 10, 5, 14, 42, 7, tzinfo=timezone.utc)


@pytest.fixture()
def accumulator():
    return TapBatchAccumulator(user_id="anon-123", country=Country.from_code("IL"))


def test_starts_idle(accumulator):
    assert accumulator.state is TapState.IDLE
    assert accumulator.count == 0
    assert accumulator.total_taps == 0
    assert accumulator.remaining == 10


def test_accumulates_below_threshold(accumulator):
    outcomes = [accumulator.tap(NOW) for _ in range(9)]
    assert all(o.submission is None for o in outcomes)
    assert not any(o.should_persist for o in outcomes)
    assert accumulator.state is TapState.ACCUMULATING
    assert accumulator.count == 9
    assert accumulator.remaining == 1


def test_ten_taps_emit_one_submission(accumulator):
    outcomes = [accumulator.tap(NOW) for _ in range(10)]
    submissions = [o.submission for o in outcomes if o.submission]

    assert len(submissions) == 1
    submission = submissions[0]
    assert submission.tap_count == 10
    assert submission.battle_id == "2025-10-05-14"
    assert submission.country_code == "IL"
    assert submission.country_name == "Israel"
    assert submission.user_id == "anon-123"
    assert submission.timestamp == NOW

    assert outcomes[-1].should_persist
    assert accumulator.count == 0
    assert accumulator.state is TapState.IDLE
    assert accumulator.total_taps == 10


def test_batches_repeat(accumulator):
    submissions = [o.submission for o in (accumulator.tap(NOW) for _ in range(25)) if o.submission]
    assert len(submissions) == 2
    assert accumulator.count == 5
    assert accumulator.total_taps == 25


def test_battle_id_taken_when_batch_fills(accumulator):
    for _ in range(9):
        accumulator.tap(datetime(2025, 10, 5, 14, 59, 59, tzinfo=timezone.utc))
    outcome = accumulator.tap(datetime(2025, 10, 5, 15, 0, 1, tzinfo=timezone.utc))
    assert outcome.submission.battle_id == "2025-10-05-15"


def test_lifetime_total_continues_from_stored_value():
    accumulator = TapBatchAccumulator("anon", Country.from_code("US"), total_taps=120)
    accumulator.tap(NOW)
    assert accumulator.total_taps == 121
    assert accumulator.flush() == 121


def test_custom_batch_size():
    accumulator = TapBatchAccumulator("anon", Country.from_code("US"), batch_size=3)
    outcomes = [accumulator.tap(NOW) for _ in range(3)]
    assert outcomes[-1].submission.tap_count == 3


@pytest.mark.parametrize("kwargs", [{"batch_size": 0}, {"total_taps": -1}])
def test_rejects_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        TapBatchAccumulator("anon", Country.from_code("US"), **kwargs)
