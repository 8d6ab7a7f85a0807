"""
Tap batching for score submission.

Taps are counted locally and sent to the backend in fixed-size batches to
keep request volume down. The accumulator is a small state machine:

    IDLE (count=0) -> ACCUMULATING (count=1..N-1) -> [N reached] -> IDLE

Reaching N emits exactly one SubmissionRequest and asks the owner to persist
the lifetime counter. The reset happens when the request is built, so a
failed submission is never resent (at-most-once).

The accumulator is not thread- or task-safe on its own; its owner must
serialize calls to tap().
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from tapwar.config import Config
from tapwar.data_models.battle import SubmissionRequest
from tapwar.data_models.country import Country
from tapwar.utils.battle_clock import BattleClock


class TapState(Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"


@dataclass(frozen=True)
class TapOutcome:
    """Result of a single tap."""
    count: int
    total_taps: int
    submission: Optional[SubmissionRequest] = None

    @property
    def should_persist(self) -> bool:
        # The lifetime counter is saved at the same cadence as submissions
        return self.submission is not None


class TapBatchAccumulator:
    """Counts one user's taps and cuts them into submission batches."""

    def __init__(self, user_id: str, country: Country, batch_size: Optional[int] = None, total_taps: int = 0):
        if batch_size is None:
            batch_size = Config.TAP_BATCH_SIZE
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if total_taps < 0:
            raise ValueError("total_taps must be non-negative")

        self.user_id = user_id
        self.country = country
        self.batch_size = batch_size
        self.count = 0
        self.total_taps = total_taps

    @property
    def state(self) -> TapState:
        return TapState.IDLE if self.count == 0 else TapState.ACCUMULATING

    @property
    def remaining(self) -> int:
        """Taps left before the next submission."""
        return self.batch_size - self.count

    def tap(self, now: Optional[datetime] = None) -> TapOutcome:
        """
        Record one tap.

        Args:
            now: Tap time, used for the battle id of an emitted batch

        Returns:
            TapOutcome carrying a SubmissionRequest when the batch filled up
        """
        self.count += 1
        self.total_taps += 1

        if self.count < self.batch_size:
            return TapOutcome(count=self.count, total_taps=self.total_taps)

        now = BattleClock.to_utc(now or BattleClock.now())
        submission = SubmissionRequest(
            battle_id=BattleClock.current_battle_id(now),
            country_code=self.country.code,
            user_id=self.user_id,
            tap_count=self.batch_size,
            timestamp=now,
            country_name=self.country.display_name
        )
        self.count = 0
        return TapOutcome(count=0, total_taps=self.total_taps, submission=submission)

    def flush(self) -> int:
        """
        Return the lifetime total for persistence on teardown.

        A partial batch is not submitted; it stays counted in the lifetime
        total only.
        """
        return self.total_taps
