"""
Battle data models: hourly windows and the tap batches submitted into them.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional


@dataclass(frozen=True)
class BattleWindow:
    """One hourly battle. Live only for the first few seconds of the hour."""
    battle_id: str
    starts_at: datetime
    live_seconds: int = 10

    @property
    def ends_at(self) -> datetime:
        return self.starts_at + timedelta(hours=1)

    @property
    def live_until(self) -> datetime:
        return self.starts_at + timedelta(seconds=self.live_seconds)

    def is_live(self, now: datetime) -> bool:
        # Naive times are UTC, as everywhere else in the battle clock
        now = now.replace(tzinfo=timezone.utc) if now.tzinfo is None else now.astimezone(timezone.utc)
        return self.starts_at <= now < self.live_until


@dataclass(frozen=True)
class SubmissionRequest:
    """A batch of taps for one country in one battle."""
    battle_id: str
    country_code: str
    user_id: str
    tap_count: int
    timestamp: datetime
    country_name: Optional[str] = None
