"""
Battle clock utilities.

Battles are hourly buckets in UTC. Every client derives the same battle id
from wall-clock time, regardless of the host's local time zone.
"""

from datetime import datetime, timedelta, timezone

from tapwar.config import Config
from tapwar.data_models.battle import BattleWindow

BATTLE_ID_FORMAT = "%Y-%m-%d-%H"
BATTLE_LENGTH = timedelta(hours=1)


class BattleClock:
    """Maps wall-clock instants onto hourly battle windows"""
    
    @staticmethod
    def to_utc(now: datetime) -> datetime:
        """
        Normalize a timestamp to an aware UTC datetime.
        
        Naive datetimes are taken to already be in UTC.
        """
        if now.tzinfo is None:
            return now.replace(tzinfo=timezone.utc)
        return now.astimezone(timezone.utc)
    
    @staticmethod
    def battle_start(now: datetime) -> datetime:
        """Start of the battle containing `now` (top of the UTC hour)"""
        return BattleClock.to_utc(now).replace(minute=0, second=0, microsecond=0)
    
    @staticmethod
    def current_battle_id(now: datetime) -> str:
        """
        Get the battle id for a timestamp
        
        Args:
            now: Timestamp to bucket
            
        Returns:
            Fixed-width, sortable id such as "2025-10-05-14"
        """
        return BattleClock.battle_start(now).strftime(BATTLE_ID_FORMAT)
    
    @staticmethod
    def next_battle_boundary(now: datetime) -> datetime:
        """
        Get the start of the next battle
        
        An instant exactly on the hour belongs to the battle it starts, so the
        next boundary is a full hour away. The result is always after `now`.
        
        Args:
            now: Reference timestamp
            
        Returns:
            Aware UTC datetime of the next top of the hour
        """
        return BattleClock.battle_start(now) + BATTLE_LENGTH
    
    @staticmethod
    def seconds_until_next_battle(now: datetime) -> float:
        return (BattleClock.next_battle_boundary(now) - BattleClock.to_utc(now)).total_seconds()
    
    @staticmethod
    def battle_window(now: datetime, live_seconds: int = None) -> BattleWindow:
        """Get the battle window containing `now`"""
        if live_seconds is None:
            live_seconds = Config.BATTLE_LIVE_SECONDS
        start = BattleClock.battle_start(now)
        return BattleWindow(
            battle_id=start.strftime(BATTLE_ID_FORMAT),
            starts_at=start,
            live_seconds=live_seconds
        )
    
    @staticmethod
    def is_peak_refresh_window(now: datetime) -> bool:
        """True from five minutes before to five minutes after each hour"""
        minute = BattleClock.to_utc(now).minute
        return minute >= 55 or minute <= 5
    
    @staticmethod
    def now() -> datetime:
        return datetime.now(timezone.utc)
