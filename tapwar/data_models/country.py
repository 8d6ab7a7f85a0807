"""
Country data models.

Countries are immutable keys; their stats are the aggregate the backend
reports for them (or a local tally built with add_taps).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from tapwar.constants import CountryConstants


@dataclass(frozen=True)
class Country:
    """A competing country, keyed by its uppercase code."""
    code: str
    display_name: str

    def __post_init__(self):
        normalized = self.code.strip().upper()
        if not normalized:
            raise ValueError("Country code must not be empty")
        object.__setattr__(self, 'code', normalized)

    @property
    def flag(self) -> str:
        """Regional indicator emoji for the code (e.g. US -> 🇺🇸)."""
        return "".join(
            chr(CountryConstants.FLAG_CODEPOINT_BASE + ord(letter))
            for letter in self.code
            if 'A' <= letter <= 'Z'
        )

    @classmethod
    def from_code(cls, code: str) -> "Country":
        """Build a country from a code, naming it from the known table."""
        normalized = code.strip().upper()
        return cls(normalized, CountryConstants.KNOWN_COUNTRIES.get(normalized, normalized))


@dataclass
class CountryStats:
    """Tap aggregate for one country. Intensity is always derived."""
    taps: int = 0
    players: int = 0

    def __post_init__(self):
        if self.taps < 0 or self.players < 0:
            raise ValueError(f"Stats must be non-negative (taps={self.taps}, players={self.players})")

    @property
    def intensity(self) -> float:
        """Taps per contributing player; 0 when nobody has played."""
        if self.players > 0:
            return self.taps / self.players
        return 0.0

    def add_taps(self, count: int):
        """Record one contributor adding `count` taps."""
        if count < 0:
            raise ValueError("Tap count must be non-negative")
        self.taps += count
        self.players += 1


class DetectionMethod(Enum):
    IP = "ip"
    MANUAL = "manual"


@dataclass(frozen=True)
class UserCountry:
    """A user's confirmed country preference."""
    country: Country
    detection_method: DetectionMethod
    confirmed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
