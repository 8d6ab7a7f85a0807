"""
Backend client for the hosted TapWar aggregate store.

The backend owns every durable count. This client only creates battle
buckets, forwards tap batches to the atomic increment RPC, reads the
leaderboard view and exposes the administrative reset. Failures are mapped
onto the TapWar exception taxonomy:

- InvalidRequestError: the request could not be built (missing URL/key)
- NetworkUnavailableError: transport failure before any response
- ServerError: non-2xx response
- DecodingError: a 2xx response whose payload is not what we expect
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from tapwar.config import Config
from tapwar.constants import BackendConstants
from tapwar.data_models.battle import SubmissionRequest
from tapwar.data_models.country import Country, CountryStats
from tapwar.utils.battle_clock import BattleClock
from tapwar.utils.backend_exceptions import (
    InvalidRequestError, ServerError, DecodingError, NetworkUnavailableError
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaderboardRow:
    """One row of the backend's leaderboard view."""
    country_code: str
    country_name: str
    total_taps: int
    total_players: int
    battles_participated: int = 0

    def to_pair(self) -> Tuple[Country, CountryStats]:
        return Country(self.country_code, self.country_name), CountryStats(self.total_taps, self.total_players)


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class BackendClient:
    """HTTP client wrapper for the backend's REST and RPC endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url if base_url is not None else Config.get_rest_url()
        self.api_key = api_key if api_key is not None else Config.SUPABASE_ANON_KEY
        self.timeout = timeout if timeout is not None else Config.HTTP_TIMEOUT_SECONDS
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if not self.base_url or not self.base_url.startswith(('http://', 'https://')):
            raise InvalidRequestError(f"backend URL {self.base_url!r} is not an http(s) URL")
        if not self.api_key:
            raise InvalidRequestError("backend API key is not configured")

        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    timeout=httpx.Timeout(self.timeout),
                    transport=self._transport,
                    headers={"apikey": self.api_key}
                )
        return self._client

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        json_data: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        client = await self._ensure_client()
        try:
            response = await client.request(
                method,
                path,
                json=json_data,
                params=params,
                headers=headers
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise InvalidRequestError(f"{operation}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise NetworkUnavailableError(operation, str(exc)) from exc

        logger.debug(f"{method} {path} -> {response.status_code}")
        return response

    async def ensure_battle_exists(self, battle_id: str, timestamp: datetime):
        """
        Idempotently create the battle bucket.

        Both "created" and "already exists" count as success. Any other status
        is logged only; the increment that follows reports real failures.
        """
        response = await self._request(
            "create battle",
            "POST",
            f"/{BackendConstants.BATTLES_TABLE}",
            json_data={
                "id": battle_id,
                "timestamp": BattleClock.to_utc(timestamp).isoformat()
            },
            headers={"Prefer": "return=minimal"}
        )
        if response.status_code not in BackendConstants.BATTLE_CREATE_OK_STATUSES:
            logger.warning(f"Unexpected status {response.status_code} creating battle {battle_id}")

    async def increment_country_taps(self, submission: SubmissionRequest):
        """Forward a tap batch to the atomic increment RPC."""
        country_name = submission.country_name or Country.from_code(submission.country_code).display_name
        response = await self._request(
            "increment country taps",
            "POST",
            f"/rpc/{BackendConstants.INCREMENT_RPC}",
            json_data={
                "p_battle_id": submission.battle_id,
                "p_country_code": submission.country_code,
                "p_country_name": country_name,
                "p_user_id": submission.user_id,
                "p_taps": submission.tap_count
            }
        )
        if not _is_success(response.status_code):
            raise ServerError("increment country taps", response.status_code, response.text)

    async def submit_battle(self, submission: SubmissionRequest):
        """Ensure the battle exists, then increment the country's stats."""
        await self.ensure_battle_exists(submission.battle_id, submission.timestamp)
        await self.increment_country_taps(submission)

    async def fetch_leaderboard(self, limit: Optional[int] = None) -> List[LeaderboardRow]:
        """
        Fetch aggregate rows from the leaderboard view.

        Any ordering the backend applies is ignored by callers, which always
        re-rank locally.
        """
        if limit is None:
            limit = Config.LEADERBOARD_FETCH_LIMIT

        response = await self._request(
            "fetch leaderboard",
            "GET",
            f"/{BackendConstants.LEADERBOARD_VIEW}",
            params={"limit": limit}
        )
        if not _is_success(response.status_code):
            logger.error(f"Leaderboard fetch failed with {response.status_code}: {response.text}")
            raise ServerError("fetch leaderboard", response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodingError("fetch leaderboard", f"invalid JSON: {exc}") from exc

        if not isinstance(payload, list):
            raise DecodingError("fetch leaderboard", f"expected a list, got {type(payload).__name__}")

        rows = [self._decode_row(raw) for raw in payload]
        logger.debug(f"Decoded {len(rows)} leaderboard rows")
        return rows

    @staticmethod
    def _decode_row(raw: Any) -> LeaderboardRow:
        if not isinstance(raw, dict):
            raise DecodingError("fetch leaderboard", f"row is not an object: {raw!r}")
        try:
            code = raw["country_code"]
            if not isinstance(code, str) or not code.strip():
                raise ValueError(f"bad country_code {code!r}")
            taps = int(raw["total_taps"])
            players = int(raw["total_players"])
            if taps < 0 or players < 0:
                raise ValueError("negative totals")
            return LeaderboardRow(
                country_code=code.strip().upper(),
                country_name=raw.get("country_name") or code.strip().upper(),
                total_taps=taps,
                total_players=players,
                battles_participated=int(raw.get("battles_participated") or 0)
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise DecodingError("fetch leaderboard", f"bad row {raw!r}: {exc}") from exc

    async def reset_all_stats(self) -> List[str]:
        """
        Delete every row of the tap, stats and battle tables.

        Destructive and irreversible. Stops at the first failing table.

        Returns:
            Names of the cleared tables
        """
        cleared = []
        for table in BackendConstants.RESET_TABLES:
            response = await self._request(
                f"reset {table}",
                "DELETE",
                f"/{table}",
                params={"select": "*"},
                headers={"Prefer": "return=minimal"}
            )
            if not _is_success(response.status_code):
                logger.error(f"Failed to delete from {table}: {response.status_code}")
                raise ServerError(f"reset {table}", response.status_code, response.text)
            logger.info(f"Cleared table: {table}")
            cleared.append(table)
        return cleared

    async def close(self):
        """Clean up underlying HTTP client resources."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None
