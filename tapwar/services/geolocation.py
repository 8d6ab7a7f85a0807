"""
Best-effort country detection from the network address.

Detection never blocks tapping: every failure surfaces as GeolocationError so
callers can fall back to manual selection.
"""

import logging
from typing import Optional

import httpx

from tapwar.config import Config
from tapwar.data_models.country import Country
from tapwar.utils.backend_exceptions import GeolocationError

logger = logging.getLogger(__name__)


class GeolocationService:
    """IP geolocation lookup (ipapi.co compatible)."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = url or Config.GEOLOCATION_URL
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout if timeout is not None else Config.HTTP_TIMEOUT_SECONDS),
            transport=transport
        )

    async def detect_country(self) -> Country:
        """
        Look up the country of the current network address.

        Raises:
            GeolocationError: on transport failure, bad status or bad payload
        """
        try:
            response = await self._client.get(self.url)
        except httpx.HTTPError as exc:
            logger.warning(f"Geolocation request failed: {exc}")
            raise GeolocationError(str(exc)) from exc

        if response.status_code != 200:
            raise GeolocationError(f"status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise GeolocationError(f"invalid JSON: {exc}") from exc

        if not isinstance(payload, dict) or payload.get("error"):
            reason = payload.get("reason") if isinstance(payload, dict) else None
            raise GeolocationError(reason or "lookup refused")

        code = payload.get("country_code")
        if not isinstance(code, str) or len(code.strip()) != 2:
            raise GeolocationError(f"missing country code in {payload!r}")

        country = Country(code, payload.get("country_name") or code.upper())
        logger.info(f"Detected country {country.code}")
        return country

    async def close(self):
        await self._client.aclose()
