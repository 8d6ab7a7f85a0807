import httpx
import pytest

from tapwar.services.geolocation import GeolocationService
from tapwar.utils.backend_exceptions import GeolocationError

GEO_URL = "https://geo.example.com/json/"


def make_service(responder):
    return GeolocationService(url=GEO_URL, timeout=5, transport=httpx.MockTransport(responder))


@pytest.mark.asyncio
async def test_detects_country_from_payload():
    service = make_service(lambda request: httpx.Response(
        200, json={"ip": "203.0.113.7", "country_code": "il", "country_name": "Israel"}
    ))

    country = await service.detect_country()

    assert country.code == "IL"
    assert country.display_name == "Israel"
    await service.close()


@pytest.mark.asyncio
async def test_missing_name_falls_back_to_code():
    service = make_service(lambda request: httpx.Response(200, json={"country_code": "fr"}))

    country = await service.detect_country()

    assert country.code == "FR"
    assert country.display_name == "FR"
    await service.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(429, text="Too many requests"),
    httpx.Response(200, text="<html>"),
    httpx.Response(200, json={"error": True, "reason": "RateLimited"}),
    httpx.Response(200, json={"country_name": "Nowhere"}),
    httpx.Response(200, json={"country_code": "USA"}),
    httpx.Response(200, json=["US"]),
])
async def test_bad_responses_raise_geolocation_error(response):
    service = make_service(lambda request: response)

    with pytest.raises(GeolocationError):
        await service.detect_country()
    await service.close()


@pytest.mark.asyncio
async def test_transport_failure_raises_geolocation_error():
    def responder(request):
        raise httpx.ReadTimeout("timed out", request=request)

    service = make_service(responder)

    with pytest.raises(GeolocationError) as exc_info:
        await service.detect_country()
    assert "manually" in exc_info.value.user_message
    await service.close()
