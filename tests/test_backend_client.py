from datetime import datetime, timezone

import httpx
import pytest

from tapwar.data_models.battle import SubmissionRequest
from tapwar.services.backend import BackendClient
from tapwar.utils.backend_exceptions import (
    DecodingError, InvalidRequestError, NetworkUnavailableError, ServerError
)


SUBMISSION = SubmissionRequest(
    battle_id="2025-10-05-14",
    country_code="IL",
    user_id="anon-123",
    tap_count=10,
    timestamp=datetime(2025, 10, 5, 14, 42, tzinfo=timezone.utc),
    country_name="Israel"
)

LEADERBOARD_ROWS = [
    {"country_code": "US", "country_name": "United States", "total_taps": 1000,
     "battles_participated": 3, "total_players": 50, "intensity": 20.0},
    {"country_code": "IL", "country_name": "Israel", "total_taps": 500,
     "battles_participated": 2, "total_players": 10, "intensity": 50.0},
]


def by_path(routes):
    """Responder that picks a response by request path."""
    def responder(request):
        return routes[request.url.path]
    return responder


@pytest.mark.asyncio
async def test_submit_battle_creates_battle_then_increments(make_backend):
    client, handler = make_backend(by_path({
        "/rest/v1/battles": httpx.Response(201),
        "/rest/v1/rpc/increment_country_taps": httpx.Response(204),
    }))

    await client.submit_battle(SUBMISSION)

    create, increment = handler.requests
    assert create.method == "POST"
    assert create.url.path == "/rest/v1/battles"
    assert create.headers["apikey"] == "test-anon-key"
    assert create.headers["Prefer"] == "return=minimal"
    assert handler.json_bodies()[0] == {"id": "2025-10-05-14", "timestamp": "2025-10-05T14:42:00+00:00"}

    assert increment.url.path == "/rest/v1/rpc/increment_country_taps"
    assert handler.json_bodies()[1] == {
        "p_battle_id": "2025-10-05-14",
        "p_country_code": "IL",
        "p_country_name": "Israel",
        "p_user_id": "anon-123",
        "p_taps": 10,
    }


@pytest.mark.asyncio
async def test_existing_battle_still_increments(make_backend):
    client, handler = make_backend(by_path({
        "/rest/v1/battles": httpx.Response(409, json={"code": "23505"}),
        "/rest/v1/rpc/increment_country_taps": httpx.Response(200),
    }))

    await client.submit_battle(SUBMISSION)

    assert len(handler.requests) == 2


@pytest.mark.asyncio
async def test_country_name_falls_back_to_known_table(make_backend):
    client, handler = make_backend(lambda request: httpx.Response(204))
    submission = SubmissionRequest("2025-10-05-14", "DE", "anon", 10, SUBMISSION.timestamp)

    await client.increment_country_taps(submission)

    assert handler.json_bodies()[0]["p_country_name"] == "Germany"


@pytest.mark.asyncio
async def test_increment_failure_raises_server_error(make_backend):
    client, _ = make_backend(by_path({
        "/rest/v1/battles": httpx.Response(201),
        "/rest/v1/rpc/increment_country_taps": httpx.Response(500, text="boom"),
    }))

    with pytest.raises(ServerError) as exc_info:
        await client.submit_battle(SUBMISSION)
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_fetch_leaderboard_decodes_rows(make_backend):
    client, handler = make_backend(lambda request: httpx.Response(200, json=LEADERBOARD_ROWS))

    rows = await client.fetch_leaderboard(limit=50)

    request = handler.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/current_leaderboard"
    assert request.url.params["limit"] == "50"
    assert [(r.country_code, r.total_taps, r.total_players) for r in rows] == [("US", 1000, 50), ("IL", 500, 10)]

    country, stats = rows[1].to_pair()
    assert country.display_name == "Israel"
    assert stats.intensity == 50


@pytest.mark.asyncio
async def test_fetch_leaderboard_server_error(make_backend):
    client, _ = make_backend(lambda request: httpx.Response(503, text="unavailable"))

    with pytest.raises(ServerError):
        await client.fetch_leaderboard()


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(200, text="not json"),
    httpx.Response(200, json={"rows": []}),
    httpx.Response(200, json=[{"country_code": "US"}]),
    httpx.Response(200, json=[{"country_code": "US", "total_taps": "many", "total_players": 1}]),
    httpx.Response(200, json=[{"country_code": "US", "total_taps": -1, "total_players": 1}]),
    httpx.Response(200, json=["US"]),
])
async def test_fetch_leaderboard_malformed_payload(make_backend, response):
    client, _ = make_backend(lambda request: response)

    with pytest.raises(DecodingError):
        await client.fetch_leaderboard()


@pytest.mark.asyncio
async def test_transport_failure_is_network_unavailable(make_backend):
    def responder(request):
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = make_backend(responder)

    with pytest.raises(NetworkUnavailableError):
        await client.fetch_leaderboard()


@pytest.mark.asyncio
@pytest.mark.parametrize("base_url,api_key", [("", "key"), ("ftp://example.com", "key"), ("https://example.com", "")])
async def test_missing_configuration_is_invalid_request(base_url, api_key):
    client = BackendClient(base_url=base_url, api_key=api_key)

    with pytest.raises(InvalidRequestError):
        await client.fetch_leaderboard()


@pytest.mark.asyncio
async def test_reset_clears_tables_in_order(make_backend):
    client, handler = make_backend(lambda request: httpx.Response(204))

    cleared = await client.reset_all_stats()

    assert cleared == ["user_taps", "country_stats", "battles"]
    assert [r.method for r in handler.requests] == ["DELETE"] * 3
    assert [r.url.path for r in handler.requests] == [
        "/rest/v1/user_taps", "/rest/v1/country_stats", "/rest/v1/battles"
    ]
    assert all(r.url.params["select"] == "*" for r in handler.requests)


@pytest.mark.asyncio
async def test_reset_stops_at_first_failure(make_backend):
    client, handler = make_backend(by_path({
        "/rest/v1/user_taps": httpx.Response(204),
        "/rest/v1/country_stats": httpx.Response(401, text="denied"),
        "/rest/v1/battles": httpx.Response(204),
    }))

    with pytest.raises(ServerError):
        await client.reset_all_stats()
    assert len(handler.requests) == 2


@pytest.mark.asyncio
async def test_close_is_idempotent(make_backend):
    client, _ = make_backend(lambda request: httpx.Response(200, json=[]))
    await client.fetch_leaderboard()

    await client.close()
    await client.close()
