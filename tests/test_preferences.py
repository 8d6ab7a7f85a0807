from datetime import timedelta, timezone

import pytest

from tapwar.data_models.country import Country, DetectionMethod
from tapwar.database.database import Database


@pytest.mark.asyncio
async def test_user_id_is_created_once_and_stable(preferences):
    first = await preferences.get_user_id(1001)
    second = await preferences.get_user_id(1001)
    other = await preferences.get_user_id(1002)

    assert first == second
    assert first != other
    assert len(first) == 36


@pytest.mark.asyncio
async def test_no_country_until_confirmed(preferences):
    assert await preferences.get_stored_country(1001) is None

    await preferences.get_user_id(1001)
    assert await preferences.get_stored_country(1001) is None


@pytest.mark.asyncio
async def test_saved_country_round_trips(preferences):
    saved = await preferences.save_country(1001, Country("IL", "Israel"), DetectionMethod.IP)

    stored = await preferences.get_stored_country(1001)

    assert stored.country == Country("IL", "Israel")
    assert stored.detection_method is DetectionMethod.IP
    assert saved.country == stored.country


@pytest.mark.asyncio
async def test_confirmed_at_is_utc_aware(preferences):
    saved = await preferences.save_country(1001, Country("IL", "Israel"), DetectionMethod.MANUAL)

    stored = await preferences.get_stored_country(1001)

    assert saved.confirmed_at.utcoffset() == timedelta(0)
    assert stored.confirmed_at.tzinfo is not None
    assert stored.confirmed_at.astimezone(timezone.utc) == saved.confirmed_at


@pytest.mark.asyncio
async def test_changing_country_keeps_user_id(preferences):
    user_id = await preferences.get_user_id(1001)

    await preferences.save_country(1001, Country("IL", "Israel"), DetectionMethod.IP)
    await preferences.save_country(1001, Country("US", "United States"), DetectionMethod.MANUAL)

    stored = await preferences.get_stored_country(1001)
    assert stored.country.code == "US"
    assert stored.detection_method is DetectionMethod.MANUAL
    assert await preferences.get_user_id(1001) == user_id


@pytest.mark.asyncio
async def test_total_taps_default_and_update(preferences):
    assert await preferences.get_total_taps(1001) == 0

    await preferences.save_total_taps(1001, 42)
    assert await preferences.get_total_taps(1001) == 42

    await preferences.save_total_taps(1001, 52)
    assert await preferences.get_total_taps(1001) == 52


@pytest.mark.asyncio
async def test_negative_total_rejected(preferences):
    with pytest.raises(ValueError):
        await preferences.save_total_taps(1001, -1)


def test_plain_sqlite_urls_use_async_driver():
    assert Database.async_url("sqlite:///tapwar.db") == "sqlite+aiosqlite:///tapwar.db"
    assert Database.async_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"


def test_session_factory_requires_initialize():
    with pytest.raises(RuntimeError):
        Database("sqlite:///unused.db").session_factory
