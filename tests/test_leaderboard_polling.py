import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from tapwar.cogs.leaderboard import LeaderboardCog
from tapwar.services.backend import LeaderboardRow

ROWS = [LeaderboardRow("US", "United States", total_taps=1000, total_players=50)]


class FakeBackend:
    async def fetch_leaderboard(self, limit=None):
        return list(ROWS)


class CountingView:
    """Stands in for a LeaderboardView; counts redraws."""

    def __init__(self):
        self.refreshes = 0
        self.stopped = False

    async def refresh_message(self):
        self.refreshes += 1

    def stop(self):
        self.stopped = True


def make_cog():
    bot = SimpleNamespace(backend=FakeBackend(), wait_until_ready=AsyncMock())
    cog = LeaderboardCog(bot)
    cog.poll_leaderboard.change_interval(seconds=0.05)
    return cog


async def unload(cog):
    task = cog.poll_leaderboard.get_task()
    cog.cog_unload()
    if task is not None:
        await asyncio.gather(task, return_exceptions=True)


@pytest.mark.asyncio
async def test_polling_stops_when_last_view_closes():
    cog = make_cog()
    view = CountingView()

    cog.track(view)
    await asyncio.sleep(0.12)
    cog.untrack(view)
    await asyncio.sleep(0.2)

    assert view.refreshes >= 2
    assert not cog.poll_leaderboard.is_running()
    await unload(cog)


@pytest.mark.asyncio
async def test_view_opened_while_polling_winds_down_keeps_refreshing():
    cog = make_cog()
    first, second = CountingView(), CountingView()

    cog.track(first)
    await asyncio.sleep(0.12)
    cog.untrack(first)
    cog.track(second)
    await asyncio.sleep(0.5)

    assert cog.poll_leaderboard.is_running()
    assert second.refreshes >= 3
    await unload(cog)
    assert second.stopped
