# tests/conftest.py
import json
from typing import Callable, List

import httpx
import pytest
import pytest_asyncio

from tapwar.database.database import Database
from tapwar.services.backend import BackendClient
from tapwar.services.preferences import PreferenceService

TEST_REST_URL = "https://example.supabase.co/rest/v1"
TEST_API_KEY = "test-anon-key"


class RecordingHandler:
    """MockTransport handler that records requests and replies from a callable."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def json_bodies(self):
        return [json.loads(r.content) if r.content else None for r in self.requests]


@pytest.fixture()
def make_backend():
    def _make(responder: Callable[[httpx.Request], httpx.Response], **kwargs):
        handler = RecordingHandler(responder)
        client = BackendClient(
            base_url=kwargs.pop("base_url", TEST_REST_URL),
            api_key=kwargs.pop("api_key", TEST_API_KEY),
            timeout=5,
            transport=httpx.MockTransport(handler)
        )
        return client, handler

    return _make


@pytest_asyncio.fixture()
async def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'tapwar_test.db'}")
    await db.initialize()
    try:
        yield db
    finally:
        await db.close()


@pytest_asyncio.fixture()
async def preferences(database) -> PreferenceService:
    return PreferenceService(database.session_factory)
