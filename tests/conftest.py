"""
Pytest Configuration and Fixtures

Shared fixtures: an in-memory SQLite store, a controllable clock for the
TTL cache and TestClient instances wired to both.
"""

import os

# must be set before app modules build their module-level settings/engine
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import asyncio
import json
from typing import Dict, Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.config.settings import Settings
from app.main import create_app
from app.services.database import build_engine
from app.services.store_adapter import SQLStoreAdapter
from app.services.ttl_cache import TTLCache


ABC_ENTRIES = [
    {"key": "a", "value": 1},
    {"key": "b", "value": 2},
    {"key": "c", "value": 3},
]


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSink:
    """
    ASGI send/receive pair for driving a response directly.

    - `delay` simulates a slow consumer: every send takes that long.
    - `disconnect_after` makes `receive()` report `http.disconnect` once that
      many body chunks were accepted; otherwise `receive()` blocks forever.
    - `probe` is called on every accepted body message and its result kept
      in `snapshots`.
    """

    def __init__(self, delay: float = 0.0, disconnect_after: Optional[int] = None, probe=None,
                 fail_after: Optional[int] = None):
        self.delay = delay
        self.disconnect_after = disconnect_after
        self.fail_after = fail_after
        self.probe = probe
        self.messages: List[Dict] = []
        self.snapshots: List = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._disconnected = asyncio.Event()

    async def send(self, message: Dict) -> None:
        if self.fail_after is not None and len(self.body_messages) >= self.fail_after:
            raise ConnectionResetError("peer closed")
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        self.messages.append(message)
        if message["type"] == "http.response.body":
            if self.probe is not None:
                self.snapshots.append(self.probe())
            if self.disconnect_after is not None and len(self.body_messages) >= self.disconnect_after:
                self._disconnected.set()

    async def receive(self) -> Dict:
        await self._disconnected.wait()
        return {"type": "http.disconnect"}

    @property
    def start_message(self) -> Dict:
        return next(m for m in self.messages if m["type"] == "http.response.start")

    @property
    def body_messages(self) -> List[Dict]:
        return [m for m in self.messages if m["type"] == "http.response.body"]

    @property
    def body(self) -> bytes:
        return b"".join(m["body"] for m in self.body_messages)

    @property
    def completed(self) -> bool:
        return any(not m.get("more_body", False) for m in self.body_messages)

    def json(self):
        return json.loads(self.body)


# ============================================================================
# Cache Fixtures
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache:
    """TTL cache with the default 5 minute TTL on the fake clock."""
    return TTLCache(ttl_seconds=300, clock=clock)


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture
def engine():
    eng = build_engine("sqlite://")
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine) -> SQLStoreAdapter:
    """Empty store; small batch size so scans span several fetches."""
    s = SQLStoreAdapter(engine, batch_size=2)
    s.init_schema()
    return s


@pytest.fixture
def abc_store(store: SQLStoreAdapter) -> SQLStoreAdapter:
    """Store holding a=1, b=2, c=3 (inserted out of order)."""
    store.put_many([ABC_ENTRIES[2], ABC_ENTRIES[0], ABC_ENTRIES[1]])
    return store


# ============================================================================
# App Fixtures
# ============================================================================

@pytest.fixture
def test_settings() -> Settings:
    return Settings(APP_ENV="test", CACHE_TTL_MS=300000, CORS_ORIGINS="")


@pytest.fixture
def client_factory(test_settings: Settings, cache: TTLCache):
    """
    Build TestClients with the lifespan running.

    Usage:
        def test_something(client_factory, abc_store):
            client = client_factory(abc_store)
    """
    clients = []

    def factory(store, settings: Optional[Settings] = None) -> TestClient:
        app = create_app(settings=settings or test_settings, store=store, cache=cache)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(client_factory, abc_store) -> TestClient:
    return client_factory(abc_store)


def lazy_entries(count: int, pulled: List[int]) -> Iterator[Dict]:
    """Generator of `count` entries that records every pull in `pulled`."""
    for i in range(count):
        pulled.append(i)
        yield {"key": f"k{i:03d}", "value": i}


# ============================================================================
# Streaming Fixtures
# ============================================================================

@pytest.fixture
def make_sink():
    """Factory for RecordingSink, see its docstring for the knobs."""
    return RecordingSink


@pytest.fixture
def make_entries():
    """Factory for lazily produced entries that record each pull."""
    return lazy_entries
