"""
Shared fixtures. The environment is pointed at a throw-away database and log
file before anything from ``gridaware`` is imported.
"""

import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="gridaware-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP}/gridaware-test.db"
os.environ["LOG_FILE"] = os.path.join(_TMP, "gridaware-test.log")
os.environ["ELECTRICITY_MAPS_API_KEY"] = ""
os.environ["LITE_YOUTUBE"] = "true"

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import delete

from gridaware.features.feature_settings import FeatureSettings
from gridaware.features.grid_provider import GridIntensityProvider
from gridaware.services.intensity_cache import MemoryIntensityCache

UPSTREAM = "https://api.test/v3"


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """Records requests and answers with a canned response."""

    def __init__(self, status_code: int = 200, payload=None) -> None:
        self.status_code = status_code
        self.payload = payload if payload is not None else {
            "zone": "DE",
            "carbonIntensity": 302,
            "datetime": "2024-05-01T10:00:00.000Z",
        }
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.payload, (dict, list)):
            return httpx.Response(self.status_code, json=self.payload)
        return httpx.Response(self.status_code, text=str(self.payload))

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
async def provider(upstream, clock):
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    yield GridIntensityProvider(
        UPSTREAM,
        api_key="test-key",
        cache=MemoryIntensityCache(clock=clock),
        client=client,
    )
    await client.aclose()


@pytest.fixture
def all_on() -> FeatureSettings:
    return FeatureSettings(images=True, videos=True, typography=True)


@pytest.fixture
def all_off() -> FeatureSettings:
    return FeatureSettings(images=False, videos=False, typography=False)


@pytest.fixture
async def db_session():
    from gridaware.database.session import AsyncSessionFactory, PageOption, SiteOption, engine, init_db

    await init_db()
    async with AsyncSessionFactory() as session:
        await session.execute(delete(PageOption))
        await session.execute(delete(SiteOption))
        await session.commit()
        yield session
    await engine.dispose()


@pytest.fixture
async def client(db_session, provider):
    """HTTP client against the app with the upstream API faked."""
    from gridaware.api.deps import get_provider
    from gridaware.main import app

    app.dependency_overrides[get_provider] = lambda: provider
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
