import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from subgraph_sql.core.client import get_http_client
from subgraph_sql.core.config import settings
from subgraph_sql.core.discovery import sql_capability_cache
from subgraph_sql.main import app

from tests.fakes import FakeNetwork


# Every test starts with an empty capability cache
@pytest.fixture(autouse=True)
def clear_capability_cache():
    sql_capability_cache.clear()
    yield
    sql_capability_cache.clear()


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(settings, "GATEWAY_API_KEY", None)
    return "test-gateway-key"


@pytest.fixture
def fake_network():
    return FakeNetwork()


@pytest_asyncio.fixture(scope="function")
async def http_client(fake_network: FakeNetwork):
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(fake_network.handler)
    ) as client:
        yield client


# App client talking to the fake network
@pytest_asyncio.fixture(scope="function")
async def client(http_client: httpx.AsyncClient):
    async def override_get_http_client():
        return http_client

    app.dependency_overrides[get_http_client] = override_get_http_client

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
