import pytest
from fastapi.testclient import TestClient

from helpers import FakeFontOrigin

from fontembed.app import app, get_http_client
from fontembed.catalog import catalog_cache


@pytest.fixture
def origin():
    return FakeFontOrigin()


@pytest.fixture(autouse=True)
def clear_catalog_cache():
    catalog_cache.clear()
    yield
    catalog_cache.clear()


@pytest.fixture
def api(origin):
    async def fake_http_client():
        async with origin.client() as client:
            yield client

    app.dependency_overrides[get_http_client] = fake_http_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
