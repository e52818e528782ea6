"""
Tests for the image cache API.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from conftest import SOURCE_URL
from image_cache.api.app import app
from image_cache.api.dependencies import get_handler
from image_cache.handlers import ImageHandler


@pytest.fixture
def make_client(make_service):
    """Create a test client whose handler runs over temporary storage."""

    def _make(request_timeout: float = 10.0, **service_kwargs) -> TestClient:
        handler = ImageHandler(
            image_service=make_service(**service_kwargs),
            request_timeout=request_timeout,
            browser_cache_seconds=3600,
            timezone="Asia/Karachi",
        )
        app.dependency_overrides[get_handler] = lambda: handler
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client):
    return make_client()


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Image Cache API"
    assert data["endpoints"]["process_image"] == "/process-image"


def test_process_image_miss_then_hit(client, fetcher):
    params = {"url": SOURCE_URL, "width": 200, "quality": 70, "format": "webp"}

    first = client.get("/process-image", params=params)
    second = client.get("/process-image", params=params)

    assert first.status_code == 200
    assert first.headers["content-type"] == "image/webp"
    assert first.headers["x-cache"] == "MISS"
    assert first.headers["cache-control"] == "public, max-age=3600"
    assert len(first.headers["x-cache-key"]) == 32

    assert second.headers["x-cache"] == "HIT"
    assert second.headers["x-cache-key"] == first.headers["x-cache-key"]
    assert second.content == first.content
    assert len(fetcher.calls) == 1


def test_process_image_jpg_alias(client):
    response = client.get("/process-image", params={"url": SOURCE_URL, "format": "jpg"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/jpeg"


def test_process_image_missing_url(client):
    """A request without url is rejected before any fetch."""
    response = client.get("/process-image")
    assert response.status_code == 400
    assert response.json()["detail"] == "Image URL is required"


def test_process_image_unsupported_format(client):
    response = client.get("/process-image", params={"url": SOURCE_URL, "format": "bmp"})
    assert response.status_code == 400


def test_process_image_fetch_failure(client):
    response = client.get("/process-image", params={"url": "https://example.com/missing.png"})
    assert response.status_code == 404
    assert response.json()["detail"].startswith("Failed to process image")


def test_process_image_degraded(client, fetcher):
    fetcher.responses[SOURCE_URL] = b"not an image"

    response = client.get("/process-image", params={"url": SOURCE_URL, "width": 100})

    assert response.status_code == 200
    assert response.headers["x-cache"] == "DEGRADED"
    assert response.headers["content-type"] == "image/png"
    assert response.content == b"not an image"


def test_process_image_timeout(make_client, fetcher):
    fetcher.gate = asyncio.Event()
    client = make_client(request_timeout=0.05)

    response = client.get("/process-image", params={"url": SOURCE_URL})

    assert response.status_code == 504
    assert "timed out" in response.json()["detail"]


def test_process_image_requires_tenant(make_client):
    client = make_client(multi_tenant=True)
    response = client.get("/process-image", params={"url": SOURCE_URL})
    assert response.status_code == 400
    assert response.json()["detail"] == "Tenant identifier is required"


def test_process_image_tenant_header(make_client, fetcher):
    client = make_client(multi_tenant=True)

    first = client.get(
        "/process-image",
        params={"url": SOURCE_URL, "width": 200},
        headers={"X-Tenant-ID": "acme"},
    )
    second = client.get(
        "/process-image",
        params={"url": SOURCE_URL, "width": 100, "format": "png", "tenant": "acme"},
    )

    assert first.headers["x-cache"] == "MISS"
    assert second.headers["x-cache"] == "URL_HIT"
    assert second.headers["content-type"] == "image/webp"
    assert len(fetcher.calls) == 1


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["storage_healthy"] is True
    assert data["transformer_available"] is True


def test_get_stats(client):
    """Test stats endpoint."""
    client.get("/process-image", params={"url": SOURCE_URL})

    response = client.get("/stats")
    assert response.status_code == 200
    data = response.json()
    assert data["requests"]["total_requests"] == 1
    assert data["requests"]["status_counts"]["MISS"] == 1
    assert data["memory"]["entries"] == 1


def test_current_time(client):
    response = client.get("/current-time")
    assert response.status_code == 200
    data = response.json()
    assert data["timezone"] == "Asia/Karachi"
    day, month, year = data["date"].split("-")
    assert len(day) == 2 and len(month) == 2 and len(year) == 4
    assert len(data["time"].split(":")) == 3
