"""Integration tests for health, root and metrics endpoints."""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_liveness(raw_client: AsyncClient) -> None:
    response = await raw_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_readiness_with_database(raw_client: AsyncClient) -> None:
    response = await raw_client.get("/health/ready")

    assert response.status_code == 200
    body = response.json()
    assert body["ready"] is True
    assert body["checks"]["database"] == "connected"


@pytest.mark.asyncio
async def test_root(raw_client: AsyncClient) -> None:
    response = await raw_client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "operational"


@pytest.mark.asyncio
async def test_request_id_header_is_echoed(raw_client: AsyncClient) -> None:
    response = await raw_client.get("/health", headers={"X-Request-ID": "req_fixed123"})

    assert response.headers["X-Request-ID"] == "req_fixed123"


@pytest.mark.asyncio
async def test_metrics_endpoint_reports_api_and_snapshot_metrics(async_client: AsyncClient) -> None:
    await async_client.post("/api/admin/analytics/2025-07-22")

    response = await async_client.get("/metrics/")

    assert response.status_code == 200
    text = response.text
    assert "api_requests_total" in text
    assert 'path="/api/admin/analytics/{anchor_date}"' in text
    assert "analytics_snapshots_created_total" in text
