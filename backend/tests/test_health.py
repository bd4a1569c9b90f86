"""Health endpoint smoke test."""

from typing import Any

import pytest
from httpx import AsyncClient

from lodge.core.dates import today


@pytest.mark.asyncio
async def test_healthcheck_returns_ok(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["service"] == "Lodge Reservations API"
    assert payload["database"] == "ok"
    assert payload["timezone"] == "Asia/Tokyo"
    assert payload["local_date"] == today("Asia/Tokyo").isoformat()
    assert "x-request-id" in response.headers
