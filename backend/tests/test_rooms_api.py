"""Room availability API tests."""

from __future__ import annotations

import datetime
from typing import Any

import pytest
from httpx import AsyncClient
from sqlalchemy import text

from lodge.core.dates import today
from lodge.db.session import get_sessionmaker

pytestmark = pytest.mark.asyncio


def _window(offset: int = 40, nights: int = 2) -> dict[str, str]:
    start = today() + datetime.timedelta(days=offset)
    return {
        "start_date": start.isoformat(),
        "end_date": (start + datetime.timedelta(days=nights)).isoformat(),
    }


async def test_booked_room_drops_out_of_availability(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    window = _window()
    created = await client.post(
        "/api/v1/bookings",
        json={
            "room_ids": ["201"],
            **window,
            "guests": {"adult": 2},
            "guest_name": "Tanaka",
        },
    )
    assert created.status_code == 201

    response = await client.get(
        "/api/v1/rooms/availability", params={**window, "guest_count": 2}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["is_available"] is True
    assert [room["room_id"] for room in body["available_rooms"]] == ["202", "203"]
    assert body["partially_available_rooms"] == []
    assert body["occupancy_rate"] == 33

    excluded = await client.get(
        "/api/v1/rooms/availability",
        params={**window, "guest_count": 4, "exclude_booking_id": created.json()["id"]},
    )
    assert [room["room_id"] for room in excluded.json()["available_rooms"]] == [
        "201",
        "203",
    ]

    occupancy = await client.get("/api/v1/rooms/occupancy", params=window)
    assert occupancy.status_code == 200
    nights = occupancy.json()
    assert [night["date"] for night in nights] == [
        window["start_date"],
        (datetime.date.fromisoformat(window["start_date"]) + datetime.timedelta(days=1)).isoformat(),
    ]
    assert all(night["occupied_room_ids"] == ["201"] for night in nights)
    assert all(night["available_rooms"] == 2 for night in nights)


async def test_availability_rejects_bad_ranges(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    window = _window()
    inverted = {"start_date": window["end_date"], "end_date": window["start_date"]}

    search = await client.get("/api/v1/rooms/availability", params=inverted)
    assert search.status_code == 400

    occupancy = await client.get("/api/v1/rooms/occupancy", params=inverted)
    assert occupancy.status_code == 400

    no_guests = await client.get(
        "/api/v1/rooms/availability", params={**window, "guest_count": 0}
    )
    assert no_guests.status_code == 422


async def test_availability_store_failure_is_service_unavailable(
    app_context: dict[str, Any], db_url: str
) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    async with get_sessionmaker(db_url)() as session:
        await session.execute(text("DROP TABLE booking_rooms"))
        await session.commit()

    response = await client.get("/api/v1/rooms/availability", params=_window())

    assert response.status_code == 503
    assert "overlap query failed" in response.json()["detail"]
