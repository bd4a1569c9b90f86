"""Booking validation, locking and lifecycle API tests."""

from __future__ import annotations

import datetime
import uuid
from typing import Any

import pytest
from httpx import AsyncClient

from lodge.core.dates import today

pytestmark = pytest.mark.asyncio


def _window(offset: int = 45, nights: int = 2) -> dict[str, str]:
    start = today() + datetime.timedelta(days=offset)
    return {
        "start_date": start.isoformat(),
        "end_date": (start + datetime.timedelta(days=nights)).isoformat(),
    }


def _booking_payload(room_ids: list[str], window: dict[str, str], **extra: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "room_ids": room_ids,
        **window,
        "guests": {"adult": 2},
        "guest_name": "Tanaka",
        "guest_email": "tanaka@example.com",
    }
    payload.update(extra)
    return payload


async def test_booking_lifecycle(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    window = _window()

    create_resp = await client.post("/api/v1/bookings", json=_booking_payload(["201"], window))
    assert create_resp.status_code == 201
    booking = create_resp.json()
    assert booking["status"] == "confirmed"
    assert booking["nights"] == 2
    assert [room["room_id"] for room in booking["rooms"]] == ["201"]

    get_resp = await client.get(f"/api/v1/bookings/{booking['id']}")
    assert get_resp.status_code == 200
    assert get_resp.json()["guest_name"] == "Tanaka"

    overlap = _window(offset=46)
    status_resp = await client.post(
        "/api/v1/bookings/conflict-status", json={"room_ids": ["201"], **overlap}
    )
    assert status_resp.status_code == 200
    status_body = status_resp.json()
    assert status_body["success"] is False
    assert status_body["message"] == "1 overlapping booking(s) found"
    assert status_body["conflicts"][0]["conflicting_booking_id"] == booking["id"]
    assert status_body["poll_interval_seconds"] == 30

    own_status = await client.post(
        "/api/v1/bookings/conflict-status",
        json={"room_ids": ["201"], **window, "exclude_booking_id": booking["id"]},
    )
    assert own_status.json()["success"] is True

    conflict_resp = await client.post(
        "/api/v1/bookings", json=_booking_payload(["201"], overlap)
    )
    assert conflict_resp.status_code == 409
    detail = conflict_resp.json()["detail"]
    assert detail["can_proceed"] is False
    assert "Overlapping booking detected" in detail["errors"]

    cancel_resp = await client.post(f"/api/v1/bookings/{booking['id']}/cancel")
    assert cancel_resp.status_code == 200
    assert cancel_resp.json()["status"] == "cancelled"

    again = await client.post(f"/api/v1/bookings/{booking['id']}/cancel")
    assert again.status_code == 400

    rebook_resp = await client.post(
        "/api/v1/bookings", json=_booking_payload(["201"], overlap)
    )
    assert rebook_resp.status_code == 201


async def test_validate_reports_all_errors(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    past_start = today() - datetime.timedelta(days=3)

    response = await client.post(
        "/api/v1/bookings/validate",
        json={
            "room_ids": ["202"],
            "start_date": past_start.isoformat(),
            "end_date": (past_start + datetime.timedelta(days=1)).isoformat(),
            "guest_count": 3,
            "guest_name": "",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["is_valid"] is False
    assert body["errors"] == [
        "Guest count 3 exceeds the combined room capacity of 2",
        "Check-in date cannot be in the past",
        "Representative name is required",
    ]


async def test_create_rejects_invalid_bookings(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    window = _window()

    too_many = await client.post(
        "/api/v1/bookings",
        json=_booking_payload(["202"], window, guests={"adult": 3}),
    )
    assert too_many.status_code == 400
    assert too_many.json()["detail"]["errors"] == [
        "Guest count 3 exceeds the combined room capacity of 2"
    ]

    cancelled_status = await client.post(
        "/api/v1/bookings", json=_booking_payload(["201"], window, status="cancelled")
    )
    assert cancelled_status.status_code == 400

    inactive_room = await client.post(
        "/api/v1/bookings", json=_booking_payload(["204"], window)
    )
    assert inactive_room.status_code == 400

    missing = await client.get(f"/api/v1/bookings/{uuid.uuid4()}")
    assert missing.status_code == 404


async def test_create_reports_every_error_for_inverted_dates(
    app_context: dict[str, Any],
) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    window = _window()
    inverted = {"start_date": window["end_date"], "end_date": window["start_date"]}

    response = await client.post(
        "/api/v1/bookings", json=_booking_payload(["201"], inverted, guest_name=" ")
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["is_valid"] is False
    assert "Check-out date must be after the check-in date" in detail["errors"]
    assert "Representative name is required" in detail["errors"]


async def test_locks_are_exclusive_per_session(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    window = _window()

    first = await client.post(
        "/api/v1/bookings/locks", json={"session_id": "a", "room_ids": ["203"], **window}
    )
    second = await client.post(
        "/api/v1/bookings/locks", json={"session_id": "b", "room_ids": ["203"], **window}
    )
    inverted = await client.post(
        "/api/v1/bookings/locks",
        json={
            "session_id": "b",
            "room_ids": ["203"],
            "start_date": window["end_date"],
            "end_date": window["start_date"],
        },
    )

    assert first.status_code == 200
    assert first.json()["lock_acquired"] is True
    assert first.json()["lock_expires_at"] is not None
    assert second.json() == {
        "lock_acquired": False,
        "lock_expires_at": None,
        "other_active_sessions": 1,
    }
    assert inverted.status_code == 400


async def test_resolve_suggests_alternatives(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    window = _window()

    created = await client.post("/api/v1/bookings", json=_booking_payload(["202"], window))
    assert created.status_code == 201

    response = await client.post(
        "/api/v1/bookings/resolve",
        json={"room_ids": ["202"], **window, "guest_count": 2},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["has_new_conflicts"] is True
    options = {option["type"]: option["data"] for option in body["resolution_options"]}
    assert options["alternative_rooms"] == {"room_ids": ["201"], "total_capacity": 4}
    assert len(options["alternative_dates"]["date_ranges"]) == 5
