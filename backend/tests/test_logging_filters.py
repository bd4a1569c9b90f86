"""Tests for the contact-detail log scrubber."""

from __future__ import annotations

import logging

from lodge.security.logging_filters import SensitiveFilter


def _record(msg: str, *args: object) -> logging.LogRecord:
    return logging.LogRecord("lodge", logging.INFO, __file__, 1, msg, args, None)


def test_email_and_phone_are_redacted() -> None:
    record = _record("Booking for %s (%s)", "tanaka@example.com", "090-1234-5678")

    assert SensitiveFilter().filter(record)

    assert record.getMessage() == "Booking for **REDACTED** (**REDACTED**)"


def test_dates_and_identifiers_are_kept() -> None:
    record = _record("Rooms %s booked 2025-06-15 to 2025-06-17", "201, 202")

    SensitiveFilter().filter(record)

    assert record.getMessage() == "Rooms 201, 202 booked 2025-06-15 to 2025-06-17"
