"""Pure helper tests: dates, pricing, booking numbers, status machine, redaction."""
from __future__ import annotations

import logging
import re
from datetime import UTC, date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.core.errors import InvalidStatusTransition, ValidationError
from app.models import Booking, BookingStatus
from app.security.logging_filters import SensitiveFilter
from app.security.redact import mask_email
from app.services import availability_service, booking_service

JUNE_1 = date(2030, 6, 1)


def test_to_utc_date_normalises_inputs() -> None:
    aware = datetime(2030, 6, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
    assert availability_service.to_utc_date(aware) == date(2030, 6, 2)
    assert availability_service.to_utc_date("2030-06-01") == JUNE_1
    assert availability_service.to_utc_date("2030-06-01T08:00:00+00:00") == JUNE_1
    assert availability_service.to_utc_date(datetime(2030, 6, 1, 12, tzinfo=UTC)) == JUNE_1
    with pytest.raises(ValidationError):
        availability_service.to_utc_date("not-a-date")


def test_iter_nights_is_half_open() -> None:
    nights = list(availability_service.iter_nights(JUNE_1, JUNE_1 + timedelta(days=3)))
    assert nights == [JUNE_1, date(2030, 6, 2), date(2030, 6, 3)]
    assert list(availability_service.iter_nights(JUNE_1, JUNE_1)) == []


def test_validate_stay_rejects_empty_range() -> None:
    with pytest.raises(ValidationError):
        availability_service.validate_stay(JUNE_1, JUNE_1)
    assert availability_service.validate_stay("2030-06-01", "2030-06-04") == (
        JUNE_1,
        date(2030, 6, 4),
    )


def test_booking_number_format() -> None:
    moment = datetime(2030, 6, 1, 12, 0, tzinfo=UTC)
    number = booking_service.generate_booking_number(moment)
    assert re.fullmatch(r"BK300601\d{8}", number)
    millis = int(moment.timestamp() * 1000) % 1_000_000
    assert number[8:14] == f"{millis:06d}"


def test_price_is_nightly_rate_times_nights() -> None:
    nights, total = booking_service.calculate_booking_price(
        Decimal("55.00"), JUNE_1, date(2030, 6, 4)
    )
    assert nights == 3
    assert total == Decimal("165.00")


def _booking(status: BookingStatus) -> Booking:
    return Booking(booking_number="BK1", status=status, status_history=[])


def test_transition_appends_history_and_stamps() -> None:
    booking = _booking(BookingStatus.PENDING)
    original_history = booking.status_history
    moment = datetime(2030, 6, 1, 9, tzinfo=UTC)

    assert booking_service.transition_status(booking, BookingStatus.CONFIRMED, now=moment)
    assert booking.status is BookingStatus.CONFIRMED
    assert booking.confirmed_at == moment
    assert booking.status_history == [
        {"from": "PENDING", "to": "CONFIRMED", "timestamp": moment.isoformat()}
    ]
    assert original_history == []

    assert booking_service.transition_status(booking, BookingStatus.CANCELLED, now=moment)
    assert booking.cancelled_at == moment
    assert len(booking.status_history) == 2


def test_same_status_is_noop() -> None:
    booking = _booking(BookingStatus.CONFIRMED)
    assert not booking_service.transition_status(booking, BookingStatus.CONFIRMED)
    assert booking.status_history == []


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (BookingStatus.PENDING, BookingStatus.COMPLETED),
        (BookingStatus.CANCELLED, BookingStatus.CONFIRMED),
        (BookingStatus.COMPLETED, BookingStatus.CANCELLED),
        (BookingStatus.NO_SHOW, BookingStatus.PENDING),
        (BookingStatus.CONFIRMED, BookingStatus.PENDING),
    ],
)
def test_invalid_transitions_are_rejected(current: BookingStatus, target: BookingStatus) -> None:
    booking = _booking(current)
    with pytest.raises(InvalidStatusTransition):
        booking_service.transition_status(booking, target)
    assert booking.status is current
    assert booking.status_history == []


def test_group_status_priority() -> None:
    resolve = booking_service.resolve_group_status
    assert resolve([BookingStatus.PENDING, BookingStatus.CONFIRMED]) is BookingStatus.CONFIRMED
    assert resolve([BookingStatus.CANCELLED, BookingStatus.COMPLETED]) is BookingStatus.COMPLETED
    assert resolve([BookingStatus.NO_SHOW, BookingStatus.CANCELLED]) is BookingStatus.CANCELLED


def test_mask_email() -> None:
    assert mask_email("ada@example.com") == "a***@example.com"
    assert mask_email("not-an-email") == "not-an-email"
    assert mask_email(None) is None


def test_sensitive_filter_masks_guest_email_and_tokens() -> None:
    record = logging.LogRecord(
        "app",
        logging.INFO,
        __file__,
        1,
        'lookup for ada.lovelace@example.com with Authorization: Bearer abc.def "password": "hunter2"',
        None,
        None,
    )
    assert SensitiveFilter().filter(record)
    assert "ada.lovelace@" not in record.msg
    assert "a***@example.com" in record.msg
    assert "abc.def" not in record.msg
    assert "hunter2" not in record.msg
