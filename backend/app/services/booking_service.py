"""Booking creation, lifecycle and guest self-service."""
from __future__ import annotations

import asyncio
import enum
import logging
import secrets
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import get_settings
from app.core.errors import (
    ConstraintViolation,
    InvalidStatusTransition,
    NotFoundOrUnauthorized,
    RoomNotAvailable,
    RoomNotFound,
)
from app.db.session import SERIALIZABLE
from app.models.booking import ACTIVE_BOOKING_STATUSES, Booking, BookingStatus
from app.models.room import Room
from app.security.redact import mask_email
from app.services.availability_service import load_capacity_snapshot, validate_stay

logger = logging.getLogger(__name__)

GROUP_FIRST_TOKEN = "__FIRST__"

_ALLOWED_STATUS_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
        BookingStatus.NO_SHOW,
    },
    BookingStatus.CONFIRMED: {
        BookingStatus.COMPLETED,
        BookingStatus.CANCELLED,
        BookingStatus.NO_SHOW,
    },
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
    BookingStatus.NO_SHOW: set(),
}

_GROUP_STATUS_PRIORITY: dict[BookingStatus, int] = {
    BookingStatus.COMPLETED: 5,
    BookingStatus.CONFIRMED: 4,
    BookingStatus.PENDING: 3,
    BookingStatus.CANCELLED: 2,
    BookingStatus.NO_SHOW: 1,
}

# SQLSTATEs PostgreSQL uses for serialization failures and deadlocks.
_RETRYABLE_SQLSTATES = {"40001", "40P01"}


class BookingOutcome(str, enum.Enum):
    """Result of one booking attempt."""

    CREATED = "created"
    CONFLICT = "conflict"
    UNAVAILABLE = "unavailable"
    ROOM_NOT_FOUND = "room_not_found"


@dataclass(frozen=True)
class BookingResult:
    """Outcome of :func:`create_booking`; only ``CONFLICT`` is worth retrying."""

    outcome: BookingOutcome
    booking: Booking | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is BookingOutcome.CREATED

    def unwrap(self) -> Booking:
        if self.outcome is BookingOutcome.CREATED and self.booking is not None:
            return self.booking
        if self.outcome is BookingOutcome.ROOM_NOT_FOUND:
            raise RoomNotFound()
        if self.outcome is BookingOutcome.UNAVAILABLE:
            raise RoomNotAvailable()
        raise ConstraintViolation("Booking could not be completed, please try again")


@dataclass(frozen=True)
class GroupReconciliation:
    """Summary of one reservation group brought back to a single status."""

    group_id: str
    statuses: tuple[BookingStatus, ...]
    resolved_status: BookingStatus
    updated: int
    overbooked: tuple[str, ...] = ()


def generate_booking_number(now: datetime | None = None) -> str:
    """Return ``<prefix><YYMMDD><6 ms digits><2 random digits>``.

    Uniqueness is enforced by the ``bookings.booking_number`` constraint.
    """
    moment = now or datetime.now(UTC)
    millis = int(moment.timestamp() * 1000) % 1_000_000
    suffix = secrets.randbelow(100)
    prefix = get_settings().booking_number_prefix
    return f"{prefix}{moment:%y%m%d}{millis:06d}{suffix:02d}"


def calculate_booking_price(
    price_per_night: Decimal, check_in: date, check_out: date
) -> tuple[int, Decimal]:
    """Return ``(number_of_nights, total_price)`` for a stay."""
    number_of_nights = (check_out - check_in).days
    total = (Decimal(price_per_night) * number_of_nights).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )
    return number_of_nights, total


def _is_retryable(exc: DBAPIError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code in _RETRYABLE_SQLSTATES:
        return True
    return isinstance(exc, OperationalError) and "database is locked" in str(orig).lower()


async def create_booking(
    session: AsyncSession,
    *,
    room_id: uuid.UUID,
    check_in_date: date | datetime | str,
    check_out_date: date | datetime | str,
    guest_name: str,
    guest_email: str,
    guest_phone: str,
    number_of_guests: int = 1,
    special_requests: str | None = None,
    reservation_group_id: str | None = None,
) -> BookingResult:
    """Reserve one unit of a room inside a single serializable transaction.

    Every night of the stay is re-checked against committed state inside the
    transaction. Nothing is written unless the outcome is ``CREATED``.
    """
    check_in, check_out = validate_stay(check_in_date, check_out_date)

    if session.new or session.dirty or session.deleted:
        raise RuntimeError("create_booking requires a session without pending changes")
    if session.in_transaction():
        await session.rollback()

    try:
        await session.connection(execution_options={"isolation_level": SERIALIZABLE})

        room = await session.get(Room, room_id, populate_existing=True)
        if room is None or not room.is_active:
            await session.rollback()
            return BookingResult(BookingOutcome.ROOM_NOT_FOUND)

        snapshot = await load_capacity_snapshot(session, room, check_in, check_out)
        if not snapshot.is_available(check_in, check_out):
            await session.rollback()
            return BookingResult(BookingOutcome.UNAVAILABLE)

        number_of_nights, total_price = calculate_booking_price(
            room.price_per_night, check_in, check_out
        )
        booking_number = generate_booking_number()
        if reservation_group_id == GROUP_FIRST_TOKEN:
            group_id: str | None = booking_number
        else:
            group_id = reservation_group_id or None

        booking = Booking(
            booking_number=booking_number,
            reservation_group_id=group_id,
            room_id=room.id,
            check_in_date=check_in,
            check_out_date=check_out,
            number_of_nights=number_of_nights,
            number_of_guests=number_of_guests,
            guest_name=guest_name,
            guest_email=guest_email,
            guest_phone=guest_phone,
            special_requests=special_requests,
            price_per_night=room.price_per_night,
            total_price=total_price,
            status=BookingStatus.PENDING,
            status_history=[],
        )
        booking.room = room
        session.add(booking)
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConstraintViolation("Booking could not be stored") from exc
    except DBAPIError as exc:
        await session.rollback()
        if _is_retryable(exc):
            logger.warning("Booking transaction for room %s hit a conflict", room_id)
            return BookingResult(BookingOutcome.CONFLICT)
        raise

    logger.info(
        "Created booking %s for room %s (%s -> %s) guest=%s",
        booking.booking_number,
        room_id,
        check_in.isoformat(),
        check_out.isoformat(),
        mask_email(guest_email),
    )
    return BookingResult(BookingOutcome.CREATED, booking)


async def create_booking_with_retry(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    attempts: int | None = None,
    backoff_seconds: float = 0.05,
    **fields: object,
) -> BookingResult:
    """Run :func:`create_booking` in fresh sessions, retrying only on conflicts."""
    max_attempts = max(1, attempts or get_settings().booking_retry_attempts)
    result = BookingResult(BookingOutcome.CONFLICT)
    for attempt in range(1, max_attempts + 1):
        async with session_factory() as session:
            result = await create_booking(session, **fields)  # type: ignore[arg-type]
        if result.outcome is not BookingOutcome.CONFLICT:
            return result
        logger.info("Retrying booking after conflict (attempt %s/%s)", attempt, max_attempts)
        await asyncio.sleep(backoff_seconds * attempt)
    return result


def _validate_status_transition(current: BookingStatus, target: BookingStatus) -> None:
    allowed = _ALLOWED_STATUS_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidStatusTransition(
            f"Invalid status transition from {current.value} to {target.value}"
        )


def _record_status(booking: Booking, target: BookingStatus, now: datetime) -> None:
    entry = {
        "from": booking.status.value,
        "to": target.value,
        "timestamp": now.isoformat(),
    }
    # a fresh list so earlier history objects are never mutated
    booking.status_history = [*(booking.status_history or []), entry]
    booking.status = target
    if target is BookingStatus.CONFIRMED:
        booking.confirmed_at = now
    elif target is BookingStatus.CANCELLED:
        booking.cancelled_at = now


def transition_status(
    booking: Booking, target: BookingStatus, *, now: datetime | None = None
) -> bool:
    """Apply a state-machine transition; returns False for a same-status no-op."""
    if target == booking.status:
        return False
    _validate_status_transition(booking.status, target)
    _record_status(booking, target, now or datetime.now(UTC))
    return True


def _booking_query():
    return select(Booking).order_by(Booking.created_at.desc())


async def list_bookings(
    session: AsyncSession,
    *,
    status: BookingStatus | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[Sequence[Booking], int]:
    stmt = _booking_query()
    count_stmt = select(func.count()).select_from(Booking)
    if status is not None:
        stmt = stmt.where(Booking.status == status)
        count_stmt = count_stmt.where(Booking.status == status)
    page = max(page, 1)
    result = await session.execute(stmt.offset((page - 1) * limit).limit(limit))
    total = (await session.execute(count_stmt)).scalar_one()
    return result.scalars().all(), total


async def get_booking(session: AsyncSession, booking_id: uuid.UUID) -> Booking | None:
    result = await session.execute(_booking_query().where(Booking.id == booking_id))
    return result.scalar_one_or_none()


async def update_booking(
    session: AsyncSession,
    *,
    booking: Booking,
    status: BookingStatus | None = None,
    admin_notes: str | None = None,
) -> Booking:
    """Admin update: optional status transition plus internal notes."""
    if status is not None:
        previous = booking.status
        if transition_status(booking, status):
            logger.info(
                "Booking %s moved from %s to %s",
                booking.booking_number,
                previous.value,
                status.value,
            )
    if admin_notes is not None:
        booking.admin_notes = admin_notes
    await session.commit()
    await session.refresh(booking)
    return booking


async def delete_booking(session: AsyncSession, *, booking: Booking) -> None:
    await session.delete(booking)
    await session.commit()


def _email_matches(booking: Booking, email: str) -> bool:
    return booking.guest_email.strip().lower() == email.strip().lower()


async def _find_by_number(session: AsyncSession, booking_number: str) -> Booking | None:
    result = await session.execute(
        select(Booking).where(Booking.booking_number == booking_number.strip())
    )
    return result.scalar_one_or_none()


async def lookup_guest_bookings(
    session: AsyncSession, *, booking_number: str, email: str
) -> list[Booking]:
    """Return the booking (or its whole reservation group) for a guest.

    Unknown numbers and e-mail mismatches raise the same error.
    """
    booking = await _find_by_number(session, booking_number)
    if booking is None or not _email_matches(booking, email):
        logger.info("Guest lookup failed for %s", mask_email(email))
        raise NotFoundOrUnauthorized()
    if booking.reservation_group_id is None:
        return [booking]

    result = await session.execute(
        select(Booking)
        .where(
            Booking.reservation_group_id == booking.reservation_group_id,
            func.lower(Booking.guest_email) == booking.guest_email.strip().lower(),
        )
        .order_by(Booking.created_at.asc())
    )
    return list(result.scalars().all())


async def cancel_guest_booking(
    session: AsyncSession,
    *,
    booking_number: str,
    email: str,
    now: datetime | None = None,
) -> Booking:
    """Cancel a guest's booking and every active booking in its group.

    ``booking_number`` may also be a reservation-group id.
    """
    booking = await _find_by_number(session, booking_number)
    if booking is None:
        result = await session.execute(
            select(Booking)
            .where(Booking.reservation_group_id == booking_number.strip())
            .order_by(Booking.created_at.asc())
            .limit(1)
        )
        booking = result.scalar_one_or_none()

    if booking is None or not _email_matches(booking, email):
        logger.info("Guest cancellation failed for %s", mask_email(email))
        raise NotFoundOrUnauthorized()

    if booking.status not in ACTIVE_BOOKING_STATUSES:
        raise InvalidStatusTransition(
            f"This booking is already {booking.status.value.lower()} "
            "and cannot be cancelled."
        )

    moment = now or datetime.now(UTC)
    if booking.reservation_group_id is None:
        members: Iterable[Booking] = [booking]
    else:
        result = await session.execute(
            select(Booking).where(
                Booking.reservation_group_id == booking.reservation_group_id,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            )
        )
        members = result.scalars().all()

    cancelled = 0
    for member in members:
        if transition_status(member, BookingStatus.CANCELLED, now=moment):
            cancelled += 1
    await session.commit()
    await session.refresh(booking)
    logger.info(
        "Guest cancelled %s booking(s) under %s", cancelled, booking.booking_number
    )
    return booking


async def _has_capacity_for(session: AsyncSession, booking: Booking) -> bool:
    """Whether every night of ``booking`` still has a unit free besides itself."""
    room = await session.get(Room, booking.room_id)
    if room is None:
        return False
    snapshot = await load_capacity_snapshot(
        session,
        room,
        booking.check_in_date,
        booking.check_out_date,
        exclude_booking_id=booking.id,
    )
    return snapshot.is_available(booking.check_in_date, booking.check_out_date)


def resolve_group_status(statuses: Iterable[BookingStatus]) -> BookingStatus:
    """Most advanced status: COMPLETED > CONFIRMED > PENDING > CANCELLED > NO_SHOW."""
    return max(statuses, key=lambda status: _GROUP_STATUS_PRIORITY[status])


async def reconcile_group_statuses(
    session: AsyncSession, *, now: datetime | None = None
) -> list[GroupReconciliation]:
    """Bring every reservation group with diverging statuses back to one status."""
    result = await session.execute(
        select(Booking)
        .where(Booking.reservation_group_id.is_not(None))
        .order_by(Booking.created_at.asc())
    )
    groups: dict[str, list[Booking]] = {}
    for booking in result.scalars().all():
        groups.setdefault(booking.group_key, []).append(booking)

    moment = now or datetime.now(UTC)
    report: list[GroupReconciliation] = []
    for group_id, members in groups.items():
        statuses = tuple(dict.fromkeys(member.status for member in members))
        if len(statuses) < 2:
            continue
        target = resolve_group_status(statuses)
        updated = 0
        overbooked: list[str] = []
        for member in members:
            if member.status == target:
                continue
            if (
                member.status not in ACTIVE_BOOKING_STATUSES
                and target in ACTIVE_BOOKING_STATUSES
                and not await _has_capacity_for(session, member)
            ):
                overbooked.append(member.booking_number)
                logger.warning(
                    "Reactivating booking %s in group %s exceeds room capacity",
                    member.booking_number,
                    group_id,
                )
            _record_status(member, target, moment)
            updated += 1
        report.append(
            GroupReconciliation(
                group_id=group_id,
                statuses=statuses,
                resolved_status=target,
                updated=updated,
                overbooked=tuple(overbooked),
            )
        )
        logger.info(
            "Reservation group %s reconciled to %s (%s booking(s) updated)",
            group_id,
            target.value,
            updated,
        )
    if report:
        await session.commit()
    return report


async def cleanup_cancelled_bookings(
    session: AsyncSession, *, now: datetime | None = None
) -> int:
    """Delete cancelled bookings cancelled before the current month began."""
    moment = now or datetime.now(UTC)
    cutoff = datetime(moment.year, moment.month, 1, tzinfo=UTC)
    result = await session.execute(
        delete(Booking).where(
            Booking.status == BookingStatus.CANCELLED,
            Booking.cancelled_at < cutoff,
        )
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    deleted = result.rowcount or 0
    logger.info("Removed %s cancelled booking(s) older than %s", deleted, cutoff.date())
    return deleted
