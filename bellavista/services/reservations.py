"""
Reservation Service

Booking intake, one-time-passcode verification and resend, and the admin
status changes. All state lives in the database; every write goes through
the ``version`` column so two requests racing on the same reservation cannot
both win.

Lifecycle:
    PENDING --(verified code)--> CONFIRMED --> COMPLETED
    PENDING / CONFIRMED --> CANCELLED
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from kombu.exceptions import OperationalError
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from bellavista.core.config import get_settings
from bellavista.core.exceptions import (
    CodeExpired,
    Conflict,
    InvalidCode,
    NotFound,
    ResendTooSoon,
    ValidationFailed,
)
from bellavista.models import Reservation, ReservationStatus, utcnow
from bellavista.schemas import ReservationCreate
from bellavista.services.notifications import BaseNotificationService
from bellavista.tasks import export_reservation_to_excel

logger = logging.getLogger(__name__)
settings = get_settings()

# Changes an admin may make. PENDING -> CONFIRMED is reserved for verify_code().
ADMIN_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset({ReservationStatus.CANCELLED}),
    ReservationStatus.CONFIRMED: frozenset({ReservationStatus.CANCELLED, ReservationStatus.COMPLETED}),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.COMPLETED: frozenset(),
}


# =============================================================================
# HELPERS
# =============================================================================

def generate_code(previous: Optional[str] = None) -> str:
    """Six digits, uniform over 100000-999999, never equal to ``previous``."""
    while True:
        code = str(100000 + secrets.randbelow(900000))
        if code != previous:
            return code


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; they are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def code_expires_at(issued_at: datetime) -> datetime:
    return issued_at + timedelta(minutes=settings.otp_ttl_minutes)


def _ledger_row(reservation: Reservation) -> dict:
    """JSON-safe payload for the Celery export task."""
    return {
        "reservation_id": reservation.id,
        "reservation_date": reservation.reservation_date.isoformat(),
        "reservation_time": reservation.reservation_time.strftime("%H:%M"),
        "customer_name": reservation.customer_name,
        "customer_phone": reservation.customer_phone,
        "customer_email": reservation.customer_email,
        "party_size": reservation.party_size,
        "special_requests": reservation.special_requests,
        "status": reservation.status.value,
        "confirmed_at": reservation.confirmed_at.isoformat() if reservation.confirmed_at else None,
        "created_at": reservation.created_at.isoformat() if reservation.created_at else None,
    }


async def _commit(db: AsyncSession) -> None:
    """Commit, turning a lost optimistic-lock race into a 409."""
    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        raise Conflict("Reservation was changed by another request. Please retry.")


async def _get(db: AsyncSession, reservation_id: str) -> Reservation:
    result = await db.execute(select(Reservation).where(Reservation.id == reservation_id))
    reservation = result.scalar_one_or_none()
    if reservation is None:
        raise NotFound("Reservation not found")
    return reservation


async def _send_code(
    notifier: BaseNotificationService,
    reservation: Reservation,
) -> bool:
    if settings.is_development:
        logger.info(f"Verification code for reservation {reservation.id}: {reservation.otp_code}")

    result = await notifier.send_verification_code(
        reservation_id=reservation.id,
        customer_name=reservation.customer_name,
        customer_email=reservation.customer_email,
        customer_phone=reservation.customer_phone,
        code=reservation.otp_code,
        ttl_minutes=settings.otp_ttl_minutes,
    )
    if not result.success:
        logger.warning(
            f"Verification code for reservation {reservation.id} not delivered: {result.error_message}"
        )
    return result.success


# =============================================================================
# INTAKE / VERIFY / RESEND
# =============================================================================

async def create_reservation(
    db: AsyncSession,
    data: ReservationCreate,
    notifier: BaseNotificationService,
) -> tuple[Reservation, bool]:
    """
    Persist a PENDING reservation and send its verification code.

    Returns:
        The reservation and whether the code reached the guest.
    """
    if data.party_size > settings.max_party_size:
        raise ValidationFailed(
            f"Online bookings are limited to {settings.max_party_size} guests. "
            f"Please call us on {settings.restaurant_phone}."
        )

    issued_at = utcnow()
    reservation = Reservation(
        customer_name=data.customer_name,
        customer_email=data.customer_email,
        customer_phone=data.customer_phone,
        party_size=data.party_size,
        reservation_date=data.reservation_date,
        reservation_time=data.reservation_time,
        special_requests=data.special_requests,
        otp_code=generate_code(),
        otp_created_at=issued_at,
        otp_expires_at=code_expires_at(issued_at),
        otp_verified=False,
        status=ReservationStatus.PENDING,
    )

    db.add(reservation)
    await db.commit()
    await db.refresh(reservation)

    logger.info(
        f"Reservation {reservation.id} created for {reservation.customer_name} "
        f"({reservation.party_size} guests on {reservation.reservation_date} "
        f"at {reservation.reservation_time.strftime('%H:%M')})"
    )

    sent = await _send_code(notifier, reservation)
    return reservation, sent


async def verify_code(
    db: AsyncSession,
    reservation_id: str,
    code: str,
    notifier: BaseNotificationService,
) -> Reservation:
    """Confirm a PENDING reservation whose code matches and has not expired."""
    result = await db.execute(
        select(Reservation).where(
            Reservation.id == reservation_id,
            Reservation.otp_code == code,
        )
    )
    reservation = result.scalar_one_or_none()

    # Same error for a wrong code and an unknown id
    if reservation is None:
        logger.info(f"Rejected verification code for reservation {reservation_id}")
        raise InvalidCode()

    if reservation.status != ReservationStatus.PENDING:
        raise Conflict(f"Reservation is already {reservation.status.value}")

    now = utcnow()
    expires_at = reservation.otp_expires_at or code_expires_at(reservation.otp_created_at)
    if now > as_utc(expires_at):
        logger.info(f"Expired verification code for reservation {reservation_id}")
        raise CodeExpired()

    reservation.status = ReservationStatus.CONFIRMED
    reservation.otp_verified = True
    reservation.confirmed_at = now
    await _commit(db)

    logger.info(f"Reservation {reservation.id} confirmed")

    try:
        export_reservation_to_excel.delay(_ledger_row(reservation))
    except (OperationalError, OSError) as e:
        logger.error(f"Ledger export for reservation {reservation.id} failed: {e}")

    confirmation = await notifier.send_reservation_confirmation(
        reservation_id=reservation.id,
        customer_name=reservation.customer_name,
        customer_email=reservation.customer_email,
        customer_phone=reservation.customer_phone,
        party_size=reservation.party_size,
        reservation_date=reservation.reservation_date,
        reservation_time=reservation.reservation_time,
    )
    if not confirmation.success:
        logger.warning(f"Confirmation for reservation {reservation.id} not delivered")

    return reservation


async def resend_code(
    db: AsyncSession,
    reservation_id: str,
    notifier: BaseNotificationService,
) -> bool:
    """Issue a fresh code, at most once per cooldown window."""
    reservation = await _get(db, reservation_id)

    if reservation.status != ReservationStatus.PENDING:
        raise Conflict(f"Reservation is already {reservation.status.value}")

    now = utcnow()
    if reservation.otp_created_at is not None:
        elapsed = (now - as_utc(reservation.otp_created_at)).total_seconds()
        if elapsed < settings.otp_resend_cooldown_seconds:
            raise ResendTooSoon()

    reservation.otp_code = generate_code(previous=reservation.otp_code)
    reservation.otp_created_at = now
    reservation.otp_expires_at = code_expires_at(now)
    await _commit(db)

    logger.info(f"New verification code issued for reservation {reservation.id}")
    return await _send_code(notifier, reservation)


# =============================================================================
# QUERIES
# =============================================================================

async def get_confirmed_reservation(db: AsyncSession, reservation_id: str) -> Reservation:
    result = await db.execute(
        select(Reservation).where(
            Reservation.id == reservation_id,
            Reservation.status == ReservationStatus.CONFIRMED,
        )
    )
    reservation = result.scalar_one_or_none()
    if reservation is None:
        raise NotFound("Reservation not found")
    return reservation


async def list_reservations(
    db: AsyncSession,
    status: Optional[ReservationStatus] = None,
    skip: int = 0,
    limit: int = 50,
) -> tuple[int, list[Reservation]]:
    query = select(Reservation).order_by(Reservation.created_at.desc())
    count_query = select(func.count(Reservation.id))

    if status is not None:
        query = query.where(Reservation.status == status)
        count_query = count_query.where(Reservation.status == status)

    total = (await db.execute(count_query)).scalar() or 0
    result = await db.execute(query.offset(skip).limit(limit))
    return total, list(result.scalars().all())


# =============================================================================
# ADMIN
# =============================================================================

async def change_status(
    db: AsyncSession,
    reservation_id: str,
    new_status: ReservationStatus,
    expected_version: Optional[int] = None,
) -> Reservation:
    """Apply an admin status change if the transition table allows it."""
    reservation = await _get(db, reservation_id)

    if expected_version is not None and expected_version != reservation.version:
        raise Conflict("Reservation was changed since it was loaded. Please refresh.")

    current = reservation.status
    if new_status not in ADMIN_TRANSITIONS[current]:
        raise Conflict(f"Cannot change reservation from {current.value} to {new_status.value}")

    reservation.status = new_status
    reservation.updated_at = utcnow()
    await _commit(db)

    logger.info(f"Reservation {reservation.id}: {current.value} -> {new_status.value}")
    return reservation


async def delete_reservation(db: AsyncSession, reservation_id: str) -> None:
    reservation = await _get(db, reservation_id)
    await db.delete(reservation)
    await _commit(db)
    logger.info(f"Reservation {reservation_id} deleted")
