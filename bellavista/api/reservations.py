"""
Public reservation endpoints: booking, code verification and resend,
confirmed reservation lookup.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bellavista.database import get_db
from bellavista.schemas import (
    ActionResponse,
    ErrorResponse,
    ReservationCreate,
    ReservationCreateResponse,
    ReservationResponse,
    ReservationSummary,
    ResendOtpRequest,
    VerifyOtpRequest,
)
from bellavista.services import reservations as reservation_service
from bellavista.services.notifications import BaseNotificationService, get_notification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Reservations"])


@router.post(
    "/reservations",
    response_model=ReservationCreateResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Book a Table",
)
async def create_reservation(
    data: ReservationCreate,
    db: AsyncSession = Depends(get_db),
    notifier: BaseNotificationService = Depends(get_notification_service),
) -> ReservationCreateResponse:
    """
    Create a pending reservation.

    A six-digit verification code is sent to the guest by SMS and email. The
    reservation only counts once the code is submitted to /api/verify-otp.
    """
    reservation, sent = await reservation_service.create_reservation(db, data, notifier)

    return ReservationCreateResponse(
        success=True,
        message=(
            "Reservation received. Enter the verification code we sent you to confirm it."
            if sent else
            "Reservation received, but we could not send your code. Please request a new one."
        ),
        verification_sent=sent,
        reservation=ReservationSummary.model_validate(reservation),
    )


@router.post(
    "/verify-otp",
    response_model=ActionResponse,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Confirm a Reservation",
)
async def verify_otp(
    data: VerifyOtpRequest,
    db: AsyncSession = Depends(get_db),
    notifier: BaseNotificationService = Depends(get_notification_service),
) -> ActionResponse:
    """Check the verification code and confirm the reservation."""
    await reservation_service.verify_code(db, data.reservation_id, data.otp, notifier)
    return ActionResponse(success=True, message="Reservation confirmed successfully")


@router.post(
    "/resend-otp",
    response_model=ActionResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Send a New Verification Code",
)
async def resend_otp(
    data: ResendOtpRequest,
    db: AsyncSession = Depends(get_db),
    notifier: BaseNotificationService = Depends(get_notification_service),
) -> ActionResponse:
    """Replace the verification code. Limited to one request per minute."""
    sent = await reservation_service.resend_code(db, data.reservation_id, notifier)
    return ActionResponse(
        success=True,
        message="New verification code sent" if sent else "New code issued but delivery failed",
    )


@router.get(
    "/reservations/{reservation_id}",
    response_model=ReservationResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a Confirmed Reservation",
)
async def get_reservation(
    reservation_id: str,
    db: AsyncSession = Depends(get_db),
) -> ReservationResponse:
    """Only confirmed reservations are visible; anything else is a 404."""
    reservation = await reservation_service.get_confirmed_reservation(db, reservation_id)
    return ReservationResponse.model_validate(reservation)
