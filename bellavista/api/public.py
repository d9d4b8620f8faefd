"""
Public menu and contact endpoints.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bellavista.core.exceptions import DeliveryFailed
from bellavista.database import get_db
from bellavista.schemas import (
    ActionResponse,
    ContactRequest,
    ErrorResponse,
    MenuItemResponse,
    MenuSection,
)
from bellavista.services import menu as menu_service
from bellavista.services.notifications import BaseNotificationService, get_notification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get(
    "/menu",
    response_model=list[MenuSection],
    tags=["Menu"],
    summary="Browse the Menu",
)
async def get_menu(db: AsyncSession = Depends(get_db)) -> list[dict]:
    """Active categories in display order with their available dishes."""
    return await menu_service.public_menu(db)


@router.get(
    "/menu/featured",
    response_model=list[MenuItemResponse],
    tags=["Menu"],
    summary="Featured Dishes",
)
async def get_featured(db: AsyncSession = Depends(get_db)):
    return await menu_service.featured_items(db)


@router.post(
    "/contact",
    response_model=ActionResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Contact"],
    summary="Send a Message to the Restaurant",
)
async def contact(
    data: ContactRequest,
    notifier: BaseNotificationService = Depends(get_notification_service),
) -> ActionResponse:
    """Forward a contact form submission to the restaurant inbox."""
    logger.info(f"Contact form submission from {data.email}: {data.subject}")

    result = await notifier.send_contact_message(
        name=data.name,
        email=data.email,
        phone=data.phone,
        subject=data.subject,
        message=data.message,
    )
    if not result.success:
        logger.error(f"Contact message from {data.email} not delivered: {result.error_message}")
        raise DeliveryFailed("Your message could not be sent. Please try again or call us.")

    return ActionResponse(success=True, message="Contact form submitted successfully")
