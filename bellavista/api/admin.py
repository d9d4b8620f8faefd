"""
Admin API: reservations, menu management, stats and analytics.
Every route requires a valid admin session.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from bellavista.core.exceptions import NotFound
from bellavista.database import get_db
from bellavista.models import ReservationStatus
from bellavista.schemas import (
    ActionResponse,
    AnalyticsResponse,
    ErrorResponse,
    MenuCategoryCreate,
    MenuCategoryResponse,
    MenuCategoryUpdate,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    ReservationListResponse,
    ReservationResponse,
    ReservationStatusUpdate,
    StatsResponse,
)
from bellavista.services import analytics as analytics_service
from bellavista.services import menu as menu_service
from bellavista.services import reservations as reservation_service
from bellavista.services.auth import require_admin
from bellavista.services.excel_manager import ExcelManager

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    dependencies=[Depends(require_admin)],
    responses={401: {"model": ErrorResponse}},
)


# =============================================================================
# RESERVATIONS
# =============================================================================

@router.get(
    "/reservations",
    response_model=ReservationListResponse,
    tags=["Admin: Reservations"],
    summary="List Reservations",
)
async def list_reservations(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    status: Optional[ReservationStatus] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> ReservationListResponse:
    """Newest first, optionally filtered by status."""
    total, reservations = await reservation_service.list_reservations(db, status, skip, limit)
    return ReservationListResponse(
        total=total,
        reservations=[ReservationResponse.model_validate(r) for r in reservations],
    )


@router.get(
    "/reservations/export",
    response_class=FileResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Admin: Reservations"],
    summary="Download the Booking Ledger",
)
async def export_reservations() -> FileResponse:
    """Excel workbook of every confirmed reservation."""
    ledger = ExcelManager.ledger_path()
    if not ledger.exists():
        raise NotFound("No reservations have been exported yet")
    return FileResponse(
        ledger,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=ledger.name,
    )


@router.patch(
    "/reservations/{reservation_id}",
    response_model=ReservationResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    tags=["Admin: Reservations"],
    summary="Change Reservation Status",
)
async def update_reservation_status(
    reservation_id: str,
    data: ReservationStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> ReservationResponse:
    """
    Move a reservation to a new status.

    Allowed: pending → cancelled, confirmed → cancelled, confirmed → completed.
    Pass the ``version`` you loaded to reject the change if someone else
    touched the reservation in the meantime.
    """
    reservation = await reservation_service.change_status(
        db, reservation_id, data.status, data.version
    )
    return ReservationResponse.model_validate(reservation)


@router.delete(
    "/reservations/{reservation_id}",
    response_model=ActionResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Admin: Reservations"],
    summary="Delete a Reservation",
)
async def delete_reservation(
    reservation_id: str,
    db: AsyncSession = Depends(get_db),
) -> ActionResponse:
    await reservation_service.delete_reservation(db, reservation_id)
    return ActionResponse(success=True)


# =============================================================================
# MENU ITEMS
# =============================================================================

@router.get(
    "/menu-items",
    response_model=list[MenuItemResponse],
    tags=["Admin: Menu"],
)
async def list_menu_items(db: AsyncSession = Depends(get_db)):
    return await menu_service.list_items(db)


@router.post(
    "/menu-items",
    response_model=MenuItemResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["Admin: Menu"],
)
async def create_menu_item(data: MenuItemCreate, db: AsyncSession = Depends(get_db)):
    return await menu_service.create_item(db, data)


@router.put(
    "/menu-items/{item_id}",
    response_model=MenuItemResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Admin: Menu"],
)
async def update_menu_item(
    item_id: str,
    data: MenuItemUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await menu_service.update_item(db, item_id, data)


@router.delete(
    "/menu-items/{item_id}",
    response_model=ActionResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Admin: Menu"],
)
async def delete_menu_item(item_id: str, db: AsyncSession = Depends(get_db)) -> ActionResponse:
    await menu_service.delete_item(db, item_id)
    return ActionResponse(success=True)


# =============================================================================
# MENU CATEGORIES
# =============================================================================

@router.get(
    "/menu-categories",
    response_model=list[MenuCategoryResponse],
    tags=["Admin: Menu"],
)
async def list_menu_categories(db: AsyncSession = Depends(get_db)):
    return await menu_service.list_categories(db)


@router.post(
    "/menu-categories",
    response_model=MenuCategoryResponse,
    responses={409: {"model": ErrorResponse}},
    tags=["Admin: Menu"],
)
async def create_menu_category(data: MenuCategoryCreate, db: AsyncSession = Depends(get_db)):
    category = await menu_service.create_category(db, data)
    return MenuCategoryResponse.model_validate(category)


@router.put(
    "/menu-categories/{category_id}",
    response_model=MenuCategoryResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    tags=["Admin: Menu"],
)
async def update_menu_category(
    category_id: str,
    data: MenuCategoryUpdate,
    db: AsyncSession = Depends(get_db),
):
    category = await menu_service.update_category(db, category_id, data)
    return MenuCategoryResponse.model_validate(category)


@router.delete(
    "/menu-categories/{category_id}",
    response_model=ActionResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Admin: Menu"],
)
async def delete_menu_category(
    category_id: str,
    db: AsyncSession = Depends(get_db),
) -> ActionResponse:
    """Deletes the category together with all of its items."""
    removed = await menu_service.delete_category(db, category_id)
    return ActionResponse(success=True, message=f"Category deleted with {removed} items")


# =============================================================================
# DASHBOARD
# =============================================================================

@router.get(
    "/stats",
    response_model=StatsResponse,
    tags=["Admin: Dashboard"],
)
async def stats(db: AsyncSession = Depends(get_db)) -> dict:
    return await analytics_service.dashboard_stats(db)


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    tags=["Admin: Dashboard"],
)
async def analytics(
    days: int = Query(30, ge=0, le=366),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Reservation trends over the last ``days`` days."""
    return await analytics_service.reservation_analytics(db, days)
