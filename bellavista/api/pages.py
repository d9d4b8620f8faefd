"""
Server-rendered pages. Forms post to the JSON API from small inline scripts.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from bellavista.core.config import get_settings
from bellavista.database import get_db
from bellavista.services import menu as menu_service

settings = get_settings()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
templates.env.globals["restaurant_name"] = settings.restaurant_name
templates.env.globals["restaurant_phone"] = settings.restaurant_phone
templates.env.globals["max_party_size"] = settings.max_party_size

router = APIRouter(tags=["Pages"], include_in_schema=False)


@router.get("/", response_class=HTMLResponse)
async def home(request: Request, db: AsyncSession = Depends(get_db)) -> HTMLResponse:
    featured = await menu_service.featured_items(db, limit=3)
    return templates.TemplateResponse(request, "index.html", {"featured": featured})


@router.get("/menu", response_class=HTMLResponse)
async def menu_page(request: Request, db: AsyncSession = Depends(get_db)) -> HTMLResponse:
    sections = await menu_service.public_menu(db)
    return templates.TemplateResponse(request, "menu.html", {"sections": sections})


@router.get("/reservations", response_class=HTMLResponse)
async def reservations_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "reservations.html", {})


@router.get("/verify-otp", response_class=HTMLResponse)
async def verify_otp_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "verify_otp.html",
        {"ttl_minutes": settings.otp_ttl_minutes},
    )


@router.get("/reservation-confirmed", response_class=HTMLResponse)
async def reservation_confirmed_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "reservation_confirmed.html", {})


@router.get("/contact", response_class=HTMLResponse)
async def contact_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "contact.html", {})


@router.get("/auth/login", response_class=HTMLResponse)
async def login_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "login.html", {})


@router.get("/admin", response_class=HTMLResponse)
async def admin_page(request: Request) -> HTMLResponse:
    """Dashboard shell; data is fetched client-side with the session cookie."""
    return templates.TemplateResponse(request, "admin.html", {})
