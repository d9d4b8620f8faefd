"""
Admin login / logout.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from bellavista.core.config import get_settings
from bellavista.database import get_db
from bellavista.models import AdminSession
from bellavista.schemas import (
    ActionResponse,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    SessionResponse,
)
from bellavista.services import auth as auth_service
from bellavista.services.auth import SESSION_COOKIE, require_admin

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    summary="Admin Login",
)
async def login(
    data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Exchange admin credentials for a session token (also set as a cookie)."""
    session = await auth_service.login(db, data.username, data.password)

    response.set_cookie(
        SESSION_COOKIE,
        session.token,
        max_age=settings.admin_session_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.use_real_services,
    )
    return LoginResponse(
        success=True,
        username=session.username,
        token=session.token,
        expires_at=session.expires_at,
    )


@router.post("/logout", response_model=ActionResponse, summary="Admin Logout")
async def logout(
    response: Response,
    session: AdminSession = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ActionResponse:
    await auth_service.logout(db, session.token)
    response.delete_cookie(SESSION_COOKIE)
    logger.info(f"Admin {session.username} logged out")
    return ActionResponse(success=True, message="Logged out")


@router.get(
    "/session",
    response_model=SessionResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Current Admin Session",
)
async def current_session(session: AdminSession = Depends(require_admin)) -> SessionResponse:
    return SessionResponse(username=session.username, expires_at=session.expires_at)
