"""
Admin Authentication

One admin identity, configured through settings. A successful login issues
an opaque random token stored in ``admin_sessions`` with a hard expiry; every
admin request presents it as a Bearer token or the ``admin_session`` cookie.
"""

import hmac
import logging
import secrets
from datetime import timedelta
from typing import Optional

from fastapi import Cookie, Depends, Header
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from bellavista.core.config import get_settings
from bellavista.core.exceptions import NotAuthenticated
from bellavista.database import get_db
from bellavista.models import AdminSession, utcnow
from bellavista.services.reservations import as_utc

logger = logging.getLogger(__name__)
settings = get_settings()

SESSION_COOKIE = "admin_session"


def credentials_match(username: str, password: str) -> bool:
    """Constant-time compare against the configured admin identity."""
    user_ok = hmac.compare_digest(username.encode(), settings.admin_username.encode())
    password_ok = hmac.compare_digest(password.encode(), settings.admin_password.encode())
    return user_ok and password_ok


async def login(db: AsyncSession, username: str, password: str) -> AdminSession:
    if not credentials_match(username, password):
        logger.warning(f"Failed admin login for {username!r}")
        raise NotAuthenticated("Invalid username or password")

    now = utcnow()
    session = AdminSession(
        token=secrets.token_urlsafe(32),
        username=settings.admin_username,
        created_at=now,
        expires_at=now + timedelta(hours=settings.admin_session_hours),
    )
    db.add(session)

    # Housekeeping: drop sessions that have run out
    await db.execute(delete(AdminSession).where(AdminSession.expires_at < now))
    await db.commit()

    logger.info(f"Admin {session.username} logged in")
    return session


async def logout(db: AsyncSession, token: str) -> None:
    await db.execute(delete(AdminSession).where(AdminSession.token == token))
    await db.commit()


def _extract_token(authorization: Optional[str], cookie: Optional[str]) -> Optional[str]:
    if authorization:
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            return value.strip()
    return cookie or None


async def require_admin(
    db: AsyncSession = Depends(get_db),
    authorization: Optional[str] = Header(None),
    admin_session: Optional[str] = Cookie(None, alias=SESSION_COOKIE),
) -> AdminSession:
    """FastAPI dependency guarding every admin endpoint."""
    token = _extract_token(authorization, admin_session)
    if not token:
        raise NotAuthenticated()

    session = await db.get(AdminSession, token)
    if session is None:
        raise NotAuthenticated("Session is invalid or has ended")

    if utcnow() >= as_utc(session.expires_at):
        await db.delete(session)
        await db.commit()
        raise NotAuthenticated("Session has expired")

    return session
