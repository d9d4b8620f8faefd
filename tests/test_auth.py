from datetime import timedelta

from bellavista.models import AdminSession, utcnow
from bellavista.services.auth import SESSION_COOKIE, credentials_match

from tests.conftest import ADMIN_CREDENTIALS


async def test_login_returns_token_and_sets_cookie(client):
    response = await client.post("/api/auth/login", json=ADMIN_CREDENTIALS)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["username"] == ADMIN_CREDENTIALS["username"]
    assert body["token"]
    assert client.cookies.get(SESSION_COOKIE) == body["token"]


async def test_cookie_session_is_accepted(client):
    await client.post("/api/auth/login", json=ADMIN_CREDENTIALS)

    response = await client.get("/api/auth/session")

    assert response.status_code == 200
    assert response.json()["username"] == ADMIN_CREDENTIALS["username"]


async def test_wrong_password_is_rejected(client):
    response = await client.post(
        "/api/auth/login",
        json={"username": ADMIN_CREDENTIALS["username"], "password": "guess"},
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid username or password"
    assert SESSION_COOKIE not in client.cookies


async def test_login_requires_both_fields(client):
    response = await client.post("/api/auth/login", json={"username": "admin"})

    assert response.status_code == 400


async def test_logout_ends_the_session(client, admin_headers):
    response = await client.post("/api/auth/logout", headers=admin_headers)
    assert response.status_code == 200

    after = await client.get("/api/auth/session", headers=admin_headers)
    assert after.status_code == 401


async def test_expired_session_is_rejected(client, session_maker):
    async with session_maker() as session:
        session.add(AdminSession(
            token="expired-token",
            username=ADMIN_CREDENTIALS["username"],
            created_at=utcnow() - timedelta(hours=9),
            expires_at=utcnow() - timedelta(hours=1),
        ))
        await session.commit()

    response = await client.get(
        "/api/admin/stats", headers={"Authorization": "Bearer expired-token"}
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Session has expired"

    # Expired sessions are removed on first use
    async with session_maker() as session:
        assert await session.get(AdminSession, "expired-token") is None


def test_credentials_match():
    assert credentials_match(ADMIN_CREDENTIALS["username"], ADMIN_CREDENTIALS["password"])
    assert not credentials_match(ADMIN_CREDENTIALS["username"], "")
    assert not credentials_match("someone@else.example", ADMIN_CREDENTIALS["password"])
