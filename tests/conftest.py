import os
import tempfile

# Must be set before bellavista reads its settings
os.environ["ENV_MODE"] = "development"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["MOCK_FAILURE_RATE"] = "0"
os.environ["MOCK_MIN_LATENCY"] = "0"
os.environ["MOCK_MAX_LATENCY"] = "0"
os.environ["DATA_DIRECTORY"] = tempfile.mkdtemp(prefix="bellavista-tests-")
os.environ["ADMIN_USERNAME"] = "admin@test.example"
os.environ["ADMIN_PASSWORD"] = "correct-horse"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bellavista.database import Base, get_db
from bellavista.main import app
from bellavista.models import Reservation
from bellavista.services.excel_manager import ExcelManager
from bellavista.services.notifications import MockNotificationService, get_notification_service

ADMIN_CREDENTIALS = {"username": "admin@test.example", "password": "correct-horse"}

BOOKING = {
    "customer_name": "Giulia Rossi",
    "customer_email": "giulia@example.com",
    "customer_phone": "+15550102020",
    "party_size": 4,
    "reservation_date": "2030-06-01",
    "reservation_time": "19:30",
    "special_requests": "Window table",
}


@pytest.fixture
async def engine():
    """Fresh in-memory database per test.

    StaticPool keeps every session on the one connection so the in-memory
    database survives between requests.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def notifier() -> MockNotificationService:
    """Mock delivery with no latency; inspect ``notifier.outbox`` for sent messages."""
    return MockNotificationService(failure_rate=0.0, min_latency=0.0, max_latency=0.0)


@pytest.fixture(autouse=True)
def clean_ledger():
    ExcelManager.clear_all()
    yield
    ExcelManager.clear_all()


@pytest.fixture
async def client(session_maker, notifier):
    """HTTP client against the app with the test database and mock notifier."""

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_service] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def admin_headers(client):
    """Bearer header for a logged-in admin. The login cookie is dropped so
    tests that omit the header run unauthenticated."""
    response = await client.post("/api/auth/login", json=ADMIN_CREDENTIALS)
    assert response.status_code == 200
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def load_reservation(session_maker):
    """Read a reservation straight from the database."""

    async def _load(reservation_id: str) -> Reservation:
        async with session_maker() as session:
            result = await session.execute(
                select(Reservation).where(Reservation.id == reservation_id)
            )
            return result.scalar_one()

    return _load


@pytest.fixture
def book(client):
    """Create a pending reservation and return its id."""

    async def _book(**overrides) -> str:
        response = await client.post("/api/reservations", json={**BOOKING, **overrides})
        assert response.status_code == 200, response.text
        return response.json()["reservation"]["id"]

    return _book


@pytest.fixture
def confirm(client, load_reservation):
    """Verify a pending reservation with its stored code."""

    async def _confirm(reservation_id: str) -> None:
        reservation = await load_reservation(reservation_id)
        response = await client.post(
            "/api/verify-otp",
            json={"reservationId": reservation_id, "otp": reservation.otp_code},
        )
        assert response.status_code == 200, response.text

    return _confirm
