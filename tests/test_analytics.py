from datetime import date, datetime, time, timedelta, timezone

from bellavista.models import MenuCategory, MenuItem, Reservation, ReservationStatus
from bellavista.services.analytics import summarize


def _reservation(day: date, at: str, party: int, created_minute: int = 0, **fields) -> Reservation:
    hour, minute = (int(part) for part in at.split(":"))
    return Reservation(
        id=fields.pop("id", f"r-{day.isoformat()}-{at}-{created_minute}"),
        customer_name=fields.pop("customer_name", "Guest"),
        customer_email="guest@example.com",
        customer_phone="+15550000000",
        party_size=party,
        reservation_date=day,
        reservation_time=time(hour, minute),
        status=fields.pop("status", ReservationStatus.CONFIRMED),
        otp_verified=True,
        created_at=datetime(2024, 1, 1, 12, created_minute, tzinfo=timezone.utc),
        **fields,
    )


# =============================================================================
# SUMMARIZE
# =============================================================================

def test_empty_window_has_zero_average():
    start, end = date(2024, 1, 1), date(2024, 1, 31)

    result = summarize([], 30, start, end)

    assert result["total_reservations"] == 0
    assert result["total_guests"] == 0
    assert result["avg_party_size"] == 0
    assert result["peak_hours"] == []
    assert result["popular_days"] == []
    assert result["recent_reservations"] == []
    assert result["start_date"] == start and result["end_date"] == end


def test_peak_hours_and_popular_days_are_ranked():
    monday, saturday = date(2024, 1, 1), date(2024, 1, 6)
    reservations = [
        _reservation(monday, "18:00", 2, created_minute=1),
        _reservation(saturday, "19:30", 4, created_minute=2),
        _reservation(saturday, "19:30", 6, created_minute=3, id="second-saturday"),
    ]

    result = summarize(reservations, 30, date(2023, 12, 8), date(2024, 1, 7))

    assert result["total_reservations"] == 3
    assert result["total_guests"] == 12
    assert result["avg_party_size"] == 4
    assert result["peak_hours"] == [
        {"hour": "19:30", "count": 2},
        {"hour": "18:00", "count": 1},
    ]
    assert result["popular_days"] == [
        {"day": "Saturday", "count": 2},
        {"day": "Monday", "count": 1},
    ]


def test_ties_keep_first_seen_order():
    day = date(2024, 1, 3)
    reservations = [
        _reservation(day, "20:00", 2, created_minute=1),
        _reservation(day, "12:00", 2, created_minute=2),
    ]

    result = summarize(reservations, 7, day, day)

    assert [h["hour"] for h in result["peak_hours"]] == ["20:00", "12:00"]


def test_recent_reservations_are_newest_first_and_capped():
    day = date(2024, 1, 2)
    reservations = [
        _reservation(day, "19:00", 2, created_minute=minute, id=f"r{minute}")
        for minute in range(15)
    ]

    result = summarize(reservations, 30, day, day)

    recent = [r["id"] for r in result["recent_reservations"]]
    assert recent == [f"r{minute}" for minute in range(14, 4, -1)]


# =============================================================================
# ENDPOINTS
# =============================================================================

async def _seed(session_maker, *objects):
    async with session_maker() as session:
        session.add_all(objects)
        await session.commit()


async def test_analytics_endpoint_with_no_data(client, admin_headers):
    response = await client.get("/api/admin/analytics", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["days"] == 30
    assert body["total_reservations"] == 0
    assert body["avg_party_size"] == 0
    assert body["end_date"] == date.today().isoformat()
    assert body["start_date"] == (date.today() - timedelta(days=30)).isoformat()


async def test_analytics_endpoint_only_counts_the_window(client, admin_headers, session_maker):
    today = date.today()
    await _seed(
        session_maker,
        _reservation(today, "19:00", 2, id="in-window-1"),
        _reservation(today - timedelta(days=3), "19:00", 4, id="in-window-2"),
        _reservation(today - timedelta(days=40), "12:00", 8, id="too-old"),
    )

    response = await client.get(
        "/api/admin/analytics", params={"days": 7}, headers=admin_headers
    )

    body = response.json()
    assert body["total_reservations"] == 2
    assert body["total_guests"] == 6
    assert body["avg_party_size"] == 3
    assert body["peak_hours"] == [{"hour": "19:00", "count": 2}]
    assert {r["id"] for r in body["recent_reservations"]} == {"in-window-1", "in-window-2"}


async def test_analytics_rejects_negative_window(client, admin_headers):
    response = await client.get(
        "/api/admin/analytics", params={"days": -1}, headers=admin_headers
    )

    assert response.status_code == 400


async def test_dashboard_stats(client, admin_headers, session_maker):
    today = date.today()
    category = MenuCategory(id="c1", name="Antipasti")
    await _seed(
        session_maker,
        category,
        MenuItem(category_id="c1", name="Bruschetta", price=8.0),
        _reservation(today, "19:00", 2, id="today-1"),
        _reservation(today, "20:00", 3, id="today-2", status=ReservationStatus.PENDING),
        _reservation(today + timedelta(days=1), "20:00", 5, id="tomorrow"),
    )

    response = await client.get("/api/admin/stats", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {
        "today_reservations": 2,
        "total_reservations": 3,
        "pending_reservations": 1,
        "total_menu_items": 1,
        "avg_party_size": 3.3,
    }


async def test_stats_require_a_session(client):
    assert (await client.get("/api/admin/stats")).status_code == 401
    assert (await client.get("/api/admin/analytics")).status_code == 401
