"""
Dashboard statistics and reservation analytics.
"""

from collections import Counter
from datetime import date, timedelta
from typing import Iterable, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from bellavista.models import MenuItem, Reservation, ReservationStatus
from bellavista.services.reservations import as_utc

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def _ranked(counter: Counter, key: str) -> list[dict]:
    # Ties keep first-seen order
    return [
        {key: label, "count": count}
        for label, count in sorted(counter.items(), key=lambda pair: pair[1], reverse=True)
    ]


def summarize(
    reservations: Iterable[Reservation],
    days: int,
    start_date: date,
    end_date: date,
    recent_limit: int = 10,
) -> dict:
    """Aggregate an in-memory list of reservations."""
    reservations = list(reservations)

    total = len(reservations)
    guests = sum(r.party_size or 0 for r in reservations)

    hours: Counter = Counter()
    weekdays: Counter = Counter()
    for r in reservations:
        if r.reservation_time is not None:
            hours[r.reservation_time.strftime("%H:%M")] += 1
        weekdays[WEEKDAY_NAMES[r.reservation_date.weekday()]] += 1

    recent = sorted(reservations, key=lambda r: as_utc(r.created_at), reverse=True)[:recent_limit]

    return {
        "days": days,
        "start_date": start_date,
        "end_date": end_date,
        "total_reservations": total,
        "total_guests": guests,
        "avg_party_size": guests / total if total else 0,
        "peak_hours": _ranked(hours, "hour"),
        "popular_days": _ranked(weekdays, "day"),
        "recent_reservations": [
            {
                "id": r.id,
                "customer_name": r.customer_name,
                "party_size": r.party_size or 0,
                "reservation_date": r.reservation_date,
                "status": r.status,
            }
            for r in recent
        ],
    }


async def reservation_analytics(
    db: AsyncSession,
    days: int = 30,
    today: Optional[date] = None,
) -> dict:
    """Analytics for reservations dated within the last ``days`` days."""
    end_date = today or date.today()
    start_date = end_date - timedelta(days=days)

    result = await db.execute(
        select(Reservation).where(
            Reservation.reservation_date >= start_date,
            Reservation.reservation_date <= end_date,
        )
    )
    return summarize(result.scalars().all(), days, start_date, end_date)


async def dashboard_stats(db: AsyncSession, today: Optional[date] = None) -> dict:
    """Headline numbers for the admin dashboard."""
    today = today or date.today()

    total = (await db.execute(select(func.count(Reservation.id)))).scalar() or 0
    today_count = (await db.execute(
        select(func.count(Reservation.id)).where(Reservation.reservation_date == today)
    )).scalar() or 0
    pending = (await db.execute(
        select(func.count(Reservation.id)).where(Reservation.status == ReservationStatus.PENDING)
    )).scalar() or 0
    menu_items = (await db.execute(select(func.count(MenuItem.id)))).scalar() or 0
    avg_party = (await db.execute(select(func.avg(Reservation.party_size)))).scalar() or 0.0

    return {
        "today_reservations": today_count,
        "total_reservations": total,
        "pending_reservations": pending,
        "total_menu_items": menu_items,
        "avg_party_size": round(float(avg_party), 1),
    }
