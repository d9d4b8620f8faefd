import pytest
from filelock import Timeout

from bellavista.services import excel_manager
from bellavista.services.excel_manager import ExcelManager
from bellavista.tasks import clear_ledger, export_reservation_to_excel


def _row(reservation_id: str, day: str, at: str, **fields) -> dict:
    return {
        "reservation_id": reservation_id,
        "reservation_date": day,
        "reservation_time": at,
        "customer_name": "Guest",
        "customer_phone": "+15550000000",
        "customer_email": "guest@example.com",
        "party_size": 2,
        "status": "confirmed",
        **fields,
    }


def test_export_creates_ledger():
    result = ExcelManager.export_reservation(_row("a", "2030-01-02", "19:00"))

    assert result["success"] is True
    assert result["exported_at"] is not None
    assert ExcelManager.ledger_path().exists()

    [row] = ExcelManager.get_all_reservations()
    assert row["reservation_id"] == "a"
    assert set(ExcelManager.RESERVATION_COLUMNS) <= set(row)


def test_reexport_replaces_existing_row():
    ExcelManager.export_reservation(_row("a", "2030-01-02", "19:00", party_size=2))
    ExcelManager.export_reservation(_row("a", "2030-01-02", "19:00", party_size=5))

    rows = ExcelManager.get_all_reservations()
    assert len(rows) == 1
    assert rows[0]["party_size"] == 5


def test_rows_are_kept_in_service_order():
    ExcelManager.export_reservation(_row("late", "2030-01-02", "21:00"))
    ExcelManager.export_reservation(_row("next-day", "2030-01-03", "12:00"))
    ExcelManager.export_reservation(_row("early", "2030-01-02", "18:30"))

    ids = [row["reservation_id"] for row in ExcelManager.get_all_reservations()]
    assert ids == ["early", "late", "next-day"]


def test_clear_all():
    ExcelManager.export_reservation(_row("a", "2030-01-02", "19:00"))

    assert ExcelManager.clear_all() is True
    assert ExcelManager.get_all_reservations() == []


def test_tasks_run_inline():
    result = export_reservation_to_excel.delay(_row("task", "2030-01-02", "19:00")).get()

    assert result["success"] is True
    assert result["reservation_id"] == "task"
    assert "processing_time_seconds" in result

    assert clear_ledger.delay().get()["success"] is True
    assert not ExcelManager.ledger_path().exists()


@pytest.fixture
def busy_lock(monkeypatch):
    """Replace the ledger lock with one that is always held elsewhere."""
    attempts = {"count": 0}

    class BusyLock:
        def __init__(self, lock_file, timeout=-1):
            self.lock_file = lock_file

        def __enter__(self):
            attempts["count"] += 1
            raise Timeout(self.lock_file)

        def __exit__(self, *exc_info):
            return False

    monkeypatch.setattr(excel_manager, "FileLock", BusyLock)
    return attempts


def test_lock_timeout_is_raised(busy_lock):
    with pytest.raises(Timeout):
        ExcelManager.export_reservation(_row("a", "2030-01-02", "19:00"))

    assert not ExcelManager.ledger_path().exists()


def test_export_task_retries_when_ledger_is_locked(busy_lock):
    with pytest.raises(Timeout):
        export_reservation_to_excel.apply(args=(_row("busy", "2030-01-02", "19:00"),))

    assert busy_lock["count"] == export_reservation_to_excel.max_retries + 1


async def test_locked_ledger_does_not_fail_confirmation(client, book, confirm, load_reservation, busy_lock):
    reservation_id = await book()

    await confirm(reservation_id)

    assert busy_lock["count"] > 1
    assert (await load_reservation(reservation_id)).status.value == "confirmed"
