"""
Excel Booking Ledger with Concurrency Control

Confirmed reservations are appended to one workbook so front-of-house staff
can open the day's bookings in a spreadsheet. Writes from concurrent Celery
workers are serialized with a file lock.
"""

import logging
from datetime import datetime
from typing import Any
from pathlib import Path

import pandas as pd
from filelock import FileLock, Timeout

from bellavista.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class ExcelManager:
    """Process-safe Excel ledger."""

    LOCK_TIMEOUT = settings.excel_lock_timeout

    RESERVATION_COLUMNS = [
        "reservation_id",
        "reservation_date",
        "reservation_time",
        "customer_name",
        "customer_phone",
        "customer_email",
        "party_size",
        "special_requests",
        "status",
        "confirmed_at",
        "created_at",
        "exported_at",
    ]

    @classmethod
    def data_dir(cls) -> Path:
        return Path(get_settings().data_directory)

    @classmethod
    def ledger_path(cls) -> Path:
        return cls.data_dir() / get_settings().excel_filename

    @classmethod
    def lock_path(cls) -> Path:
        return cls.data_dir() / f"{get_settings().excel_filename}.lock"

    @classmethod
    def _ensure_data_dir(cls) -> None:
        """Create data directory if needed."""
        data_dir = cls.data_dir()
        if not data_dir.exists():
            data_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {data_dir}")

    @classmethod
    def _load_or_create_df(cls, file_path: Path, columns: list) -> pd.DataFrame:
        """Load existing file or create new DataFrame."""
        if file_path.exists():
            try:
                return pd.read_excel(file_path, engine="openpyxl", dtype={"reservation_id": str})
            except Exception as e:
                logger.warning(f"Error reading {file_path}: {e}")
                return pd.DataFrame(columns=columns)
        return pd.DataFrame(columns=columns)

    @classmethod
    def export_reservation(cls, reservation_data: dict[str, Any]) -> dict[str, Any]:
        """
        Append or replace one reservation row.

        A reservation already in the ledger is overwritten so re-exports
        never produce duplicates.

        Raises:
            Timeout: the ledger lock could not be acquired
            OSError: the workbook could not be read or written
        """
        cls._ensure_data_dir()

        reservation_id = reservation_data.get("reservation_id", "unknown")
        result = {
            "success": False,
            "message": "",
            "reservation_id": reservation_id,
            "exported_at": None,
        }

        try:
            lock = FileLock(str(cls.lock_path()), timeout=cls.LOCK_TIMEOUT)

            with lock:
                logger.debug(f"Lock acquired for reservation {reservation_id}")

                df = cls._load_or_create_df(cls.ledger_path(), cls.RESERVATION_COLUMNS)

                export_time = datetime.now().isoformat()
                new_row = {
                    column: reservation_data.get(column)
                    for column in cls.RESERVATION_COLUMNS
                }
                new_row["exported_at"] = export_time

                if not df.empty:
                    df = df[df["reservation_id"] != reservation_id]
                df = pd.concat([df, pd.DataFrame([new_row])], ignore_index=True)
                df = df.sort_values(["reservation_date", "reservation_time"], kind="stable")
                df.to_excel(str(cls.ledger_path()), index=False, engine="openpyxl")

                logger.info(f"Reservation {reservation_id} exported to Excel")

                result["success"] = True
                result["message"] = f"Reservation {reservation_id} exported"
                result["exported_at"] = export_time

            logger.debug(f"Lock released for reservation {reservation_id}")

        except Timeout:
            logger.error(f"Lock timeout ({cls.LOCK_TIMEOUT}s) for reservation {reservation_id}")
            raise

        except OSError as e:
            logger.error(f"Could not write ledger for reservation {reservation_id}: {e}")
            raise

        except Exception as e:
            result["message"] = str(e)
            logger.exception(f"Error exporting reservation {reservation_id}")

        return result

    @classmethod
    def get_all_reservations(cls) -> list[dict[str, Any]]:
        """Get all ledger rows."""
        ledger = cls.ledger_path()
        if not ledger.exists():
            return []

        try:
            df = pd.read_excel(ledger, engine="openpyxl", dtype={"reservation_id": str})
            return df.to_dict("records")
        except Exception as e:
            logger.error(f"Error reading ledger: {e}")
            return []

    @classmethod
    def clear_all(cls) -> bool:
        """Delete the ledger and its lock file."""
        try:
            for f in [cls.ledger_path(), cls.lock_path()]:
                if f.exists():
                    f.unlink()
            logger.info("Booking ledger cleared")
            return True
        except OSError as e:
            logger.error(f"Error clearing ledger: {e}")
            return False
