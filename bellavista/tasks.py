"""
Celery Tasks
Background work that must not hold up a guest's request.
"""

import logging
import time
from datetime import datetime

from filelock import Timeout

from bellavista.celery_worker import celery_app
from bellavista.services.excel_manager import ExcelManager

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(Timeout, OSError),
    retry_backoff=True
)
def export_reservation_to_excel(self, reservation_data: dict) -> dict:
    """
    Write a confirmed reservation to the booking ledger.

    Args:
        reservation_data: Flat, JSON-serializable reservation fields

    Returns:
        dict: Result of the export operation
    """
    task_id = self.request.id
    reservation_id = reservation_data.get('reservation_id', 'unknown')

    logger.info(f"Task {task_id}: exporting reservation {reservation_id}")
    start_time = time.time()

    try:
        result = ExcelManager.export_reservation(reservation_data)
    except (Timeout, OSError) as e:
        # Celery retries these with backoff
        logger.warning(f"Task {task_id}: reservation {reservation_id} not written - {e}")
        raise

    elapsed = round(time.time() - start_time, 3)
    result['task_id'] = task_id
    result['processing_time_seconds'] = elapsed

    if result['success']:
        logger.info(f"Task {task_id}: reservation {reservation_id} exported in {elapsed}s")
    else:
        logger.warning(f"Task {task_id}: reservation {reservation_id} failed - {result['message']}")

    return result


@celery_app.task
def clear_ledger() -> dict:
    """
    Clear the booking ledger (for testing/reset purposes).
    """
    success = ExcelManager.clear_all()
    return {
        'success': success,
        'message': 'Ledger cleared' if success else 'Failed to clear ledger',
        'timestamp': datetime.now().isoformat()
    }
