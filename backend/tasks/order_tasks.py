"""
Celery Tasks - Print order processing and Lulu status polling
"""
from celery_app import celery_app
from database import get_db
from services.order_service import process_order, poll_active_orders
import logging

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def process_order_task(self, order_id: str):
    """
    Runs the full order pipeline (PDFs -> Lulu submission) off the request path.
    Failures are recorded on the order itself; the task result mirrors them.
    """
    db = next(get_db())
    try:
        result = process_order(db, order_id)
        if not result.success:
            logger.error(f"Order {order_id} processing failed: {result.error}")
        return {"success": result.success, "error": result.error, "message": result.message}
    finally:
        db.close()


@celery_app.task(bind=True)
def poll_active_orders_task(self):
    """Hourly refresh of every order currently held by Lulu."""
    db = next(get_db())
    try:
        summary = poll_active_orders(db)
        logger.info(f"Lulu poll complete: {summary}")
        return summary
    finally:
        db.close()
