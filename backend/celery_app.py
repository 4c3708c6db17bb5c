"""
Celery application - background workers for order processing and image transforms
"""
from celery import Celery
from celery.schedules import crontab

from config import get_settings

settings = get_settings()

celery_app = Celery(
    "storybook",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["tasks.order_tasks", "tasks.image_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
)

# Lulu has no webhooks for job status; poll every hour
celery_app.conf.beat_schedule = {
    "poll-lulu-orders": {
        "task": "tasks.order_tasks.poll_active_orders_task",
        "schedule": crontab(minute=0),
    },
}
