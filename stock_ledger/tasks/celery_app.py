from celery import Celery
from celery.schedules import crontab

from stock_ledger.config import get_settings

settings = get_settings()

# Create Celery application
celery_app = Celery(
    "stock_ledger",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["stock_ledger.tasks.stock_tasks"]
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task settings
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max
    task_soft_time_limit=240,  # Soft limit 4 minutes

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=4,

    # Late acks: a task lost with its worker is redelivered
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Nightly stock ledger check (run `celery -A stock_ledger.tasks.celery_app beat`)
    beat_schedule={
        "reconcile-stock-nightly": {
            "task": "reconcile_stock",
            "schedule": crontab(hour=settings.RECONCILE_HOUR_UTC, minute=0),
        },
    },
)
