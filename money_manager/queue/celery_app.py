"""
Celery application - background retries for the price-update fan-out.
"""

from celery import Celery
from celery.signals import setup_logging

from money_manager.config import get_settings
from money_manager.core.logging_config import configure_logging

settings = get_settings()

celery_app = Celery(
    "money_manager",
    broker=settings.celery_broker_url,
    backend=settings.redis_url,
    include=["money_manager.queue.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    task_track_started=True,
    task_time_limit=300,
    task_soft_time_limit=60,
    task_acks_late=True,  # Redeliver if a worker dies mid-revaluation
    worker_prefetch_multiplier=1,
)


@setup_logging.connect
def _configure_worker_logging(**kwargs):
    configure_logging()
