"""
Celery application - background work kept off the request path
(search indexing, media-host cleanup). RabbitMQ broker, Redis result backend.
"""

from celery import Celery
from celery.signals import setup_logging

from rewear.config import get_settings
from rewear.core.logging_config import configure_logging

settings = get_settings()

celery_app = Celery(
    "rewear",
    broker=settings.celery_broker_url,
    backend=settings.redis_url,
    include=["rewear.queue.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    task_track_started=True,
    task_time_limit=300,
    task_soft_time_limit=60,
    worker_prefetch_multiplier=1,  # Fair distribution
)


@setup_logging.connect
def _configure_worker_logging(**kwargs):
    configure_logging()
