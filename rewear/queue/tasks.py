"""
Celery tasks - search index maintenance and media cleanup.
The API enqueues, workers consume; failures retry with a short countdown.
"""

import logging

from rewear.media.media_host import MediaHost
from rewear.queue.celery_app import celery_app
from rewear.search.elasticsearch_client import index_item_sync, remove_item_sync

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def index_item_task(self, item_doc: dict):
    """(Re)index a listed item after approval or edit."""
    try:
        index_item_sync(item_doc)
    except Exception as exc:
        logger.warning("index_item_task failed for item id=%s: %s", item_doc.get("id"), exc)
        raise self.retry(exc=exc, countdown=5)


@celery_app.task(bind=True, max_retries=3)
def remove_item_task(self, item_id: int):
    """Drop an item from search when it is no longer listed."""
    try:
        remove_item_sync(item_id)
    except Exception as exc:
        logger.warning("remove_item_task failed for item id=%s: %s", item_id, exc)
        raise self.retry(exc=exc, countdown=5)


@celery_app.task
def delete_images_task(public_ids: list[str]) -> int:
    """Delete images from the media host after their item is gone. Returns deleted count."""
    host = MediaHost()
    deleted = sum(1 for public_id in public_ids if host.destroy_sync(public_id))
    if deleted != len(public_ids):
        logger.warning("delete_images_task: %d of %d images deleted", deleted, len(public_ids))
    return deleted


