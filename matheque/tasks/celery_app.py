"""Celery app and configuration."""

import logging
from celery import Celery
from celery.signals import worker_ready
from matheque.core.config import get_settings
from matheque.tasks.loop_lock import get_loop_lock

logger = logging.getLogger(__name__)

def create_celery_app() -> Celery:
    """
    Factory function to create and configure Celery app instance.

    Returns:
        Configured Celery application instance
    """
    settings = get_settings()

    app = Celery("matheque")

    app.conf.update(
        broker_url=settings.REDIS_URL,
        result_backend=settings.REDIS_URL,

        # Serialization
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",

        timezone="UTC",
        enable_utc=True,

        include=["matheque.tasks.discovery"],

        # Passes run one at a time on a single worker
        worker_prefetch_multiplier=1,
        worker_concurrency=1,
        task_acks_late=True,

        result_expires=3600,  # 1 hour
        task_reject_on_worker_lost=True,
    )

    logger.info(f"Celery app configured with broker: {settings.REDIS_URL}")
    return app

celery = create_celery_app()

@worker_ready.connect
def start_discovery_loop(sender=None, **kwargs):
    """
    Kick off the first discovery pass; each pass re-arms the next one.

    The new loop token supersedes passes still queued from an earlier worker,
    so restarts never leave two loops polling the cinema site.
    """
    token = get_loop_lock().start()
    logger.info("Worker ready, starting discovery loop")
    sender.app.send_task("matheque.tasks.discovery.discover_films", kwargs={"token": token})
