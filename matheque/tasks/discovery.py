"""Task: discover new films and notify watchers, re-arming itself after every pass."""

import logging
from functools import lru_cache
from typing import Optional
from matheque.core.config import get_settings
from matheque.core.context import AppContext, build_context, configure_logging
from matheque.core.errors import PersistenceError, ScrapeMarkerMissing, TransientNetworkError
from matheque.engine.discovery import next_poll_delay
from matheque.tasks.celery_app import celery
from matheque.tasks.loop_lock import get_loop_lock

logger = logging.getLogger(__name__)

# Errors that abort a pass; the next pass starts from scratch
PASS_ABORTING_ERRORS = (TransientNetworkError, ScrapeMarkerMissing, PersistenceError)

@lru_cache(maxsize=1)
def get_worker_context() -> AppContext:
    """Build the worker's context on first use and keep it for the process lifetime."""
    settings = get_settings()
    configure_logging(settings)
    return build_context(settings)

@celery.task(bind=True, name="matheque.tasks.discovery.discover_films")
def discover_films(self, token: Optional[str] = None) -> dict:
    """
    Run one discovery pass, then schedule the next one after a jittered delay.

    Only the pass carrying the current loop token runs; passes from a
    superseded loop return without re-arming. Pass-aborting errors are logged
    and reported in the result; anything unexpected propagates after the next
    pass has been scheduled.

    Args:
        token: Loop token issued when the worker started the loop

    Returns:
        Pass counters, {"aborted": True, "error": ...} or {"superseded": True}
    """
    loop_lock = get_loop_lock()
    if not loop_lock.holds(token):
        logger.info("Discovery pass belongs to a superseded loop, dropping it")
        return {"superseded": True}

    settings = get_settings()
    try:
        result = get_worker_context().discovery_pipeline().run_pass().as_dict()
    except PASS_ABORTING_ERRORS as e:
        logger.error(f"Discovery pass aborted: {e}")
        result = {"aborted": True, "error": str(e)}
    finally:
        if loop_lock.holds(token):
            countdown = next_poll_delay(*settings.poll_window())
            discover_films.apply_async(kwargs={"token": token}, countdown=countdown)
            logger.info(f"Next discovery pass in {countdown:.0f}s")
    return result
