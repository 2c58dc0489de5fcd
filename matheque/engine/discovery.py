"""Discovery pass: find new films in the feed, store them and notify watchers."""

import logging
import random
import time
from dataclasses import asdict, dataclass
from typing import Callable, Dict
from sqlalchemy.orm import sessionmaker
from matheque.db import crud
from matheque.engine.matcher import MatchEngine
from matheque.engine.notifier import Notifier
from matheque.ingestion.cinemacity import CinemaCityClient

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryResult:
    films_seen: int = 0
    new_films: int = 0
    notifications: int = 0
    failed_notifications: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


class DiscoveryPipeline:
    """
    One poll-and-process cycle over the feed.

    Films are handled one after another with a random pause between new ones,
    since each new film costs a page request against the cinema site. A film
    is stored before it is matched, and a stored film is never matched again:
    if matching or notifying fails after the insert, that film's notifications
    are lost. Feed, scrape and store errors abort the whole pass.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        feed: CinemaCityClient,
        notifier: Notifier,
        film_delay_max: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random = None,
    ):
        self.session_factory = session_factory
        self.feed = feed
        self.notifier = notifier
        self.film_delay_max = film_delay_max
        self._sleep = sleep
        self._rng = rng or random.Random()

    def run_pass(self) -> DiscoveryResult:
        """
        Run one discovery pass.

        Returns:
            Counters for the pass

        Raises:
            TransientNetworkError: feed or film page unreachable
            ScrapeMarkerMissing: film page without a localized title
            PersistenceError: store failure
        """
        logger.info("Fetching films...")
        films = self.feed.fetch_films()
        result = DiscoveryResult(films_seen=len(films))

        with self.session_factory() as db:
            engine = MatchEngine(db)
            for film in films:
                if crud.film_exists(db, film.id):
                    continue

                if result.new_films:
                    self._pause()

                localized_name = self.feed.fetch_localized_title(film.link)
                stored = crud.insert_film(
                    db,
                    original_id=film.id,
                    name=localized_name,
                    original_name=film.name,
                    link=film.link,
                    poster_link=film.poster_link,
                )
                crud.commit(db)
                result.new_films += 1
                logger.info(f"New film: {film.name} ({localized_name})")

                chat_ids = crud.filter_subscribed(db, engine.on_new_film(stored))
                delivered = self.notifier.notify_all(chat_ids, film.name, film.link, film.poster_link)
                result.notifications += delivered
                result.failed_notifications += len(chat_ids) - delivered

        logger.info(f"Discovery pass finished: {result.as_dict()}")
        return result

    def _pause(self) -> None:
        if self.film_delay_max > 0:
            self._sleep(self._rng.uniform(0, self.film_delay_max))


def next_poll_delay(interval_min: int, interval_max: int, rng: random.Random = None) -> float:
    """Pick the delay before the next pass, uniformly inside [interval_min, interval_max] seconds."""
    return (rng or random).uniform(interval_min, interval_max)
