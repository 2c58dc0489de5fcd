"""Cinema City feed client and film page scraper."""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional
import httpx
from matheque.core.errors import ScrapeMarkerMissing, TransientNetworkError

logger = logging.getLogger(__name__)

_FEATURE_NAME = re.compile(r'var featureName = "(?P<title>[^"]+)"')


@dataclass(frozen=True)
class FeedFilm:
    """A film as listed by the now-playing feed."""

    id: str
    name: str
    link: str
    poster_link: Optional[str]


class CinemaCityClient:
    """Fetches the now-playing list and scrapes localized titles from film pages."""

    def __init__(self, feed_url: str, timeout: float = 20.0, client: Optional[httpx.Client] = None):
        self.feed_url = feed_url
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self) -> None:
        self._client.close()

    def _get(self, url: str) -> httpx.Response:
        try:
            response = self._client.get(url)
            response.raise_for_status()
            return response
        except httpx.HTTPError as e:
            raise TransientNetworkError(f"GET {url} failed: {e}") from e

    def fetch_films(self) -> List[FeedFilm]:
        """
        Fetch the films currently playing.

        Returns:
            Films listed under body.posters

        Raises:
            TransientNetworkError: on transport errors, bad status or malformed JSON
        """
        response = self._get(self.feed_url)
        try:
            posters = response.json()["body"]["posters"] or []
            films = [
                FeedFilm(
                    id=str(poster["code"]),
                    name=poster["featureTitle"],
                    link=poster["url"],
                    poster_link=poster.get("posterSrc"),
                )
                for poster in posters
            ]
        except (ValueError, KeyError, TypeError) as e:
            raise TransientNetworkError(f"Unexpected feed payload from {self.feed_url}: {e}") from e

        logger.info(f"{len(films)} films found in feed")
        return films

    def fetch_localized_title(self, link: str) -> str:
        """
        Scrape the localized title from a film's page.

        Raises:
            TransientNetworkError: on transport errors or bad status
            ScrapeMarkerMissing: when the page has no featureName marker
        """
        response = self._get(link)
        match = _FEATURE_NAME.search(response.text)
        if not match:
            raise ScrapeMarkerMissing(link)
        return match.group("title")
