"""Match newly discovered films against watcher keywords."""

import logging
from typing import List
from sqlalchemy.orm import Session
from matheque.db import crud
from matheque.db.models import Film
from matheque.ingestion.normalizer import tokenize

logger = logging.getLogger(__name__)


class MatchEngine:
    """
    Decides which chats should hear about a film.

    Matching is loose: a watcher matches when its normalized
    keywords share any token with the film's original or localized title.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_matching_chats(self, original_title: str, localized_title: str) -> List[int]:
        """
        Find chats with a watcher sharing a token with either title.

        Args:
            original_title: Title as listed in the feed
            localized_title: Title scraped from the film page

        Returns:
            Distinct chat ids, most relevant first; empty when nothing matches
        """
        tokens = tokenize(f"{original_title} {localized_title}")
        if not tokens:
            return []
        chat_ids = crud.match_watchers(self.db, tokens)
        logger.debug(f"Tokens {tokens} matched {len(chat_ids)} chats")
        return chat_ids

    def on_new_film(self, film: Film) -> List[int]:
        return self.find_matching_chats(film.original_name, film.name)
