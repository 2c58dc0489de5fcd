"""Film notifications to matched chats."""

import logging
from typing import Iterable, Optional
from matheque.bot import responses
from matheque.bot.client import BotClient
from matheque.bot.payloads import SendMessage
from matheque.core.errors import DeliveryError

logger = logging.getLogger(__name__)


class Notifier:
    """Sends one notification per matched chat, without retries."""

    def __init__(self, bot: BotClient):
        self.bot = bot

    def notify(self, chat_id: int, film_title: str, film_link: str, poster_link: Optional[str]) -> None:
        """
        Tell a chat that tickets for a matching film are on sale.

        Falls back to a plain message when the film has no poster.

        Raises:
            DeliveryError: if the Bot API call fails
        """
        photo = responses.film_notification(chat_id, film_title, film_link, poster_link or "")
        if poster_link:
            self.bot.send_photo(photo)
        else:
            self.bot.send_message(SendMessage(chat_id=chat_id, text=photo.caption))

    def notify_all(
        self, chat_ids: Iterable[int], film_title: str, film_link: str, poster_link: Optional[str]
    ) -> int:
        """Notify every chat, logging failures. Returns the number of chats reached."""
        delivered = 0
        for chat_id in chat_ids:
            logger.info(f"Notify {chat_id} for film {film_title}")
            try:
                self.notify(chat_id, film_title, film_link, poster_link)
                delivered += 1
            except DeliveryError as e:
                logger.error(f"Notification failed: {e}")
        return delivered
