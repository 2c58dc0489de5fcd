"""Error taxonomy shared by the discovery loop and the bot."""


class MathequeError(Exception):
    """Base class for all application errors."""


class TransientNetworkError(MathequeError):
    """A feed, scrape or transport call failed; retrying later may succeed."""


class ScrapeMarkerMissing(MathequeError):
    """A film page did not contain the expected title marker."""

    def __init__(self, url: str):
        super().__init__(f"couldn't scrape the film's localized name from {url}")
        self.url = url


class PersistenceError(MathequeError):
    """The store was unavailable or rejected a write."""


class DeliveryError(MathequeError):
    """A notification could not be delivered to a chat."""

    def __init__(self, chat_id: int, reason: str):
        super().__init__(f"delivery to chat {chat_id} failed: {reason}")
        self.chat_id = chat_id
        self.reason = reason
