"""Process-wide handles, built once at startup and passed to components."""

import logging
from dataclasses import dataclass
from sqlalchemy.orm import sessionmaker
from matheque.bot.client import BotClient
from matheque.core.config import Settings
from matheque.db.session import create_session_factory
from matheque.engine.discovery import DiscoveryPipeline
from matheque.engine.notifier import Notifier
from matheque.ingestion.cinemacity import CinemaCityClient

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    session_factory: sessionmaker
    bot: BotClient
    feed: CinemaCityClient

    def discovery_pipeline(self) -> DiscoveryPipeline:
        return DiscoveryPipeline(
            self.session_factory,
            self.feed,
            Notifier(self.bot),
            film_delay_max=self.settings.FILM_DELAY_MAX,
        )

    def close(self) -> None:
        self.bot.close()
        self.feed.close()
        self.session_factory.kw["bind"].dispose()


def build_context(settings: Settings) -> AppContext:
    """Create the database session factory and HTTP clients described by settings."""
    if not settings.require_bot():
        logger.warning("TELEGRAM_BOT_TOKEN is not set; Bot API calls will fail")
    return AppContext(
        settings=settings,
        session_factory=create_session_factory(settings),
        bot=BotClient(settings.bot_api_url(), timeout=settings.HTTP_TIMEOUT),
        feed=CinemaCityClient(settings.FEED_URL, timeout=settings.HTTP_TIMEOUT),
    )


def configure_logging(settings: Settings) -> None:
    """Configure root logging; DEBUG overrides LOG_LEVEL."""
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
