"""Test configuration and fixtures."""

import json
import pytest
import httpx
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from matheque.bot.client import BotClient
from matheque.core.config import Settings
from matheque.core.context import AppContext
from matheque.core.errors import ScrapeMarkerMissing
from matheque.db.models import Base
from matheque.db.session import create_db_engine
from matheque.ingestion.cinemacity import CinemaCityClient


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across connections."""
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def test_db(session_factory):
    """Create a test database session."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def test_settings():
    """Settings that don't read the environment or any env file."""
    return Settings(
        _env_file=None,
        TELEGRAM_BOT_TOKEN="",
        DATABASE_URL="sqlite://",
        POLL_INTERVAL_MIN=300,
        POLL_INTERVAL_MAX=600,
        FILM_DELAY_MAX=0,
    )


class RecordingTransport:
    """httpx transport answering Bot API calls and remembering them."""

    def __init__(self, fail_chat_ids=()):
        self.calls = []
        self.fail_chat_ids = set(fail_chat_ids)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        payload = json.loads(request.content or b"{}")
        self.calls.append((method, payload))
        if payload.get("chat_id") in self.fail_chat_ids:
            return httpx.Response(403, json={"ok": False, "description": "Forbidden: bot was blocked by the user"})
        if method == "getWebhookInfo":
            return httpx.Response(200, json={"ok": True, "result": {"url": "https://example.org/webhook", "pending_update_count": 0}})
        return httpx.Response(200, json={"ok": True, "result": True})

    def sent(self, method):
        return [payload for name, payload in self.calls if name == method]


@pytest.fixture
def bot_transport():
    return RecordingTransport()


@pytest.fixture
def bot(bot_transport):
    return BotClient(
        "https://api.telegram.org/bottest-token/",
        client=httpx.Client(transport=httpx.MockTransport(bot_transport)),
    )


class FakeFeed:
    """Stands in for CinemaCityClient with canned films and page titles."""

    def __init__(self, films=(), titles=None):
        self.films = list(films)
        self.titles = dict(titles or {})
        self.title_requests = []

    def fetch_films(self):
        return list(self.films)

    def fetch_localized_title(self, link):
        self.title_requests.append(link)
        if link not in self.titles:
            raise ScrapeMarkerMissing(link)
        return self.titles[link]

    def close(self):
        pass


@pytest.fixture
def fake_feed():
    return FakeFeed()


@pytest.fixture
def app_context(test_settings, session_factory, bot):
    return AppContext(
        settings=test_settings,
        session_factory=session_factory,
        bot=bot,
        feed=CinemaCityClient("https://feed.test/now-playing", client=httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(404)))),
    )

