"""Test film notifications."""

import httpx
import pytest
from matheque.bot.client import BotClient
from matheque.core.errors import DeliveryError
from matheque.engine.notifier import Notifier


def test_notify_sends_photo_with_caption(bot, bot_transport):
    """One sendPhoto per chat, captioned with a Markdown link to the film."""
    Notifier(bot).notify(1001, "Dune: Part Two", "https://cinema.test/dune", "https://img.test/dune.jpg")

    [photo] = bot_transport.sent("sendPhoto")
    assert photo["chat_id"] == 1001
    assert photo["photo"] == "https://img.test/dune.jpg"
    assert photo["parse_mode"] == "markdown"
    assert photo["caption"].endswith("[Dune: Part Two](https://cinema.test/dune)")
    assert "now on sale" in photo["caption"]


def test_notify_without_poster_sends_text(bot, bot_transport):
    """Films without a poster are announced with a plain message."""
    Notifier(bot).notify(1001, "Dune", "https://cinema.test/dune", None)

    assert bot_transport.sent("sendPhoto") == []
    [message] = bot_transport.sent("sendMessage")
    assert message["text"].endswith("[Dune](https://cinema.test/dune)")


def test_notify_raises_delivery_error(bot, bot_transport):
    """A Bot API rejection is a DeliveryError for that chat."""
    bot_transport.fail_chat_ids = {1001}

    with pytest.raises(DeliveryError) as exc_info:
        Notifier(bot).notify(1001, "Dune", "https://cinema.test/dune", "https://img.test/dune.jpg")

    assert exc_info.value.chat_id == 1001
    assert "blocked" in str(exc_info.value)


def test_notify_all_continues_after_failure(bot, bot_transport):
    """A failed chat doesn't stop delivery to the others."""
    bot_transport.fail_chat_ids = {1002}

    delivered = Notifier(bot).notify_all(
        [1001, 1002, 1003], "Dune", "https://cinema.test/dune", "https://img.test/dune.jpg"
    )

    assert delivered == 2
    assert [p["chat_id"] for p in bot_transport.sent("sendPhoto")] == [1001, 1002, 1003]


def test_notify_all_survives_non_object_replies():
    """A proxy answering with a bare JSON value fails each chat without ending the loop."""
    bot = BotClient(
        "https://api.telegram.org/bottest/",
        client=httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200, content=b"null"))),
    )

    delivered = Notifier(bot).notify_all([1001, 1002], "Dune", "https://cinema.test/dune", "https://img.test/dune.jpg")

    assert delivered == 0
