"""Test settings loading."""

import logging
import pytest
from unittest.mock import patch
from pydantic import ValidationError
from matheque.core.config import Settings
from matheque.core.context import configure_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ["TELEGRAM_BOT_TOKEN", "PUBLIC_URL", "DATABASE_URL", "POLL_INTERVAL_MIN", "POLL_INTERVAL_MAX"]:
        monkeypatch.delenv(name, raising=False)


def test_config_file(tmp_path):
    """The .config file uses KEY=value lines with optional quotes and comments."""
    config = tmp_path / ".config"
    config.write_text(
        "# bot credentials\n"
        'TELEGRAM_BOT_TOKEN="123456:ABC-DEF"\n'
        "PUBLIC_URL=https://matheque.example.org/\n"
        "DATABASE_URL='sqlite:////var/lib/matheque/data.sqlite'\n"
        "SOMETHING_ELSE=ignored\n"
    )

    settings = Settings(_env_file=config)

    assert settings.TELEGRAM_BOT_TOKEN == "123456:ABC-DEF"
    assert settings.DATABASE_URL == "sqlite:////var/lib/matheque/data.sqlite"
    assert settings.webhook_url() == "https://matheque.example.org/webhook"
    assert settings.bot_api_url() == "https://api.telegram.org/bot123456:ABC-DEF/"
    assert settings.require_bot()


def test_environment_overrides_file(tmp_path, monkeypatch):
    config = tmp_path / ".config"
    config.write_text("TELEGRAM_BOT_TOKEN=from-file\n")
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "from-env")

    assert Settings(_env_file=config).TELEGRAM_BOT_TOKEN == "from-env"


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.poll_window() == (300, 600)
    assert settings.FILM_DELAY_MAX == 5.0
    assert not settings.require_bot()
    assert not settings.require_api_auth()


def test_poll_window_must_be_ordered():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, POLL_INTERVAL_MIN=600, POLL_INTERVAL_MAX=300)


@pytest.mark.parametrize("debug, expected", [(True, logging.DEBUG), (False, "WARNING")])
def test_debug_overrides_log_level(debug, expected):
    settings = Settings(_env_file=None, DEBUG=debug, LOG_LEVEL="warning")

    with patch("matheque.core.context.logging.basicConfig") as mock_config:
        configure_logging(settings)

    assert mock_config.call_args.kwargs["level"] == expected
