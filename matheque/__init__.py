"""Telegram bot that watches the Cinema City feed for films users are waiting for."""

__version__ = "1.0.0"
