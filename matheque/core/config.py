"""App settings and config loader."""

from functools import lru_cache
from typing import Optional
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
	# Telegram bot
	TELEGRAM_BOT_TOKEN: str = Field(default="")
	TELEGRAM_API_URL: str = Field(default="https://api.telegram.org")
	TELEGRAM_WEBHOOK_SECRET: Optional[str] = Field(default=None)

	# Public endpoint Telegram posts updates to
	PUBLIC_URL: str = Field(default="http://localhost:8000")
	PORT: int = Field(default=8000)

	# Database
	DATABASE_URL: str = Field(default="sqlite:///./data/matheque.sqlite")

	# Redis (Celery broker)
	REDIS_URL: str = Field(default="redis://redis:6379/0")

	# Cinema City feed
	FEED_URL: str = Field(
		default="https://www.cinemacity.ro/ro/data-api-service/v1/feed/10107/byName/now-playing?lang=en_GB"
	)
	HTTP_TIMEOUT: float = Field(default=20.0)

	# Discovery loop, in seconds
	POLL_INTERVAL_MIN: int = Field(default=300)
	POLL_INTERVAL_MAX: int = Field(default=600)
	FILM_DELAY_MAX: float = Field(default=5.0)

	# API Authentication
	API_USERNAME: Optional[str] = Field(default=None)
	API_PASSWORD: Optional[str] = Field(default=None)

	LOG_LEVEL: str = Field(default="INFO")
	DEBUG: bool = Field(default=False)

	# .config is the legacy file name, kept so existing deployments keep working
	model_config = SettingsConfigDict(
		env_file=(".config", ".env"), env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
	)

	@model_validator(mode="after")
	def _check_poll_window(self) -> "Settings":
		if self.POLL_INTERVAL_MIN < 0 or self.POLL_INTERVAL_MAX < self.POLL_INTERVAL_MIN:
			raise ValueError("POLL_INTERVAL_MIN must be >= 0 and <= POLL_INTERVAL_MAX")
		return self

	def bot_api_url(self) -> str:
		"""Return the Bot API base URL for the configured token."""
		return f"{self.TELEGRAM_API_URL.rstrip('/')}/bot{self.TELEGRAM_BOT_TOKEN}/"

	def webhook_url(self) -> str:
		return f"{self.PUBLIC_URL.rstrip('/')}/webhook"

	def poll_window(self) -> tuple[int, int]:
		return self.POLL_INTERVAL_MIN, self.POLL_INTERVAL_MAX

	def require_bot(self) -> bool:
		"""Check if the bot token is configured."""
		return bool(self.TELEGRAM_BOT_TOKEN)

	def require_api_auth(self) -> bool:
		return bool(self.API_USERNAME and self.API_PASSWORD)

@lru_cache(maxsize=1)
def get_settings() -> Settings:
	"""Return cached settings instance."""
	return Settings()
