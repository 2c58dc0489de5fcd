"""Telegram Bot API client."""

import logging
from typing import Any, Dict, Optional
import httpx
from pydantic import BaseModel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential
from matheque.bot.payloads import SendMessage, SendPhoto, SetMyCommands
from matheque.bot.responses import BOT_COMMANDS
from matheque.core.errors import DeliveryError, TransientNetworkError

logger = logging.getLogger(__name__)


class BotClient:
    """Thin wrapper around the Bot API with timeouts and error translation."""

    def __init__(self, api_url: str, timeout: float = 20.0, client: Optional[httpx.Client] = None):
        self.api_url = api_url
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _call(self, method: str, payload: Dict[str, Any]) -> Any:
        """
        Call a Bot API method.

        Args:
            method: Bot API method name
            payload: JSON body

        Returns:
            The "result" field of the reply

        Raises:
            TransientNetworkError: on transport errors or a reply with ok=false
        """
        try:
            response = self._client.post(self.api_url + method, json=payload)
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TransientNetworkError(f"{method} failed: {e}") from e

        if not isinstance(body, dict):
            raise TransientNetworkError(f"{method} got a non-object reply ({response.status_code}): {body!r:.200}")
        if not body.get("ok"):
            raise TransientNetworkError(
                f"{method} rejected ({response.status_code}): {body.get('description', 'no description')}"
            )
        return body.get("result")

    def _send(self, payload: BaseModel, chat_id: int) -> Any:
        data = payload.model_dump(exclude={"method"})
        try:
            return self._call(payload.method, data)
        except TransientNetworkError as e:
            raise DeliveryError(chat_id, str(e)) from e

    def send_message(self, message: SendMessage) -> Any:
        """Send a text message. Raises DeliveryError on failure."""
        return self._send(message, message.chat_id)

    def send_photo(self, photo: SendPhoto) -> Any:
        """Send a photo with a caption. Raises DeliveryError on failure."""
        return self._send(photo, photo.chat_id)

    @retry(
        stop=stop_after_attempt(5),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        retry=retry_if_exception_type(TransientNetworkError),
        reraise=True,
    )
    def set_webhook(self, url: str, secret_token: Optional[str] = None) -> None:
        """Point the bot's webhook at url, dropping updates queued meanwhile."""
        payload: Dict[str, Any] = {"url": url, "drop_pending_updates": True}
        if secret_token:
            payload["secret_token"] = secret_token
        self._call("setWebhook", payload)
        logger.info(f"Webhook set to {url}")

    @retry(
        stop=stop_after_attempt(5),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        retry=retry_if_exception_type(TransientNetworkError),
        reraise=True,
    )
    def set_commands(self) -> None:
        """Publish the command list shown in Telegram's command menu."""
        payload = SetMyCommands(commands=BOT_COMMANDS)
        self._call(payload.method, payload.model_dump(exclude={"method"}))
        logger.info(f"Published {len(BOT_COMMANDS)} bot commands")

    def get_webhook_info(self) -> Dict[str, Any]:
        return self._call("getWebhookInfo", {})
