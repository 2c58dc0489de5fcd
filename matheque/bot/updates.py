"""Inbound Telegram updates, decoded up front into one message type."""

from dataclasses import dataclass
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class TelegramUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    is_bot: bool = False
    first_name: Optional[str] = None
    language_code: Optional[str] = None


class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    type: Optional[str] = None
    first_name: Optional[str] = None


class TelegramMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message_id: int
    chat: TelegramChat
    from_: Optional[TelegramUser] = Field(default=None, alias="from")
    date: Optional[int] = None
    text: Optional[str] = None


class Update(BaseModel):
    model_config = ConfigDict(extra="ignore")

    update_id: int
    message: Optional[TelegramMessage] = None
    edited_message: Optional[TelegramMessage] = None

    def inbound(self) -> Optional["InboundMessage"]:
        """Return the message this update carries, new or edited, or None for other update kinds."""
        if self.message is not None:
            return InboundMessage.from_telegram(self.update_id, self.message)
        if self.edited_message is not None:
            return InboundMessage.from_telegram(self.update_id, self.edited_message)
        return None


@dataclass(frozen=True)
class InboundMessage:
    """A text message from a user, whatever update shape it arrived in."""

    update_id: int
    message_id: int
    chat_id: int
    user_id: int
    text: str
    user_first_name: Optional[str] = None
    chat_first_name: Optional[str] = None

    @classmethod
    def from_telegram(cls, update_id: int, message: TelegramMessage) -> "InboundMessage":
        # Channel posts have no sender; fall back to the chat itself
        sender = message.from_ or TelegramUser(id=message.chat.id)
        return cls(
            update_id=update_id,
            message_id=message.message_id,
            chat_id=message.chat.id,
            user_id=sender.id,
            text=message.text or "",
            user_first_name=sender.first_name,
            chat_first_name=message.chat.first_name,
        )
