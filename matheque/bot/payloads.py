"""Bot API method payloads.

Webhook replies and outbound calls share these models: Telegram executes a
method payload returned as the webhook response body.
"""

from typing import List, Literal, Union
from pydantic import BaseModel, Field


class KeyboardButton(BaseModel):
    text: str


class ReplyKeyboardMarkup(BaseModel):
    keyboard: List[List[KeyboardButton]]
    one_time_keyboard: bool = True
    resize_keyboard: bool = False


class ReplyKeyboardRemove(BaseModel):
    remove_keyboard: bool = True


class SendMessage(BaseModel):
    method: Literal["sendMessage"] = "sendMessage"
    chat_id: int
    text: str
    parse_mode: str = "markdown"
    reply_markup: Union[ReplyKeyboardMarkup, ReplyKeyboardRemove] = Field(default_factory=ReplyKeyboardRemove)


class SendPhoto(BaseModel):
    method: Literal["sendPhoto"] = "sendPhoto"
    chat_id: int
    photo: str
    caption: str
    parse_mode: str = "markdown"


class BotCommand(BaseModel):
    command: str
    description: str


class SetMyCommands(BaseModel):
    method: Literal["setMyCommands"] = "setMyCommands"
    commands: List[BotCommand]
