"""Reply texts and keyboards sent back to users."""

from typing import List, Sequence
from matheque.bot.payloads import (
    BotCommand, KeyboardButton, ReplyKeyboardMarkup, SendMessage, SendPhoto
)

MAX_CHARS_PER_KEYBOARD_ROW = 30

WATCHER_EXISTS_OR_INVALID = "This looks like an invalid or already existing watcher. 🧐"
WATCHER_NOT_FOUND = "Couldn't find a watcher named like that."

BOT_COMMANDS = [
    BotCommand(command="start", description="Start using the bot"),
    BotCommand(command="stop", description="Unsubscribe from updates"),
    BotCommand(command="add", description="Create a new watcher"),
    BotCommand(command="remove", description="Remove a watcher"),
    BotCommand(command="list", description="List the active watchers"),
]


def start_response(chat_id: int) -> SendMessage:
    return SendMessage(chat_id=chat_id, text="You are now subscribed to updates! 👍")


def stop_response(chat_id: int) -> SendMessage:
    return SendMessage(chat_id=chat_id, text="You are now unsubscribed.")


def list_response(chat_id: int, watchers: Sequence[str]) -> SendMessage:
    if not watchers:
        return SendMessage(chat_id=chat_id, text="You have no watchers. Use `/add` to add one now.")

    lines = "".join(f"✔︎ _{watcher}_\n" for watcher in watchers)
    text = f"These are your watchers:\n\n{lines}\nUse `/add` and `/remove` commands to manage them."
    return SendMessage(chat_id=chat_id, text=text)


def add_response(chat_id: int) -> SendMessage:
    return SendMessage(
        chat_id=chat_id,
        text=(
            "What's the film name? \n\n"
            "You can add multiple keywords separated by commas, like this:\n"
            "_Fight Club, Clubul batausilor, Fight_."
        ),
    )


def remove_response(chat_id: int, watchers: Sequence[str]) -> SendMessage:
    if not watchers:
        return SendMessage(chat_id=chat_id, text="You have no watchers, add some using `/add`")

    keyboard = [
        [KeyboardButton(text=label) for label in row] for row in keyboard_rows(watchers)
    ]
    return SendMessage(
        chat_id=chat_id,
        text="Which watcher do you want to remove? Type it or click one of the buttons below.",
        reply_markup=ReplyKeyboardMarkup(keyboard=keyboard),
    )


def keyboard_rows(labels: Sequence[str], max_chars: int = MAX_CHARS_PER_KEYBOARD_ROW) -> List[List[str]]:
    """
    Lay out button labels in rows.

    A new row starts once the current row holds max_chars characters or more,
    so a single long label still gets a row of its own.
    """
    rows: List[List[str]] = []
    row: List[str] = []
    for label in labels:
        if sum(len(item) for item in row) >= max_chars:
            rows.append(row)
            row = []
        row.append(label)
    if row:
        rows.append(row)
    return rows


def watcher_added_response(chat_id: int, added: bool) -> SendMessage:
    text = "Watcher added ✨. Use `/list` to list your watchers." if added else WATCHER_EXISTS_OR_INVALID
    return SendMessage(chat_id=chat_id, text=text)


def watcher_removed_response(chat_id: int, removed: bool) -> SendMessage:
    return SendMessage(chat_id=chat_id, text="Watcher removed 🗑." if removed else WATCHER_NOT_FOUND)


def unknown_command_response(chat_id: int) -> SendMessage:
    return SendMessage(
        chat_id=chat_id, text="Sorry, I didn't understand that. Type `/` to list the available commands."
    )


def film_notification(chat_id: int, film_title: str, film_link: str, poster_link: str) -> SendPhoto:
    caption = (
        "🎉 Tickets for a film matching one of your watchers are now on sale:\n\n"
        f"[{film_title}]({film_link})"
    )
    return SendPhoto(chat_id=chat_id, photo=poster_link, caption=caption)
