"""Command parsing for inbound text."""

import enum
from dataclasses import dataclass


class CommandKind(enum.Enum):
    START = "/start"
    STOP = "/stop"
    LIST = "/list"
    ADD = "/add"
    REMOVE = "/remove"
    FREE_TEXT = ""


# Tested in this order
_PREFIXED = (CommandKind.START, CommandKind.STOP, CommandKind.LIST, CommandKind.ADD, CommandKind.REMOVE)


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    text: str = ""

    @property
    def is_free_text(self) -> bool:
        return self.kind is CommandKind.FREE_TEXT


def parse_command(text: str) -> Command:
    """
    Classify inbound text as a command or free text.

    Matching is a literal prefix test: "/addXYZ" and "/add@matheque_bot" both
    parse as ADD. Anything else is FREE_TEXT carrying the original text.
    """
    for kind in _PREFIXED:
        if text.startswith(kind.value):
            return Command(kind, text)
    return Command(CommandKind.FREE_TEXT, text)
