"""Per-chat conversation state machine driving the bot commands."""

import logging
from sqlalchemy.orm import Session
from matheque.bot import responses
from matheque.bot.commands import Command, CommandKind, parse_command
from matheque.bot.payloads import SendMessage
from matheque.db import crud
from matheque.db.models import ChatStatus

logger = logging.getLogger(__name__)


class ConversationStateMachine:
    """
    Interprets inbound text for one (chat, user) pair.

    State lives only in the store. Commands move the chat into the state they
    announce; a free-text reply is handled according to the stored state and
    always returns the chat to IDLE, whatever the outcome. All writes of one
    request are committed together; a PersistenceError rolls them back and
    propagates, so no reply is produced and the state is left unchanged.
    """

    def __init__(self, db: Session):
        self.db = db

    def on_inbound_message(self, chat_id: int, user_id: int, text: str) -> SendMessage:
        command = parse_command(text)
        response = self._dispatch(chat_id, user_id, command)
        crud.commit(self.db)
        return response

    def _dispatch(self, chat_id: int, user_id: int, command: Command) -> SendMessage:
        if command.is_free_text:
            return self._reply(chat_id, user_id, command.text)

        if command.kind is CommandKind.START:
            crud.set_chat_status(self.db, chat_id, user_id, ChatStatus.IDLE)
            crud.set_subscribed(self.db, chat_id, user_id, True)
            logger.info(f"Chat {chat_id} subscribed")
            return responses.start_response(chat_id)

        if command.kind is CommandKind.STOP:
            crud.set_chat_status(self.db, chat_id, user_id, ChatStatus.IDLE)
            crud.set_subscribed(self.db, chat_id, user_id, False)
            logger.info(f"Chat {chat_id} unsubscribed")
            return responses.stop_response(chat_id)

        if command.kind is CommandKind.LIST:
            crud.set_chat_status(self.db, chat_id, user_id, ChatStatus.IDLE)
            return responses.list_response(chat_id, crud.list_watchers(self.db, chat_id))

        if command.kind is CommandKind.ADD:
            crud.set_chat_status(self.db, chat_id, user_id, ChatStatus.AWAITING_ADD_KEYWORDS)
            return responses.add_response(chat_id)

        # REMOVE
        crud.set_chat_status(self.db, chat_id, user_id, ChatStatus.AWAITING_REMOVE_SELECTION)
        return responses.remove_response(chat_id, crud.list_watchers(self.db, chat_id))

    def _reply(self, chat_id: int, user_id: int, text: str) -> SendMessage:
        status = crud.get_chat_status(self.db, chat_id, user_id)

        if status is ChatStatus.AWAITING_ADD_KEYWORDS:
            added = crud.insert_watcher(self.db, chat_id, text) is not None
            logger.info(f"Chat {chat_id} add watcher {text!r}: {'added' if added else 'rejected'}")
            response = responses.watcher_added_response(chat_id, added)
        elif status is ChatStatus.AWAITING_REMOVE_SELECTION:
            removed = crud.remove_watcher(self.db, chat_id, text)
            logger.info(f"Chat {chat_id} remove watcher {text!r}: {'removed' if removed else 'not found'}")
            response = responses.watcher_removed_response(chat_id, removed)
        else:
            response = responses.unknown_command_response(chat_id)

        crud.set_chat_status(self.db, chat_id, user_id, ChatStatus.IDLE)
        return response
