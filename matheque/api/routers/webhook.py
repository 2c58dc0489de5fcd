"""Telegram webhook endpoints."""

import logging
from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from matheque.api.deps import get_bot, get_current_user, get_database, verify_webhook_secret
from matheque.bot.client import BotClient
from matheque.bot.updates import Update
from matheque.core.errors import PersistenceError, TransientNetworkError
from matheque.db import crud
from matheque.engine.conversation import ConversationStateMachine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Webhook"])

@router.post("/webhook", dependencies=[Depends(verify_webhook_secret)])
def receive_update(update: Update, db: Session = Depends(get_database)):
    """
    Handle one Telegram update.

    The reply is returned as a Bot API method payload, which Telegram executes.
    Updates without a message and requests that hit a store failure get an
    empty 200 so that Telegram does not redeliver them.
    """
    inbound = update.inbound()
    if inbound is None:
        logger.debug(f"Ignoring update {update.update_id} without a message")
        return Response(status_code=200)

    try:
        crud.insert_message(
            db,
            message_id=inbound.message_id,
            from_id=inbound.user_id,
            from_first_name=inbound.user_first_name,
            chat_id=inbound.chat_id,
            chat_first_name=inbound.chat_first_name,
            text=inbound.text,
        )
        crud.commit(db)
        reply = ConversationStateMachine(db).on_inbound_message(inbound.chat_id, inbound.user_id, inbound.text)
    except PersistenceError as e:
        logger.error(f"Dropping update {update.update_id} for chat {inbound.chat_id}: {e}")
        return Response(status_code=200)

    return JSONResponse(content=reply.model_dump())

@router.get("/webhook-info")
def webhook_info(bot: BotClient = Depends(get_bot), user: str = Depends(get_current_user)):
    """Return Telegram's view of the webhook (pending updates, last error)."""
    try:
        return bot.get_webhook_info()
    except TransientNetworkError as e:
        logger.error(f"getWebhookInfo failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))
