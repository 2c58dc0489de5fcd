"""FastAPI dependencies for the app context, DB sessions and authentication."""

import secrets
from typing import Generator, Optional
from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session
from matheque.bot.client import BotClient
from matheque.core.context import AppContext
from matheque.db.session import session_scope

security = HTTPBasic(auto_error=False)

def get_context(request: Request) -> AppContext:
    """Return the context built at startup."""
    context = request.app.state.context
    if context is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service not ready")
    return context

def get_database(context: AppContext = Depends(get_context)) -> Generator[Session, None, None]:
    """
    Database dependency.

    Yields:
        SQLAlchemy session
    """
    yield from session_scope(context.session_factory)

def get_bot(context: AppContext = Depends(get_context)) -> BotClient:
    return context.bot

def get_current_user(
    credentials: Optional[HTTPBasicCredentials] = Depends(security),
    context: AppContext = Depends(get_context),
) -> str:
    """
    Simple HTTP Basic Auth dependency.

    Args:
        credentials: HTTP Basic Auth credentials, if sent
        context: App context holding the configured credentials

    Returns:
        Username if authenticated, "anonymous" when no credentials are configured

    Raises:
        HTTPException: If authentication fails
    """
    settings = context.settings

    if not settings.require_api_auth():
        return "anonymous"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    is_correct_username = secrets.compare_digest(credentials.username, settings.API_USERNAME)
    is_correct_password = secrets.compare_digest(credentials.password, settings.API_PASSWORD)

    if not (is_correct_username and is_correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username

def verify_webhook_secret(
    x_telegram_bot_api_secret_token: Optional[str] = Header(default=None),
    context: AppContext = Depends(get_context),
) -> None:
    """Reject webhook calls that don't carry the secret registered with setWebhook."""
    expected = context.settings.TELEGRAM_WEBHOOK_SECRET
    if not expected:
        return
    if x_telegram_bot_api_secret_token is None or not secrets.compare_digest(
        x_telegram_bot_api_secret_token, expected
    ):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid webhook secret")
