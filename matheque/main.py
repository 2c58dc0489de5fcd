"""FastAPI app entrypoint."""

import logging
from typing import Optional
import uvicorn
from fastapi import FastAPI

from matheque.api.routers import health, webhook
from matheque.core.config import get_settings
from matheque.core.context import AppContext, build_context, configure_logging
from matheque.core.errors import TransientNetworkError

logger = logging.getLogger(__name__)

def register_webhook(context: AppContext) -> None:
    """Point Telegram at our webhook and publish the command menu."""
    settings = context.settings
    if not settings.require_bot():
        logger.warning("Skipping webhook registration: no bot token configured")
        return
    try:
        context.bot.set_webhook(settings.webhook_url(), secret_token=settings.TELEGRAM_WEBHOOK_SECRET)
        context.bot.set_commands()
    except TransientNetworkError as e:
        # The webhook from a previous run may still be in place
        logger.error(f"Webhook registration failed: {e}")

def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        context: Prebuilt context; when omitted it is built from settings on startup

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Matheque",
        description="Telegram bot that notifies users when films matching their watchers go on sale",
        version="1.0.0",
    )
    app.state.context = context

    @app.on_event("startup")
    def startup_event():
        """Build the context and register the webhook."""
        if app.state.context is None:
            settings = get_settings()
            configure_logging(settings)
            app.state.context = build_context(settings)
            register_webhook(app.state.context)

    @app.on_event("shutdown")
    def shutdown_event():
        if app.state.context is not None:
            app.state.context.close()

    @app.get("/")
    def root():
        """Root endpoint."""
        return {
            "service": "Matheque",
            "version": "1.0.0",
            "status": "running"
        }

    app.include_router(webhook.router)
    app.include_router(health.router)
    return app

app = create_app()

def run() -> None:
    """Serve the API on the configured port."""
    settings = get_settings()
    uvicorn.run("matheque.main:app", host="0.0.0.0", port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
