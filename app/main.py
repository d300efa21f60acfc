"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (HTTP and WebSocket)
- Error handlers (raised errors to HTTP; Results are projected by routes)
- Security middleware (headers, rate limiting)
- Logging configuration
- Notification components (WebSocket hub, e-mail outbox worker)

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from app.core.config import settings
from app.infrastructure.shop.database import create_schema, get_engine
from app.infrastructure.shop.notifications import (
    EmailOutbox,
    EmailSender,
    HttpEmailSender,
    LoggingEmailSender,
    NotificationHub,
)
from app.interfaces.health import router as health_router
from app.interfaces.realtime import router as realtime_router
from app.interfaces.shop.dependencies import set_notification_components
from app.interfaces.shop.router import router as shop_router
from app.shared.errors.handlers import register_error_handlers
from app.shared.logging import configure_logging
from app.shared.security.headers import SecurityHeadersMiddleware
from app.shared.security.rate_limiting import limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)


def _build_email_sender() -> EmailSender:
    if settings.email_relay_url:
        return HttpEmailSender(settings.email_relay_url, settings.email_sender)
    logger.warning("EMAIL_RELAY_URL not set; outbound e-mail is only logged")
    return LoggingEmailSender()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: start/stop the notification components."""
    hub = NotificationHub(send_timeout=settings.ws_send_timeout)
    outbox = EmailOutbox(_build_email_sender(), maxsize=settings.email_queue_size)
    set_notification_components(hub, outbox)
    if settings.auto_create_schema:
        await create_schema(get_engine())
    outbox.start()

    yield

    # Shutdown
    await outbox.shutdown()
    if get_engine.cache_info().currsize:
        await get_engine().dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # --- Security Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(shop_router, prefix="/api/v1")
    app.include_router(realtime_router)

    return app


app = create_app()
