"""
Health check router.

``/health`` is the liveness probe. ``/health/notifications`` reports
the state of the WebSocket hub and the e-mail outbox worker.
No business logic.
"""

from fastapi import APIRouter, Depends

from app.core.config import settings
from app.infrastructure.shop.notifications import EmailOutbox, NotificationHub
from app.interfaces.shop.dependencies import get_email_outbox, get_notification_hub
from app.interfaces.shop.schemas import HealthResponse, NotificationHealthResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application health status and version.",
)
def health_check() -> HealthResponse:
    """Return current application health status."""
    return HealthResponse(status="ok", version=settings.version)


@router.get(
    "/notifications",
    response_model=NotificationHealthResponse,
    summary="Notification components health",
)
def notification_health(
    hub: NotificationHub = Depends(get_notification_hub),
    outbox: EmailOutbox = Depends(get_email_outbox),
) -> NotificationHealthResponse:
    """Degraded when the e-mail worker is not running."""
    return NotificationHealthResponse(
        status="ok" if outbox.is_running else "degraded",
        websocket=hub.stats,
        email=outbox.stats,
    )
