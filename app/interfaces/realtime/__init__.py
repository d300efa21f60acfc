"""
FastAPI router for real-time change notifications.

Provides:
- ``/ws/v1/products``: public product catalogue events
- ``/ws/v1/orders?token=...``: order events for the token's owner
  (admins receive every order event)

Protocol (JSON):
    ← {"event": "connected", "channel": "orders", "data": {...}}
    → {"action": "ping"}
    ← {"event": "pong", "timestamp": "..."}
    ← {"event": "order_created", "channel": "orders", "data": {...}}

A rejected connection receives one ``{"event": "error", ...}`` frame
and is then closed with the code for its error category.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from app.application.shop.auth_service import AuthService
from app.application.shop.order_service import ORDERS_CHANNEL
from app.application.shop.product_service import PRODUCTS_CHANNEL
from app.domain.shop.entities import Principal
from app.infrastructure.shop.notifications import NotificationHub
from app.interfaces.shop.dependencies import get_auth_service, get_notification_hub
from app.shared.errors.app_error import AppError
from app.shared.errors.projection import to_ws_rejection, ws_close_code_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws/v1", tags=["realtime"])


async def _serve(
    hub: NotificationHub,
    channel: str,
    websocket: WebSocket,
    principal: Optional[Principal] = None,
) -> None:
    await hub.connect(channel, websocket, principal)
    try:
        while True:
            raw = await websocket.receive_text()
            await hub.handle_client_message(websocket, raw)
    except WebSocketDisconnect:
        logger.debug("Client closed '%s' stream", channel)
    finally:
        hub.disconnect(channel, websocket)


async def _reject(websocket: WebSocket, error: AppError) -> None:
    logger.info("WebSocket connection rejected: %s", error.type.value)
    await websocket.accept()
    await websocket.send_json(to_ws_rejection(error))
    await websocket.close(code=ws_close_code_for(error))


# ------------------------------------------------------------------
# WebSocket endpoints
# ------------------------------------------------------------------


@router.websocket("/products")
async def ws_products(
    websocket: WebSocket,
    hub: NotificationHub = Depends(get_notification_hub),
) -> None:
    """Stream product_created / product_updated / product_deleted events."""
    await _serve(hub, PRODUCTS_CHANNEL, websocket)


@router.websocket("/orders")
async def ws_orders(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    auth_service: AuthService = Depends(get_auth_service),
    hub: NotificationHub = Depends(get_notification_hub),
) -> None:
    """Stream order events the token's user is allowed to see."""
    await auth_service.authenticate(token).match(
        on_success=lambda principal: _serve(hub, ORDERS_CHANNEL, websocket, principal),
        on_failure=lambda error: _reject(websocket, error),
    )
