"""
Adapters: WebSocket notification hub and the outbound e-mail outbox.

NotificationHub keeps the connected WebSocket clients per channel and
pushes JSON events to them. Events that carry an ``owner_id`` reach
only that user and admins.

EmailOutbox is a bounded queue drained by one worker task that the
application lifespan starts and stops. When the queue is full, the
newest message is dropped, logged and counted; producers never wait.

Architecture:
    OrderService ──enqueue()──▶ EmailOutbox queue ──worker──▶ EmailSender
    Services ─────notify()────▶ NotificationHub ──send_text──▶ clients
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from app.domain.shop.entities import EmailMessage, Principal
from app.domain.shop.ports import EmailQueuePort, NotificationPort

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _can_receive(principal: Optional[Principal], owner_id: Optional[int]) -> bool:
    if owner_id is None:
        return True
    if principal is None:
        return False
    return principal.is_admin or principal.user_id == owner_id


class NotificationHub(NotificationPort):
    """Registry of WebSocket clients, grouped by channel.

    Usage in FastAPI:
        hub = NotificationHub()

        @app.websocket("/ws/v1/products")
        async def ws_endpoint(ws: WebSocket):
            await hub.connect("products", ws)
            try:
                while True:
                    await hub.handle_client_message(ws, await ws.receive_text())
            except WebSocketDisconnect:
                hub.disconnect("products", ws)
    """

    def __init__(self, send_timeout: float = 5.0) -> None:
        self._channels: dict[str, dict[Any, Optional[Principal]]] = defaultdict(dict)
        self._send_timeout = send_timeout
        self._stats = {
            "total_connections": 0,
            "total_events": 0,
            "total_messages_sent": 0,
        }

    def active_connections(self, channel: Optional[str] = None) -> int:
        if channel is not None:
            return len(self._channels.get(channel, {}))
        return sum(len(clients) for clients in self._channels.values())

    @property
    def stats(self) -> dict:
        return {**self._stats, "active_connections": self.active_connections()}

    # ------------------------------------------------------------------
    # WebSocket lifecycle
    # ------------------------------------------------------------------

    async def connect(
        self, channel: str, websocket: Any, principal: Optional[Principal] = None
    ) -> None:
        """Accept a WebSocket and subscribe it to ``channel``."""
        await websocket.accept()
        self._channels[channel][websocket] = principal
        self._stats["total_connections"] += 1
        logger.info(
            "WebSocket client joined '%s'. Active: %d",
            channel,
            self.active_connections(channel),
        )
        await websocket.send_text(
            json.dumps(
                {
                    "event": "connected",
                    "channel": channel,
                    "data": {"active_clients": self.active_connections(channel)},
                    "timestamp": _now_iso(),
                }
            )
        )

    def disconnect(self, channel: str, websocket: Any) -> None:
        clients = self._channels.get(channel)
        if clients is not None:
            clients.pop(websocket, None)
        logger.info(
            "WebSocket client left '%s'. Active: %d",
            channel,
            self.active_connections(channel),
        )

    async def handle_client_message(self, websocket: Any, raw: str) -> None:
        """Answer a client frame. Only ``{"action": "ping"}`` is supported."""
        try:
            msg = json.loads(raw)
        except json.JSONDecodeError:
            await websocket.send_text(json.dumps({"error": "Invalid JSON"}))
            return

        action = msg.get("action", "") if isinstance(msg, dict) else ""
        if action == "ping":
            await websocket.send_text(
                json.dumps({"event": "pong", "timestamp": _now_iso()})
            )
        else:
            await websocket.send_text(
                json.dumps({"error": f"Unknown action: {action}", "supported": ["ping"]})
            )

    # ------------------------------------------------------------------
    # Broadcasting
    # ------------------------------------------------------------------

    async def notify(
        self,
        channel: str,
        event: str,
        data: dict[str, Any],
        owner_id: Optional[int] = None,
    ) -> int:
        payload = json.dumps(
            {
                "event": event,
                "channel": channel,
                "data": data,
                "timestamp": _now_iso(),
            },
            default=str,
        )
        self._stats["total_events"] += 1

        recipients = [
            websocket
            for websocket, principal in list(self._channels.get(channel, {}).items())
            if _can_receive(principal, owner_id)
        ]
        # Clients are written to concurrently, so a write waits at most
        # send_timeout no matter how many clients are slow.
        outcomes = await asyncio.gather(
            *(
                asyncio.wait_for(websocket.send_text(payload), self._send_timeout)
                for websocket in recipients
            ),
            return_exceptions=True,
        )

        sent = 0
        for websocket, outcome in zip(recipients, outcomes):
            if isinstance(outcome, BaseException):
                logger.debug("Dropping client on '%s': %r", channel, outcome)
                self.disconnect(channel, websocket)
                continue
            sent += 1
            self._stats["total_messages_sent"] += 1

        logger.debug("Event %s on '%s' delivered to %d client(s)", event, channel, sent)
        return sent


# ══════════════════════════════════════════════════════════════════════
# E-mail
# ══════════════════════════════════════════════════════════════════════


class EmailSender(ABC):
    """Delivers one e-mail. Raises on failure."""

    @abstractmethod
    async def send(self, message: EmailMessage) -> None:
        raise NotImplementedError


class LoggingEmailSender(EmailSender):
    """Writes e-mails to the log. Used when no relay is configured."""

    async def send(self, message: EmailMessage) -> None:
        logger.info("E-mail to %s: %s", message.to, message.subject)


class HttpEmailSender(EmailSender):
    """Posts e-mails as JSON to an HTTP relay."""

    def __init__(self, relay_url: str, sender: str, timeout: float = 10.0) -> None:
        self._relay_url = relay_url
        self._sender = sender
        self._timeout = timeout

    async def send(self, message: EmailMessage) -> None:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(
                self._relay_url,
                json={
                    "from": self._sender,
                    "to": message.to,
                    "subject": message.subject,
                    "body": message.body,
                },
            )
            resp.raise_for_status()


class EmailOutbox(EmailQueuePort):
    """Bounded e-mail queue with a single background worker."""

    def __init__(self, sender: EmailSender, maxsize: int = 1000) -> None:
        self._sender = sender
        self._queue: asyncio.Queue[EmailMessage] = asyncio.Queue(maxsize=maxsize)
        self._worker: Optional[asyncio.Task] = None
        self._stats = {"queued": 0, "sent": 0, "failed": 0, "dropped": 0}

    @property
    def stats(self) -> dict:
        return {**self._stats, "pending": self._queue.qsize()}

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def enqueue(self, message: EmailMessage) -> bool:
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            self._stats["dropped"] += 1
            logger.warning(
                "E-mail queue full (%d), dropping: %s",
                self._queue.maxsize,
                message.subject,
            )
            return False
        self._stats["queued"] += 1
        return True

    def start(self) -> None:
        """Start the worker task on the running event loop."""
        if self.is_running:
            return
        self._worker = asyncio.create_task(self._run(), name="email-outbox")
        logger.info("E-mail outbox worker started")

    async def stop(self) -> None:
        """Cancel the worker. Messages still queued stay in the queue."""
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        logger.info(
            "E-mail outbox worker stopped (%d message(s) pending)",
            self._queue.qsize(),
        )

    async def shutdown(self) -> int:
        """Stop the worker, then deliver whatever is still queued.

        Returns how many messages were delivered during the drain.
        """
        await self.stop()
        drained = await self.flush()
        if drained:
            logger.info("E-mail outbox drained %d message(s) on shutdown", drained)
        return drained

    async def flush(self) -> int:
        """Deliver every queued message now. Returns how many were taken."""
        taken = 0
        while not self._queue.empty():
            message = self._queue.get_nowait()
            try:
                await self._deliver(message)
            finally:
                self._queue.task_done()
            taken += 1
        return taken

    async def _run(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self._deliver(message)
            finally:
                self._queue.task_done()

    async def _deliver(self, message: EmailMessage) -> None:
        try:
            await self._sender.send(message)
        except Exception:
            self._stats["failed"] += 1
            logger.exception("Failed to send e-mail: %s", message.subject)
            return
        self._stats["sent"] += 1
