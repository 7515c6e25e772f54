"""
Real-time notification hub for live WebSocket connections.

Features:
- Connections registered and addressed by user identity, never by socket
- Every live connection of a user (e.g. several tabs) receives each event
- Fire-and-forget delivery: no live connection means the event is dropped
- Per-send timeout; dead or stalled sockets are dropped from the registry

The hub is process-scoped. Fan-out across several server processes would sit
behind the ``HireNotifier`` protocol (e.g. a pub/sub relay) and is not done here.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Protocol
from uuid import UUID

from fastapi import WebSocket

from gigflow_shared.schemas.bids import HiredNotification

logger = logging.getLogger(__name__)

DEFAULT_SEND_TIMEOUT = 5.0  # seconds


class HireNotifier(Protocol):
    async def notify_hired(self, freelancer_id: UUID, gig_id: UUID, gig_title: str) -> int:
        ...


class ConnectionInfo:
    """Handle for one registered WebSocket connection."""

    __slots__ = ("websocket", "user_id", "connected_at")

    def __init__(self, websocket: WebSocket, user_id: UUID):
        self.websocket = websocket
        self.user_id = user_id
        self.connected_at = datetime.now(timezone.utc)


class NotificationHub:
    """
    Registry of live connections keyed by user id.

    Mutated by connect/disconnect, read by ``send_to_user``. The lock guards the
    registry only; sends happen outside it so a slow socket never blocks
    registration.
    """

    def __init__(self, send_timeout: float = DEFAULT_SEND_TIMEOUT) -> None:
        # user_id_str -> list[ConnectionInfo]
        self._connections: dict[str, list[ConnectionInfo]] = {}
        self._lock = asyncio.Lock()
        self._send_timeout = send_timeout

    @property
    def connections(self) -> dict[str, list[ConnectionInfo]]:
        return self._connections

    async def register_connection(self, user_id: UUID, websocket: WebSocket) -> ConnectionInfo:
        """Register an accepted WebSocket under ``user_id``."""
        info = ConnectionInfo(websocket, user_id)
        async with self._lock:
            self._connections.setdefault(str(user_id), []).append(info)
            total = len(self._connections[str(user_id)])

        logger.info("Notification socket connected: user=%s total=%d", user_id, total)
        return info

    async def unregister_connection(self, info: ConnectionInfo) -> None:
        """Remove a connection. Unknown handles are ignored."""
        user_str = str(info.user_id)
        async with self._lock:
            conns = self._connections.get(user_str)
            if conns is None:
                return
            try:
                conns.remove(info)
            except ValueError:
                return
            if not conns:
                del self._connections[user_str]

        logger.info("Notification socket disconnected: user=%s", info.user_id)

    async def connection_count(self, user_id: UUID) -> int:
        async with self._lock:
            return len(self._connections.get(str(user_id), []))

    async def send_to_user(self, user_id: UUID, message: dict[str, Any]) -> int:
        """
        Push ``message`` to every live connection of ``user_id``.

        Returns the number of connections that accepted it. Zero connections is
        not an error: the event is simply dropped.
        """
        async with self._lock:
            targets = list(self._connections.get(str(user_id), []))

        if not targets:
            logger.debug("No live connection for user=%s, dropping %s", user_id, message.get("type"))
            return 0

        msg_text = json.dumps(message, default=str)
        results = await asyncio.gather(
            *(self._send(conn_info, msg_text) for conn_info in targets)
        )

        dead_connections = [c for c, ok in zip(targets, results) if not ok]
        for dead in dead_connections:
            await self.unregister_connection(dead)

        return len(targets) - len(dead_connections)

    async def _send(self, conn_info: ConnectionInfo, msg_text: str) -> bool:
        try:
            await asyncio.wait_for(conn_info.websocket.send_text(msg_text), timeout=self._send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning("Notification send timed out: user=%s", conn_info.user_id)
            return False
        except Exception as exc:
            logger.info("Notification send failed: user=%s error=%s", conn_info.user_id, exc)
            return False

    async def notify_hired(self, freelancer_id: UUID, gig_id: UUID, gig_title: str) -> int:
        """Tell a freelancer they were hired for ``gig_title``."""
        payload = HiredNotification(
            message=f'You have been hired for "{gig_title}"!',
            gig_id=gig_id,
            gig_title=gig_title,
            timestamp=datetime.now(timezone.utc),
        )
        return await self.send_to_user(freelancer_id, payload.model_dump(mode="json"))

    async def close_all(self) -> None:
        """Close every registered socket (application shutdown)."""
        async with self._lock:
            everything = [c for conns in self._connections.values() for c in conns]
            self._connections.clear()

        for conn_info in everything:
            try:
                await conn_info.websocket.close(code=1001, reason="server_shutdown")
            except Exception:
                logger.debug("Socket already closed: user=%s", conn_info.user_id)
