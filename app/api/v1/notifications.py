"""
Notification WebSocket.

- WS /ws: authenticated socket that receives ``hired`` events for the caller

Frames accepted from the client: ``{"type": "ping"}`` → ``{"type": "pong"}``.
Anything else gets an error frame; the socket stays open.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import APIRouter, Query, Request, WebSocket, WebSocketDisconnect

from app.core.auth import get_current_user_id_ws
from app.core.errors import Unauthorized
from app.core.notifications import NotificationHub

router = APIRouter()
logger = logging.getLogger(__name__)


def get_notification_hub(request: Request) -> NotificationHub:
    """FastAPI dependency: the application's connection registry."""
    return request.app.state.notifications


@router.websocket("/ws")
async def notifications_socket(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
):
    try:
        user_id = get_current_user_id_ws(websocket, token)
    except Unauthorized:
        await websocket.close(code=4001, reason="authentication_failed")
        return

    await websocket.accept()
    hub: NotificationHub = websocket.app.state.notifications
    conn_info = await hub.register_connection(user_id, websocket)

    try:
        while True:
            data = await websocket.receive_text()
            try:
                frame = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_text(json.dumps({
                    "type": "error",
                    "code": "INVALID_JSON",
                    "message": "Could not parse message as JSON.",
                }))
                continue

            if isinstance(frame, dict) and frame.get("type") == "ping":
                await websocket.send_text(json.dumps({"type": "pong"}))
                continue

            await websocket.send_text(json.dumps({
                "type": "error",
                "code": "UNKNOWN_FRAME",
                "message": "Only ping frames are accepted.",
            }))
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"Notification socket error: {e}")
    finally:
        await hub.unregister_connection(conn_info)
