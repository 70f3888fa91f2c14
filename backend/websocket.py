"""
WebSocket render boundary for the board.
"""

import json
import logging
from typing import Optional, Set, Union

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from backend.models import ClientCommand, ErrorMessage, ViewMessage
from backend.metrics import WEBSOCKET_CONNECTIONS, WEBSOCKET_MESSAGES_SENT

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages WebSocket connections and broadcasts rendered views."""

    def __init__(self):
        self.active_connections: Set[WebSocket] = set()
        self.latest: Optional[Union[ViewMessage, ErrorMessage]] = None

    async def connect(self, websocket: WebSocket):
        """Accept new WebSocket connection."""
        await websocket.accept()
        self.active_connections.add(websocket)
        WEBSOCKET_CONNECTIONS.set(len(self.active_connections))
        logger.info(f"WebSocket connected. Total connections: {len(self.active_connections)}")

        # Late joiners get the current screen
        if self.latest is not None:
            try:
                await websocket.send_json(self.latest.model_dump())
                WEBSOCKET_MESSAGES_SENT.labels(type=self.latest.type).inc()
            except Exception as e:
                logger.error(f"Failed to send current view: {e}")
                self.disconnect(websocket)

    def disconnect(self, websocket: WebSocket):
        """Remove WebSocket connection."""
        self.active_connections.discard(websocket)
        WEBSOCKET_CONNECTIONS.set(len(self.active_connections))
        logger.info(f"WebSocket disconnected. Total connections: {len(self.active_connections)}")

    async def publish(self, message: Union[ViewMessage, ErrorMessage]):
        """Record ``message`` as the current screen and broadcast it."""
        self.latest = message

        if not self.active_connections:
            return

        message_json = message.model_dump()
        disconnected = []

        for connection in list(self.active_connections):
            try:
                await connection.send_json(message_json)
                WEBSOCKET_MESSAGES_SENT.labels(type=message.type).inc()
            except Exception as e:
                logger.warning(f"Failed to send {message.type} to connection: {e}")
                disconnected.append(connection)

        # Clean up disconnected clients
        for connection in disconnected:
            self.disconnect(connection)

    async def _dispatch(self, raw: str, view_controller):
        """Apply one client command to the view controller."""
        try:
            command = ClientCommand(**json.loads(raw))
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Ignoring invalid client command: {e}")
            return

        if command.action == "select_view":
            if command.view is None:
                logger.warning("Ignoring select_view without a view")
                return
            await view_controller.select_view(command.view)
        elif command.action == "search":
            view_controller.set_search(command.term)

    async def handle_client(self, websocket: WebSocket, view_controller):
        """Handle a WebSocket client connection."""
        await self.connect(websocket)

        try:
            while True:
                raw = await websocket.receive_text()
                await self._dispatch(raw, view_controller)

        except WebSocketDisconnect:
            logger.info("Client disconnected")
        except Exception as e:
            logger.error(f"WebSocket error: {e}")
        finally:
            self.disconnect(websocket)
