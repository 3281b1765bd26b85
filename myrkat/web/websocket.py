"""WebSocket connection manager relaying bus notifications to browsers."""

import logging
from typing import Any, Callable

from fastapi import WebSocket

logger = logging.getLogger(__name__)


def to_wire(value: Any) -> Any:
    """Drop callables (e.g. search onClick hooks) so a payload can be sent as JSON."""
    if isinstance(value, dict):
        return {k: to_wire(v) for k, v in value.items() if not callable(v)}
    if isinstance(value, (list, tuple)):
        return [to_wire(v) for v in value if not callable(v)]
    return value


class ConnectionManager:
    """Manages WebSocket connections and broadcasts."""

    def __init__(self):
        # Map: client_id -> WebSocket
        self.active_connections: dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket, client_id: str):
        """Accept and register a WebSocket connection."""
        await websocket.accept()
        self.active_connections[client_id] = websocket
        logger.info(f"WebSocket connected: {client_id}")

    def disconnect(self, client_id: str):
        """Remove a WebSocket connection."""
        if client_id in self.active_connections:
            del self.active_connections[client_id]
            logger.info(f"WebSocket disconnected: {client_id}")

    async def send_personal(self, client_id: str, message: dict):
        """Send message to a specific client."""
        if client_id in self.active_connections:
            try:
                await self.active_connections[client_id].send_json(message)
            except Exception as e:
                logger.error(f"Error sending to {client_id}: {e}")
                self.disconnect(client_id)

    async def broadcast_all(self, message: dict):
        """Broadcast message to all connected clients."""
        disconnected = []

        for client_id, connection in list(self.active_connections.items()):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.error(f"Error broadcasting to {client_id}: {e}")
                disconnected.append(client_id)

        # Clean up disconnected clients
        for client_id in disconnected:
            self.disconnect(client_id)

    def relay(self, topic: str) -> Callable[[Any], Any]:
        """Bus subscriber that forwards every publish on topic to all clients."""
        async def forward(payload: Any) -> None:
            await self.broadcast_all({"topic": topic, "payload": to_wire(payload)})
        forward.__qualname__ = f"relay[{topic}]"
        return forward

    def count(self) -> int:
        """Return number of active connections."""
        return len(self.active_connections)
