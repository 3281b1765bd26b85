"""HTTP and WebSocket surface for the Myrkat bus."""

from .app import create_app
from .websocket import ConnectionManager

__all__ = [
    "ConnectionManager",
    "create_app",
]
