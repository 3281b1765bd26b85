"""FastAPI HTTP server exposing the Myrkat bus to browser front ends."""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from .. import __version__
from ..app_context import AppContext, MyrkatConfig
from ..core.constants import STORAGE_REQUEST_TOPIC
from ..core.exceptions import (
    DuplicateDocumentIdError,
    InvalidRequestError,
    MyrkatError,
    NoHandlerRegisteredError,
    UnsupportedOperationError,
)
from ..core.storage_handler import StorageRequest
from .websocket import ConnectionManager

logger = logging.getLogger(__name__)


# ============================================================================
# Response Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    plugins: int
    connections: int
    data_dir: str


class PluginInfo(BaseModel):
    """Plugin summary for front ends."""
    id: str
    name: str
    slots: list[str]


def _to_http_error(e: MyrkatError) -> HTTPException:
    """Map core errors to HTTP status codes."""
    if isinstance(e, (UnsupportedOperationError, InvalidRequestError, DuplicateDocumentIdError)):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, NoHandlerRegisteredError):
        return HTTPException(status_code=503, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


# ============================================================================
# App factory
# ============================================================================

def create_app(config: MyrkatConfig | None = None) -> FastAPI:
    """Build the FastAPI app; the context lives on app.state for the app's lifetime."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifecycle."""
        logger.info("Starting Myrkat HTTP Server...")

        context = AppContext(config or MyrkatConfig.from_env())
        connections = ConnectionManager()
        await context.start()

        relays = {topic: connections.relay(topic) for topic in context.config.relay_topics}
        for topic, relay in relays.items():
            context.bus.subscribe(topic, relay)

        app.state.context = context
        app.state.connections = connections
        logger.info("Server ready")

        yield

        # Shutdown
        for topic, relay in relays.items():
            context.bus.unsubscribe(topic, relay)
        await context.stop()
        logger.info("Server stopped")

    app = FastAPI(
        title="Myrkat Server",
        description="Document store and event bus for the Myrkat note shell",
        version=__version__,
        lifespan=lifespan,
    )

    # ========================================================================
    # API Endpoints
    # ========================================================================

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Health check endpoint."""
        context: AppContext = request.app.state.context
        return {
            "status": "ok",
            "version": __version__,
            "plugins": context.registry.count(),
            "connections": request.app.state.connections.count(),
            "data_dir": str(context.store.root),
        }

    @app.post("/api/storage")
    async def storage_request(request: Request, envelope: StorageRequest):
        """Forward a storage envelope to the storage:request handler."""
        context: AppContext = request.app.state.context
        try:
            return await context.bus.request(STORAGE_REQUEST_TOPIC, envelope)
        except MyrkatError as e:
            logger.warning(f"Storage request failed ({envelope.operation} on '{envelope.collection}'): {e}")
            raise _to_http_error(e)
        except Exception as e:
            logger.error(f"Error handling storage request: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(e))

    @app.post("/api/events/{topic}")
    async def publish_event(topic: str, request: Request, payload: Any = Body(None)):
        """Publish a notification on the bus."""
        context: AppContext = request.app.state.context
        await context.bus.publish(topic, payload)
        return {"published": topic}

    @app.get("/api/plugins", response_model=list[PluginInfo])
    async def list_plugins(request: Request):
        """List registered plugins and the view slots they fill."""
        context: AppContext = request.app.state.context
        return [
            {"id": p.id, "name": p.name, "slots": [name for name, value in p.slots.items() if value is not None]}
            for p in context.registry.get_plugins()
        ]

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket, client_id: str | None = None):
        """
        WebSocket endpoint for bus notifications.
        Clients connect with: ws://localhost:8765/ws?client_id=xxx
        """
        connections: ConnectionManager | None = getattr(websocket.app.state, "connections", None)
        if connections is None:
            await websocket.close(code=1011, reason="Server not initialized")
            return

        client_id = client_id or uuid.uuid4().hex[:8]
        await connections.connect(websocket, client_id)

        try:
            # Keep connection alive and answer heartbeats
            while True:
                data = await websocket.receive_text()
                await connections.send_personal(client_id, {"type": "pong", "message": data})

        except WebSocketDisconnect:
            connections.disconnect(client_id)
        except Exception as e:
            logger.error(f"WebSocket error for {client_id}: {e}")
            connections.disconnect(client_id)

    return app
