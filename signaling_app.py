from typing import Optional

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from logging_config import get_logger
from relay import RelaySession
from room_registry import RoomRegistry

logger = get_logger(__name__)


def create_signaling_app(registry: Optional[RoomRegistry] = None) -> FastAPI:
    """Build the relay application around its own room registry."""
    app = FastAPI(title="Signaling Relay")
    app.state.registry = registry or RoomRegistry()

    # Peers connect from arbitrary origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket, room: Optional[str] = None):
        """Join ``room`` (or the default room) and relay every text frame to the rest of it."""
        logger.info(f"WebSocket connection attempt for room: {room}")
        await RelaySession(app.state.registry, websocket, room).run()

    logger.info("Signaling relay application initialized")
    return app


app = create_signaling_app()
