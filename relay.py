from fastapi import WebSocket

from constants import DEFAULT_ROOM
from logging_config import get_logger
from room_registry import Peer, RoomRegistry

logger = get_logger(__name__)


class RelaySession:
    """Lifecycle of one signaling connection: accept, join, relay, leave."""

    def __init__(self, registry: RoomRegistry, websocket: WebSocket, room_id: str = None):
        self.registry = registry
        self.websocket = websocket
        self.room_id = room_id or DEFAULT_ROOM
        self.peer = Peer(websocket=websocket)

    async def run(self) -> None:
        try:
            await self.websocket.accept()
        except Exception as e:
            logger.error(f"WebSocket upgrade failed for room {self.room_id}: {e}", exc_info=True)
            return

        await self.registry.join(self.room_id, self.peer)
        try:
            await self._relay_loop()
        finally:
            await self.registry.leave(self.room_id, self.peer)
            try:
                await self.websocket.close()
            except Exception as e:
                logger.debug(f"Error closing WebSocket for peer {self.peer.peer_id}: {e}")

    async def _relay_loop(self) -> None:
        message_count = 0
        while True:
            try:
                message = await self.websocket.receive()
            except Exception as e:
                logger.info(f"Read error for peer {self.peer.peer_id} in room {self.room_id}: {e}")
                return

            if message["type"] == "websocket.disconnect":
                logger.info(f"Peer {self.peer.peer_id} disconnected from room {self.room_id} (code {message.get('code')})")
                return

            text = message.get("text")
            if text is None:
                # binary frames carry nothing the peers exchange
                continue

            message_count += 1
            logger.debug(f"Message #{message_count} from peer {self.peer.peer_id} in room {self.room_id}")
            await self.registry.broadcast(self.room_id, self.peer, text)
