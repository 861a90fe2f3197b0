import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Set

from constants import DEFAULT_ROOM
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass(eq=False)
class Peer:
    """One connected transport endpoint.

    Peers compare by identity, so two connections are never equal even if they
    share a remote address. ``websocket`` is anything with async ``send_text``
    and ``close`` methods.
    """
    websocket: Any
    peer_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    async def send(self, payload: str) -> None:
        await self.websocket.send_text(payload)

    async def close(self) -> None:
        await self.websocket.close()


class Room:
    """Peers of one room and the lock that serializes their membership and fan-out."""

    def __init__(self, room_id: str):
        self.room_id = room_id
        self.peers: Set[Peer] = set()
        self.lock = asyncio.Lock()


class RoomRegistry:
    """Room id -> room of peers, with fan-out broadcast.

    Membership changes and broadcasts in a room run under that room's lock, so
    a broadcast never iterates a room while a peer is half removed and the room
    sizes written to the log are the sizes at that point. A slow peer only
    holds up its own room.

    Rooms are created on first join and are kept after they empty out.
    """

    def __init__(self):
        self.rooms: Dict[str, Room] = {}

    async def join(self, room_id: str, peer: Peer) -> None:
        room = self._room(room_id)
        async with room.lock:
            room.peers.add(peer)
            logger.info(f"Peer {peer.peer_id} joined room {room.room_id}. Total peers: {len(room.peers)}")

    async def leave(self, room_id: str, peer: Peer) -> None:
        room = self.rooms.get(room_id or DEFAULT_ROOM)
        if room is None:
            return
        async with room.lock:
            self._discard(room, peer)

    async def broadcast(self, room_id: str, from_peer: Peer, payload: str) -> int:
        """Send ``payload`` to every peer in the room except ``from_peer``.

        A peer whose send fails is removed from the room and its transport
        closed; delivery to the remaining peers continues. Returns the number
        of peers the payload was delivered to.
        """
        room = self.rooms.get(room_id or DEFAULT_ROOM)
        if room is None:
            return 0
        delivered = 0
        async with room.lock:
            for peer in list(room.peers):
                if peer is from_peer:
                    continue
                try:
                    await peer.send(payload)
                    delivered += 1
                except Exception as e:
                    logger.warning(f"Send to peer {peer.peer_id} in room {room.room_id} failed: {e}")
                    self._discard(room, peer)
                    await self._close_quietly(peer)
        logger.debug(f"Relayed {len(payload)}-char message from {from_peer.peer_id} to {delivered} peers in room {room.room_id}")
        return delivered

    def members(self, room_id: str) -> Set[Peer]:
        room = self.rooms.get(room_id or DEFAULT_ROOM)
        if room is None:
            return set()
        return room.peers.copy()

    def _room(self, room_id: str) -> Room:
        room_id = room_id or DEFAULT_ROOM
        room = self.rooms.get(room_id)
        if room is None:
            room = self.rooms[room_id] = Room(room_id)
            logger.info(f"Room {room_id} created")
        return room

    def _discard(self, room: Room, peer: Peer) -> None:
        if peer not in room.peers:
            return
        room.peers.discard(peer)
        logger.info(f"Peer {peer.peer_id} left room {room.room_id}. Total peers: {len(room.peers)}")

    async def _close_quietly(self, peer: Peer) -> None:
        try:
            await peer.close()
        except Exception as e:
            logger.debug(f"Error closing transport for peer {peer.peer_id}: {e}")
