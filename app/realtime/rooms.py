"""
In-memory registry of live realtime connections, grouped by match id.

All mutations run on the event loop, so the registry needs no lock. Broadcasts
iterate over a snapshot of the room and hand every send to its own task: a slow
or dead peer never delays the others. A peer whose send fails or stalls past
the send timeout is dropped.

The registry is process-local. Running several workers would need a pub/sub
backplane in place of this class.
"""
import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Set
from app.config.constants import (
    EMPTY_ROOM,
    RELAYED_FRAME_TYPES,
    SERVER_TIMESTAMP_FIELD,
    REALTIME_SEND_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class RoomConnection:
    """One open websocket, bound to a single room for its whole lifetime."""
    websocket: Any
    user_id: str
    room_id: int

    @property
    def authenticated(self) -> bool:
        return self.room_id != EMPTY_ROOM


class RoomManager:
    def __init__(self, send_timeout: float = REALTIME_SEND_TIMEOUT_SECONDS):
        self.send_timeout = send_timeout
        self.rooms: Dict[int, Set[RoomConnection]] = {}
        self._pending: Set[asyncio.Task] = set()

    def join(self, connection: RoomConnection):
        self.rooms.setdefault(connection.room_id, set()).add(connection)
        logger.info(f"Connection for user {connection.user_id or '-'} joined room {connection.room_id}")

    def leave(self, connection: RoomConnection):
        members = self.rooms.get(connection.room_id)
        if not members or connection not in members:
            return
        members.discard(connection)
        if not members:
            del self.rooms[connection.room_id]
        logger.info(f"Connection for user {connection.user_id or '-'} left room {connection.room_id}")

    def members(self, room_id: int) -> Set[RoomConnection]:
        return set(self.rooms.get(room_id, ()))

    def connection_count(self) -> int:
        return sum(len(members) for members in self.rooms.values())

    async def _send(self, connection: RoomConnection, text: str):
        try:
            await asyncio.wait_for(connection.websocket.send_text(text), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Dropping connection of user {connection.user_id} in room {connection.room_id}: "
                f"send stalled for {self.send_timeout}s"
            )
            self.leave(connection)
        except Exception as e:
            logger.warning(f"Dropping connection of user {connection.user_id} in room {connection.room_id}: {e}")
            self.leave(connection)

    def broadcast(self, room_id: int, payload: Dict[str, Any], exclude: Optional[RoomConnection] = None) -> int:
        """
        Schedule delivery of payload to every connection in the room except `exclude`.

        Returns:
            Number of peers a send was scheduled for
        """
        if room_id == EMPTY_ROOM:
            return 0

        text = json.dumps(payload)
        peers = [c for c in self.members(room_id) if c is not exclude]
        for peer in peers:
            task = asyncio.create_task(self._send(peer, text))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        return len(peers)

    def handle_frame(self, connection: RoomConnection, raw: str) -> int:
        """
        Relay one inbound frame to the other members of the connection's room.

        The frame must be a JSON object whose `type` is relayable and whose
        `matchId` is the room the connection authenticated into; anything else
        is dropped. The relayed copy gets a server timestamp.

        Returns:
            Number of peers the frame was relayed to
        """
        if not connection.authenticated:
            logger.debug("Dropping frame from unauthenticated connection")
            return 0
        if connection not in self.rooms.get(connection.room_id, ()):
            logger.debug(f"Dropping frame from evicted connection of user {connection.user_id}")
            return 0

        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Dropping malformed frame from user {connection.user_id}")
            return 0

        if not isinstance(data, dict):
            return 0

        frame_type = data.get("type")
        match_id = data.get("matchId")
        if frame_type not in RELAYED_FRAME_TYPES:
            logger.debug(f"Dropping frame of type {frame_type!r}")
            return 0
        if isinstance(match_id, bool) or match_id != connection.room_id:
            logger.warning(
                f"User {connection.user_id} addressed room {match_id!r} from room {connection.room_id}; dropped"
            )
            return 0

        relayed = dict(data)
        relayed[SERVER_TIMESTAMP_FIELD] = int(time.time() * 1000)
        return self.broadcast(connection.room_id, relayed, exclude=connection)

    async def drain(self):
        """Wait for scheduled sends to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


room_manager = RoomManager()
