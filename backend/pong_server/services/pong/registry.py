import itertools
import threading
from typing import Dict, List, Optional

from pong_server.models import Room


class SessionRegistry:
    """Process-wide matchmaking state.

    Holds the live rooms, the connection -> room index and the single waiting
    slot. Every access goes through ``lock``; callers that need several steps
    to happen atomically (pairing, teardown) hold it across them. The lock is
    re-entrant so those callers can still use the helpers below.
    """

    def __init__(self):
        self.lock = threading.RLock()
        self._rooms: Dict[str, Room] = {}
        self._room_of: Dict[str, str] = {}
        self._waiting: Optional[str] = None
        self._ids = itertools.count(1)

    # ---- rooms ----

    def new_room_id(self) -> str:
        with self.lock:
            return f'room-{next(self._ids)}'

    def add_room(self, room: Room) -> None:
        with self.lock:
            self._rooms[room.room_id] = room
            for sid in room.players:
                self._room_of[sid] = room.room_id

    def get_room(self, room_id: str) -> Optional[Room]:
        with self.lock:
            return self._rooms.get(room_id)

    def room_of(self, sid: str) -> Optional[Room]:
        with self.lock:
            room_id = self._room_of.get(sid)
            return self._rooms.get(room_id) if room_id else None

    def remove_room(self, room_id: str) -> Optional[Room]:
        """Drop a room and the index entries that still point at it."""
        with self.lock:
            room = self._rooms.pop(room_id, None)
            if room is None:
                return None
            for sid in room.players:
                # a player of a finished room may already be in a newer match
                if self._room_of.get(sid) == room_id:
                    del self._room_of[sid]
            return room

    def rooms(self) -> List[Room]:
        with self.lock:
            return list(self._rooms.values())

    def expired_rooms(self, now: float, ttl: float) -> List[Room]:
        with self.lock:
            return [
                r for r in self._rooms.values()
                if not r.is_playing and r.finished_at is not None and now - r.finished_at >= ttl
            ]

    def __contains__(self, room_id: str) -> bool:
        with self.lock:
            return room_id in self._rooms

    def __len__(self) -> int:
        with self.lock:
            return len(self._rooms)

    # ---- waiting slot ----

    @property
    def waiting(self) -> Optional[str]:
        with self.lock:
            return self._waiting

    def set_waiting(self, sid: Optional[str]) -> None:
        with self.lock:
            self._waiting = sid

    def clear_waiting(self, sid: str) -> bool:
        """Empty the waiting slot if ``sid`` holds it."""
        with self.lock:
            if self._waiting != sid:
                return False
            self._waiting = None
            return True
