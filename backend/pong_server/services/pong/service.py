import logging
import random
import time
from typing import Callable, List, Optional

from pong_server.constants import SOCKET_EVENTS
from pong_server.models import Room
from . import controls, payloads
from .matchmaker import Matchmaker
from .registry import SessionRegistry
from .scheduler import RoomLoopScheduler

logger = logging.getLogger(__name__)


class PongService:
    """Entry point the transport handlers call into.

    Owns the registry, matchmaker and scheduler for one process. Stored on
    ``app.extensions['pong']`` by the app factory.
    """

    def __init__(
        self,
        broadcaster,
        start_task: Callable,
        sleep: Callable[[float], None],
        autostart: bool = True,
        finished_room_ttl: float = 10.0,
        rng=random,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.broadcaster = broadcaster
        self.finished_room_ttl = finished_room_ttl
        self.clock = clock
        self.registry = SessionRegistry()
        self.scheduler = RoomLoopScheduler(
            self.registry,
            broadcaster,
            start_task=start_task,
            sleep=sleep,
            autostart=autostart,
            rng=rng,
            clock=clock,
        )
        self.matchmaker = Matchmaker(self.registry, self.scheduler, broadcaster, rng=rng)

    def request_join(self, sid: str) -> Optional[Room]:
        self.reap_finished()
        return self.matchmaker.request_join(sid)

    def apply_input(self, sid: str, room_id, key, action) -> bool:
        return controls.apply_input(self.registry, sid, room_id, key, action)

    def disconnect(self, sid: str) -> Optional[Room]:
        """Drop ``sid`` from matchmaking; end its match if one is running.

        Returns the room that was torn down, if any.
        """
        with self.registry.lock:
            if self.registry.clear_waiting(sid):
                logger.info(f"[disconnect] sid={sid} was waiting")
                return None
            room = self.registry.room_of(sid)
            if room is None:
                return None
            self.registry.remove_room(room.room_id)

        self.scheduler.stop(room.room_id)
        with room.lock:
            was_playing = room.is_playing and not room.closed
            room.closed = True
        if was_playing:
            opponent = room.opponent_of(sid)
            logger.info(f"[disconnect] sid={sid} room={room.room_id} opponent={opponent}")
            self.broadcaster.to_player(opponent, SOCKET_EVENTS['OPPONENT_DISCONNECTED'], payloads.opponent_disconnected())
        else:
            logger.info(f"[disconnect] sid={sid} room={room.room_id} already finished")
        self.broadcaster.close_room(room.room_id)
        self.reap_finished()
        return room

    def reap_finished(self, now: Optional[float] = None) -> List[Room]:
        """Forget finished rooms older than the grace period."""
        if now is None:
            now = self.clock()
        reaped = []
        with self.registry.lock:
            for room in self.registry.expired_rooms(now, self.finished_room_ttl):
                self.registry.remove_room(room.room_id)
                reaped.append(room)
        for room in reaped:
            self.scheduler.stop(room.room_id)
            with room.lock:
                room.closed = True
            self.broadcaster.close_room(room.room_id)
            logger.info(f"[room-expired] room={room.room_id}")
        return reaped

    def rooms(self) -> List[Room]:
        return self.registry.rooms()

    @property
    def waiting(self) -> Optional[str]:
        return self.registry.waiting

    def shutdown(self) -> None:
        for room_id in self.scheduler.active_rooms():
            self.scheduler.stop(room_id)
