import logging
import random
from typing import Optional

from pong_server.constants import SOCKET_EVENTS
from pong_server.models import Ball, GameState, Paddle, Room
from . import payloads, physics
from .registry import SessionRegistry
from .scheduler import RoomLoopScheduler

logger = logging.getLogger(__name__)


def new_game_state(left_id: str, right_id: str, rng=random) -> GameState:
    """Fresh match: centered ball with a random serve, centered paddles, 0-0."""
    ball = Ball(dx=physics.serve_dx(rng), dy=physics.serve_dy(rng))
    return GameState(
        ball=ball,
        paddles={left_id: Paddle.left(left_id), right_id: Paddle.right(right_id)},
        scores={left_id: 0, right_id: 0},
    )


class Matchmaker:
    """Pairs join requests two at a time.

    At most one connection waits. The connection that was waiting becomes
    player one (left paddle), the one that completes the pair player two.
    """

    def __init__(self, registry: SessionRegistry, scheduler: RoomLoopScheduler, broadcaster, rng=random):
        self.registry = registry
        self.scheduler = scheduler
        self.broadcaster = broadcaster
        self.rng = rng

    def request_join(self, sid: str) -> Optional[Room]:
        """Handle a join request; return the room ``sid`` is now playing in, if any.

        Decisions are made under the registry lock, sends happen after it is
        released so other rooms' ticks are not held up by them.
        """
        with self.registry.lock:
            current = self.registry.room_of(sid)
            if current is not None and current.is_playing:
                logger.info(f"[rejoin] sid={sid} room={current.room_id}")
                with current.lock:
                    joined = payloads.room_joined(current, sid)
                outbox = [
                    (SOCKET_EVENTS['ERROR'], payloads.error(payloads.ALREADY_IN_GAME_MESSAGE)),
                    (SOCKET_EVENTS['ROOM_JOINED'], joined),
                ]
                room = None
            else:
                current = None
                room = self._pair_or_wait(sid)
                outbox = [] if room else [(SOCKET_EVENTS['WAITING_FOR_PLAYER'], payloads.waiting())]

        if room is None:
            for event, payload in outbox:
                self.broadcaster.to_player(sid, event, payload)
            return current

        # the room lock was taken in _pair_or_wait; the first tick waits behind the join notices
        try:
            for player in room.players:
                self.broadcaster.enter_room(player, room.room_id)
            for player in room.players:
                self.broadcaster.to_player(player, SOCKET_EVENTS['ROOM_JOINED'], payloads.room_joined(room, player))
            self.broadcaster.to_room(room.room_id, SOCKET_EVENTS['GAME_START'], room.state.to_dict())
        finally:
            room.lock.release()
        logger.info(f"[room-start] room={room.room_id} left={room.left_id} right={room.right_id}")
        return room

    def _pair_or_wait(self, sid: str) -> Optional[Room]:
        """Pair ``sid`` with the waiting connection or make it wait.

        Called with the registry lock held. A new room is returned with its
        lock acquired and its loop started; the caller releases the lock.
        """
        waiting = self.registry.waiting
        if waiting is None or waiting == sid:
            self.registry.set_waiting(sid)
            logger.info(f"[waiting] sid={sid}")
            return None

        self.registry.set_waiting(None)
        room = Room(self.registry.new_room_id(), waiting, sid, new_game_state(waiting, sid, self.rng))
        self.registry.add_room(room)
        room.lock.acquire()
        try:
            self.scheduler.start(room)
        except Exception:
            room.lock.release()
            raise
        return room
