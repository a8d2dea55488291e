import logging
import random
import threading
import time
from typing import Callable, Dict, List, Optional

from pong_server.constants import SOCKET_EVENTS, TICK_RATE, WINNING_SCORE
from pong_server.models import FINISHED, Room
from . import payloads, physics
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class LoopHandle:
    """Cancellation handle for one room's tick task.

    ``cancel`` may be called any number of times from either the game-over
    path or the disconnect path; only the first call has an effect.
    """

    def __init__(self, room_id: str):
        self.room_id = room_id
        self.task = None
        self._cancelled = threading.Event()

    def cancel(self) -> bool:
        if self._cancelled.is_set():
            return False
        self._cancelled.set()
        return True

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


class RoomLoopScheduler:
    """Runs one fixed-rate simulation task per playing room.

    - ``start_task``/``sleep`` are ``socketio.start_background_task`` and
      ``socketio.sleep`` in the app, so loops follow the configured async mode
    - with ``autostart`` off (TESTING) no task is spawned; callers drive
      ``tick`` themselves
    - a fault inside one room's tick tears down that room only
    """

    def __init__(
        self,
        registry: SessionRegistry,
        broadcaster,
        start_task: Callable,
        sleep: Callable[[float], None],
        tick_rate: int = TICK_RATE,
        autostart: bool = True,
        rng=random,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.registry = registry
        self.broadcaster = broadcaster
        self.start_task = start_task
        self.sleep = sleep
        self.interval = 1.0 / tick_rate
        self.autostart = autostart
        self.rng = rng
        self.clock = clock
        self._loops: Dict[str, LoopHandle] = {}
        self._lock = threading.Lock()

    def start(self, room: Room) -> LoopHandle:
        handle = LoopHandle(room.room_id)
        room.loop = handle
        with self._lock:
            previous = self._loops.get(room.room_id)
            self._loops[room.room_id] = handle
        if previous is not None:
            previous.cancel()
        if self.autostart:
            handle.task = self.start_task(self._run, room.room_id, handle)
        logger.info(f"[loop-start] room={room.room_id} interval={self.interval:.4f}s autostart={self.autostart}")
        return handle

    def stop(self, room_id: str) -> bool:
        """Cancel and forget a room's loop. Safe to call repeatedly."""
        with self._lock:
            handle = self._loops.pop(room_id, None)
        if handle is None:
            return False
        stopped = handle.cancel()
        if stopped:
            logger.info(f"[loop-stop] room={room_id}")
        return stopped

    def is_running(self, room_id: str) -> bool:
        with self._lock:
            return room_id in self._loops

    def active_rooms(self) -> List[str]:
        with self._lock:
            return list(self._loops)

    def tick(self, room_id: str) -> bool:
        """Advance one room by one step. Returns False once the loop should end."""
        room = self.registry.get_room(room_id)
        if room is None:
            self.stop(room_id)
            return False

        with room.lock:
            if room.closed or not room.is_playing:
                self.stop(room_id)
                return False

            state = room.state
            ball = state.ball
            physics.advance(ball)

            # only the paddle the ball is heading for can be hit
            paddle = room.left_paddle if ball.dx < 0 else room.right_paddle
            physics.paddle_collision(ball, paddle)

            if physics.wall_bounce(ball):
                scorer = room.right_id if physics.exit_side(ball) == physics.LEFT else room.left_id
                state.scores[scorer] += 1
                state.message = f'{_label(room, scorer)} scores!'
                logger.debug(f"[score] room={room_id} scorer={scorer} scores={state.scores}")
                physics.reset_ball(ball, self.rng)
            else:
                state.message = None

            winner = self._winner(room)
            if winner is None:
                self.broadcaster.to_room(room_id, SOCKET_EVENTS['GAME_UPDATE'], payloads.game_update(state.to_dict()))
                return True

            state.status = FINISHED
            state.winner = winner
            state.message = f'{_label(room, winner)} wins!'
            room.finished_at = self.clock()
            self.stop(room_id)
            snapshot = state.to_dict()
            logger.info(f"[game-over] room={room_id} winner={winner} scores={state.scores}")
            self.broadcaster.to_room(room_id, SOCKET_EVENTS['GAME_OVER'], snapshot)
            self.broadcaster.to_room(room_id, SOCKET_EVENTS['GAME_UPDATE'], payloads.game_update(snapshot))
            return False

    def _winner(self, room: Room) -> Optional[str]:
        for sid in room.players:
            if room.state.scores[sid] >= WINNING_SCORE:
                return sid
        return None

    def _run(self, room_id: str, handle: LoopHandle) -> None:
        next_at = self.clock()
        while not handle.cancelled:
            try:
                if not self.tick(room_id):
                    return
            except Exception:
                logger.exception(f"[tick-fault] room={room_id}")
                self.abort(room_id)
                return
            next_at += self.interval
            delay = next_at - self.clock()
            if delay < 0:
                # fell behind; resume from now instead of bursting ticks
                next_at = self.clock()
                delay = 0
            self.sleep(delay)

    def abort(self, room_id: str) -> None:
        """Tear down a room whose loop failed and tell its players."""
        self.stop(room_id)
        with self.registry.lock:
            room = self.registry.remove_room(room_id)
        if room is None:
            return
        with room.lock:
            room.closed = True
        try:
            self.broadcaster.to_room(room_id, SOCKET_EVENTS['ERROR'], payloads.error(payloads.ROOM_FAULT_MESSAGE))
            self.broadcaster.close_room(room_id)
        except Exception:
            logger.exception(f"[abort-notify-failed] room={room_id}")


def _label(room: Room, sid: str) -> str:
    return 'Player 1' if room.is_player_one(sid) else 'Player 2'
