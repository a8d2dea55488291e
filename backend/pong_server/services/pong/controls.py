import logging
from typing import Optional

from pong_server.constants import PADDLE_SPEED, PLAYER_ONE_KEYS, PLAYER_TWO_KEYS, PRESS
from pong_server.models import Room
from . import physics
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


def direction_for(room: Room, sid: str, key) -> Optional[str]:
    """Map a key to 'up'/'down' for this player's role, or None.

    Player one only steers with W/S and player two only with the arrow keys,
    whatever the client sends.
    """
    if not isinstance(key, str):
        return None
    keys = PLAYER_ONE_KEYS if room.is_player_one(sid) else PLAYER_TWO_KEYS
    return keys.get(key)


def apply_input(registry: SessionRegistry, sid: str, room_id, key, action) -> bool:
    """Move ``sid``'s paddle one step for a key press.

    Stale or invalid input (unknown or finished room, non-participant, the
    other role's key, key release) is ignored. Returns True if a paddle moved.
    """
    if action != PRESS:
        return False
    room = registry.get_room(room_id) if isinstance(room_id, str) else None
    if room is None or not room.has_player(sid):
        logger.debug(f"[input-ignored] sid={sid} room={room_id} reason=not-in-room")
        return False

    direction = direction_for(room, sid, key)
    if direction is None:
        logger.debug(f"[input-ignored] sid={sid} room={room_id} key={key!r} reason=wrong-key")
        return False

    with room.lock:
        if room.closed or not room.is_playing:
            return False
        paddle = room.state.paddles[sid]
        physics.move_paddle(paddle, -PADDLE_SPEED if direction == 'up' else PADDLE_SPEED)
    return True
