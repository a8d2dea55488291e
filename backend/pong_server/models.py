import threading
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from pong_server.constants import (
    BALL_RADIUS,
    GAME_HEIGHT,
    GAME_WIDTH,
    INITIAL_BALL_SPEED,
    PADDLE_HEIGHT,
    PADDLE_OFFSET_X,
    PADDLE_WIDTH,
)

PLAYING = 'playing'
FINISHED = 'finished'


@dataclass
class Ball:
    x: float = GAME_WIDTH / 2
    y: float = GAME_HEIGHT / 2
    radius: float = BALL_RADIUS
    dx: float = 1.0
    dy: float = 0.0
    speed: float = INITIAL_BALL_SPEED

    def to_dict(self):
        return {
            'x': self.x,
            'y': self.y,
            'radius': self.radius,
            'dx': self.dx,
            'dy': self.dy,
            'speed': self.speed,
        }


@dataclass
class Paddle:
    player_id: str
    x: float
    y: float = (GAME_HEIGHT - PADDLE_HEIGHT) / 2
    width: float = PADDLE_WIDTH
    height: float = PADDLE_HEIGHT

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @classmethod
    def left(cls, player_id: str) -> 'Paddle':
        return cls(player_id=player_id, x=PADDLE_OFFSET_X)

    @classmethod
    def right(cls, player_id: str) -> 'Paddle':
        return cls(player_id=player_id, x=GAME_WIDTH - PADDLE_OFFSET_X - PADDLE_WIDTH)

    def to_dict(self):
        return {
            'playerId': self.player_id,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
        }


@dataclass
class GameState:
    """Authoritative state of one match, serialized as the snapshot."""
    ball: Ball
    paddles: Dict[str, Paddle]
    scores: Dict[str, int]
    status: str = PLAYING
    message: Optional[str] = None
    winner: Optional[str] = None

    def to_dict(self):
        data = {
            'ball': self.ball.to_dict(),
            'paddles': {pid: p.to_dict() for pid, p in self.paddles.items()},
            'scores': dict(self.scores),
            'status': self.status,
            'message': self.message,
        }
        if self.winner is not None:
            data['winner'] = self.winner
        return data


class Room:
    """One two-player match.

    ``left_id`` is player one and ``right_id`` player two; the assignment is
    fixed for the lifetime of the room. ``lock`` serializes the tick task
    against input events addressed to this room.
    """

    def __init__(self, room_id: str, left_id: str, right_id: str, state: GameState):
        if left_id == right_id:
            raise ValueError('a room needs two distinct players')
        self.room_id = room_id
        self.left_id = left_id
        self.right_id = right_id
        self.state = state
        self.loop = None
        self.lock = threading.Lock()
        # set under ``lock`` once the room is torn down; nothing is emitted after
        self.closed = False
        self.finished_at: Optional[float] = None

    @property
    def players(self) -> Tuple[str, str]:
        return (self.left_id, self.right_id)

    @property
    def status(self) -> str:
        return self.state.status

    @property
    def is_playing(self) -> bool:
        return self.state.status == PLAYING

    @property
    def left_paddle(self) -> Paddle:
        return self.state.paddles[self.left_id]

    @property
    def right_paddle(self) -> Paddle:
        return self.state.paddles[self.right_id]

    def has_player(self, sid: str) -> bool:
        return sid in (self.left_id, self.right_id)

    def is_player_one(self, sid: str) -> bool:
        return sid == self.left_id

    def opponent_of(self, sid: str) -> Optional[str]:
        if sid == self.left_id:
            return self.right_id
        if sid == self.right_id:
            return self.left_id
        return None

    def to_dict(self):
        return {
            'roomId': self.room_id,
            'players': list(self.players),
            'status': self.status,
            'scores': dict(self.state.scores),
        }

    def __repr__(self):
        return f'<Room {self.room_id} {self.left_id} vs {self.right_id} {self.status}>'
