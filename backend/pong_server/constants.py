"""Game constants shared with clients.

These values are the contract between server and client. Clients fetch them
from ``GET /api/constants`` rather than hard-coding their own copy.
"""

# Playfield
GAME_WIDTH = 800
GAME_HEIGHT = 600

# Paddles
PADDLE_WIDTH = 15
PADDLE_HEIGHT = 100
PADDLE_SPEED = 10  # units per key press
PADDLE_OFFSET_X = 30  # distance from side walls

# Ball
BALL_RADIUS = 8
INITIAL_BALL_SPEED = 5
# Largest |dy| a paddle hit can produce (edge of the paddle)
MAX_BOUNCE_DY = 1.5
# Serve angle: |dy| is drawn from [MIN_BALL_DY, MAX_SERVE_DY]
MIN_BALL_DY = 0.2
MAX_SERVE_DY = 0.8

# Match
WINNING_SCORE = 5
TICK_RATE = 60  # ticks per second

# Role-dependent movement keys; the two sets never overlap
PLAYER_ONE_KEYS = {'w': 'up', 's': 'down'}
PLAYER_TWO_KEYS = {'ArrowUp': 'up', 'ArrowDown': 'down'}

PRESS = 'press'
RELEASE = 'release'

SOCKET_EVENTS = {
    # Client to Server
    'PLAYER_INPUT': 'playerInput',
    'JOIN_ROOM_REQUEST': 'joinRoomRequest',
    'CLIENT_MESSAGE': 'clientMessage',
    # Server to Client
    'MESSAGE': 'message',
    'WAITING_FOR_PLAYER': 'waitingForPlayer',
    'ROOM_JOINED': 'roomJoined',
    'GAME_START': 'gameStart',
    'GAME_UPDATE': 'gameUpdate',
    'GAME_OVER': 'gameOver',
    'OPPONENT_DISCONNECTED': 'opponentDisconnected',
    'ERROR': 'error',
}


def as_dict():
    """Constants in the shape served to clients."""
    return {
        'GAME_WIDTH': GAME_WIDTH,
        'GAME_HEIGHT': GAME_HEIGHT,
        'PADDLE_WIDTH': PADDLE_WIDTH,
        'PADDLE_HEIGHT': PADDLE_HEIGHT,
        'PADDLE_SPEED': PADDLE_SPEED,
        'PADDLE_OFFSET_X': PADDLE_OFFSET_X,
        'BALL_RADIUS': BALL_RADIUS,
        'INITIAL_BALL_SPEED': INITIAL_BALL_SPEED,
        'WINNING_SCORE': WINNING_SCORE,
        'TICK_RATE': TICK_RATE,
        'PLAYER_ONE_KEYS': sorted(PLAYER_ONE_KEYS),
        'PLAYER_TWO_KEYS': sorted(PLAYER_TWO_KEYS),
        'SOCKET_EVENTS': dict(SOCKET_EVENTS),
    }
