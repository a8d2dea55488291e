"""Wire payloads sent to clients."""

from pong_server.models import Room

WAITING_MESSAGE = 'Waiting for an opponent...'
ALREADY_IN_GAME_MESSAGE = 'You are already in a game.'
OPPONENT_LEFT_MESSAGE = 'Your opponent disconnected. Game over.'
ROOM_FAULT_MESSAGE = 'The game stopped because of a server error.'


def waiting(message=WAITING_MESSAGE):
    return {'message': message}


def room_joined(room: Room, sid: str, message=None):
    is_player_one = room.is_player_one(sid)
    if message is None:
        message = f"You are Player {1 if is_player_one else 2}. Controls: {'W/S' if is_player_one else 'Arrow keys'}."
    return {
        'roomId': room.room_id,
        'yourId': sid,
        'isPlayerOne': is_player_one,
        'initialState': room.state.to_dict(),
        'message': message,
    }


def game_update(snapshot):
    return {'gameState': snapshot}


def error(message):
    return {'message': message}


def opponent_disconnected(message=OPPONENT_LEFT_MESSAGE):
    return {'message': message}
