import threading

from pong_server.constants import (
    GAME_HEIGHT,
    GAME_WIDTH,
    MAX_SERVE_DY,
    MIN_BALL_DY,
    PADDLE_HEIGHT,
    PADDLE_OFFSET_X,
    PADDLE_WIDTH,
    SOCKET_EVENTS,
)
from pong_server.models import FINISHED

WAITING = SOCKET_EVENTS['WAITING_FOR_PLAYER']
ROOM_JOINED = SOCKET_EVENTS['ROOM_JOINED']
GAME_START = SOCKET_EVENTS['GAME_START']
ERROR = SOCKET_EVENTS['ERROR']


def test_first_join_waits(service, broadcaster):
    assert service.request_join('alice') is None
    assert service.waiting == 'alice'
    assert broadcaster.received('alice', WAITING) == [{'message': 'Waiting for an opponent...'}]
    assert len(service.registry) == 0


def test_repeated_join_while_waiting_is_idempotent(service, broadcaster):
    service.request_join('alice')
    service.request_join('alice')
    first, second = broadcaster.received('alice', WAITING)
    assert first == second
    assert service.waiting == 'alice'
    assert len(service.registry) == 0


def test_second_join_pairs_in_arrival_order(service, broadcaster):
    service.request_join('alice')
    room = service.request_join('bob')

    assert room.left_id == 'alice'
    assert room.right_id == 'bob'
    assert service.waiting is None

    (alice_joined,) = broadcaster.received('alice', ROOM_JOINED)
    (bob_joined,) = broadcaster.received('bob', ROOM_JOINED)
    assert alice_joined['roomId'] == bob_joined['roomId'] == room.room_id
    assert alice_joined['isPlayerOne'] is True
    assert bob_joined['isPlayerOne'] is False
    assert alice_joined['yourId'] == 'alice'
    assert bob_joined['yourId'] == 'bob'
    assert alice_joined['initialState']['status'] == 'playing'

    # both hear the match start, after their own room-joined notice
    assert len(broadcaster.received('alice', GAME_START)) == 1
    assert len(broadcaster.received('bob', GAME_START)) == 1
    events = [e for s, e, _ in broadcaster.sent if s == 'bob']
    assert events.index(ROOM_JOINED) < events.index(GAME_START)

    assert service.scheduler.is_running(room.room_id)
    assert room.loop is not None and not room.loop.cancelled


def test_initial_state(room):
    state = room.state
    assert (state.ball.x, state.ball.y) == (GAME_WIDTH / 2, GAME_HEIGHT / 2)
    assert state.ball.dx in (-1, 1)
    assert MIN_BALL_DY <= abs(state.ball.dy) <= MAX_SERVE_DY
    assert state.scores == {'alice': 0, 'bob': 0}
    assert state.message is None
    left, right = room.left_paddle, room.right_paddle
    assert left.x == PADDLE_OFFSET_X
    assert right.x == GAME_WIDTH - PADDLE_OFFSET_X - PADDLE_WIDTH
    assert left.y == right.y == (GAME_HEIGHT - PADDLE_HEIGHT) / 2


def test_join_during_match_resyncs(service, broadcaster, room):
    broadcaster.clear()
    again = service.request_join('bob')

    assert again is room
    assert broadcaster.received('bob', ERROR) == [{'message': 'You are already in a game.'}]
    (joined,) = broadcaster.received('bob', ROOM_JOINED)
    assert joined['roomId'] == room.room_id
    assert joined['isPlayerOne'] is False
    assert service.waiting is None
    assert len(service.registry) == 1


def test_third_player_waits_for_next_pair(service, broadcaster, room):
    assert service.request_join('carol') is None
    assert service.waiting == 'carol'
    second = service.request_join('dave')
    assert second.room_id != room.room_id
    assert second.players == ('carol', 'dave')
    assert len(service.registry) == 2


def test_room_ids_are_unique(service):
    ids = set()
    for i in range(10):
        service.request_join(f'l{i}')
        ids.add(service.request_join(f'r{i}').room_id)
    assert len(ids) == 10


def test_player_of_finished_room_can_queue_again(service, broadcaster, room):
    room.state.status = FINISHED
    assert service.request_join('alice') is None
    assert service.waiting == 'alice'
    new_room = service.request_join('bob')
    assert new_room is not room
    assert new_room.players == ('alice', 'bob')
    assert service.registry.room_of('alice') is new_room


def _held_elsewhere(lock):
    """True if another thread could not take ``lock`` right now."""
    result = []

    def attempt():
        acquired = lock.acquire(timeout=0.5)
        if acquired:
            lock.release()
        result.append(not acquired)

    worker = threading.Thread(target=attempt)
    worker.start()
    worker.join()
    return result[0]


def test_join_notices_are_sent_outside_the_registry_lock(service, broadcaster, monkeypatch):
    sends = []

    def watch(send):
        def wrapper(target, event, payload):
            room = service.registry.get_room(target) or service.registry.room_of(target)
            sends.append((event, _held_elsewhere(service.registry.lock), room is not None and room.lock.locked()))
            send(target, event, payload)
        return wrapper

    monkeypatch.setattr(broadcaster, 'to_player', watch(broadcaster.to_player))
    monkeypatch.setattr(broadcaster, 'to_room', watch(broadcaster.to_room))

    service.request_join('alice')
    room = service.request_join('bob')
    service.request_join('bob')

    assert [event for event, _, _ in sends] == [WAITING, ROOM_JOINED, ROOM_JOINED, GAME_START, ERROR, ROOM_JOINED]
    assert not any(registry_locked for _, registry_locked, _ in sends)
    # the first tick cannot run before both players know their room
    assert all(room_locked for event, _, room_locked in sends[1:4])
    assert not room.lock.locked()
