import os
import random
import sys
from collections import defaultdict

import pytest

# Ensure the backend root (containing the `pong_server` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from pong_server import create_app, socketio
from pong_server.services.pong import PongService


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:3000']
    LOG_LEVEL = 'DEBUG'
    SOCKETIO_NAMESPACE = '/'
    FINISHED_ROOM_TTL_SEC = 10
    ENABLE_LOOP_IN_TESTS = False


class LoopConfig(TestConfig):
    """Room loops run as real background tasks."""
    ENABLE_LOOP_IN_TESTS = True


class RecordingBroadcaster:
    """Stands in for the Socket.IO server in service tests."""

    def __init__(self):
        self.sent = []
        self.rooms = defaultdict(set)
        self.closed = []

    def to_player(self, sid, event, payload):
        self.sent.append((sid, event, payload))

    def to_room(self, room_id, event, payload):
        for sid in sorted(self.rooms.get(room_id, ())):
            self.sent.append((sid, event, payload))

    def enter_room(self, sid, room_id):
        self.rooms[room_id].add(sid)

    def close_room(self, room_id):
        self.closed.append(room_id)
        self.rooms.pop(room_id, None)

    def received(self, sid, event=None):
        return [p for s, e, p in self.sent if s == sid and (event is None or e == event)]

    def count(self, event):
        return sum(1 for _, e, _ in self.sent if e == event)

    def clear(self):
        self.sent.clear()


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def service(broadcaster, clock):
    svc = PongService(
        broadcaster,
        socketio.start_background_task,
        socketio.sleep,
        autostart=False,
        finished_room_ttl=10,
        rng=random.Random(1234), clock=clock)
    yield svc
    svc.shutdown()


@pytest.fixture()
def room(service):
    """A playing room: 'alice' is player one, 'bob' player two."""
    service.request_join('alice')
    return service.request_join('bob')


def _make_app(config_class):
    application = create_app(config_class)
    with application.app_context():
        yield application
    application.extensions['pong'].shutdown()


@pytest.fixture()
def flask_app():
    yield from _make_app(TestConfig)


@pytest.fixture()
def loop_app():
    yield from _make_app(LoopConfig)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def _client_factory(application):
    clients = []

    def _make():
        test_client = socketio.test_client(application, flask_test_client=application.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def sio_factory(flask_app):
    yield from _client_factory(flask_app)


@pytest.fixture()
def loop_sio_factory(loop_app):
    yield from _client_factory(loop_app)
