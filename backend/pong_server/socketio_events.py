from flask import current_app, request
from flask_socketio import emit

from pong_server import socketio
from pong_server.constants import SOCKET_EVENTS
from pong_server.services.pong import PongService


def _service() -> PongService:
    return current_app.extensions['pong']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    sid = _get_sid()
    current_app.logger.info(f"[connect] sid={sid}")
    emit(SOCKET_EVENTS['MESSAGE'], f'Welcome, you are connected with ID: {sid}')


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    _service().disconnect(sid)


def handle_client_message(data=None):
    current_app.logger.info(f"[client-message] sid={_get_sid()} data={data!r}")
    emit(SOCKET_EVENTS['MESSAGE'], f'Server received your message: {data}')


def handle_join_room_request(data=None):
    _service().request_join(_get_sid())


def handle_player_input(data=None):
    # malformed input is stale client state, not an error
    if not isinstance(data, dict):
        return
    _service().apply_input(_get_sid(), data.get('roomId'), data.get('key'), data.get('action'))


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event(SOCKET_EVENTS['JOIN_ROOM_REQUEST'], handle_join_room_request, namespace=namespace)
    socketio.on_event(SOCKET_EVENTS['PLAYER_INPUT'], handle_player_input, namespace=namespace)
    socketio.on_event(SOCKET_EVENTS['CLIENT_MESSAGE'], handle_client_message, namespace=namespace)
