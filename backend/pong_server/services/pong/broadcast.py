from flask_socketio import SocketIO


class SocketIOBroadcaster:
    """Outbound side of the transport.

    Talks to the Socket.IO server directly instead of through
    ``flask_socketio.emit``/``join_room`` so it also works from room loop
    background tasks, which run without a request context.
    """

    def __init__(self, socketio: SocketIO, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def to_player(self, sid: str, event: str, payload) -> None:
        self.socketio.emit(event, payload, to=sid, namespace=self.namespace)

    def to_room(self, room_id: str, event: str, payload) -> None:
        self.socketio.emit(event, payload, to=room_id, namespace=self.namespace)

    def enter_room(self, sid: str, room_id: str) -> None:
        self.socketio.server.enter_room(sid, room_id, namespace=self.namespace)

    def close_room(self, room_id: str) -> None:
        self.socketio.close_room(room_id, namespace=self.namespace)
