"""Pong domain services: physics, matchmaking and room loops.

Transport concerns stay in ``pong_server.socketio_events``; everything here
talks to clients only through a broadcaster object.
"""

from .broadcast import SocketIOBroadcaster
from .service import PongService

__all__ = ['PongService', 'SocketIOBroadcaster']
