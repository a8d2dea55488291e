from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from pong_server.main import main
    flask_app.register_blueprint(main)

    from pong_server.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api')

    # Room loops are background tasks; in tests they stay off unless asked for
    # and tests step rooms with scheduler.tick instead
    from pong_server.services.pong import PongService, SocketIOBroadcaster
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    autostart = not flask_app.config.get('TESTING') or bool(flask_app.config.get('ENABLE_LOOP_IN_TESTS'))
    flask_app.extensions['pong'] = PongService(
        SocketIOBroadcaster(socketio, namespace=namespace),
        start_task=socketio.start_background_task,
        sleep=socketio.sleep,
        autostart=autostart,
        finished_room_ttl=float(flask_app.config.get('FINISHED_ROOM_TTL_SEC', 10)),
    )

    from pong_server.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    return flask_app
