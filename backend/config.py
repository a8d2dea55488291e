import os


def _origins(value):
    return [o.strip() for o in value.split(',') if o.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Client origins allowed by CORS and the Socket.IO handshake
    CORS_ORIGINS = _origins(os.environ.get('CORS_ORIGINS', 'http://localhost:3000'))
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3001'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    SOCKETIO_NAMESPACE = '/'
    # Finished rooms are kept this long (seconds) before they are reaped
    FINISHED_ROOM_TTL_SEC = float(os.environ.get('FINISHED_ROOM_TTL_SEC', '10'))
    # Run real room loops even when TESTING is set
    ENABLE_LOOP_IN_TESTS = os.environ.get('ENABLE_LOOP_IN_TESTS', '0') == '1'
