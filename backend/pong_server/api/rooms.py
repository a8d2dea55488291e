from flask import Blueprint, current_app, jsonify

from pong_server import constants

rooms = Blueprint('rooms', __name__)


@rooms.route('/constants', methods=['GET'])
def get_constants():
    """Game constants, so clients and server share one source of truth."""
    return jsonify(constants.as_dict())


@rooms.route('/rooms', methods=['GET'])
def list_rooms():
    service = current_app.extensions['pong']
    return jsonify({
        'rooms': [room.to_dict() for room in service.rooms()],
        'waiting': service.waiting is not None,
    })
