from flask_socketio import join_room, leave_room, emit
from guess_sentence import socketio


def _room_for(data):
    match_id = (data or {}).get('match_id')
    try:
        return f"match:{int(match_id)}"
    except (TypeError, ValueError):
        return None


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_match(data):
    """Subscribe to ``match_update`` pushes. They carry only the safe view."""
    room = _room_for(data)
    if room is None:
        emit('error', {'message': 'match_id is required'})
        return
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_match(data):
    room = _room_for(data)
    if room is None:
        emit('error', {'message': 'match_id is required'})
        return
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('join_match', handle_join_match, namespace='/ws')
    socketio.on_event('leave_match', handle_leave_match, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')
