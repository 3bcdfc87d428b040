from flask_socketio import join_room, leave_room, emit
from hunt import socketio

HUNT_ROOM = 'hunt'


def team_room(team_id) -> str:
    return f"team:{team_id}"


def broadcast_hunt_update(event: str, team_id=None, round_id=None) -> None:
    """Tell connected dashboards that hunt state changed.

    Payloads only carry ids; clients refetch the leaderboard or team view.
    """
    payload = {'event': event}
    if team_id is not None:
        payload['teamId'] = team_id
    if round_id is not None:
        payload['roundId'] = round_id
    socketio.emit('hunt_update', payload, to=HUNT_ROOM, namespace='/ws')
    if team_id is not None:
        socketio.emit('hunt_update', payload, to=team_room(team_id), namespace='/ws')


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_hunt(data):
    team_id = (data or {}).get('teamId')
    rooms = [HUNT_ROOM]
    join_room(HUNT_ROOM)
    if team_id is not None:
        join_room(team_room(team_id))
        rooms.append(team_room(team_id))
    emit('joined', {'rooms': rooms})


def handle_leave_hunt(data):
    team_id = (data or {}).get('teamId')
    leave_room(HUNT_ROOM)
    if team_id is not None:
        leave_room(team_room(team_id))
    emit('left', {'room': HUNT_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_hunt', handle_join_hunt, namespace=namespace)
        socketio.on_event('leave_hunt', handle_leave_hunt, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
