from flask import current_app, request
from flask_socketio import emit
from buzzboard.services.games import events, snapshots, store


def emit_snapshots() -> None:
    """Send the full current picture to the requesting socket only.

    Late joiners get state, lists and recent events; no history replay.
    """
    state = store.ensure_state()
    emit('players:updated', snapshots.players_payload())
    emit('questions:updated', snapshots.questions_payload())
    emit('game:state', snapshots.state_payload(state))
    emit('events:init', events.list_events(100))
    emit('buzz:queue', snapshots.queue_payload())


def handle_connect(auth=None):
    current_app.logger.info(f"[ws] connect sid={_get_sid()}")
    emit('connected', {'message': 'Connected to /ws'})
    emit_snapshots()


def handle_disconnect(*args):
    current_app.logger.info(f"[ws] disconnect sid={_get_sid()}")


def handle_sync(data=None):
    # Clients that missed updates (e.g. a phone waking up) ask for a fresh picture
    emit_snapshots()


def handle_ping(data):
    emit('pong', data or {})


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    socketio_handlers = (
        ('connect', handle_connect),
        ('disconnect', handle_disconnect),
        ('sync', handle_sync),
        ('ping', handle_ping),
    )
    from buzzboard import socketio
    for name, handler in socketio_handlers:
        socketio.on_event(name, handler, namespace='/ws')

    if testing:
        # Test-only mirror on default namespace
        for name, handler in socketio_handlers:
            socketio.on_event(name, handler, namespace='/')
