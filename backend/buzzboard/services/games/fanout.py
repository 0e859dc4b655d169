from flask import current_app

from buzzboard import socketio
from . import snapshots


NAMESPACE = '/ws'

TOPIC_EVENTS = {
    'state': 'game:state',
    'queue': 'buzz:queue',
    'players': 'players:updated',
    'questions': 'questions:updated',
}


def _emit(event: str, payload) -> None:
    # Subscribers come and go; a failed emit must never undo a committed change
    try:
        socketio.emit(event, payload, namespace=NAMESPACE)
    except Exception as exc:
        current_app.logger.warning(f"[fanout] emit {event} failed: {exc}")


def build_payload(topic: str):
    if topic == 'state':
        from .store import read
        return snapshots.state_payload(read())
    if topic == 'queue':
        return snapshots.queue_payload()
    if topic == 'players':
        return snapshots.players_payload()
    if topic == 'questions':
        return snapshots.questions_payload()
    raise ValueError(f"Unknown fan-out topic: {topic}")


def publish(changes) -> None:
    """Broadcast fresh snapshots for every topic an operation touched."""
    # Fixed order so the state always lands before the derived lists
    for topic in ('players', 'questions', 'state', 'queue'):
        if topic not in changes.topics:
            continue
        try:
            payload = build_payload(topic)
        except Exception as exc:
            current_app.logger.warning(f"[fanout] building {topic} snapshot failed: {exc}")
            continue
        _emit(TOPIC_EVENTS[topic], payload)
    for evt in changes.events:
        try:
            payload = evt.to_dict()
        except Exception as exc:
            current_app.logger.warning(f"[fanout] building event snapshot failed: {exc}")
            continue
        _emit('events:new', payload)
