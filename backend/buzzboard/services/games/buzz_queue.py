"""Waiting list of players who buzzed while someone else held the buzzer.

Ordered by buzz time, then insertion id so equal timestamps keep arrival
order. Callers run inside ``store.game_operation``.
"""

from typing import Optional

from buzzboard import db
from buzzboard.models import BuzzQueueEntry


def _ordered():
    return BuzzQueueEntry.query.order_by(BuzzQueueEntry.buzz_time.asc(), BuzzQueueEntry.id.asc())


def enqueue(player_id: int, buzz_time: float) -> dict:
    if BuzzQueueEntry.query.filter_by(player_id=player_id).first():
        return {'queued': False, 'reason': 'already_queued'}
    db.session.add(BuzzQueueEntry(player_id=player_id, buzz_time=buzz_time))
    db.session.flush()
    return {'queued': True}


def dequeue_earliest() -> Optional[dict]:
    entry = _ordered().first()
    if entry is None:
        return None
    taken = {'id': entry.id, 'player_id': entry.player_id, 'buzz_time': entry.buzz_time}
    db.session.delete(entry)
    db.session.flush()
    return taken


def clear() -> int:
    return BuzzQueueEntry.query.delete(synchronize_session=False)


def remove_player(player_id: int) -> int:
    return BuzzQueueEntry.query.filter_by(player_id=player_id).delete(synchronize_session=False)


def length() -> int:
    return BuzzQueueEntry.query.count()


def list_entries() -> list:
    return [entry.to_dict() for entry in _ordered().all()]
