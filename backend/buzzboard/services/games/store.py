import threading
from contextlib import contextmanager
from typing import Any, Dict, Optional

from buzzboard import db
from buzzboard.models import GameState
from buzzboard.errors import ValidationFailed
from . import events, fanout


GAME_STATE_ID = 1

STATE_DEFAULTS: Dict[str, Any] = {
    'status': 'waiting',
    'current_question_id': None,
    'current_category': None,
    'current_points': None,
    'current_is_placeholder': False,
    'current_clue_text': None,
    'current_answer_text': None,
    'turn_player_id': None,
    'buzzer_locked': False,
    'last_buzz_player_id': None,
    'last_buzz_time': None,
    'question_reading': False,
}

PATCHABLE_FIELDS = frozenset(STATE_DEFAULTS)

# Patch fragments shared by the operations that drop the clue or release the buzzer
CLEARED_CLUE: Dict[str, Any] = {
    'current_question_id': None,
    'current_category': None,
    'current_points': None,
    'current_is_placeholder': False,
    'current_clue_text': None,
    'current_answer_text': None,
    'question_reading': False,
}
RELEASED_BUZZER: Dict[str, Any] = {
    'buzzer_locked': False,
    'last_buzz_player_id': None,
    'last_buzz_time': None,
}

# Serializes every compound read-modify-write on the game state, queue and catalog.
# Process-local: the server must run as a single process.
_game_lock = threading.RLock()


class Changes:
    """What an operation touched; published only after its commit."""

    def __init__(self):
        self.topics = set()
        self.events = []

    def touch(self, *topics: str) -> None:
        self.topics.update(topics)

    def log(self, event_type: str, message: str, data: Optional[dict] = None) -> None:
        self.events.append(events.record(event_type, message, data))


@contextmanager
def game_operation():
    """Run one logical operation under the game lock, all-or-nothing.

    The session is committed when the block exits normally and rolled back
    if it raises. Fan-out happens after the commit while the lock is still
    held, so subscribers see snapshots in commit order.
    """
    with _game_lock:
        changes = Changes()
        try:
            yield changes
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        fanout.publish(changes)


def read() -> GameState:
    state = db.session.get(GameState, GAME_STATE_ID)
    if state is None:
        state = GameState(id=GAME_STATE_ID, **STATE_DEFAULTS)
        db.session.add(state)
        db.session.flush()
    return state


def patch(fields: Optional[Dict[str, Any]] = None, **extra: Any) -> GameState:
    """Apply a partial update to the singleton and return the full state.

    Must run inside ``game_operation`` so the write is committed atomically.
    An empty patch returns the current state untouched.
    """
    changes = dict(fields or {})
    changes.update(extra)
    unknown = set(changes) - PATCHABLE_FIELDS
    if unknown:
        raise ValidationFailed(f"Unknown game state field(s): {', '.join(sorted(unknown))}")
    state = read()
    if not changes:
        return state
    for key, value in changes.items():
        setattr(state, key, value)
    db.session.add(state)
    db.session.flush()
    return state


def ensure_state() -> GameState:
    """Create the singleton row if it is missing and commit it."""
    with _game_lock:
        state = read()
        db.session.commit()
        return state
