import pytest

from buzzboard import db
from buzzboard.errors import ValidationFailed
from buzzboard.models import GameEvent, GameState
from buzzboard.services.games import events, store


def test_single_state_row(flask_app):
    store.ensure_state()
    store.ensure_state()
    assert GameState.query.count() == 1
    assert store.read().id == store.GAME_STATE_ID


def test_empty_patch_is_a_no_op(flask_app):
    before = store.read().to_dict()
    with store.game_operation():
        state = store.patch({})
    assert state.to_dict() == before


def test_patch_rejects_unknown_fields(flask_app):
    with pytest.raises(ValidationFailed) as excinfo:
        with store.game_operation():
            store.patch(colour='red')
    assert excinfo.value.status_code == 400
    assert excinfo.value.to_dict()['code'] == 'validation'
    assert 'colour' in excinfo.value.message


def test_failed_operation_rolls_back(flask_app):
    with pytest.raises(RuntimeError):
        with store.game_operation() as changes:
            store.patch(status='active', buzzer_locked=True)
            changes.log('game_started', 'Game started')
            raise RuntimeError('boom')
    db.session.expire_all()
    state = store.read()
    assert state.status == 'waiting'
    assert state.buzzer_locked is False
    assert GameEvent.query.count() == 0


def test_patch_merges_fragments(flask_app):
    with store.game_operation():
        state = store.patch(dict(store.RELEASED_BUZZER), status='active', current_points=400)
    assert state.status == 'active'
    assert state.current_points == 400
    assert state.buzzer_locked is False


def test_event_log_is_pruned(flask_app):
    flask_app.config['EVENT_LOG_LIMIT'] = 5
    for i in range(8):
        with store.game_operation() as changes:
            changes.log('note', f"note {i}", {'i': i})
    assert GameEvent.query.count() == 5
    newest = events.list_events(1)[0]
    assert newest['message'] == 'note 7'
    assert newest['data'] == {'i': 7}


def test_list_events_clamps_limit(flask_app):
    with store.game_operation() as changes:
        changes.log('a', 'first')
        changes.log('b', 'second')
    assert [e['type'] for e in events.list_events('bogus')] == ['b', 'a']
    assert len(events.list_events(0)) == 1
