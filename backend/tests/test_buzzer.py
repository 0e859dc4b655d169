import threading

import pytest

from buzzboard import db
from buzzboard.errors import NotFound, PreconditionFailed, ValidationFailed
from buzzboard.services.games import arbitration, buzz_queue, selection


def _state(client):
    return client.get('/api/game/state').get_json()


def _score_of(client, player_id):
    players = client.get('/api/players').get_json()
    return next(p['score'] for p in players if p['id'] == player_id)


def test_buzz_requires_active_game(client, make_player):
    alice = make_player('Alice')
    client.post('/api/game/select-card', json={'category': 'Disney & Pixar', 'points': 200})
    res = client.post('/api/game/buzz', json={'player_id': alice['id']})
    assert res.status_code == 400
    assert res.get_json()['code'] == 'precondition'


def test_buzz_requires_active_clue(client, make_player):
    alice = make_player('Alice')
    client.post('/api/game/start')
    res = client.post('/api/game/buzz', json={'player_id': alice['id']})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'No active clue'


def test_buzz_blocked_while_question_is_read(client, make_player):
    alice = make_player('Alice')
    client.post('/api/game/start')
    tile = client.get('/api/game/board').get_json()['columns'][0]['tiles'][0]
    state = client.post('/api/game/select-card', json={'question_id': tile['question_id']}).get_json()
    assert state['question_reading'] is True

    res = client.post('/api/game/buzz', json={'player_id': alice['id']})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Question is still being read'

    client.post('/api/game/set-question-reading', json={'reading': False})
    res = client.post('/api/game/buzz', json={'player_id': alice['id']})
    assert res.status_code == 200
    assert res.get_json()['state']['last_buzz_player_id'] == alice['id']


def test_buzz_validation_and_unknown_player(client, live_clue):
    assert client.post('/api/game/buzz', json={}).status_code == 400
    res = client.post('/api/game/buzz', json={'player_id': 4242})
    assert res.status_code == 404


def test_first_buzz_wins_and_second_is_queued(client, live_clue):
    alice, bob = live_clue['alice'], live_clue['bob']

    first = client.post('/api/game/buzz', json={'player_id': alice['id']}).get_json()
    assert first['ok'] is True
    assert first['queued'] is False
    assert first['state']['buzzer_locked'] is True
    assert first['state']['last_buzz_player_id'] == alice['id']
    assert first['state']['last_buzz_time'] is not None

    second = client.post('/api/game/buzz', json={'player_id': bob['id']}).get_json()
    assert second == {'ok': True, 'queued': True, 'reason': None, 'position': 1}

    queue = client.get('/api/game/buzz-queue').get_json()
    assert [entry['player_id'] for entry in queue] == [bob['id']]
    assert _state(client)['last_buzz_player_id'] == alice['id']


def test_repeat_buzzes_are_idempotent(client, live_clue):
    alice, bob = live_clue['alice'], live_clue['bob']
    client.post('/api/game/buzz', json={'player_id': alice['id']})
    client.post('/api/game/buzz', json={'player_id': bob['id']})

    again = client.post('/api/game/buzz', json={'player_id': alice['id']}).get_json()
    assert again == {'ok': True, 'queued': False, 'reason': 'already_current'}

    again = client.post('/api/game/buzz', json={'player_id': bob['id']}).get_json()
    assert again['queued'] is False
    assert again['reason'] == 'already_queued'
    assert again['position'] == 1
    assert len(client.get('/api/game/buzz-queue').get_json()) == 1


def test_queue_orders_by_buzz_time(flask_app, live_clue):
    alice, bob, cara = live_clue['alice'], live_clue['bob'], live_clue['cara']
    arbitration.buzz(alice['id'], now=100.0)
    arbitration.buzz(cara['id'], now=100.5)
    arbitration.buzz(bob['id'], now=100.2)
    assert [e['player_id'] for e in buzz_queue.list_entries()] == [bob['id'], cara['id']]


def test_equal_buzz_times_keep_arrival_order(flask_app, live_clue):
    alice, bob, cara = live_clue['alice'], live_clue['bob'], live_clue['cara']
    arbitration.buzz(alice['id'], now=50.0)
    arbitration.buzz(cara['id'], now=51.0)
    arbitration.buzz(bob['id'], now=51.0)
    assert [e['player_id'] for e in buzz_queue.list_entries()] == [cara['id'], bob['id']]


def test_wrong_answers_advance_the_queue(client, flask_app, live_clue):
    alice, bob, cara = live_clue['alice'], live_clue['bob'], live_clue['cara']
    arbitration.buzz(alice['id'], now=10.0)
    arbitration.buzz(bob['id'], now=10.1)
    arbitration.buzz(cara['id'], now=10.2)

    result = arbitration.resolve(alice['id'], False)
    state = result['state']
    assert state['buzzer_locked'] is True
    assert state['last_buzz_player_id'] == bob['id']
    assert state['last_buzz_time'] > 10.2
    assert state['clue_active'] is True
    assert [e['player_id'] for e in buzz_queue.list_entries()] == [cara['id']]

    state = arbitration.resolve(bob['id'], False)['state']
    assert state['last_buzz_player_id'] == cara['id']
    assert buzz_queue.length() == 0

    state = arbitration.resolve(cara['id'], False)['state']
    assert state['buzzer_locked'] is False
    assert state['last_buzz_player_id'] is None
    assert state['clue_active'] is True

    assert _score_of(client, alice['id']) == -200
    assert _score_of(client, bob['id']) == -200
    assert _score_of(client, cara['id']) == -200


def test_correct_answer_scores_and_passes_turn(client, live_clue):
    alice, bob = live_clue['alice'], live_clue['bob']
    client.post('/api/game/buzz', json={'player_id': bob['id']})
    client.post('/api/game/buzz', json={'player_id': alice['id']})

    res = client.post('/api/admin/resolve-current', json={'player_id': bob['id'], 'correct': True})
    assert res.status_code == 200
    body = res.get_json()
    state = body['state']
    assert state['turn_player_id'] == bob['id']
    assert state['clue_active'] is False
    assert state['current_clue_text'] is None
    assert state['buzzer_locked'] is False
    assert client.get('/api/game/buzz-queue').get_json() == []
    assert body['scores'][0]['id'] == bob['id']
    assert body['scores'][0]['score'] == 200


def test_real_question_scores_catalog_points(client, make_player):
    alice = make_player('Alice')
    client.post('/api/game/start')
    board = client.get('/api/game/board').get_json()
    tile = board['columns'][0]['tiles'][2]
    client.post('/api/game/select-card', json={'question_id': tile['question_id']})
    client.post('/api/game/set-question-reading', json={'reading': False})
    client.post('/api/game/buzz', json={'player_id': alice['id']})
    client.post('/api/admin/resolve-current', json={'player_id': alice['id'], 'correct': True})
    assert _score_of(client, alice['id']) == tile['points'] == 600


def test_resolve_rejects_non_boolean(client, live_clue):
    alice = live_clue['alice']
    res = client.post('/api/admin/resolve-current', json={'player_id': alice['id'], 'correct': 'yes'})
    assert res.status_code == 400
    assert res.get_json()['code'] == 'validation'
    assert _score_of(client, alice['id']) == 0


def test_resolve_without_clue(flask_app, make_player):
    alice = make_player('Alice')
    with pytest.raises(PreconditionFailed):
        arbitration.resolve(alice['id'], True)
    with pytest.raises(ValidationFailed):
        arbitration.resolve(None, True)


def test_resolve_unknown_player_changes_nothing(flask_app, live_clue):
    with pytest.raises(NotFound):
        arbitration.resolve(9999, True)


def test_simultaneous_buzzes_have_one_winner(file_app):
    client = file_app.test_client()
    ids = [client.post('/api/players', json={'name': name}).get_json()['id']
           for name in ('Alice', 'Bob', 'Cara', 'Dana')]
    client.post('/api/game/start')
    client.post('/api/game/select-card', json={'category': 'Disney & Pixar', 'points': 200})

    barrier = threading.Barrier(len(ids))
    results, errors = [], []

    def contender(player_id):
        with file_app.app_context():
            try:
                barrier.wait(timeout=5)
                results.append(arbitration.buzz(player_id))
            except Exception as exc:
                errors.append(exc)
            finally:
                db.session.remove()

    threads = [threading.Thread(target=contender, args=(pid,)) for pid in ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert errors == []
    assert len(results) == len(ids)
    winners = [r for r in results if 'state' in r]
    queued = [r for r in results if r['queued']]
    assert len(winners) == 1
    assert len(queued) == len(ids) - 1
    # each queued buzz saw the queue the previous one left behind
    assert sorted(r['position'] for r in queued) == [1, 2, 3]

    holder = winners[0]['state']['last_buzz_player_id']
    state = client.get('/api/game/state').get_json()
    assert state['buzzer_locked'] is True
    assert state['last_buzz_player_id'] == holder
    queue = [entry['player_id'] for entry in client.get('/api/game/buzz-queue').get_json()]
    assert holder not in queue
    assert len(set(queue)) == len(queue) == len(ids) - 1
    assert sorted(queue + [holder]) == sorted(ids)


def test_turn_and_current_question_need_ids(flask_app):
    with pytest.raises(ValidationFailed):
        selection.set_turn(None)
    with pytest.raises(ValidationFailed):
        selection.set_current_question('')


def test_skip_keeps_turn(client, make_player):
    alice = make_player('Alice')
    bob = make_player('Bob')
    client.post('/api/game/start')
    client.post('/api/admin/set-turn', json={'player_id': alice['id']})
    client.post('/api/game/select-card', json={
        'category': 'Disney & Pixar', 'points': 200, 'picker_player_id': alice['id'],
    })
    client.post('/api/game/buzz', json={'player_id': bob['id']})

    state = client.post('/api/admin/skip-current').get_json()
    assert state['clue_active'] is False
    assert state['buzzer_locked'] is False
    assert state['turn_player_id'] == alice['id']
    assert _score_of(client, bob['id']) == 0
    assert client.post('/api/admin/skip-current').status_code == 400


def test_unlock_buzzer_clears_queue(client, live_clue):
    alice, bob = live_clue['alice'], live_clue['bob']
    client.post('/api/game/buzz', json={'player_id': alice['id']})
    client.post('/api/game/buzz', json={'player_id': bob['id']})

    state = client.post('/api/game/unlock-buzzer').get_json()
    assert state['buzzer_locked'] is False
    assert state['last_buzz_player_id'] is None
    assert client.get('/api/game/buzz-queue').get_json() == []

    res = client.post('/api/game/buzz', json={'player_id': bob['id']}).get_json()
    assert res['state']['last_buzz_player_id'] == bob['id']


def test_end_locks_out_buzzer(client, live_clue):
    alice = live_clue['alice']
    state = client.post('/api/game/end').get_json()
    assert state['status'] == 'ended'
    assert state['buzzer_locked'] is True
    res = client.post('/api/game/buzz', json={'player_id': alice['id']})
    assert res.status_code == 400


def test_set_question_reading_requires_boolean(client):
    assert client.post('/api/game/set-question-reading', json={'reading': 'no'}).status_code == 400


def test_delete_lock_holder_mid_game(client, live_clue):
    alice, bob, cara = live_clue['alice'], live_clue['bob'], live_clue['cara']
    client.post('/api/admin/set-turn', json={'player_id': bob['id']})
    client.post('/api/game/buzz', json={'player_id': bob['id']})
    client.post('/api/game/buzz', json={'player_id': cara['id']})

    res = client.delete(f"/api/admin/players/{bob['id']}")
    assert res.status_code == 200

    state = _state(client)
    assert state['turn_player_id'] is None
    assert state['buzzer_locked'] is False
    assert state['last_buzz_player_id'] is None
    assert state['clue_active'] is True
    queue = client.get('/api/game/buzz-queue').get_json()
    assert [entry['player_id'] for entry in queue] == [cara['id']]
    assert all(p['id'] != bob['id'] for p in client.get('/api/players').get_json())

    # the remaining players can still play the clue
    res = client.post('/api/game/buzz', json={'player_id': alice['id']}).get_json()
    assert res['state']['last_buzz_player_id'] == alice['id']


def test_delete_author_of_current_clue(client, make_player):
    author = make_player('Author')
    q = client.post('/api/questions', json={
        'player_id': author['id'], 'question_text': 'Q?', 'answer': 'A', 'category': 'Misc', 'points': 400,
    }).get_json()
    client.post(f"/api/admin/questions/{q['id']}/select", json={'selected': True})
    client.post('/api/game/select-card', json={'question_id': q['id']})

    client.delete(f"/api/admin/players/{author['id']}")
    state = _state(client)
    assert state['current_question_id'] is None
    assert state['clue_active'] is False
    assert client.get('/api/questions').get_json() == []
    assert client.delete(f"/api/admin/players/{author['id']}").status_code == 404
