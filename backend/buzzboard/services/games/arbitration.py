"""Buzzer arbitration: who gets to answer the active clue, and what happens after.

Per clue the buzzer moves between unlocked (anyone may buzz) and locked to a
single responder. Buzzes that arrive while locked wait in the FIFO queue; a
wrong answer hands the lock to the earliest of them or reopens the buzzer.
"""

import time
from typing import Optional

from flask import current_app

from buzzboard.errors import PreconditionFailed, ValidationFailed
from buzzboard.services.catalog import players
from . import buzz_queue, scoring, snapshots, store


def buzz(player_id, now: Optional[float] = None) -> dict:
    """First buzz on an unlocked clue wins the lock; later ones are queued."""
    if player_id is None or player_id == '':
        raise ValidationFailed('player_id is required')
    with store.game_operation() as changes:
        player = players.require(player_id)
        state = store.read()
        if state.status != 'active':
            raise PreconditionFailed('Game is not active')
        if not state.clue_active:
            raise PreconditionFailed('No active clue')
        if state.question_reading:
            raise PreconditionFailed('Question is still being read')

        buzz_time = time.time() if now is None else float(now)

        if state.buzzer_locked:
            if state.last_buzz_player_id == player.id:
                return {'ok': True, 'queued': False, 'reason': 'already_current'}
            result = buzz_queue.enqueue(player.id, buzz_time)
            position = buzz_queue.length()
            if result['queued']:
                changes.touch('queue')
                changes.log('buzz_queued', f"{player.name} queued to buzz",
                            {'player_id': player.id, 'player_name': player.name, 'position': position})
                current_app.logger.info(f"[buzz] player={player.id} queued position={position}")
            return {'ok': True, 'queued': result['queued'], 'reason': result.get('reason'), 'position': position}

        state = store.patch(buzzer_locked=True, last_buzz_player_id=player.id, last_buzz_time=buzz_time)
        changes.touch('state', 'queue')
        changes.log('buzz', f"{player.name} buzzed first", {'player_id': player.id, 'player_name': player.name})
        current_app.logger.info(f"[buzz] player={player.id} won the lock")
        return {'ok': True, 'queued': False, 'reason': None, 'state': snapshots.state_payload(state)}


def resolve(player_id, correct) -> dict:
    """Score the responder's answer to the active clue.

    Correct: +value, clue cleared, the responder picks next.
    Wrong: -value, clue stays up and the lock passes to the next queued
    player with a fresh buzz time, or the buzzer reopens.
    """
    if player_id is None or player_id == '' or not isinstance(correct, bool):
        raise ValidationFailed('player_id and correct are required')
    with store.game_operation() as changes:
        state = store.read()
        if not state.clue_active:
            raise PreconditionFailed('No current question')
        player = players.require(player_id)
        delta = scoring.clue_value(state)
        clue = {
            'question_id': state.current_question_id,
            'category': state.current_category,
            'points': state.current_points,
            'placeholder': bool(state.current_is_placeholder),
        }

        if correct:
            scoring.apply_delta(player, delta)
            buzz_queue.clear()
            state = store.patch(dict(store.CLEARED_CLUE, **store.RELEASED_BUZZER), turn_player_id=player.id)
        else:
            scoring.apply_delta(player, -delta)
            nxt = buzz_queue.dequeue_earliest()
            if nxt:
                state = store.patch(buzzer_locked=True, last_buzz_player_id=nxt['player_id'],
                                    last_buzz_time=time.time())
                next_player = players.find(nxt['player_id'])
                next_name = next_player.name if next_player else nxt['player_id']
                changes.log('buzz_advance', f"Next up: {next_name}",
                            {'player_id': nxt['player_id'], 'player_name': next_name})
            else:
                state = store.patch(store.RELEASED_BUZZER)

        signed = delta if correct else -delta
        changes.touch('players', 'state', 'queue')
        changes.log('marked_correct' if correct else 'marked_wrong',
                    f"{'Correct' if correct else 'Wrong'}: {player.name} ({'+' if signed >= 0 else ''}{signed} pts)",
                    dict(clue, player_id=player.id, player_name=player.name, delta=signed))
        current_app.logger.info(f"[resolve] player={player.id} correct={correct} delta={signed}")
        return {'state': snapshots.state_payload(state), 'scores': scoring.scoreboard()}


def skip() -> dict:
    """Drop the active clue without scoring; the turn stays with the same picker."""
    with store.game_operation() as changes:
        state = store.read()
        if not state.clue_active:
            raise PreconditionFailed('No current question')
        buzz_queue.clear()
        state = store.patch(dict(store.CLEARED_CLUE, **store.RELEASED_BUZZER))
        changes.touch('state', 'queue')
        changes.log('question_skipped', 'Question skipped (no one knew the answer)')
        current_app.logger.info('[resolve] clue skipped')
        return snapshots.state_payload(state)


def unlock_buzzer() -> dict:
    with store.game_operation() as changes:
        buzz_queue.clear()
        state = store.patch(store.RELEASED_BUZZER)
        changes.touch('state', 'queue')
        return snapshots.state_payload(state)


def set_question_reading(reading) -> dict:
    if not isinstance(reading, bool):
        raise ValidationFailed('reading must be boolean')
    with store.game_operation() as changes:
        state = store.patch(question_reading=reading)
        changes.touch('state')
        return snapshots.state_payload(state)
