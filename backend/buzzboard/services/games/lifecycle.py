from flask import current_app

from buzzboard.models import Player, Question
from buzzboard.services.catalog import packs
from . import buzz_queue, snapshots, store


def start_game() -> dict:
    """Open a new match on a fresh board.

    Seeds and selects the default pack when nothing is selected yet.
    """
    with store.game_operation() as changes:
        seeded = None
        if not Question.query.filter_by(selected_for_game=True).count():
            seeded = packs.insert_pack_questions(select_for_game=True)['inserted']
            changes.touch('players')
            if not seeded:
                # every pack question is recorded in QuestionUsage from an earlier game
                current_app.logger.warning('[lifecycle] default pack already used, board starts empty')
        Question.query.update({Question.used_in_game: False})
        buzz_queue.clear()
        state = store.patch(dict(store.CLEARED_CLUE, **store.RELEASED_BUZZER), status='active', turn_player_id=None)
        changes.touch('questions', 'state', 'queue')
        changes.log('game_started', 'Game started' if seeded != 0 else 'Game started (no unused default questions)',
                    {'seeded': seeded})
        changes.log('board_reset', 'Board reset (all tiles unused)')
        current_app.logger.info('[lifecycle] game started')
        return snapshots.state_payload(state)


def end_game() -> dict:
    with store.game_operation() as changes:
        buzz_queue.clear()
        # the lock here is a lockout with no holder, not an arbitration win
        state = store.patch(dict(store.CLEARED_CLUE, **store.RELEASED_BUZZER), status='ended', buzzer_locked=True)
        packs.mark_game_completed()
        changes.touch('state', 'queue')
        changes.log('game_ended', 'Game ended')
        current_app.logger.info('[lifecycle] game ended')
        return snapshots.state_payload(state)


def reset_game() -> dict:
    """Back to waiting between games; roster and scores are kept."""
    with store.game_operation() as changes:
        buzz_queue.clear()
        state = store.patch(dict(store.CLEARED_CLUE, **store.RELEASED_BUZZER), status='waiting', turn_player_id=None)
        changes.touch('state', 'queue')
        changes.log('game_reset', 'Game reset')
        current_app.logger.info('[lifecycle] game reset')
        return snapshots.state_payload(state)


def reset_board() -> dict:
    """Mark every tile unused and drop the clue; status and turn are left alone."""
    with store.game_operation() as changes:
        Question.query.update({Question.used_in_game: False})
        buzz_queue.clear()
        state = store.patch(dict(store.CLEARED_CLUE, **store.RELEASED_BUZZER))
        changes.touch('questions', 'state', 'queue')
        return snapshots.state_payload(state)


def reset_for_new_game() -> dict:
    """Zero scores and empty the catalog, keeping players and photos."""
    with store.game_operation() as changes:
        Player.query.update({Player.score: 0})
        buzz_queue.clear()
        state = store.patch(dict(store.CLEARED_CLUE, **store.RELEASED_BUZZER), status='waiting', turn_player_id=None)
        Question.query.delete(synchronize_session=False)
        changes.touch('players', 'questions', 'state', 'queue')
        changes.log('reset_new_game', 'Reset questions + scores (kept players/photos)')
        current_app.logger.info('[lifecycle] reset for new game')
        return {'ok': True, 'state': snapshots.state_payload(state)}
