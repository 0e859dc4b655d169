from flask import current_app

from buzzboard.errors import Conflict, PermissionDenied, PreconditionFailed, ValidationFailed
from buzzboard.services.catalog import packs, players, questions
from . import buzz_queue, snapshots, store


PLACEHOLDER_TEXT = 'N/A'


def select_card(question_id=None, category=None, points=None, force=False, picker_player_id=None) -> dict:
    """Put a board tile on screen as the active clue.

    Without ``question_id`` the tile is empty: a placeholder clue is built
    from the default pack entry at that category and points, or ``N/A``.
    ``force`` is the host override for the active-clue, turn and catalog
    checks.
    """
    if category is not None:
        category = str(category).strip() or None
    points = players.as_whole_number(points)
    force = bool(force)

    with store.game_operation() as changes:
        state = store.read()
        if state.clue_active and not force:
            raise Conflict('A clue is already active')
        if state.turn_player_id and not force and players.coerce_id(picker_player_id) != state.turn_player_id:
            raise PermissionDenied('Not your turn')

        if not question_id:
            fallback = packs.find_default_question(category, points)
            buzz_queue.clear()
            state = store.patch(
                dict(store.RELEASED_BUZZER),
                current_question_id=None,
                current_category=category,
                current_points=points,
                current_is_placeholder=True,
                current_clue_text=(fallback or {}).get('question_text') or PLACEHOLDER_TEXT,
                current_answer_text=(fallback or {}).get('answer') or PLACEHOLDER_TEXT,
                question_reading=False,
            )
            changes.touch('state', 'queue')
            changes.log('card_selected', f"Selected {category or 'Unknown'} ${points or ''} (default/NA)",
                        {'category': category, 'points': points, 'placeholder': True, 'fallback': bool(fallback)})
            current_app.logger.info(f"[select] placeholder category={category} points={points} fallback={bool(fallback)}")
            return snapshots.state_payload(state)

        question = questions.require(question_id)
        if not force:
            if not question.selected_for_game:
                raise PreconditionFailed('Question not selected')
            if question.used_in_game:
                raise Conflict('Card already used')

        question.used_in_game = True
        buzz_queue.clear()
        state = store.patch(
            dict(store.RELEASED_BUZZER),
            current_question_id=question.id,
            current_category=question.category or category,
            current_points=question.points if question.points is not None else points,
            current_is_placeholder=False,
            current_clue_text=None,
            current_answer_text=None,
            # the host reads a real clue aloud before buzzing opens
            question_reading=True,
        )
        changes.touch('questions', 'state', 'queue')
        changes.log('card_selected', f"Selected {state.current_category or 'Unknown'} ${state.current_points or ''}",
                    {'question_id': question.id, 'category': state.current_category,
                     'points': state.current_points, 'placeholder': False})
        current_app.logger.info(f"[select] question={question.id} forced={force}")
        return snapshots.state_payload(state)


def set_turn(player_id) -> dict:
    if not player_id:
        raise ValidationFailed('player_id is required')
    with store.game_operation() as changes:
        player = players.require(player_id)
        state = store.patch(turn_player_id=player.id)
        changes.touch('state')
        changes.log('turn_set', f"Turn set to {player.name}", {'player_id': player.id, 'player_name': player.name})
        return snapshots.state_payload(state)


def set_current_question(question_id) -> dict:
    """Host override: point the board at a catalog question, bypassing the gate."""
    if not question_id:
        raise ValidationFailed('question_id is required')
    with store.game_operation() as changes:
        question = questions.require(question_id)
        state = store.patch(
            current_question_id=question.id,
            current_category=question.category,
            current_points=question.points,
            current_is_placeholder=False,
            current_clue_text=None,
            current_answer_text=None,
        )
        changes.touch('state')
        return snapshots.state_payload(state)
