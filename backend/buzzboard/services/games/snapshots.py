from flask import current_app

from buzzboard.models import Player, Question
from . import buzz_queue


def state_payload(state) -> dict:
    payload = state.to_dict()
    payload['answer_window_sec'] = int(current_app.config.get('ANSWER_WINDOW_SEC', 30))
    return payload


def players_payload() -> list:
    return [p.to_dict() for p in Player.query.order_by(Player.created_at.desc(), Player.id.desc()).all()]


def questions_payload(selected=None) -> list:
    query = Question.query
    if selected is True:
        query = query.filter_by(selected_for_game=True)
    elif selected is False:
        query = query.filter_by(selected_for_game=False)
    return [q.to_dict() for q in query.order_by(Question.created_at.desc(), Question.id.desc()).all()]


def queue_payload() -> list:
    return buzz_queue.list_entries()
