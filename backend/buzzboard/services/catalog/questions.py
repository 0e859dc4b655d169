from buzzboard import db
from buzzboard.errors import NotFound, ValidationFailed
from buzzboard.models import Question
from buzzboard.services.games import snapshots, store
from .players import as_whole_number, coerce_id, require as require_player


def _clean_category(value):
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def find(question_id):
    qid = coerce_id(question_id)
    if qid is None:
        return None
    return db.session.get(Question, qid)


def require(question_id) -> Question:
    question = find(question_id)
    if not question:
        raise NotFound('Question not found')
    return question


def list_questions(selected=None) -> list:
    return snapshots.questions_payload(selected)


def create_question(player_id, question_text, answer, category=None, points=None) -> dict:
    if not player_id or not isinstance(question_text, str) or not question_text.strip() \
            or not isinstance(answer, str) or not answer.strip():
        raise ValidationFailed('player_id, question_text, and answer are required')
    with store.game_operation() as changes:
        author = require_player(player_id)
        question = Question(
            player_id=author.id,
            question_text=question_text.strip(),
            answer=answer.strip(),
            category=_clean_category(category),
            points=as_whole_number(points),
            selected_for_game=False,
            used_in_game=False,
        )
        db.session.add(question)
        db.session.flush()
        changes.touch('questions')
        return question.to_dict()


def set_selected(question_id, selected) -> dict:
    if not isinstance(selected, bool):
        raise ValidationFailed('selected must be boolean')
    with store.game_operation() as changes:
        question = require(question_id)
        question.selected_for_game = selected
        db.session.add(question)
        changes.touch('questions')
        return {'id': question.id, 'selected_for_game': selected}


def update_meta(question_id, **fields) -> dict:
    updates = {}
    if 'category' in fields:
        updates['category'] = _clean_category(fields['category'])
    if 'points' in fields:
        updates['points'] = as_whole_number(fields['points'])
    if not updates:
        raise ValidationFailed('No updates provided')
    with store.game_operation() as changes:
        question = require(question_id)
        for key, value in updates.items():
            setattr(question, key, value)
        db.session.add(question)
        changes.touch('questions')
        return {
            'id': question.id,
            'category': question.category,
            'points': question.points,
            'selected_for_game': question.selected_for_game,
            'used_in_game': question.used_in_game,
        }


def update_points(question_id, points) -> dict:
    with store.game_operation() as changes:
        question = require(question_id)
        question.points = as_whole_number(points)
        db.session.add(question)
        changes.touch('questions')
        return {'id': question.id, 'points': question.points}
