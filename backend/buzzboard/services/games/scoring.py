from buzzboard import db
from buzzboard.models import GameState, Player, Question
from buzzboard.errors import NotFound


def clue_value(state: GameState) -> int:
    """Point value of the active clue.

    Placeholders carry their own points; real clues use the catalog row.
    """
    if state.current_is_placeholder:
        return int(state.current_points or 0)
    question = db.session.get(Question, state.current_question_id)
    if not question:
        raise NotFound('Question not found')
    return int(question.points or 0)


def apply_delta(player: Player, delta: int) -> int:
    player.score = int(player.score or 0) + int(delta)
    db.session.add(player)
    db.session.flush()
    return player.score


def set_score(player: Player, score: int) -> int:
    player.score = int(score)
    db.session.add(player)
    db.session.flush()
    return player.score


def scoreboard() -> list:
    """Players by score, highest first; ties go to the earliest registration."""
    players = Player.query.order_by(Player.score.desc(), Player.created_at.asc(), Player.id.asc()).all()
    return [p.to_dict() for p in players]
