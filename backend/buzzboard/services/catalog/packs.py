"""Built-in question packs, seeding and per-game question history.

Packs are JSON lists shipped in ``buzzboard/data``. Seeded questions are
authored by a system "House Questions" player and remembered in
``QuestionUsage`` so a pack is not replayed in a later game.
"""

import json
import os
from functools import lru_cache
from typing import Optional

from flask import current_app

from buzzboard import db
from buzzboard.errors import NotFound, ValidationFailed
from buzzboard.models import GameHistory, Player, Question, QuestionUsage, utcnow
from buzzboard.services.games import buzz_queue, store


DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), 'data')

PACK_FILES = {
    'classic': 'default_questions.json',
    'holiday2025': 'question_pack_holiday_2025.json',
}
FALLBACK_PACK = 'classic'

HOUSE_SLUG = 'house'
HOUSE_NAME = 'House Questions'


@lru_cache(maxsize=None)
def load_pack(key: str) -> Optional[tuple]:
    filename = PACK_FILES.get(key)
    if not filename:
        return None
    path = os.path.join(DATA_DIR, filename)
    if not os.path.exists(path):
        return None
    with open(path, encoding='utf-8') as fh:
        rows = json.load(fh)
    return tuple(rows) if isinstance(rows, list) else None


def list_packs() -> list:
    return [{'key': key, 'count': len(load_pack(key) or ())} for key in PACK_FILES]


def resolve_pack(key: Optional[str] = None) -> tuple:
    """The requested pack, else the configured default, else the classic set."""
    for candidate in (key, current_app.config.get('DEFAULT_QUESTION_PACK'), FALLBACK_PACK):
        if candidate:
            pool = load_pack(candidate)
            if pool:
                return pool
    return ()


def find_default_question(category, points) -> Optional[dict]:
    if not category or points is None:
        return None
    cat = str(category).strip().lower()
    for row in resolve_pack():
        if str(row.get('category', '')).strip().lower() == cat and row.get('points') == int(points):
            return row
    return None


def _normalize(row: dict) -> Optional[tuple]:
    category = str(row.get('category') or '').strip()
    points = row.get('points')
    text = str(row.get('question_text') or '').strip()
    answer = str(row.get('answer') or '').strip()
    if not (category and text and answer) or isinstance(points, bool) or not isinstance(points, (int, float)):
        return None
    points = int(points)
    if not points:
        return None
    return text, answer, category, points


def ensure_house_player() -> Player:
    player = Player.query.filter_by(slug=HOUSE_SLUG).first()
    if player:
        return player
    player = Player(name=HOUSE_NAME, slug=HOUSE_SLUG, score=0)
    db.session.add(player)
    db.session.flush()
    return player


def next_game_number() -> int:
    current = db.session.query(db.func.max(GameHistory.game_number)).scalar()
    return int(current or 0) + 1


def _usage_of(text, answer, category, points) -> Optional[QuestionUsage]:
    return QuestionUsage.query.filter_by(question_text=text, answer=answer, category=category, points=points).first()


def record_usage(text, answer, category, points, game_number) -> None:
    usage = _usage_of(text, answer, category, points)
    if usage:
        usage.last_used_in_game = game_number
        usage.use_count = int(usage.use_count or 0) + 1
    else:
        usage = QuestionUsage(question_text=text, answer=answer, category=category, points=points,
                              first_used_in_game=game_number, last_used_in_game=game_number, use_count=1)
    db.session.add(usage)
    db.session.flush()


def insert_pack_questions(select_for_game=True, pack=None, game_number=None) -> dict:
    """Insert a pack into the catalog within the caller's transaction."""
    house = ensure_house_player()
    pool = resolve_pack(pack)
    game_num = game_number or next_game_number()
    inserted = 0
    skipped = 0

    for row in pool:
        normalized = _normalize(row)
        if not normalized:
            continue
        text, answer, category, points = normalized
        exists = Question.query.filter_by(player_id=house.id, question_text=text, answer=answer,
                                          category=category, points=points).first()
        if exists or _usage_of(text, answer, category, points):
            skipped += 1
            continue
        db.session.add(Question(player_id=house.id, question_text=text, answer=answer, category=category,
                                points=points, selected_for_game=bool(select_for_game), used_in_game=False))
        record_usage(text, answer, category, points, game_num)
        inserted += 1

    if inserted and not GameHistory.query.filter_by(game_number=game_num).first():
        db.session.add(GameHistory(game_number=game_num, question_set_json=json.dumps(list(pool))))
    db.session.flush()
    current_app.logger.info(f"[seed] pack={pack or 'default'} game={game_num} inserted={inserted} skipped={skipped}")
    return {'inserted': inserted, 'skipped': skipped, 'player': house.to_dict(), 'game_number': game_num}


def seed_defaults(select_for_game=True, pack=None) -> dict:
    if pack is not None and pack not in PACK_FILES:
        raise ValidationFailed(f"Unknown question pack: {pack}")
    with store.game_operation() as changes:
        result = insert_pack_questions(select_for_game=select_for_game, pack=pack)
        changes.touch('players', 'questions')
        changes.log('seed_defaults',
                    f"Seeded default questions (+{result['inserted']}, skipped {result['skipped']})",
                    {'inserted': result['inserted'], 'skipped': result['skipped'],
                     'game_number': result['game_number'], 'select_for_game': bool(select_for_game),
                     'pack': pack or current_app.config.get('DEFAULT_QUESTION_PACK')})
        return result


def list_game_history(limit=50) -> list:
    rows = GameHistory.query.order_by(GameHistory.game_number.desc()).limit(limit).all()
    return [h.to_dict() for h in rows]


def mark_game_completed() -> None:
    latest = GameHistory.query.order_by(GameHistory.game_number.desc()).first()
    if latest and not latest.completed_at:
        latest.completed_at = utcnow()
        db.session.add(latest)


def load_game_history(game_number) -> dict:
    """Replace the house questions with a past game's set, all selected."""
    try:
        game_num = int(game_number)
    except (TypeError, ValueError):
        game_num = 0
    if game_num < 1:
        raise ValidationFailed('Invalid game number')

    with store.game_operation() as changes:
        history = GameHistory.query.filter_by(game_number=game_num).first()
        if not history:
            raise NotFound('Game not found in history')
        question_set = json.loads(history.question_set_json)
        house = ensure_house_player()

        state = store.read()
        house_ids = {q.id for q in Question.query.filter_by(player_id=house.id).all()}
        if state.current_question_id in house_ids:
            buzz_queue.clear()
            store.patch(dict(store.CLEARED_CLUE, **store.RELEASED_BUZZER))
        Question.query.filter_by(player_id=house.id).delete(synchronize_session=False)

        loaded = 0
        for row in question_set:
            normalized = _normalize(row)
            if not normalized:
                continue
            text, answer, category, points = normalized
            db.session.add(Question(player_id=house.id, question_text=text, answer=answer, category=category,
                                    points=points, selected_for_game=True, used_in_game=False))
            record_usage(text, answer, category, points, game_num)
            loaded += 1

        changes.touch('questions', 'state', 'queue')
        changes.log('history_loaded', f"Loaded question set from game #{game_num}",
                    {'game_number': game_num, 'loaded': loaded})
        return {'ok': True, 'game_number': game_num, 'loaded': loaded}
