from collections import Counter

from buzzboard.models import Question
from . import store


BOARD_COLUMNS = 6
BOARD_POINTS = (200, 400, 600, 800, 1000)


def tile_lookup(rows) -> dict:
    """Map ``(category, points)`` to the question shown on that tile.

    When several selected questions share a tile the first unused one wins,
    so a tile is not shown as answered because a duplicate was used.
    """
    lookup = {}
    for q in rows:
        key = (q.category.strip(), q.points)
        existing = lookup.get(key)
        if existing is None or (existing.used_in_game and not q.used_in_game):
            lookup[key] = q
    return lookup


def build_board() -> dict:
    rows = (Question.query
            .filter(Question.selected_for_game.is_(True), Question.category.isnot(None), Question.points.isnot(None))
            .order_by(Question.created_at.desc(), Question.id.desc())
            .all())
    rows = [q for q in rows if q.category.strip() and q.points]

    counts = Counter(q.category.strip() for q in rows)
    # most_common keeps first-seen order among equal counts
    categories = [cat for cat, _ in counts.most_common(BOARD_COLUMNS)]
    while len(categories) < BOARD_COLUMNS:
        categories.append(f"Category {len(categories) + 1}")

    lookup = tile_lookup(rows)
    state = store.read()
    columns = []
    for cat in categories:
        tiles = []
        for pts in BOARD_POINTS:
            q = lookup.get((cat, pts))
            if q is not None:
                active = state.current_question_id == q.id
            else:
                active = bool(state.current_is_placeholder) and state.current_category == cat \
                    and state.current_points == pts
            tiles.append({
                'points': pts,
                'question_id': q.id if q else None,
                'used': bool(q.used_in_game) if q else False,
                'active': active,
            })
        columns.append({'category': cat, 'tiles': tiles})
    return {'categories': categories, 'points': list(BOARD_POINTS), 'columns': columns}
