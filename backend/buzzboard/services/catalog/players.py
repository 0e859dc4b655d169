import base64
import binascii
import math
import re
from typing import Optional

from flask import current_app

from buzzboard import db
from buzzboard.errors import NotFound, ValidationFailed
from buzzboard.models import Player, Question
from buzzboard.services.games import buzz_queue, scoring, store


SLUG_MAX_LEN = 40
DATA_URL_RE = re.compile(r'^data:([^;]+);base64,(.+)$', re.DOTALL)

_UNSET = object()


def slugify(name: str) -> str:
    base = re.sub(r'[^a-z0-9]+', '', (name or '').lower().strip())[:SLUG_MAX_LEN]
    return base or 'player'


def ensure_unique_slug(base_slug: str, exclude_id: Optional[int] = None) -> str:
    slug = base_slug
    counter = 1
    while True:
        query = Player.query.filter_by(slug=slug)
        if exclude_id is not None:
            query = query.filter(Player.id != exclude_id)
        if not query.first():
            return slug
        counter += 1
        slug = f"{base_slug}-{counter}"


def coerce_id(value) -> Optional[int]:
    """Accept ids as ints or digit strings; anything else is no id at all."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def as_whole_number(value) -> Optional[int]:
    """Truncate a finite number (or numeric string) to int, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, (int, float)) and math.isfinite(value):
        return int(value)
    return None


def find(player_id) -> Optional[Player]:
    pid = coerce_id(player_id)
    if pid is None:
        return None
    return db.session.get(Player, pid)


def require(player_id) -> Player:
    player = find(player_id)
    if not player:
        raise NotFound('Player not found')
    return player


def get_by_slug(slug: str) -> Player:
    player = Player.query.filter_by(slug=slug).first()
    if not player:
        raise NotFound('Player not found')
    return player


def _check_photo(photo_url) -> None:
    if photo_url is None:
        return
    if not isinstance(photo_url, str):
        raise ValidationFailed('photo_url must be a string')
    if len(photo_url) > int(current_app.config.get('MAX_PHOTO_BYTES', 5 * 1024 * 1024)):
        raise ValidationFailed('Photo is too large')


def create_player(name, photo_url=None) -> dict:
    if not isinstance(name, str) or not name.strip():
        raise ValidationFailed('Name is required')
    _check_photo(photo_url)
    with store.game_operation() as changes:
        player = Player(
            name=name.strip(),
            slug=ensure_unique_slug(slugify(name)),
            score=0,
            photo_url=photo_url or None,
        )
        db.session.add(player)
        db.session.flush()
        changes.touch('players')
        changes.log('player_joined', f"{player.name} joined", {'player_id': player.id, 'player_slug': player.slug})
        return player.to_dict(include_photo=True)


def update_player(slug: str, name=_UNSET, photo_url=_UNSET) -> dict:
    """Update profile fields only; score changes go through ``adjust_score``."""
    if photo_url is not _UNSET:
        _check_photo(photo_url)
    with store.game_operation() as changes:
        player = get_by_slug(slug)
        touched = False
        if isinstance(name, str) and name.strip():
            player.name = name.strip()
            player.slug = ensure_unique_slug(slugify(player.name), exclude_id=player.id)
            touched = True
        if photo_url is not _UNSET:
            player.photo_url = photo_url or None
            touched = True
        if touched:
            db.session.add(player)
            changes.touch('players')
        return player.to_dict(include_photo=True)


def photo_of(player_id):
    """Return ``('data', mime, bytes)`` or ``('redirect', url)`` for a player's photo."""
    player = require(player_id)
    raw = player.photo_url or ''
    match = DATA_URL_RE.match(raw)
    if match:
        try:
            data = base64.b64decode(match.group(2), validate=False)
        except (binascii.Error, ValueError):
            raise ValidationFailed('Stored photo is not valid base64')
        return 'data', match.group(1) or 'image/jpeg', data
    if raw.startswith('http://') or raw.startswith('https://'):
        return 'redirect', raw
    raise NotFound('Player has no photo')


def delete_player(player_id) -> None:
    """Remove a player mid-game without leaving dangling references.

    Their queued buzz and authored questions go with them; the turn is
    cleared if it was theirs and the buzzer is released if they held it.
    """
    with store.game_operation() as changes:
        player = require(player_id)
        state = store.read()
        authored_ids = {q.id for q in Question.query.filter_by(player_id=player.id).all()}

        patch = {}
        if state.turn_player_id == player.id:
            patch['turn_player_id'] = None
        if state.last_buzz_player_id == player.id:
            patch.update(store.RELEASED_BUZZER)
        if state.current_question_id in authored_ids:
            buzz_queue.clear()
            patch.update(store.CLEARED_CLUE)
            patch.update(store.RELEASED_BUZZER)
        store.patch(patch)

        buzz_queue.remove_player(player.id)
        Question.query.filter_by(player_id=player.id).delete(synchronize_session=False)
        name, slug = player.name, player.slug
        db.session.delete(player)
        db.session.flush()

        current_app.logger.info(f"[players] deleted player={player_id} name={name}")
        changes.touch('players', 'questions', 'state', 'queue')
        changes.log('player_deleted', f"Admin deleted player {name}",
                    {'player_id': int(player_id), 'player_name': name, 'player_slug': slug})


def adjust_score(player_id, delta=None, score=None) -> dict:
    """Admin override: set ``score`` outright, or add ``delta``."""
    with store.game_operation() as changes:
        player = require(player_id)
        applied = 0
        if score is not None:
            value = as_whole_number(score)
            if value is None:
                raise ValidationFailed('score must be a number')
            new_score = scoring.set_score(player, value)
        else:
            applied = as_whole_number(delta)
            if applied is None:
                raise ValidationFailed('delta must be a number')
            new_score = scoring.apply_delta(player, applied)

        label = (f"{'+' if applied > 0 else ''}{applied}") if applied else 'set'
        changes.touch('players')
        changes.log('score_adjust', f"Admin adjusted {player.name}: {label} -> {new_score}",
                    {'player_id': player.id, 'player_name': player.name, 'delta': applied, 'score': new_score})
        return {'player_id': player.id, 'score': new_score}
