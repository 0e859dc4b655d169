import json
from typing import Optional

from flask import current_app
from sqlalchemy import select

from buzzboard import db
from buzzboard.models import GameEvent


def record(event_type: str, message: str, data: Optional[dict] = None) -> GameEvent:
    """Add an event row to the current transaction and prune old rows."""
    evt = GameEvent(type=event_type, message=message, data_json=json.dumps(data) if data else None)
    db.session.add(evt)
    db.session.flush()

    limit = int(current_app.config.get('EVENT_LOG_LIMIT', 300))
    keep = select(GameEvent.id).order_by(GameEvent.created_at.desc(), GameEvent.id.desc()).limit(limit)
    GameEvent.query.filter(GameEvent.id.not_in(keep)).delete(synchronize_session=False)
    return evt


def list_events(limit=100):
    try:
        lim = int(limit)
    except (TypeError, ValueError):
        lim = 100
    lim = max(1, min(500, lim))
    rows = GameEvent.query.order_by(GameEvent.created_at.desc(), GameEvent.id.desc()).limit(lim).all()
    return [e.to_dict() for e in rows]
