from buzzboard import db
from datetime import datetime, timezone
import json


def utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    slug = db.Column(db.String(64), unique=True, nullable=False, index=True)
    score = db.Column(db.Integer, default=0, nullable=False)
    photo_url = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    questions = db.relationship('Question', back_populates='author', lazy='dynamic')

    @property
    def has_photo(self):
        return bool(self.photo_url)

    def to_dict(self, include_photo=False):
        data = {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'score': self.score,
            'has_photo': self.has_photo,
            'created_at': _iso(self.created_at),
        }
        if include_photo:
            data['photo_url'] = self.photo_url
        return data


class Question(db.Model):
    __tablename__ = 'question'
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False)
    question_text = db.Column(db.Text, nullable=False)
    answer = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(128), nullable=True)
    points = db.Column(db.Integer, nullable=True)
    selected_for_game = db.Column(db.Boolean, default=False, nullable=False)
    used_in_game = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    author = db.relationship('Player', back_populates='questions')

    def to_dict(self):
        return {
            'id': self.id,
            'player_id': self.player_id,
            'question_text': self.question_text,
            'answer': self.answer,
            'category': self.category,
            'points': self.points,
            'selected_for_game': self.selected_for_game,
            'used_in_game': self.used_in_game,
            'created_at': _iso(self.created_at),
            'player_name': self.author.name if self.author else None,
            'player_slug': self.author.slug if self.author else None,
        }


class GameState(db.Model):
    """The single authoritative game record (always row id 1)."""
    __tablename__ = 'game_state'
    __table_args__ = (db.CheckConstraint('id = 1', name='ck_game_state_singleton'),)

    id = db.Column(db.Integer, primary_key=True)
    status = db.Column(db.String(16), default='waiting', nullable=False)  # waiting, active, ended
    current_question_id = db.Column(db.Integer, db.ForeignKey('question.id', ondelete='SET NULL'), nullable=True)
    current_category = db.Column(db.String(128), nullable=True)
    current_points = db.Column(db.Integer, nullable=True)
    current_is_placeholder = db.Column(db.Boolean, default=False, nullable=False)
    current_clue_text = db.Column(db.Text, nullable=True)
    current_answer_text = db.Column(db.Text, nullable=True)
    turn_player_id = db.Column(db.Integer, db.ForeignKey('player.id', ondelete='SET NULL'), nullable=True)
    buzzer_locked = db.Column(db.Boolean, default=False, nullable=False)
    last_buzz_player_id = db.Column(db.Integer, db.ForeignKey('player.id', ondelete='SET NULL'), nullable=True)
    last_buzz_time = db.Column(db.Float, nullable=True)  # epoch seconds; clients derive the countdown
    question_reading = db.Column(db.Boolean, default=False, nullable=False)

    @property
    def clue_active(self):
        return bool(self.current_question_id) or bool(self.current_is_placeholder)

    def to_dict(self):
        return {
            'status': self.status,
            'current_question_id': self.current_question_id,
            'current_category': self.current_category,
            'current_points': self.current_points,
            'current_is_placeholder': bool(self.current_is_placeholder),
            'current_clue_text': self.current_clue_text,
            'current_answer_text': self.current_answer_text,
            'turn_player_id': self.turn_player_id,
            'buzzer_locked': bool(self.buzzer_locked),
            'last_buzz_player_id': self.last_buzz_player_id,
            'last_buzz_time': self.last_buzz_time,
            'question_reading': bool(self.question_reading),
            'clue_active': self.clue_active,
        }


class BuzzQueueEntry(db.Model):
    __tablename__ = 'buzz_queue'
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), unique=True, nullable=False)
    buzz_time = db.Column(db.Float, nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    player = db.relationship('Player')

    def to_dict(self):
        return {
            'id': self.id,
            'player_id': self.player_id,
            'buzz_time': self.buzz_time,
            'player_name': self.player.name if self.player else None,
            'player_slug': self.player.slug if self.player else None,
            'has_photo': self.player.has_photo if self.player else False,
        }


class GameEvent(db.Model):
    __tablename__ = 'game_event'
    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(64), nullable=False)
    message = db.Column(db.Text, nullable=False)
    data_json = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'message': self.message,
            'data': json.loads(self.data_json) if self.data_json else None,
            'created_at': _iso(self.created_at),
        }


class GameHistory(db.Model):
    __tablename__ = 'game_history'
    id = db.Column(db.Integer, primary_key=True)
    game_number = db.Column(db.Integer, unique=True, nullable=False, index=True)
    question_set_json = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'game_number': self.game_number,
            'question_set': json.loads(self.question_set_json),
            'created_at': _iso(self.created_at),
            'completed_at': _iso(self.completed_at),
        }


class QuestionUsage(db.Model):
    """Remembers seeded questions across games so packs are not repeated."""
    __tablename__ = 'question_usage'
    __table_args__ = (
        db.UniqueConstraint('question_text', 'answer', 'category', 'points', name='uq_question_usage'),
    )
    id = db.Column(db.Integer, primary_key=True)
    question_text = db.Column(db.Text, nullable=False)
    answer = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(128), nullable=True)
    points = db.Column(db.Integer, nullable=True)
    first_used_in_game = db.Column(db.Integer, nullable=True)
    last_used_in_game = db.Column(db.Integer, nullable=True, index=True)
    use_count = db.Column(db.Integer, default=1, nullable=False)
