"""initial buzzboard schema: players, questions, game state, buzz queue, event log, history

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2025-11-29 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a2b3c4d5e6f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'player' not in existing_tables:
        op.create_table(
            'player',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=64), nullable=False),
            sa.Column('slug', sa.String(length=64), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('photo_url', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_player_slug', 'player', ['slug'], unique=True)

    if 'question' not in existing_tables:
        op.create_table(
            'question',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('player_id', sa.Integer(), sa.ForeignKey('player.id'), nullable=False),
            sa.Column('question_text', sa.Text(), nullable=False),
            sa.Column('answer', sa.Text(), nullable=False),
            sa.Column('category', sa.String(length=128), nullable=True),
            sa.Column('points', sa.Integer(), nullable=True),
            sa.Column('selected_for_game', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('used_in_game', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )

    if 'game_state' not in existing_tables:
        op.create_table(
            'game_state',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('status', sa.String(length=16), nullable=False, server_default='waiting'),
            sa.Column('current_question_id', sa.Integer(),
                      sa.ForeignKey('question.id', ondelete='SET NULL'), nullable=True),
            sa.Column('current_category', sa.String(length=128), nullable=True),
            sa.Column('current_points', sa.Integer(), nullable=True),
            sa.Column('current_is_placeholder', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('current_clue_text', sa.Text(), nullable=True),
            sa.Column('current_answer_text', sa.Text(), nullable=True),
            sa.Column('turn_player_id', sa.Integer(),
                      sa.ForeignKey('player.id', ondelete='SET NULL'), nullable=True),
            sa.Column('buzzer_locked', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('last_buzz_player_id', sa.Integer(),
                      sa.ForeignKey('player.id', ondelete='SET NULL'), nullable=True),
            sa.Column('last_buzz_time', sa.Float(), nullable=True),
            sa.Column('question_reading', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.CheckConstraint('id = 1', name='ck_game_state_singleton'),
        )
        op.execute("INSERT INTO game_state (id) VALUES (1)")

    if 'buzz_queue' not in existing_tables:
        op.create_table(
            'buzz_queue',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('player_id', sa.Integer(), sa.ForeignKey('player.id'), nullable=False, unique=True),
            sa.Column('buzz_time', sa.Float(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_buzz_queue_buzz_time', 'buzz_queue', ['buzz_time'])

    if 'game_event' not in existing_tables:
        op.create_table(
            'game_event',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('type', sa.String(length=64), nullable=False),
            sa.Column('message', sa.Text(), nullable=False),
            sa.Column('data_json', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_game_event_created_at', 'game_event', ['created_at'])

    if 'game_history' not in existing_tables:
        op.create_table(
            'game_history',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_number', sa.Integer(), nullable=False),
            sa.Column('question_set_json', sa.Text(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_game_history_game_number', 'game_history', ['game_number'], unique=True)

    if 'question_usage' not in existing_tables:
        op.create_table(
            'question_usage',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('question_text', sa.Text(), nullable=False),
            sa.Column('answer', sa.Text(), nullable=False),
            sa.Column('category', sa.String(length=128), nullable=True),
            sa.Column('points', sa.Integer(), nullable=True),
            sa.Column('first_used_in_game', sa.Integer(), nullable=True),
            sa.Column('last_used_in_game', sa.Integer(), nullable=True),
            sa.Column('use_count', sa.Integer(), nullable=False, server_default='1'),
            sa.UniqueConstraint('question_text', 'answer', 'category', 'points', name='uq_question_usage'),
        )
        op.create_index('ix_question_usage_last_used_in_game', 'question_usage', ['last_used_in_game'])


def downgrade():
    op.drop_index('ix_question_usage_last_used_in_game', table_name='question_usage')
    op.drop_table('question_usage')
    op.drop_index('ix_game_history_game_number', table_name='game_history')
    op.drop_table('game_history')
    op.drop_index('ix_game_event_created_at', table_name='game_event')
    op.drop_table('game_event')
    op.drop_index('ix_buzz_queue_buzz_time', table_name='buzz_queue')
    op.drop_table('buzz_queue')
    op.drop_table('game_state')
    op.drop_table('question')
    op.drop_index('ix_player_slug', table_name='player')
    op.drop_table('player')
