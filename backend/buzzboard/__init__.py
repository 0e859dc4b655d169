from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
from werkzeug.exceptions import HTTPException
import click
import os
from buzzboard.config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'migrations')


def _ensure_sqlite_dir(uri):
    prefix = 'sqlite:///'
    if uri and uri.startswith(prefix) and ':memory:' not in uri:
        path = uri[len(prefix):]
        if path:
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'

    _ensure_sqlite_dir(flask_app.config.get('SQLALCHEMY_DATABASE_URI'))
    db.init_app(flask_app)
    migrate.init_app(flask_app, db, directory=MIGRATIONS_DIR)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from buzzboard.main import main
    flask_app.register_blueprint(main)

    from buzzboard.api.players import players_bp
    from buzzboard.api.questions import questions_bp
    from buzzboard.api.game import game_bp
    from buzzboard.api.admin import admin_bp
    flask_app.register_blueprint(players_bp, url_prefix='/api/players')
    flask_app.register_blueprint(questions_bp, url_prefix='/api/questions')
    flask_app.register_blueprint(game_bp, url_prefix='/api/game')
    flask_app.register_blueprint(admin_bp, url_prefix='/api/admin')

    from buzzboard.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from buzzboard.errors import GameError

    @flask_app.errorhandler(GameError)
    def handle_game_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    @flask_app.errorhandler(404)
    def handle_not_found(exc):
        return jsonify({'error': 'Not found', 'code': 'not_found'}), 404

    @flask_app.errorhandler(Exception)
    def handle_unexpected(exc):
        if isinstance(exc, HTTPException):
            return jsonify({'error': exc.description, 'code': 'http'}), exc.code
        flask_app.logger.exception(f"[error] unhandled: {exc}")
        return jsonify({'error': 'Internal server error', 'code': 'internal'}), 500

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from buzzboard.services.catalog import packs
        from buzzboard.services.games import store
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            store.ensure_state()
            result = packs.seed_defaults(select_for_game=True)
            print(f"Database has been reset and seeded ({result['inserted']} questions)!")

    flask_app.cli.add_command(db_reset_command)

    return flask_app
