import os
import sys
import pytest

# Ensure the backend root (containing the `buzzboard` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from buzzboard import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = ['http://localhost:5173']
    ANSWER_WINDOW_SEC = 30
    EVENT_LOG_LIMIT = 300
    DEFAULT_QUESTION_PACK = 'holiday2025'
    MAX_PHOTO_BYTES = 1024 * 1024


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import buzzboard.models  # noqa: F401
        db.create_all()
        from buzzboard.services.games import store
        store.ensure_state()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def file_app(tmp_path):
    """Same as flask_app but on a SQLite file, so each thread gets its own connection."""
    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'game.db'}"

    application = create_app(FileConfig)
    with application.app_context():
        import buzzboard.models  # noqa: F401
        db.create_all()
        from buzzboard.services.games import store
        store.ensure_state()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def make_player(client):
    def _make(name):
        res = client.post('/api/players', json={'name': name})
        assert res.status_code == 201
        return res.get_json()
    return _make


@pytest.fixture()
def live_clue(client, make_player):
    """An active game with a placeholder clue up and the buzzer open."""
    alice = make_player('Alice')
    bob = make_player('Bob')
    cara = make_player('Cara')
    assert client.post('/api/game/start').status_code == 200
    res = client.post('/api/game/select-card', json={'category': 'Disney & Pixar', 'points': 200})
    assert res.status_code == 200
    return {'alice': alice, 'bob': bob, 'cara': cara}
