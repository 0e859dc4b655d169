import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(os.path.dirname(BASE_DIR), 'data', 'game.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Comma separated list of origins allowed to call the API and connect to /ws
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
    ).split(',') if o.strip()]
    # Answer countdown shown by clients once someone holds the buzzer (seconds)
    ANSWER_WINDOW_SEC = int(os.environ.get('ANSWER_WINDOW_SEC', '30'))
    # Number of rows kept in the event log
    EVENT_LOG_LIMIT = int(os.environ.get('EVENT_LOG_LIMIT', '300'))
    # Pack used for seeding and for empty-tile fallbacks
    DEFAULT_QUESTION_PACK = os.environ.get('DEFAULT_QUESTION_PACK', 'holiday2025')
    # Player photos are stored inline as data URLs
    MAX_PHOTO_BYTES = int(os.environ.get('MAX_PHOTO_BYTES', str(5 * 1024 * 1024)))
