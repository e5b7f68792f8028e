import os


def _split_origins(value):
    return [origin.strip() for origin in value.split(',') if origin.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma-separated list; "*" allows any origin
    CORS_ALLOWED_ORIGINS = _split_origins(os.environ.get(
        'CORS_ALLOWED_ORIGINS',
        'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
    ))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Tournament roster ceiling
    TOURNAMENT_CAPACITY = int(os.environ.get('TOURNAMENT_CAPACITY', '10'))
    NICKNAME_MAX_LENGTH = int(os.environ.get('NICKNAME_MAX_LENGTH', '32'))
    # Optional JSON file overriding the built-in map pool
    CATALOG_PATH = os.environ.get('CATALOG_PATH') or None
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
