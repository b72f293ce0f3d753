import os


def _csv(value):
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    DEBUG = os.environ.get('DEBUG', '0') == '1'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Listening address
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    # Round countdown (seconds)
    ROUND_DURATION_SEC = int(os.environ.get('ROUND_DURATION_SEC', '30'))
    # Client files served at the URL root
    STATIC_FOLDER = os.environ.get('STATIC_FOLDER', 'public')
    # '*' allows any origin
    CORS_ALLOWED_ORIGINS = _csv(os.environ.get('CORS_ALLOWED_ORIGINS', '*'))
