import os

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from config import Config

cors = CORS()
socketio = SocketIO(async_mode=None)


def _origins(config):
    origins = config.get('CORS_ALLOWED_ORIGINS') or '*'
    if origins == ['*']:
        return '*'
    return origins


def create_app(config_class=Config):
    static_folder = getattr(config_class, 'STATIC_FOLDER', 'public')
    if not os.path.isabs(static_folder):
        static_folder = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), static_folder)
    flask_app = Flask(__name__, static_folder=static_folder, static_url_path='')
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _origins(flask_app.config)
    cors.init_app(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One engine per app; handlers reach it through app.extensions
    from arena.services.tournament import RoundEngine, BackgroundScheduler
    from arena.socketio_events import SocketIONotifier, register_socketio_handlers
    engine = RoundEngine(
        notifier=SocketIONotifier(socketio),
        scheduler=BackgroundScheduler(socketio, flask_app),
        duration=flask_app.config.get('ROUND_DURATION_SEC', 30),
        logger=flask_app.logger,
    )
    flask_app.extensions['arena'] = engine

    from arena.main import main
    flask_app.register_blueprint(main)

    register_socketio_handlers()

    return flask_app
