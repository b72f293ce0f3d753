import os
import sys
import pytest

# Ensure the backend root (containing the `arena` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from arena import create_app, socketio
from arena.services.tournament import Countdown, RoundEngine


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    ROUND_DURATION_SEC = 30
    STATIC_FOLDER = 'public'
    CORS_ALLOWED_ORIGINS = ['*']
    LOG_LEVEL = 'DEBUG'


class RecordingNotifier:
    def __init__(self):
        self.events = []

    def emit(self, event, payload=None, to=None):
        self.events.append((event, payload, to))

    def named(self, event):
        return [(payload, to) for name, payload, to in self.events if name == event]

    def clear(self):
        self.events = []


class ManualScheduler:
    """Hands out countdowns that only fire when a test says so."""

    def __init__(self):
        self.scheduled = []

    def schedule(self, duration, callback):
        countdown = Countdown(duration, callback)
        self.scheduled.append(countdown)
        return countdown

    def live(self):
        return [c for c in self.scheduled if c.live]


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def engine(notifier, scheduler):
    return RoundEngine(notifier=notifier, scheduler=scheduler, duration=30)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
    yield test_client
    try:
        test_client.disconnect()
    except Exception:
        pass


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        c = socketio.test_client(flask_app)
        clients.append(c)
        return c

    yield _make
    for c in clients:
        try:
            c.disconnect()
        except Exception:
            pass
