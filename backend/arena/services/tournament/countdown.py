import time
from typing import Callable


class Countdown:
    """A single round timer.

    The handle only knows whether it is still live. Whoever owns it decides
    what firing means; the callback receives the handle back so the owner
    can tell a stale timer from the current one.
    """

    def __init__(self, duration: int, callback: Callable[['Countdown'], None]):
        self.duration = duration
        self.deadline = time.time() + duration
        self.cancelled = False
        self.fired = False
        self._callback = callback

    @property
    def live(self) -> bool:
        return not (self.cancelled or self.fired)

    @property
    def remaining(self) -> float:
        return max(0.0, self.deadline - time.time())

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> bool:
        if not self.live:
            return False
        self.fired = True
        self._callback(self)
        return True


class BackgroundScheduler:
    """Runs countdowns as Socket.IO background tasks.

    - No-ops in TESTING mode (the handle is returned but never started),
      unless ENABLE_SCHEDULER_IN_TESTS is set
    - Sleeps with socketio.sleep so it cooperates with eventlet/gevent
    - Fires inside an app context so the callback can log through the app
    """

    def __init__(self, socketio, app=None):
        self.socketio = socketio
        self.app = app

    def _autostart(self) -> bool:
        if self.app is None:
            return True
        config = self.app.config
        return not config.get('TESTING') or bool(config.get('ENABLE_SCHEDULER_IN_TESTS'))

    def schedule(self, duration: int, callback) -> Countdown:
        countdown = Countdown(duration, callback)
        if self._autostart():
            self.socketio.start_background_task(self._run, countdown)
        return countdown

    def _run(self, countdown: Countdown) -> None:
        self.socketio.sleep(countdown.duration)
        if not countdown.live:
            return
        if self.app is not None:
            with self.app.app_context():
                countdown.fire()
        else:
            countdown.fire()
