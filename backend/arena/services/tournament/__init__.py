"""Tournament domain services: roster, round engine and countdown.

This package holds the round/tournament state machine. It knows nothing
about Flask or Socket.IO; the socket handlers feed it inbound events and
hand it a notifier to emit through.
"""

from .countdown import Countdown, BackgroundScheduler
from .engine import RoundEngine, RoundPhase, ROUND_DURATION_SEC
from .errors import TournamentError, IllegalOperation, TransitionError
from .roster import Roster, Player, TEAM_A, TEAM_B, TEAMS

__all__ = [
    'Countdown',
    'BackgroundScheduler',
    'RoundEngine',
    'RoundPhase',
    'ROUND_DURATION_SEC',
    'TournamentError',
    'IllegalOperation',
    'TransitionError',
    'Roster',
    'Player',
    'TEAM_A',
    'TEAM_B',
    'TEAMS',
]
