"""Round engine: the tournament state machine.

One engine owns one roster and one round state. Every inbound event is
turned into a call on the engine, and every change clients can see goes
out through the notifier (anything with ``emit(event, payload=None,
to=None)``; ``to=None`` means broadcast).

Phases and the actions that move between them live in ``TRANSITIONS``;
``_transition`` is the only place the phase changes.
"""

import logging
import threading
from enum import Enum
from typing import Optional

from .countdown import Countdown
from .errors import IllegalOperation, TransitionError
from .roster import Roster, TEAM_A, TEAM_B, TEAMS

ROUND_DURATION_SEC = 30

DRAW = 'DRAW'

RESULT_WIN = 'win'
RESULT_LOSE = 'lose'
RESULT_DRAW = 'draw'


class RoundPhase(str, Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    RESOLVED = 'resolved'
    TOURNAMENT_OVER = 'tournament_over'


TRANSITIONS = {
    (RoundPhase.IDLE, 'start'): RoundPhase.RUNNING,
    (RoundPhase.RUNNING, 'resolve'): RoundPhase.RESOLVED,
    (RoundPhase.RESOLVED, 'crown'): RoundPhase.TOURNAMENT_OVER,
    (RoundPhase.RESOLVED, 'advance'): RoundPhase.IDLE,
    (RoundPhase.IDLE, 'abort'): RoundPhase.IDLE,
    (RoundPhase.RUNNING, 'abort'): RoundPhase.IDLE,
    (RoundPhase.RESOLVED, 'abort'): RoundPhase.IDLE,
}

# reset is legal from every phase
for _phase in RoundPhase:
    TRANSITIONS[(_phase, 'reset')] = RoundPhase.IDLE


def decide_winner(score_a: int, score_b: int) -> str:
    if score_a > score_b:
        return TEAM_A
    if score_b > score_a:
        return TEAM_B
    return DRAW


class RoundEngine:
    def __init__(self, notifier, scheduler, duration: int = ROUND_DURATION_SEC,
                 roster: Roster = None, logger: logging.Logger = None):
        self.notifier = notifier
        self.scheduler = scheduler
        self.duration = int(duration)
        self.roster = roster if roster is not None else Roster()
        self.logger = logger or logging.getLogger(__name__)

        self.round = 1
        self.team_a_score = 0
        self.team_b_score = 0
        self.phase = RoundPhase.IDLE
        self.countdown: Optional[Countdown] = None
        self._lock = threading.RLock()

    # ---- derived flags ----

    @property
    def started(self) -> bool:
        return self.phase == RoundPhase.RUNNING

    @property
    def is_game_over(self) -> bool:
        return self.phase == RoundPhase.TOURNAMENT_OVER

    def can(self, action: str) -> bool:
        return (self.phase, action) in TRANSITIONS

    def _transition(self, action: str) -> RoundPhase:
        next_phase = TRANSITIONS.get((self.phase, action))
        if next_phase is None:
            raise TransitionError(self.phase.value, action)
        self.logger.info(f"[phase] {self.phase.value} --{action}--> {next_phase.value} round={self.round}")
        self.phase = next_phase
        return next_phase

    # ---- outbound helpers ----

    def _emit(self, event: str, payload=None, to: str = None) -> None:
        self.notifier.emit(event, payload, to=to)

    def score_payload(self):
        return {'a': self.team_a_score, 'b': self.team_b_score}

    def player_list_payload(self):
        team_a, team_b, total = self.roster.stats_snapshot()
        return {'A': team_a, 'B': team_b, 'totalSurvivors': total, 'round': self.round}

    def _broadcast_players(self) -> None:
        self._emit('updatePlayerList', self.player_list_payload())

    def _broadcast_score(self) -> None:
        self._emit('updateScore', self.score_payload())

    def _warn(self, message: str, to: str = None) -> None:
        self._emit('showWarning', message, to=to)

    def _cancel_countdown(self) -> None:
        if self.countdown is not None:
            self.countdown.cancel()
            self.countdown = None

    def snapshot(self):
        with self._lock:
            team_a, team_b, total = self.roster.stats_snapshot()
            return {
                'round': self.round,
                'phase': self.phase.value,
                'started': self.started,
                'is_game_over': self.is_game_over,
                'score': self.score_payload(),
                'teams': {TEAM_A: team_a, TEAM_B: team_b},
                'total_survivors': total,
                'player_count': len(self.roster),
                'duration': self.duration,
                'countdown_remaining': self.countdown.remaining if self.countdown else None,
                'players': [player.to_dict() for player in self.roster.players()],
            }

    # ---- connection lifecycle ----

    def welcome(self, connection_id: str) -> None:
        """Send the current state to a freshly connected client."""
        with self._lock:
            self._emit('updateScore', self.score_payload(), to=connection_id)
            self._emit('gameStatus', self.started, to=connection_id)
            self._emit('updatePlayerList', self.player_list_payload(), to=connection_id)

    def login(self, connection_id: str, name) -> bool:
        with self._lock:
            player = self.roster.register(connection_id, name)
            if player is None:
                self.logger.info(f"[login-ignored] sid={connection_id} unusable name")
                return False
            self.logger.info(f"[login] sid={connection_id} name={player.name} alive={player.alive}")
            self._emit('loginSuccess', {'name': player.name, 'round': self.round}, to=connection_id)
            self._broadcast_players()
            return True

    def disconnect(self, connection_id: str) -> None:
        with self._lock:
            player = self.roster.remove(connection_id)
            if player is None:
                return
            self.logger.info(f"[disconnect] sid={connection_id} name={player.name}")
            self._broadcast_players()

    def join_team(self, connection_id: str, team) -> bool:
        with self._lock:
            try:
                player = self.roster.assign_team(connection_id, team)
            except IllegalOperation as exc:
                self.logger.info(f"[join-rejected] {exc}")
                self._emit('forceEliminate', to=connection_id)
                return False
            except ValueError as exc:
                self.logger.info(f"[join-rejected] sid={connection_id} {exc}")
                self._warn('Please choose team A or team B.', to=connection_id)
                return False
            self._emit('waitingForStart', player.team, to=connection_id)
            self._broadcast_players()
            return True

    # ---- round lifecycle ----

    def start(self, requested_by: str = None) -> bool:
        with self._lock:
            if not self.can('start'):
                self.logger.info(f"[start-ignored] phase={self.phase.value} round={self.round}")
                return False

            count_a, count_b = self.roster.team_counts()
            if count_a + count_b > 1 and (count_a == 0 or count_b == 0):
                self.logger.info(f"[start-rejected] unbalanced teams A={count_a} B={count_b}")
                self._emit('teamUnbalanced', {TEAM_A: count_a, TEAM_B: count_b})
                if requested_by:
                    self._warn('Both teams need at least one player before the round can start.', to=requested_by)
                return False

            self._transition('start')
            self.team_a_score = 0
            self.team_b_score = 0
            self._cancel_countdown()
            self.countdown = self.scheduler.schedule(self.duration, self._countdown_elapsed)
            self.logger.info(f"[timer-set] round={self.round} duration={self.duration}s deadline={self.countdown.deadline}")

            self._broadcast_score()
            self._emit('gameStart', self.duration)
            self._emit('gameStatus', True)
            return True

    def score(self, connection_id: str, team) -> bool:
        """Count one tap. Late, foreign or teamless taps are dropped without a reply."""
        with self._lock:
            if not self.started or team not in TEAMS:
                return False
            player = self.roster.get(connection_id)
            if player is None or not player.alive or player.team is None:
                return False
            if team == TEAM_A:
                self.team_a_score += 1
            else:
                self.team_b_score += 1
            self._broadcast_score()
            return True

    def _countdown_elapsed(self, countdown: Countdown) -> None:
        with self._lock:
            if countdown is not self.countdown or countdown.cancelled:
                self.logger.info(f"[timer-abort] stale countdown ignored round={self.round}")
                return
            self.logger.info(f"[timer-fire] round={self.round}")
            self.resolve()

    def resolve(self) -> Optional[str]:
        """End the running round, eliminate the losers, maybe crown a champion.

        Returns the winner label ('A', 'B' or 'DRAW'), or None when no round
        was running.
        """
        with self._lock:
            try:
                self._transition('resolve')
            except TransitionError as exc:
                self.logger.info(f"[resolve-ignored] {exc}")
                return None
            self._cancel_countdown()
            self._emit('gameStatus', False)

            winner = decide_winner(self.team_a_score, self.team_b_score)
            if winner == DRAW:
                self._emit('roundResult', {'result': RESULT_DRAW})
            else:
                for connection_id, player in self.roster.alive_players():
                    if player.team == winner:
                        self._emit('roundResult', {'result': RESULT_WIN}, to=connection_id)
                    else:
                        self.roster.mark_eliminated(connection_id)
                        self._emit('roundResult', {'result': RESULT_LOSE}, to=connection_id)

            survivors = [player.name for _, player in self.roster.alive_players()]
            champion = len(survivors) == 1
            self.logger.info(
                f"[round-resolve] round={self.round} winner={winner} score={self.team_a_score}:{self.team_b_score} survivors={len(survivors)}"
            )
            if champion:
                self._transition('crown')
                self.logger.info(f"[champion] {survivors[0]}")

            self._emit('roundOver', {
                'winnerTeam': winner,
                'scoreA': self.team_a_score,
                'scoreB': self.team_b_score,
                'winnerNames': survivors,
                'survivorCount': len(survivors),
                'isUltimateWinner': champion,
            })
            self._broadcast_players()
            return winner

    def advance_round(self, requested_by: str = None) -> bool:
        with self._lock:
            if self.is_game_over:
                self.logger.info(f"[advance-ignored] tournament over at round={self.round}")
                if requested_by:
                    self._warn('The tournament is over. Reset it to play again.', to=requested_by)
                return False
            try:
                self._transition('advance')
            except TransitionError as exc:
                self.logger.info(f"[advance-ignored] {exc}")
                return False

            self.round += 1
            self.team_a_score = 0
            self.team_b_score = 0
            self.roster.reset_teams()
            for connection_id, _ in self.roster.alive_players():
                self._emit('reSelectTeam', to=connection_id)
            self._emit('resetScreenForNextRound', self.round)
            self._broadcast_score()
            self._broadcast_players()
            return True

    def continue_next_round(self, connection_id: str, choice) -> bool:
        with self._lock:
            player = self.roster.get(connection_id)
            if player is None:
                return False
            if choice:
                if not player.alive:
                    return False
                self.roster.clear_team(connection_id)
                self._emit('reSelectTeam', to=connection_id)
                self._broadcast_players()
                return True
            return self._forfeit(connection_id)

    def _forfeit(self, connection_id: str) -> bool:
        was_alive = self.roster.mark_eliminated(connection_id)
        if not was_alive:
            return False
        self.logger.info(f"[forfeit] sid={connection_id}")
        self._emit('forceEliminate', to=connection_id)
        self._broadcast_players()
        if self.roster.alive_count() == 0 and not self.is_game_over:
            self.logger.info(f"[all-forfeit] round={self.round}")
            self._emit('allForfeit')
        return True

    def abort_round(self) -> bool:
        """Stop the current round and zero the scores, keeping the roster."""
        with self._lock:
            try:
                self._transition('abort')
            except TransitionError as exc:
                self.logger.info(f"[abort-ignored] {exc}")
                return False
            self._cancel_countdown()
            self.team_a_score = 0
            self.team_b_score = 0
            self._broadcast_score()
            self._emit('resetGame')
            self._emit('gameStatus', False)
            return True

    def reset_all(self) -> None:
        with self._lock:
            self._transition('reset')
            self._cancel_countdown()
            self.roster.reset_all()
            self.round = 1
            self.team_a_score = 0
            self.team_b_score = 0
            self.logger.info('[reset-all] tournament cleared')
            self._emit('reload')

    # ---- admin entry point ----

    def admin_action(self, action, requested_by: str = None) -> bool:
        self.logger.info(f"[admin] action={action!r} sid={requested_by}")
        if action == 'start':
            return self.start(requested_by=requested_by)
        if action == 'nextRound':
            return self.advance_round(requested_by=requested_by)
        if action == 'resetAll':
            self.reset_all()
            return True
        if action == 'reset':
            return self.abort_round()
        self.logger.warning(f"[admin] unknown action {action!r}")
        return False
