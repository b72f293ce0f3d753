from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .errors import IllegalOperation

TEAM_A = 'A'
TEAM_B = 'B'
TEAMS = (TEAM_A, TEAM_B)

MAX_NAME_LENGTH = 24


@dataclass
class Player:
    name: str
    team: Optional[str] = None
    alive: bool = True

    def to_dict(self):
        return {
            'name': self.name,
            'team': self.team,
            'alive': self.alive,
        }


def normalize_name(value) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value:
        return None
    return value[:MAX_NAME_LENGTH]


class Roster:
    """Connected players keyed by connection id.

    The roster is the only owner of Player objects. Everything else reads
    aggregate views (team counts, name lists) and asks the roster to mutate.
    """

    def __init__(self):
        self._players: Dict[str, Player] = {}

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, connection_id) -> bool:
        return connection_id in self._players

    def get(self, connection_id: str) -> Optional[Player]:
        return self._players.get(connection_id)

    def register(self, connection_id: str, name) -> Optional[Player]:
        """Add a player for this connection.

        Returns None when the name is unusable. A connection that already
        has a player keeps it as-is, so a repeated login cannot revive an
        eliminated player.
        """
        name = normalize_name(name)
        if not name:
            return None
        existing = self._players.get(connection_id)
        if existing is not None:
            return existing
        player = Player(name=name)
        self._players[connection_id] = player
        return player

    def _live_player(self, connection_id: str) -> Player:
        player = self._players.get(connection_id)
        if player is None:
            raise IllegalOperation(connection_id)
        if not player.alive:
            raise IllegalOperation(connection_id, f"Player {player.name} is eliminated")
        return player

    def assign_team(self, connection_id: str, team: str) -> Player:
        player = self._live_player(connection_id)
        if team not in TEAMS:
            raise ValueError(f"Unknown team {team!r}")
        player.team = team
        return player

    def clear_team(self, connection_id: str) -> Player:
        player = self._live_player(connection_id)
        player.team = None
        return player

    def mark_eliminated(self, connection_id: str) -> bool:
        """Eliminate the player; returns True if they were alive before."""
        player = self._players.get(connection_id)
        if player is None or not player.alive:
            return False
        player.alive = False
        return True

    def remove(self, connection_id: str) -> Optional[Player]:
        return self._players.pop(connection_id, None)

    def players(self) -> List[Player]:
        return list(self._players.values())

    def alive_players(self) -> List[Tuple[str, Player]]:
        return [(cid, p) for cid, p in self._players.items() if p.alive]

    def alive_count(self) -> int:
        return sum(1 for p in self._players.values() if p.alive)

    def team_counts(self) -> Tuple[int, int]:
        count_a = count_b = 0
        for player in self._players.values():
            if not player.alive:
                continue
            if player.team == TEAM_A:
                count_a += 1
            elif player.team == TEAM_B:
                count_b += 1
        return count_a, count_b

    def stats_snapshot(self) -> Tuple[List[str], List[str], int]:
        """Names on team A, names on team B, and the alive total."""
        team_a, team_b = [], []
        total = 0
        for player in self._players.values():
            if not player.alive:
                continue
            total += 1
            if player.team == TEAM_A:
                team_a.append(player.name)
            elif player.team == TEAM_B:
                team_b.append(player.name)
        return team_a, team_b, total

    def reset_teams(self) -> None:
        for player in self._players.values():
            if player.alive:
                player.team = None

    def reset_all(self) -> None:
        self._players.clear()
