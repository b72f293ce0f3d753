class TournamentError(Exception):
    """Base class for rejected tournament operations."""
    pass


class IllegalOperation(TournamentError):
    """The connection has no live player to act on."""

    def __init__(self, connection_id: str, reason: str = None):
        self.connection_id = connection_id
        self.reason = reason or f"No live player for connection {connection_id}"
        super().__init__(self.reason)


class TransitionError(TournamentError):
    def __init__(self, from_phase: str, action: str, reason: str = None):
        self.from_phase = from_phase
        self.action = action
        self.reason = reason or f"No valid transition for action '{action}' from phase '{from_phase}'"
        super().__init__(self.reason)
