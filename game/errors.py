"""Error taxonomy for the game session core.

Every error carries a stable ``code`` that travels over the wire in
``Error`` events, so clients can branch on it without parsing messages.
"""


class GameError(Exception):
    """Base class for recoverable game errors."""

    code = "GAME_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class OutOfRangeError(GameError, IndexError):
    """Coordinates or row/column index outside the board."""

    code = "OUT_OF_RANGE"


class InvalidMoveError(GameError):
    """Move violates the occupancy/direction rules of the variant."""

    code = "INVALID_MOVE"


class NotPlayersTurnError(GameError):
    code = "NOT_PLAYERS_TURN"


class NotInProgressError(GameError):
    code = "NOT_IN_PROGRESS"


class SessionFullError(GameError):
    code = "SESSION_FULL"


class DuplicatePlayerError(GameError):
    code = "DUPLICATE_PLAYER"


class SessionNotFoundError(GameError):
    code = "SESSION_NOT_FOUND"


class PlayerNotFoundError(GameError):
    code = "PLAYER_NOT_FOUND"


class NoJoinableSessionError(GameError):
    code = "NO_JOINABLE_SESSION"


class InvalidTransitionError(GameError):
    """Illegal lifecycle change (including any change out of a terminal state)."""

    code = "INVALID_TRANSITION"


class DecodeError(GameError):
    """Malformed wire message."""

    code = "DECODE_ERROR"
