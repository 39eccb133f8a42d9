"""
Game session aggregate and its lifecycle state machine.

A ``GameSession`` is an immutable snapshot. Every transition returns a new
session built with ``dataclasses.replace``; the original is never touched.
"""

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from game.board import Board
from game.errors import (
    DuplicatePlayerError, InvalidTransitionError, NotInProgressError,
    PlayerNotFoundError, SessionFullError,
)
from game.player import Player
from game.wire import read_int, read_str


class SessionState(Enum):
    """Lifecycle states. Values are the wire names."""
    WAITING_PLAYERS = "ESPERANDO_JUGADORES"
    IN_PROGRESS = "EN_CURSO"
    PAUSED = "PAUSADO"
    FINISHED = "FINALIZADO"
    CANCELLED = "CANCELADO"


class Variant(Enum):
    """Rule sets. Values are the wire names."""
    GENERIC = "GENERICO"
    LINE3 = "TRES_EN_LINEA"
    CHESS = "AJEDREZ"
    CHECKERS = "DAMAS"

    @classmethod
    def parse(cls, value: str) -> 'Variant':
        """Accept either the wire value or the member name."""
        try:
            return cls(value)
        except ValueError:
            try:
                return cls[value.upper()]
            except KeyError:
                raise ValueError(f"Unknown variant: {value}") from None


# Allowed lifecycle transitions; terminal states have no entry.
TRANSITIONS: Dict[SessionState, Tuple[SessionState, ...]] = {
    SessionState.WAITING_PLAYERS: (SessionState.IN_PROGRESS, SessionState.CANCELLED),
    SessionState.IN_PROGRESS: (SessionState.PAUSED, SessionState.FINISHED, SessionState.CANCELLED),
    SessionState.PAUSED: (SessionState.IN_PROGRESS, SessionState.CANCELLED),
}

TERMINAL_STATES = (SessionState.FINISHED, SessionState.CANCELLED)


def _now_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class GameSession:
    """One shared game: board, roster in turn order, lifecycle state."""

    id: str
    board: Board
    players: Tuple[Player, ...] = ()
    state: SessionState = SessionState.WAITING_PLAYERS
    current_player: int = 0
    created_at: int = field(default_factory=_now_millis)
    max_players: int = 4
    round: int = 1
    variant: Variant = Variant.GENERIC

    def __post_init__(self):
        if not self.id or not self.id.strip():
            raise ValueError("Session id cannot be blank")
        if self.max_players <= 0:
            raise ValueError("max_players must be positive")
        if self.round <= 0:
            raise ValueError("round must be positive")
        if self.current_player < 0:
            raise ValueError("current_player must be >= 0")
        if len(self.players) > self.max_players:
            raise ValueError("Session holds more players than max_players")
        # Accept any iterable of players but always store a tuple
        if not isinstance(self.players, tuple):
            object.__setattr__(self, "players", tuple(self.players))

    # --- Derived views ---

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.max_players

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def connected_players(self) -> List[Player]:
        return [p for p in self.players if p.connected]

    @property
    def active_player_raw(self) -> Optional[Player]:
        """Player at the turn index regardless of state or connectivity."""
        if 0 <= self.current_player < len(self.players):
            return self.players[self.current_player]
        return None

    def find_player(self, player_id: int) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def require_player(self, player_id: int) -> Player:
        player = self.find_player(player_id)
        if player is None:
            raise PlayerNotFoundError(f"Player {player_id} is not in session {self.id}")
        return player

    def first_connected_index(self) -> int:
        for i, player in enumerate(self.players):
            if player.connected:
                return i
        return 0

    def next_connected_index(self) -> int:
        """Index of the next connected player after the current one, wrapping.

        Scans at most one full lap; with nobody connected the current index
        is kept.
        """
        count = len(self.players)
        if count == 0:
            return 0
        index = (self.current_player + 1) % count
        for _ in range(count):
            if self.players[index].connected:
                return index
            index = (index + 1) % count
        return self.current_player

    # --- Transitions ---

    def add_player(self, player: Player) -> 'GameSession':
        """Append a player to the roster (join order is turn order)."""
        if self.is_full:
            raise SessionFullError(f"Session {self.id} is full ({self.max_players} players)")
        if self.state != SessionState.WAITING_PLAYERS:
            raise InvalidTransitionError(
                f"Cannot add players while the session is {self.state.name}"
            )
        if self.find_player(player.id) is not None:
            raise DuplicatePlayerError(f"A player with id {player.id} already joined")
        return replace(self, players=self.players + (player,))

    def remove_player(self, player_id: int) -> 'GameSession':
        """Drop a player from the roster and re-clamp the turn index.

        Removing a player seated before the turn holder keeps the turn with
        the same player. While the game runs the turn then moves on if it
        landed on a disconnected player.
        """
        if self.find_player(player_id) is None:
            return self
        removed = next(i for i, p in enumerate(self.players) if p.id == player_id)
        players = tuple(p for p in self.players if p.id != player_id)
        current = self.current_player
        if removed < current:
            current -= 1
        if current >= len(players):
            current = 0
        updated = replace(self, players=players, current_player=current)
        return updated._skip_disconnected_holder()

    def set_player_connected(self, player_id: int, connected: bool) -> 'GameSession':
        player = self.require_player(player_id)
        if player.connected == connected:
            return self
        players = tuple(
            p.with_connection(connected) if p.id == player_id else p for p in self.players
        )
        return replace(self, players=players)._skip_disconnected_holder()

    def _skip_disconnected_holder(self) -> 'GameSession':
        # The turn never rests on a disconnected player while the game runs
        holder = self.active_player_raw
        if (self.state == SessionState.IN_PROGRESS
                and holder is not None and not holder.connected):
            return replace(self, current_player=self.next_connected_index())
        return self

    def change_state(self, new_state: SessionState) -> 'GameSession':
        allowed = TRANSITIONS.get(self.state)
        if allowed is None:
            raise InvalidTransitionError(f"Cannot change state from terminal state {self.state.name}")
        if new_state not in allowed:
            raise InvalidTransitionError(
                f"Invalid transition from {self.state.name} to {new_state.name}"
            )
        return replace(self, state=new_state)

    def start(self) -> 'GameSession':
        """WAITING_PLAYERS -> IN_PROGRESS, turn goes to the first connected player."""
        if not self.players:
            raise InvalidTransitionError("Cannot start a session without players")
        started = self.change_state(SessionState.IN_PROGRESS)
        return replace(started, current_player=self.first_connected_index())

    def next_round(self) -> 'GameSession':
        if self.state != SessionState.IN_PROGRESS:
            raise NotInProgressError("The session must be in progress to advance the round")
        return replace(self, round=self.round + 1, current_player=self.first_connected_index())

    def reset_board(self) -> 'GameSession':
        """Fresh empty board of the same size, round and turn reset."""
        return replace(self, board=Board(self.board.rows, self.board.cols),
                       round=1, current_player=0)

    def with_board(self, board: Board) -> 'GameSession':
        return replace(self, board=board)

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        """Serialize session to its wire form."""
        return {
            "id": self.id,
            "tablero": self.board.to_dict(),
            "jugadores": [p.to_dict() for p in self.players],
            "estado": self.state.value,
            "jugadorActual": self.current_player,
            "fechaCreacion": self.created_at,
            "maxJugadores": self.max_players,
            "rondaActual": self.round,
            "tipoJuego": self.variant.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameSession':
        """Deserialize session from its wire form."""
        return cls(
            id=read_str(data, "id"),
            board=Board.from_dict(data["tablero"]),
            players=tuple(Player.from_dict(p) for p in data.get("jugadores", [])),
            state=SessionState(data.get("estado", SessionState.WAITING_PLAYERS.value)),
            current_player=read_int(data, "jugadorActual", 0),
            created_at=read_int(data, "fechaCreacion", 0),
            max_players=read_int(data, "maxJugadores", 4),
            round=read_int(data, "rondaActual", 1),
            variant=Variant.parse(data.get("tipoJuego", Variant.GENERIC.value)),
        )
