"""Player identity within a session."""
from dataclasses import dataclass, replace
from typing import Any, Dict

from game.wire import read_bool, read_int, read_str


# Color palette for rendering players in the console client
PLAYER_COLORS = ["green", "cyan", "yellow", "magenta", "red", "blue", "bright_green", "bright_cyan"]


@dataclass(frozen=True)
class Player:
    """
    A participant in a session.

    Players are values: changing the score or the connection flag returns a
    new ``Player``. Identity within a session is the numeric ``id``.
    """

    id: int
    name: str
    score: int = 0
    connected: bool = True

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Player name cannot be blank")
        if self.score < 0:
            raise ValueError("Player score cannot be negative")

    @property
    def color(self) -> str:
        return PLAYER_COLORS[self.id % len(PLAYER_COLORS)]

    def with_score(self, score: int) -> 'Player':
        if score < 0:
            raise ValueError("Player score cannot be negative")
        return replace(self, score=score)

    def with_connection(self, connected: bool) -> 'Player':
        return replace(self, connected=connected)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize player to its wire form."""
        return {
            "id": self.id,
            "nombre": self.name,
            "puntuacion": self.score,
            "conectado": self.connected,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Player':
        """Deserialize player from its wire form."""
        return cls(
            id=read_int(data, "id"),
            name=read_str(data, "nombre"),
            score=read_int(data, "puntuacion", 0),
            connected=read_bool(data, "conectado", True),
        )

    def __str__(self) -> str:
        return f"{self.name} (#{self.id}, {self.score} pts)"
