"""Line-delimited JSON protocol between clients and the session server."""
from enum import Enum
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
import json

from game.errors import DecodeError
from game.move import NO_ORIGIN
from game.player import Player
from game.session import GameSession, Variant
from game.wire import read_int, read_optional_str, read_str


TYPE_FIELD = "tipo"


class CommandType(Enum):
    """Message types sent from client to server."""
    CREATE_SESSION = "CrearPartida"
    JOIN_SESSION = "UnirseAPartida"
    JOIN_ANY_SESSION = "UnirseAPartidaAuto"
    MAKE_MOVE = "RealizarMovimiento"
    GET_SESSION = "ConsultarPartida"


class EventType(Enum):
    """Message types sent from server to client."""
    SESSION_UPDATED = "PartidaActualizada"
    ERROR = "Error"


# Client -> Server

@dataclass(frozen=True)
class CreateSession:
    player: Player
    variant: Optional[Variant] = None

    TYPE = CommandType.CREATE_SESSION

    def to_dict(self) -> Dict[str, Any]:
        data = {TYPE_FIELD: self.TYPE.value, "jugador": self.player.to_dict()}
        if self.variant is not None:
            data["tipoJuego"] = self.variant.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CreateSession':
        variant = read_optional_str(data, "tipoJuego")
        return cls(
            player=Player.from_dict(data["jugador"]),
            variant=Variant.parse(variant) if variant else None,
        )


@dataclass(frozen=True)
class JoinSession:
    session_id: str
    player: Player

    TYPE = CommandType.JOIN_SESSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            TYPE_FIELD: self.TYPE.value,
            "idPartida": self.session_id,
            "jugador": self.player.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'JoinSession':
        return cls(
            session_id=read_str(data, "idPartida"),
            player=Player.from_dict(data["jugador"]),
        )


@dataclass(frozen=True)
class JoinAnySession:
    player: Player

    TYPE = CommandType.JOIN_ANY_SESSION

    def to_dict(self) -> Dict[str, Any]:
        return {TYPE_FIELD: self.TYPE.value, "jugador": self.player.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'JoinAnySession':
        return cls(player=Player.from_dict(data["jugador"]))


@dataclass(frozen=True)
class MakeMove:
    """Placement at (row, col), or a translocation when an origin is given."""
    session_id: str
    player_id: int
    row: int
    col: int
    content: Optional[str] = None
    origin_row: int = NO_ORIGIN
    origin_col: int = NO_ORIGIN

    TYPE = CommandType.MAKE_MOVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            TYPE_FIELD: self.TYPE.value,
            "idPartida": self.session_id,
            "jugadorId": self.player_id,
            "fila": self.row,
            "columna": self.col,
            "contenido": self.content,
            "filaOrigen": self.origin_row,
            "columnaOrigen": self.origin_col,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MakeMove':
        return cls(
            session_id=read_str(data, "idPartida"),
            player_id=read_int(data, "jugadorId"),
            row=read_int(data, "fila"),
            col=read_int(data, "columna"),
            content=read_optional_str(data, "contenido"),
            origin_row=read_int(data, "filaOrigen", NO_ORIGIN),
            origin_col=read_int(data, "columnaOrigen", NO_ORIGIN),
        )


@dataclass(frozen=True)
class GetSession:
    session_id: str

    TYPE = CommandType.GET_SESSION

    def to_dict(self) -> Dict[str, Any]:
        return {TYPE_FIELD: self.TYPE.value, "idPartida": self.session_id}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GetSession':
        return cls(session_id=read_str(data, "idPartida"))


# Server -> Client

@dataclass(frozen=True)
class SessionUpdated:
    session: GameSession

    TYPE = EventType.SESSION_UPDATED

    def to_dict(self) -> Dict[str, Any]:
        return {TYPE_FIELD: self.TYPE.value, "juego": self.session.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionUpdated':
        return cls(session=GameSession.from_dict(data["juego"]))


@dataclass(frozen=True)
class Error:
    message: str
    code: Optional[str] = None

    TYPE = EventType.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {TYPE_FIELD: self.TYPE.value, "mensaje": self.message, "codigo": self.code}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Error':
        return cls(message=str(data.get("mensaje", "")), code=data.get("codigo"))


Command = Union[CreateSession, JoinSession, JoinAnySession, MakeMove, GetSession]
Event = Union[SessionUpdated, Error]
Message = Union[Command, Event]

COMMANDS = {cls.TYPE.value: cls for cls in (CreateSession, JoinSession, JoinAnySession,
                                            MakeMove, GetSession)}
EVENTS = {cls.TYPE.value: cls for cls in (SessionUpdated, Error)}


def encode(message: Message) -> str:
    """Serialize a message to a single JSON line (no trailing newline)."""
    return json.dumps(message.to_dict(), ensure_ascii=False, separators=(",", ":"))


def _decode(line: str, registry: Dict[str, Any], kind: str):
    try:
        obj = json.loads(line)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Malformed JSON: {e}") from e
    if not isinstance(obj, dict):
        raise DecodeError(f"Expected a JSON object, got {type(obj).__name__}")

    tag = obj.get(TYPE_FIELD)
    cls = registry.get(tag)
    if cls is None:
        raise DecodeError(f"Unknown {kind} type: {tag!r}")
    try:
        return cls.from_dict(obj)
    except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
        raise DecodeError(f"Invalid {tag} message: {e}") from e


def decode_command(line: str) -> Command:
    """Parse one client line. Raises DecodeError on anything malformed."""
    return _decode(line, COMMANDS, "command")


def decode_event(line: str) -> Event:
    """Parse one server line. Raises DecodeError on anything malformed."""
    return _decode(line, EVENTS, "event")
