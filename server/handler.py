"""
Command processing boundary.

Turns one decoded ``Command`` into one ``Event``. This is the only place
where ``GameError`` exceptions are converted into wire ``Error`` events;
nothing raised while processing a single request escapes ``handle``.
"""

import logging
from typing import Callable, Dict, Optional, Tuple

from game.config_loader import get_config
from game.engine import GameEngine
from game.errors import DecodeError, GameError, OutOfRangeError, SessionNotFoundError
from game.events import SessionEventType
from game.move import NO_ORIGIN, Move
from game.session import GameSession, SessionState
from server.protocol import (
    Command, CreateSession, Error, Event, GetSession, JoinAnySession, JoinSession,
    MakeMove, SessionUpdated, decode_command, encode,
)
from server.registry import SessionRegistry


logger = logging.getLogger(__name__)

INTERNAL_ERROR = "INTERNAL_ERROR"


class CommandHandler:
    """Dispatch commands to the registry and engine."""

    def __init__(self, registry: SessionRegistry, engine: Optional[GameEngine] = None,
                 start_when_full: Optional[bool] = None,
                 remove_abandoned: Optional[bool] = None):
        self.registry = registry
        self.engine = engine or GameEngine()
        settings = get_config()
        if start_when_full is None:
            start_when_full = bool(settings.get("session", "start_when_full", default=True))
        if remove_abandoned is None:
            remove_abandoned = bool(settings.get("session", "remove_abandoned", default=True))
        self.start_when_full = start_when_full
        self.remove_abandoned = remove_abandoned

        self._handlers: Dict[type, Callable[[Command], GameSession]] = {
            CreateSession: self._create,
            JoinSession: self._join,
            JoinAnySession: self._join_any,
            MakeMove: self._make_move,
            GetSession: self._get,
        }

    def handle(self, command: Command) -> Event:
        """Process one command; always returns an event."""
        handler = self._handlers.get(type(command))
        if handler is None:
            return Error(f"Unsupported command: {type(command).__name__}", DecodeError.code)
        try:
            session = handler(command)
        except GameError as e:
            logger.info("%s rejected: %s (%s)", command.TYPE.value, e.message, e.code)
            return Error(e.message, e.code)
        except Exception:
            logger.exception("Unexpected error while handling %s", command.TYPE.value)
            return Error("Internal error", INTERNAL_ERROR)
        return SessionUpdated(session)

    def process_line(self, line: str) -> Tuple[Optional[Command], Event]:
        """Decode and process one protocol line.

        Returns the decoded command (None when the line was malformed) and
        the event to send back.
        """
        try:
            command = decode_command(line)
        except DecodeError as e:
            logger.warning("Could not decode line: %s", e.message)
            return None, Error(e.message, e.code)
        logger.debug("Received %s", command)
        return command, self.handle(command)

    def handle_line(self, line: str) -> str:
        """Decode, process and encode a single protocol line."""
        return encode(self.process_line(line)[1])

    # --- Commands ---

    def _create(self, command: CreateSession) -> GameSession:
        session = self.registry.create(command.player, variant=command.variant)
        self.engine.notify(SessionEventType.PLAYER_JOINED, session, command.player)
        return session

    def _join(self, command: JoinSession) -> GameSession:
        session = self.registry.join(command.session_id, command.player,
                                     start_when_full=self.start_when_full)
        self._after_join(session, command)
        return session

    def _join_any(self, command: JoinAnySession) -> GameSession:
        session = self.registry.join_any(command.player, start_when_full=self.start_when_full)
        self._after_join(session, command)
        return session

    def _after_join(self, session: GameSession, command) -> None:
        self.engine.notify(SessionEventType.PLAYER_JOINED, session, command.player)
        if session.state == SessionState.IN_PROGRESS:
            # The join filled the session and started it
            self.engine.notify(SessionEventType.STATE_CHANGED, session,
                               previous=SessionState.WAITING_PLAYERS.name,
                               current=session.state.name)
            self.engine.notify(SessionEventType.TURN_CHANGED, session,
                               self.engine.active_player(session), previous=None)

    def _make_move(self, command: MakeMove) -> GameSession:
        move = self._build_move(command)

        def _apply(session: GameSession) -> GameSession:
            player = session.require_player(command.player_id)
            return self.engine.apply_move(session, player, move)

        return self.registry.mutate(command.session_id, _apply)

    def _get(self, command: GetSession) -> GameSession:
        return self.registry.require(command.session_id)

    @staticmethod
    def _build_move(command: MakeMove) -> Move:
        if command.row < 0 or command.col < 0:
            raise OutOfRangeError(f"Destination ({command.row}, {command.col}) is outside the board")
        if command.origin_row < NO_ORIGIN or command.origin_col < NO_ORIGIN:
            raise OutOfRangeError(
                f"Origin ({command.origin_row}, {command.origin_col}) is outside the board"
            )
        return Move(command.origin_row, command.origin_col, command.row, command.col,
                    command.content)

    # --- Connection lifecycle ---

    def disconnect(self, session_id: str, player_id: int) -> Optional[GameSession]:
        """Mark a player disconnected; returns None if the session or player is gone.

        With ``remove_abandoned`` set, a session left without any connected
        player is dropped from the registry.
        """
        try:
            updated = self.registry.mutate(
                session_id,
                lambda session: self.engine.set_player_connected(session, player_id, False),
            )
        except GameError as e:
            logger.debug("Disconnect of player %s from %s ignored: %s", player_id, session_id, e.message)
            return None
        if self.remove_abandoned:
            try:
                self.registry.remove_if(session_id, lambda session: not session.connected_players)
            except SessionNotFoundError:
                # Already removed by another connection closing
                pass
        return updated
