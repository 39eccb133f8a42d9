"""
Concurrent session registry.

Maps session id -> ``GameSession`` for the whole process. A map lock
protects the dictionary itself and one lock per session id serializes
read-modify-write cycles on that session, so two different sessions can be
mutated fully in parallel. The registry never runs engine logic: callers
read, call the engine, and write back (``mutate`` does all three under the
session's lock).
"""

import logging
import threading
import uuid
from typing import Callable, Dict, List, Optional

from game.config_loader import ConfigLoader, get_config
from game.errors import (
    InvalidTransitionError, NoJoinableSessionError, SessionFullError, SessionNotFoundError,
)
from game.player import Player
from game.rules import initial_board
from game.session import GameSession, SessionState, Variant


logger = logging.getLogger(__name__)

SESSION_ID_PREFIX = "PARTIDA-"

SessionMutation = Callable[[GameSession], GameSession]


def generate_session_id() -> str:
    """``PARTIDA-`` followed by 8 characters from [A-Z0-9]."""
    return SESSION_ID_PREFIX + uuid.uuid4().hex[:8].upper()


class SessionRegistry:
    """In-memory store of live sessions, safe for many worker threads."""

    def __init__(self, settings: Optional[ConfigLoader] = None):
        self.settings = settings or get_config()
        self._sessions: Dict[str, GameSession] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._map_lock = threading.Lock()

    # --- Lifecycle ---

    def close(self):
        """Drop every session. The registry stays usable but empty."""
        with self._map_lock:
            count = len(self._sessions)
            self._sessions.clear()
            self._locks.clear()
        logger.info("Session registry closed (%d sessions dropped)", count)

    def __enter__(self) -> 'SessionRegistry':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __len__(self) -> int:
        with self._map_lock:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        with self._map_lock:
            return session_id in self._sessions

    # --- Internals ---

    def _lock_for(self, session_id: str) -> threading.Lock:
        with self._map_lock:
            if session_id not in self._sessions:
                raise SessionNotFoundError(f"Session not found: {session_id}")
            return self._locks[session_id]

    def _default_variant(self) -> Variant:
        return Variant.parse(self.settings.get("session", "default_variant",
                                               default=Variant.LINE3.value))

    # --- Operations ---

    def create(self, player: Player, variant: Optional[Variant] = None,
               rows: Optional[int] = None, cols: Optional[int] = None,
               max_players: Optional[int] = None) -> GameSession:
        """Build a WAITING_PLAYERS session with ``player`` already joined."""
        variant = variant or self._default_variant()
        default_rows, default_cols = self.settings.get_board_size(variant.value)
        board = initial_board(variant, rows or default_rows, cols or default_cols)
        max_players = max_players or int(self.settings.get("session", "max_players", default=2))

        with self._map_lock:
            session_id = generate_session_id()
            while session_id in self._sessions:
                session_id = generate_session_id()
            session = GameSession(
                id=session_id,
                board=board,
                max_players=max_players,
                variant=variant,
            ).add_player(player)
            self._sessions[session_id] = session
            self._locks[session_id] = threading.Lock()

        logger.info("Session %s created by %s (%s, %dx%d)",
                    session_id, player.name, variant.name, board.rows, board.cols)
        return session

    def get(self, session_id: str) -> Optional[GameSession]:
        with self._map_lock:
            return self._sessions.get(session_id)

    def require(self, session_id: str) -> GameSession:
        session = self.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return session

    def list_sessions(self) -> List[GameSession]:
        with self._map_lock:
            return list(self._sessions.values())

    def update(self, session: GameSession) -> GameSession:
        """Overwrite the stored session with the same id."""
        lock = self._lock_for(session.id)
        with lock:
            with self._map_lock:
                if session.id not in self._sessions:
                    raise SessionNotFoundError(f"Session not found: {session.id}")
                self._sessions[session.id] = session
        return session

    def remove(self, session_id: str) -> Optional[GameSession]:
        with self._map_lock:
            self._locks.pop(session_id, None)
            removed = self._sessions.pop(session_id, None)
        if removed is not None:
            logger.info("Session %s removed", session_id)
        return removed

    def remove_if(self, session_id: str,
                  predicate: Callable[[GameSession], bool]) -> Optional[GameSession]:
        """Remove a session only if ``predicate`` holds, under its lock.

        Returns the removed session, or None when it was kept.
        """
        lock = self._lock_for(session_id)
        with lock:
            session = self.require(session_id)
            if not predicate(session):
                return None
            return self.remove(session_id)

    def mutate(self, session_id: str, fn: SessionMutation) -> GameSession:
        """
        Atomically replace a session with ``fn(session)``.

        ``fn`` runs while the session's lock is held, so no other mutation of
        the same id can interleave. If ``fn`` raises, nothing is stored.
        """
        lock = self._lock_for(session_id)
        with lock:
            current = self.require(session_id)
            updated = fn(current)
            with self._map_lock:
                if session_id not in self._sessions:
                    raise SessionNotFoundError(f"Session not found: {session_id}")
                self._sessions[session_id] = updated
            return updated

    def join(self, session_id: str, player: Player, start_when_full: bool = False) -> GameSession:
        """Add ``player`` to a session, optionally starting it once it fills up."""
        def _join(session: GameSession) -> GameSession:
            joined = session.add_player(player)
            if start_when_full and joined.is_full:
                joined = joined.start()
            return joined

        session = self.mutate(session_id, _join)
        logger.info("%s joined session %s (%d/%d)", player.name, session_id,
                    len(session.players), session.max_players)
        return session

    def find_joinable(self) -> Optional[GameSession]:
        """First session still waiting for players with room left."""
        for session in self.list_sessions():
            if session.state == SessionState.WAITING_PLAYERS and not session.is_full:
                return session
        return None

    def join_any(self, player: Player, start_when_full: bool = False) -> GameSession:
        """Join the first joinable session.

        Candidates can fill up between the scan and the join; those are
        skipped and the next candidate is tried.
        """
        for candidate in self.list_sessions():
            if candidate.state != SessionState.WAITING_PLAYERS or candidate.is_full:
                continue
            try:
                return self.join(candidate.id, player, start_when_full=start_when_full)
            except (SessionNotFoundError, SessionFullError, InvalidTransitionError):
                continue
        raise NoJoinableSessionError("No sessions available to join")
