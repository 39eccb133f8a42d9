"""
Game engine: turn order, move application and end detection.

The engine holds no session state. Every operation takes a ``GameSession``
and returns a new one; failures raise a ``GameError`` and leave the input
untouched. The only thing an engine owns is its ordered list of observers,
which are told about each successful mutation (and each rejected move).
"""

from dataclasses import replace
from typing import Any, Dict, Iterable, Optional

from game.errors import GameError, NotInProgressError, NotPlayersTurnError, OutOfRangeError
from game.events import Observer, ObserverList, SessionEvent, SessionEventType
from game.move import Move
from game.player import Player
from game.rules import rules_for
from game.session import GameSession, SessionState


class GameEngine:
    """Stateless rule engine over immutable sessions."""

    def __init__(self, observers: Optional[Iterable[Observer]] = None):
        self.observers = ObserverList(observers)

    def notify(self, event_type: SessionEventType, session: GameSession,
               player: Optional[Player] = None, move: Optional[Move] = None, **data) -> None:
        self.observers.notify(SessionEvent(event_type, session, player, move, data))

    # --- Turns ---

    def active_player(self, session: GameSession) -> Optional[Player]:
        """Player whose turn it is, or None when nobody can play."""
        if session.state != SessionState.IN_PROGRESS:
            return None
        if not session.connected_players:
            return None
        player = session.active_player_raw
        if player is None or not player.connected:
            return None
        return player

    def is_players_turn(self, session: GameSession, player: Player) -> bool:
        active = self.active_player(session)
        return active is not None and active.id == player.id

    def next_player_index(self, session: GameSession) -> int:
        """Next connected player after the current one, wrapping around."""
        return session.next_connected_index()

    def can_play(self, session: GameSession) -> bool:
        return session.state == SessionState.IN_PROGRESS and bool(session.connected_players)

    # --- Moves ---

    def apply_move(self, session: GameSession, player: Player, move: Move) -> GameSession:
        """
        Validate and apply a move for ``player``.

        Raises:
            NotInProgressError: session is not IN_PROGRESS
            NotPlayersTurnError: it is someone else's turn
            OutOfRangeError: origin or destination outside the board
            InvalidMoveError: variant rules reject the move
        """
        try:
            updated = self._apply(session, player, move)
        except GameError as e:
            self.notify(SessionEventType.MOVE_REJECTED, session, player, move,
                        error=e.message, code=e.code)
            raise

        previous = self.active_player(session)
        current = self.active_player(updated)
        self.notify(SessionEventType.MOVE_APPLIED, updated, player, move)
        if current is not None and (previous is None or previous.id != current.id):
            self.notify(SessionEventType.TURN_CHANGED, updated, current, previous=previous)
        if updated.state == SessionState.FINISHED:
            self.notify(SessionEventType.GAME_FINISHED, updated, self.winner(updated),
                        reason=self.end_reason(updated))
        return updated

    def _apply(self, session: GameSession, player: Player, move: Move) -> GameSession:
        if session.state != SessionState.IN_PROGRESS:
            raise NotInProgressError(
                f"The session must be in progress to play (current state: {session.state.name})"
            )
        if not self.is_players_turn(session, player):
            active = self.active_player(session)
            raise NotPlayersTurnError(
                f"Not your turn, {player.name}: it is {active.name if active else 'nobody'}'s turn"
            )

        board = session.board
        if not move.is_placement and not board.coordinates_valid(move.origin_row, move.origin_col):
            raise OutOfRangeError(
                f"Origin ({move.origin_row}, {move.origin_col}) is outside the board"
            )
        if not board.coordinates_valid(move.dest_row, move.dest_col):
            raise OutOfRangeError(
                f"Destination ({move.dest_row}, {move.dest_col}) is outside the board"
            )

        rules_for(session.variant).validate(board, move)

        new_board = board.copy()
        if move.is_placement:
            new_board.place(move.dest_row, move.dest_col, move.content)
        else:
            content = board.get(move.origin_row, move.origin_col).content
            new_board.clear(move.origin_row, move.origin_col)
            new_board.place(move.dest_row, move.dest_col, content)

        checked = self.check_end_condition(session.with_board(new_board))
        if checked.state == SessionState.FINISHED:
            return checked
        return replace(checked, current_player=self.next_player_index(checked))

    # --- End of game ---

    def check_end_condition(self, session: GameSession) -> GameSession:
        """Move an in-progress session to FINISHED if its variant says so."""
        if session.state != SessionState.IN_PROGRESS:
            return session
        if rules_for(session.variant).is_over(session.board):
            return session.change_state(SessionState.FINISHED)
        return session

    def winner(self, session: GameSession) -> Optional[Player]:
        return rules_for(session.variant).winner(session.board, list(session.players))

    def end_reason(self, session: GameSession) -> str:
        if self.winner(session) is not None:
            return "Victory condition met"
        if session.board.is_full:
            return "Draw - board full"
        if not session.connected_players:
            return "No connected players"
        return "Special end condition"

    # --- Notifying lifecycle wrappers ---

    def start(self, session: GameSession) -> GameSession:
        started = session.start()
        self.notify(SessionEventType.STATE_CHANGED, started,
                    previous=session.state.name, current=started.state.name)
        self.notify(SessionEventType.TURN_CHANGED, started, self.active_player(started), previous=None)
        return started

    def change_state(self, session: GameSession, new_state: SessionState) -> GameSession:
        updated = session.change_state(new_state)
        self.notify(SessionEventType.STATE_CHANGED, updated,
                    previous=session.state.name, current=new_state.name)
        if new_state == SessionState.PAUSED:
            self.notify(SessionEventType.GAME_PAUSED, updated)
        elif session.state == SessionState.PAUSED and new_state == SessionState.IN_PROGRESS:
            self.notify(SessionEventType.GAME_RESUMED, updated)
        return updated

    def add_player(self, session: GameSession, player: Player) -> GameSession:
        updated = session.add_player(player)
        self.notify(SessionEventType.PLAYER_JOINED, updated, player)
        return updated

    def remove_player(self, session: GameSession, player_id: int) -> GameSession:
        removed = session.find_player(player_id)
        updated = session.remove_player(player_id)
        if removed is not None:
            self.notify(SessionEventType.PLAYER_REMOVED, updated, removed)
            previous = session.active_player_raw
            holder = self.active_player(updated)
            if holder is not None and (previous is None or holder.id != previous.id):
                self.notify(SessionEventType.TURN_CHANGED, updated, holder, previous=previous)
        return updated

    def set_player_connected(self, session: GameSession, player_id: int,
                             connected: bool) -> GameSession:
        """Flip a player's connection flag; the turn moves on if they held it."""
        updated = session.set_player_connected(player_id, connected)
        if updated is session:
            return session
        self.notify(SessionEventType.CONNECTION_CHANGED, updated,
                    updated.find_player(player_id), connected=connected)
        if updated.current_player != session.current_player:
            self.notify(SessionEventType.TURN_CHANGED, updated, self.active_player(updated),
                        previous=session.active_player_raw)
        return updated

    def next_round(self, session: GameSession) -> GameSession:
        updated = session.next_round()
        self.notify(SessionEventType.NEW_ROUND, updated, round=updated.round)
        return updated

    # --- Reporting ---

    def statistics(self, session: GameSession) -> Dict[str, Any]:
        active = self.active_player(session)
        return {
            "total_players": len(session.players),
            "connected_players": len(session.connected_players),
            "occupied_cells": session.board.count_occupied(),
            "empty_cells": len(session.board.empty_cells()),
            "can_continue": self.can_play(session),
            "current_turn": active.name if active else None,
            "round": session.round,
        }

    def describe(self, session: GameSession) -> str:
        active = self.active_player(session)
        board = session.board
        lines = [
            "=== SESSION ===",
            f"ID: {session.id}",
            f"Variant: {session.variant.name}",
            f"State: {session.state.name}",
            f"Round: {session.round}",
            f"Players: {len(session.players)}/{session.max_players}",
            f"Current player: {active.name if active else 'N/A'}",
            f"Connected: {[p.name for p in session.connected_players]}",
            f"Occupied cells: {board.count_occupied()}/{board.rows * board.cols}",
        ]
        return "\n".join(lines)
