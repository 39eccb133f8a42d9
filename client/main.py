# client/main.py
"""Main entry point for the board-game terminal client.

The client is fully synchronous: questionary drives the UI and every menu
action sends one command over the WebSocket and waits for the answer.
"""

import argparse
import logging
import random
from typing import Optional

from client import ui
from client.connection import ConnectionManager, ServerError
from game.player import Player
from game.session import GameSession, SessionState
from server.protocol import CreateSession, GetSession, JoinAnySession, JoinSession, MakeMove


DEFAULT_URL = "ws://localhost:5050"


class GameClient:
    """Interactive console client for one player."""

    def __init__(self, connection: ConnectionManager, player: Player):
        self.connection = connection
        self.player = player
        self.session: Optional[GameSession] = None
        self._running = False

    def run(self):
        """Run the main client loop."""
        self._running = True
        while self._running:
            if self.session is None:
                self._lobby()
            else:
                self._play()

    def _lobby(self):
        ui.clear_screen()
        ui.print_header(f"Welcome, {self.player.name}", f"Player #{self.player.id}")
        action = ui.get_main_action()

        if action == "create":
            self._send(CreateSession(self.player, ui.get_variant()))
        elif action == "join":
            session_id = ui.get_session_id()
            if session_id:
                self._send(JoinSession(session_id, self.player))
        elif action == "join_any":
            self._send(JoinAnySession(self.player))
        else:
            self._running = False

    def _play(self):
        ui.print_session(self.session, you=self.player.id)
        if self.session.state in (SessionState.FINISHED, SessionState.CANCELLED):
            ui.print_info(f"Game over ({self.session.state.name})")
            ui.wait_for_enter()
            self.session = None
            return

        action = ui.get_session_action(self.session)
        if action == "place":
            self._place()
        elif action == "move":
            self._move()
        elif action == "refresh":
            self._send(GetSession(self.session.id))
        else:
            self.session = None

    def _place(self):
        square = ui.get_square("Destination")
        if square is None:
            return
        piece = ui.get_piece(self.player, self.session)
        self._send(MakeMove(self.session.id, self.player.id, square[0], square[1], piece or None))

    def _move(self):
        origin = ui.get_square("From")
        if origin is None:
            return
        destination = ui.get_square("To")
        if destination is None:
            return
        self._send(MakeMove(self.session.id, self.player.id, destination[0], destination[1],
                            origin_row=origin[0], origin_col=origin[1]))

    def _send(self, command):
        try:
            self.session = self.connection.send(command)
        except ServerError as e:
            ui.print_error(f"{e.message} ({e.code})")
            ui.wait_for_enter()
        except ConnectionError as e:
            ui.print_error(str(e))
            self._running = False


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Board-game session client")
    parser.add_argument("--url", default=DEFAULT_URL, help="Server WebSocket URL")
    parser.add_argument("--name", default=None, help="Player name")
    parser.add_argument("--id", type=int, default=None, help="Player id (random if omitted)")
    parser.add_argument("--debug", action="store_true", help="Log protocol traffic")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    name = args.name or ui.get_player_name()
    player = Player(id=args.id if args.id is not None else random.randint(1, 999_999), name=name)

    ui.print_connecting(args.url)
    connection = ConnectionManager(args.url)
    try:
        connection.connect()
    except ConnectionError as e:
        ui.print_error(str(e))
        return 1

    with connection:
        GameClient(connection, player).run()
    return 0


if __name__ == "__main__":
    exit(main())
