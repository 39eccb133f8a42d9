"""
WebSocket server entry point for the board-game session service.

This module provides:
- WebSocket server using the websockets library (one thread per connection)
- Line-delimited command processing through ``CommandHandler``
- Connection tracking so players are marked disconnected when their socket closes
"""

import argparse
import logging
import socket
import threading
from typing import Dict, Optional, Set, Tuple

from rich.logging import RichHandler
from websockets.exceptions import ConnectionClosed
from websockets.sync.server import ServerConnection, serve

from game.config_loader import get_config
from game.engine import GameEngine
from game.events import StatisticsObserver, log_observer
from server.handler import CommandHandler
from server.protocol import (
    CreateSession, Error, JoinAnySession, JoinSession, SessionUpdated, encode,
)
from server.registry import SessionRegistry
from version import VERSION


logger = logging.getLogger(__name__)

# Suppress websockets library errors from TCP probes (connections that never
# complete the WebSocket handshake).
logging.getLogger("websockets").setLevel(logging.CRITICAL)

Binding = Tuple[str, int]  # (session id, player id)


class GameServer:
    """
    WebSocket game server hosting many concurrent sessions.

    Each connection gets its own thread that reads a message, processes every
    newline-delimited command in it and answers with one event line per
    command. Players created or joined over a connection are bound to it and
    marked disconnected when it closes.
    """

    def __init__(self, host: str = "0.0.0.0", port: int = 5050,
                 registry: Optional[SessionRegistry] = None,
                 engine: Optional[GameEngine] = None):
        self.host = host
        self.port = port
        self.registry = registry or SessionRegistry()
        self.statistics = StatisticsObserver()
        self.engine = engine or GameEngine([log_observer, self.statistics])
        self.handler = CommandHandler(self.registry, self.engine)

        self._bindings: Dict[ServerConnection, Set[Binding]] = {}
        self._bindings_lock = threading.Lock()
        self._server = None
        self._ready = threading.Event()

    @property
    def address(self) -> Tuple[str, int]:
        """Actual (host, port) once listening; useful when bound to port 0."""
        if self._server is None:
            return self.host, self.port
        return self._server.socket.getsockname()[:2]

    def start(self):
        """Serve until ``shutdown`` is called."""
        logger.info("Starting session server v%s on ws://%s:%s", VERSION, self.host, self.port)
        with serve(self.handle_connection, self.host, self.port) as server:
            self._server = server
            self._ready.set()
            server.serve_forever()
        logger.info("Server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._ready.wait(timeout)

    def shutdown(self):
        if self._server is not None:
            self._server.shutdown()
        self.registry.close()

    def handle_connection(self, connection: ServerConnection):
        """Handle one WebSocket connection until it closes."""
        peer = connection.remote_address
        logger.info("New connection: %s", peer)
        with self._bindings_lock:
            self._bindings[connection] = set()

        try:
            for message in connection:
                if isinstance(message, bytes):
                    message = message.decode("utf-8", errors="replace")
                for line in message.splitlines():
                    if not line.strip():
                        continue
                    connection.send(self.handle_line(connection, line))
        except ConnectionClosed:
            logger.info("Connection closed abruptly: %s", peer)
        finally:
            self.handle_disconnect(connection)
            logger.info("Connection closed: %s", peer)

    def handle_line(self, connection: ServerConnection, line: str) -> str:
        """Process one command line, remembering which players joined through it."""
        command, event = self.handler.process_line(line)

        if isinstance(event, SessionUpdated) and isinstance(
                command, (CreateSession, JoinSession, JoinAnySession)):
            with self._bindings_lock:
                self._bindings.setdefault(connection, set()).add(
                    (event.session.id, command.player.id))
        elif isinstance(event, Error):
            logger.debug("%s <- error %s", connection.remote_address, event.code)
        return encode(event)

    def handle_disconnect(self, connection: ServerConnection):
        """Mark every player bound to ``connection`` as disconnected."""
        with self._bindings_lock:
            bindings = self._bindings.pop(connection, set())
        for session_id, player_id in bindings:
            if self.handler.disconnect(session_id, player_id) is not None:
                logger.info("Player %s disconnected from %s", player_id, session_id)


def check_port_available(host: str, port: int) -> bool:
    """Check if a port is available for binding.

    Returns True if available, False if in use by another process.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host if host != "0.0.0.0" else "127.0.0.1", port))
        return True
    except OSError:
        return False
    finally:
        sock.close()


def setup_logging(level: str):
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    logging.getLogger("websockets").setLevel(logging.CRITICAL)


def main(argv=None):
    """Main entry point."""
    settings = get_config()
    parser = argparse.ArgumentParser(description="Board-game session server")
    parser.add_argument("--host", default=settings.get("server", "host", default="0.0.0.0"),
                        help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.get("server", "port", default=5050),
                        help="Port to bind to")
    parser.add_argument("--log-level", default=settings.get("server", "log_level", default="INFO"),
                        help="Logging level (DEBUG, INFO, WARNING, ...)")
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    if not check_port_available(args.host, args.port):
        logger.error("Port %s is already in use by another application. Try --port %s",
                     args.port, args.port + 1)
        return 1

    server = GameServer(host=args.host, port=args.port)
    try:
        server.start()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        server.registry.close()
        logger.info("Statistics: %s", server.statistics.snapshot())

    return 0


if __name__ == "__main__":
    exit(main())
