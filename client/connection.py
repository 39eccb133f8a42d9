"""WebSocket connection to the session server (synchronous request/response)."""

import logging
from contextlib import ExitStack
from typing import Optional

from websockets.exceptions import ConnectionClosed
from websockets.sync.client import ClientConnection, connect

from game.errors import GameError
from game.session import GameSession
from server.protocol import Command, Error, Event, SessionUpdated, decode_event, encode


logger = logging.getLogger(__name__)


class ServerError(GameError):
    """Error event returned by the server, raised on the client side."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code or "SERVER_ERROR"


class ConnectionManager:
    """Manages the WebSocket connection to the game server.

    Every command gets exactly one event back, so requests are simply sent
    and the next message is read as the answer.
    """

    RECEIVE_TIMEOUT_SECONDS = 10.0

    def __init__(self, url: str):
        self.url = url
        self.websocket: Optional[ClientConnection] = None
        self._stack = ExitStack()

    @property
    def connected(self) -> bool:
        return self.websocket is not None

    def connect(self):
        """Connect to the server at ``self.url``."""
        try:
            self.websocket = self._stack.enter_context(connect(self.url))
        except (OSError, ConnectionClosed) as e:
            self.websocket = None
            raise ConnectionError(f"Failed to connect to {self.url}: {e}") from e
        logger.debug("Connected to %s", self.url)

    def disconnect(self):
        """Disconnect from server."""
        self.websocket = None
        self._stack.close()

    def __enter__(self) -> 'ConnectionManager':
        if not self.connected:
            self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()

    def request(self, command: Command) -> Event:
        """Send one command and wait for its event."""
        if self.websocket is None:
            raise ConnectionError("Not connected to server")
        try:
            self.websocket.send(encode(command))
            reply = self.websocket.recv(timeout=self.RECEIVE_TIMEOUT_SECONDS)
        except ConnectionClosed as e:
            self.disconnect()
            raise ConnectionError(f"Connection lost: {e}") from e
        if isinstance(reply, bytes):
            reply = reply.decode("utf-8")
        return decode_event(reply.strip())

    def send(self, command: Command) -> GameSession:
        """Send a command and return the updated session, raising on Error events."""
        event = self.request(command)
        if isinstance(event, Error):
            raise ServerError(event.message, event.code)
        if isinstance(event, SessionUpdated):
            return event.session
        raise ServerError(f"Unexpected event: {event!r}")
