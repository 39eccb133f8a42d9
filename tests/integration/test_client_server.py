"""Integration tests for client-server communication.

Runs the WebSocket server in a background thread and drives it with the
synchronous client connection, exactly as the console client does.
"""

import json
import time
import warnings

import pytest
from websockets.sync.client import connect

from client.connection import ConnectionManager, ServerError
from game.player import Player
from game.session import SessionState, Variant
from server.protocol import (
    CreateSession, Error, GetSession, JoinAnySession, JoinSession, MakeMove, SessionUpdated,
)

# Mark all tests in this module as slow and set a timeout
pytestmark = [pytest.mark.slow, pytest.mark.timeout(30)]


class TestFullGame:
    """Two clients play a whole three-in-a-row game."""

    def test_two_players_finish_a_game(self, running_server):
        with ConnectionManager(running_server.url) as ana_conn, \
                ConnectionManager(running_server.url) as carlos_conn:
            created = ana_conn.send(CreateSession(Player(1, "Ana")))
            assert created.state == SessionState.WAITING_PLAYERS

            joined = carlos_conn.send(JoinSession(created.id, Player(2, "Carlos")))
            assert joined.state == SessionState.IN_PROGRESS

            moves = [(ana_conn, 1, 0, 0, "X"), (carlos_conn, 2, 1, 1, "O"),
                     (ana_conn, 1, 0, 1, "X"), (carlos_conn, 2, 2, 0, "O"),
                     (ana_conn, 1, 0, 2, "X")]
            for conn, player_id, r, c, symbol in moves:
                session = conn.send(MakeMove(created.id, player_id, r, c, symbol))

            assert session.state == SessionState.FINISHED
            assert carlos_conn.send(GetSession(created.id)) == session

        assert running_server.statistics.snapshot()["games_finished"] == 1

    def test_errors_come_back_as_events(self, running_server):
        with ConnectionManager(running_server.url) as conn:
            event = conn.request(JoinSession("PARTIDA-NOPE0000", Player(1, "Ana")))
            assert isinstance(event, Error)
            assert event.code == "SESSION_NOT_FOUND"

            with pytest.raises(ServerError) as exc_info:
                conn.send(JoinAnySession(Player(1, "Ana")))
            assert exc_info.value.code == "NO_JOINABLE_SESSION"

    def test_variant_is_honoured(self, running_server):
        with ConnectionManager(running_server.url) as conn:
            session = conn.send(CreateSession(Player(1, "Ana"), Variant.CHESS))
            assert session.variant == Variant.CHESS
            assert session.board.count_occupied() == 32


class TestConnectionManager:
    """Connection lifecycle of the client side."""

    def test_connect_without_deprecation_warnings(self, running_server):
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            with ConnectionManager(running_server.url) as conn:
                session = conn.send(CreateSession(Player(1, "Ana")))
        assert not conn.connected
        assert session.players[0].name == "Ana"

    def test_reconnect_after_disconnect(self, running_server):
        conn = ConnectionManager(running_server.url)
        conn.connect()
        conn.disconnect()
        conn.connect()
        try:
            assert conn.send(CreateSession(Player(1, "Ana"))).state == SessionState.WAITING_PLAYERS
        finally:
            conn.disconnect()

    def test_request_when_not_connected(self):
        with pytest.raises(ConnectionError):
            ConnectionManager("ws://127.0.0.1:1").request(GetSession("PARTIDA-X"))


class TestRawProtocol:
    """Line-level behaviour of the server."""

    def test_malformed_line_does_not_close_connection(self, running_server):
        with connect(running_server.url) as ws:
            ws.send("this is not json")
            reply = json.loads(ws.recv(timeout=5))
            assert reply["tipo"] == "Error"
            assert reply["codigo"] == "DECODE_ERROR"

            ws.send(json.dumps({"tipo": "CrearPartida",
                                "jugador": {"id": 1, "nombre": "Ana"}}))
            reply = json.loads(ws.recv(timeout=5))
            assert reply["tipo"] == "PartidaActualizada"

    def test_several_lines_in_one_message(self, running_server):
        with connect(running_server.url) as ws:
            lines = [
                json.dumps({"tipo": "CrearPartida", "jugador": {"id": 1, "nombre": "Ana"}}),
                json.dumps({"tipo": "ConsultarPartida", "idPartida": "PARTIDA-NOPE0000"}),
            ]
            ws.send("\n".join(lines) + "\n")
            first = json.loads(ws.recv(timeout=5))
            second = json.loads(ws.recv(timeout=5))
            assert first["tipo"] == "PartidaActualizada"
            assert second["tipo"] == "Error"


class TestDisconnect:
    """Closing a connection marks its players disconnected."""

    def test_closed_connection_passes_the_turn(self, running_server):
        with ConnectionManager(running_server.url) as carlos_conn:
            with ConnectionManager(running_server.url) as ana_conn:
                created = ana_conn.send(CreateSession(Player(1, "Ana")))
                carlos_conn.send(JoinSession(created.id, Player(2, "Carlos")))

            # Server-side cleanup runs on the connection's thread after close
            deadline = time.time() + 5
            session = carlos_conn.send(GetSession(created.id))
            while session.find_player(1).connected and time.time() < deadline:
                time.sleep(0.05)
                session = carlos_conn.send(GetSession(created.id))

            assert not session.find_player(1).connected
            assert session.current_player == 1
            event = carlos_conn.request(MakeMove(created.id, 2, 1, 1, "O"))
            assert isinstance(event, SessionUpdated)

    def test_abandoned_session_is_removed(self, running_server):
        with ConnectionManager(running_server.url) as ana_conn:
            created = ana_conn.send(CreateSession(Player(1, "Ana")))
        assert created.state == SessionState.WAITING_PLAYERS

        deadline = time.time() + 5
        while created.id in running_server.registry and time.time() < deadline:
            time.sleep(0.05)
        assert created.id not in running_server.registry

        with ConnectionManager(running_server.url) as carlos_conn:
            event = carlos_conn.request(JoinAnySession(Player(2, "Carlos")))
            assert isinstance(event, Error)
            assert event.code == "NO_JOINABLE_SESSION"
