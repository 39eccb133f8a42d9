"""Shared fixtures and utilities for integration tests."""

import socket
import threading
import time

import pytest

from server.main import GameServer
from server.registry import SessionRegistry


def wait_for_server(port: int, timeout: float = 5.0) -> bool:
    """Wait for server to start accepting connections.

    Returns True if server is ready, False if timeout.
    """
    start_time = time.time()
    while time.time() - start_time < timeout:
        try:
            with socket.create_connection(("127.0.0.1", port), timeout=0.5):
                return True
        except OSError:
            time.sleep(0.1)
    return False


@pytest.fixture
def running_server(temp_config_dir):
    """GameServer serving on an ephemeral port in a background thread."""
    server = GameServer(host="127.0.0.1", port=0, registry=SessionRegistry())
    thread = threading.Thread(target=server.start, name="GameServer", daemon=True)
    thread.start()

    if not server.wait_until_ready(timeout=5.0):
        pytest.fail("Server thread did not start listening in time")
    host, port = server.address
    if not wait_for_server(port):
        pytest.fail(f"Server is not accepting connections on port {port}")

    server.url = f"ws://{host}:{port}"
    yield server

    server.shutdown()
    thread.join(timeout=5)
