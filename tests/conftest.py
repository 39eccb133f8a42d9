"""Shared test fixtures for the board-game session tests."""
import json

import pytest

from game.board import Board
from game.config_loader import ConfigLoader
from game.engine import GameEngine
from game.player import Player
from game.session import GameSession, Variant
from server.registry import SessionRegistry


@pytest.fixture
def temp_config_dir(tmp_path, monkeypatch):
    """Create temporary config directory with a test game_settings.json."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    game_settings = {
        "server": {
            "host": "127.0.0.1",
            "port": 0,
            "log_level": "DEBUG"
        },
        "session": {
            "default_variant": "TRES_EN_LINEA",
            "max_players": 2,
            "start_when_full": True,
            "remove_abandoned": True
        },
        "variants": {
            "TRES_EN_LINEA": {"rows": 3, "cols": 3},
            "GENERICO": {"rows": 5, "cols": 5}
        }
    }
    (config_dir / "game_settings.json").write_text(json.dumps(game_settings, indent=2))

    # Reset the singleton instance FIRST
    ConfigLoader._instance = None

    # Patch the class-level _config_dir attribute
    monkeypatch.setattr(ConfigLoader, '_config_dir', str(config_dir))

    yield config_dir

    # Cleanup: reset singleton
    ConfigLoader._instance = None


@pytest.fixture
def ana():
    return Player(1, "Ana")


@pytest.fixture
def carlos():
    return Player(2, "Carlos")


@pytest.fixture
def engine():
    return GameEngine()


@pytest.fixture
def line3_session(ana, carlos):
    """3x3 three-in-a-row session with Ana and Carlos, already started."""
    session = GameSession(id="PARTIDA-TEST0001", board=Board(3, 3),
                          max_players=2, variant=Variant.LINE3)
    return session.add_player(ana).add_player(carlos).start()


@pytest.fixture
def four_player_session():
    """4-player GENERIC session in progress on a 4x4 board."""
    session = GameSession(id="PARTIDA-TEST0004", board=Board(4, 4), max_players=4)
    for i, name in enumerate(["Ana", "Bruno", "Carla", "Diego"], start=1):
        session = session.add_player(Player(i, name))
    return session.start()


@pytest.fixture
def registry(temp_config_dir):
    """Registry built over the temporary configuration."""
    with SessionRegistry() as reg:
        yield reg
