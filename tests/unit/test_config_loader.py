"""Unit tests for game/config_loader.py - ConfigLoader class."""
import logging

from game.config_loader import DEFAULT_SETTINGS, ConfigLoader, get_config


class TestConfigLoaderSingleton:
    """Tests for ConfigLoader singleton pattern."""

    def test_singleton_returns_same_instance(self, temp_config_dir):
        """Test ConfigLoader returns the same instance."""
        config1 = ConfigLoader()
        config2 = get_config()

        assert config1 is config2

    def test_singleton_persists_data(self, temp_config_dir):
        """Test singleton preserves loaded data."""
        assert ConfigLoader().game_settings is ConfigLoader().game_settings


class TestConfigLoading:
    """Tests for configuration file loading."""

    def test_file_values_override_defaults(self, temp_config_dir):
        config = ConfigLoader()

        assert config.get("server", "host") == "127.0.0.1"
        assert config.get("server", "log_level") == "DEBUG"
        assert config.get("variants", "GENERICO", "rows") == 5

    def test_defaults_fill_missing_keys(self, temp_config_dir):
        """Variants absent from the file still come from the defaults."""
        config = ConfigLoader()

        assert config.get_board_size("AJEDREZ") == (8, 8)
        assert config.get_board_size("TRES_EN_LINEA") == (3, 3)

    def test_missing_file_uses_defaults(self, temp_config_dir, caplog):
        (temp_config_dir / "game_settings.json").unlink()

        with caplog.at_level(logging.WARNING, logger="game.config_loader"):
            config = ConfigLoader()

        assert config.game_settings == DEFAULT_SETTINGS
        assert "not found" in caplog.text

    def test_malformed_file_uses_defaults(self, temp_config_dir, caplog):
        (temp_config_dir / "game_settings.json").write_text("{ not json")

        with caplog.at_level(logging.WARNING, logger="game.config_loader"):
            config = ConfigLoader()

        assert config.get("server", "port") == 5050
        assert "Error parsing" in caplog.text


class TestConfigGet:
    """Tests for nested lookups."""

    def test_missing_key_returns_default(self, temp_config_dir):
        config = ConfigLoader()

        assert config.get("server", "nope", default=42) == 42
        assert config.get("server", "host", "deeper", default="x") == "x"

    def test_unknown_variant_board_size(self, temp_config_dir):
        assert ConfigLoader().get_board_size("UNKNOWN") == (8, 8)
