"""Unit tests for configuration loading.

Covers defaults, TOML files, environment overrides and validation errors.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import toml

pytestmark = [pytest.mark.unit, pytest.mark.config]

from bencodec.config import config as config_module
from bencodec.config.config import (
    ConfigManager,
    get_codec_config,
    get_config,
    init_config,
    reload_config,
    set_config,
)
from bencodec.models import CodecConfig, Config, LogLevel
from bencodec.utils.exceptions import ConfigurationError


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "bencodec.toml"
    path.write_text(
        "[codec]\nmax_depth = 32\nstrict_encode = false\n\n"
        "[observability]\nlog_level = \"debug\"\n",
        encoding="utf-8",
    )
    return path


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_defaults(self, tmp_path, monkeypatch):
        """Test defaults apply when no file is found."""
        monkeypatch.chdir(tmp_path)
        manager = ConfigManager()
        assert manager.config_file is None
        assert manager.config.codec == CodecConfig()
        assert manager.config.observability.log_level is LogLevel.WARNING

    def test_loads_toml_file(self, config_file):
        """Test values from an explicit TOML file."""
        manager = ConfigManager(config_file)
        assert manager.config.codec.max_depth == 32
        assert manager.config.codec.strict_encode is False
        assert manager.config.observability.log_level is LogLevel.DEBUG

    def test_finds_file_in_cwd(self, config_file, monkeypatch):
        """Test bencodec.toml in the working directory is picked up."""
        monkeypatch.chdir(config_file.parent)
        assert ConfigManager().config_file == Path.cwd() / "bencodec.toml"

    def test_env_overrides_file(self, config_file, monkeypatch):
        """Test BENCODEC_* variables win over the file."""
        monkeypatch.setenv("BENCODEC_MAX_DEPTH", "8")
        monkeypatch.setenv("BENCODEC_REJECT_TRAILING_DATA", "true")
        manager = ConfigManager(config_file)
        assert manager.config.codec.max_depth == 8
        assert manager.config.codec.reject_trailing_data is True
        assert manager.config.codec.strict_encode is False

    def test_invalid_value(self, tmp_path):
        """Test out-of-range values raise ConfigurationError."""
        path = tmp_path / "bad.toml"
        path.write_text("[codec]\nmax_depth = 0\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            ConfigManager(path)

    def test_invalid_env_value(self, monkeypatch):
        """Test unparseable environment values raise ConfigurationError."""
        monkeypatch.setenv("BENCODEC_READ_CHUNK_SIZE", "lots")
        with pytest.raises(ConfigurationError):
            ConfigManager()

    def test_malformed_toml(self, tmp_path):
        """Test TOML syntax errors raise ConfigurationError."""
        path = tmp_path / "broken.toml"
        path.write_text("[codec\nmax_depth = ", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            ConfigManager(path)

    def test_export_roundtrips(self, config_file):
        """Test exported TOML loads back to the same config."""
        manager = ConfigManager(config_file)
        exported = toml.loads(manager.export())
        assert Config(**exported) == manager.config


class TestGlobalConfig:
    """Tests for the module-level configuration accessors."""

    def test_get_config_creates_manager(self):
        """Test get_config lazily initializes defaults."""
        assert isinstance(get_config(), Config)
        assert config_module._config_manager is not None

    def test_init_config_replaces_global(self, config_file):
        """Test init_config installs the manager globally."""
        init_config(config_file)
        assert get_codec_config().max_depth == 32

    def test_set_config(self):
        """Test set_config swaps the active configuration."""
        new = Config(codec=CodecConfig(max_depth=3))
        set_config(new)
        assert get_config() is new

    def test_reload_config(self, config_file):
        """Test reload_config re-reads the file."""
        init_config(config_file)
        config_file.write_text("[codec]\nmax_depth = 64\n", encoding="utf-8")
        assert reload_config().codec.max_depth == 64

    def test_reload_without_init(self):
        """Test reload before initialization is an error."""
        with pytest.raises(ConfigurationError):
            reload_config()
