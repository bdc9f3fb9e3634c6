"""Configuration management for bencodec.

Provides centralized configuration with TOML support, validation, and
hierarchical loading from defaults → config file → environment.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import toml

from bencodec.models import CodecConfig, Config, ObservabilityConfig
from bencodec.utils.exceptions import ConfigurationError
from bencodec.utils.logging_config import setup_logging

CONFIG_FILENAME = "bencodec.toml"

# Global configuration instance
_config_manager: ConfigManager | None = None

# Mapping of environment variables to config paths
ENV_MAPPINGS: dict[str, str] = {
    "BENCODEC_MAX_DEPTH": "codec.max_depth",
    "BENCODEC_READ_CHUNK_SIZE": "codec.read_chunk_size",
    "BENCODEC_REJECT_TRAILING_DATA": "codec.reject_trailing_data",
    "BENCODEC_STRICT_ENCODE": "codec.strict_encode",
    "BENCODEC_LOG_LEVEL": "observability.log_level",
    "BENCODEC_LOG_FILE": "observability.log_file",
    "BENCODEC_STRUCTURED_LOGGING": "observability.structured_logging",
    "BENCODEC_LOG_CORRELATION_ID": "observability.log_correlation_id",
}


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_file: str | Path | None = None):
        """Initialize configuration manager.

        Args:
            config_file: Path to TOML config file. If None, searches for bencodec.toml

        """
        self.config_file = self._find_config_file(config_file)
        self.config = self._load_config()
        self._setup_logging()

    def _find_config_file(
        self,
        config_file: str | Path | None,
    ) -> Path | None:
        """Find configuration file in standard locations."""
        if config_file:
            return Path(config_file)

        # Search in current directory, then home directory
        search_paths = [
            Path.cwd() / CONFIG_FILENAME,
            Path.home() / ".config" / "bencodec" / CONFIG_FILENAME,
            Path.home() / f".{CONFIG_FILENAME}",
        ]

        for path in search_paths:
            if path.exists():
                return path

        return None

    def _load_config(self) -> Config:
        """Load configuration from file and environment."""
        config_data: dict[str, Any] = {}

        if self.config_file and self.config_file.exists():
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    config_data.update(toml.load(f))
            except (OSError, toml.TomlDecodeError) as e:
                msg = f"Failed to load config file {self.config_file}: {e}"
                raise ConfigurationError(msg) from e
        elif self.config_file:
            logging.warning("Config file %s does not exist, using defaults", self.config_file)

        # Apply environment overrides
        env_config = self._get_env_config()
        config_data = self._merge_config(config_data, env_config)

        try:
            return Config(**config_data)
        except Exception as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigurationError(msg) from e

    def _get_env_config(self) -> dict[str, Any]:
        """Get configuration from environment variables."""
        env_config: dict[str, Any] = {}

        def _parse_env_value(raw: str) -> bool | int | str:
            low = raw.lower()
            if low in {"true", "yes", "on"}:
                return True
            if low in {"false", "no", "off"}:
                return False
            try:
                return int(raw)
            except ValueError:
                return raw

        def _set_nested(d: dict[str, Any], path: str, value: Any) -> None:
            parts = path.split(".")
            cur = d
            for p in parts[:-1]:
                cur = cur.setdefault(p, {})
            cur[parts[-1]] = value

        for env_name, cfg_path in ENV_MAPPINGS.items():
            raw = os.getenv(env_name)
            if raw is None:
                continue
            _set_nested(env_config, cfg_path, _parse_env_value(raw))

        return env_config

    def _merge_config(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Merge configuration dictionaries recursively."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value

        return result

    def export(self) -> str:
        """Export current configuration as TOML."""
        data = self.config.model_dump(mode="json", exclude_none=True)
        return toml.dumps(data)

    def _setup_logging(self) -> None:
        """Set up logging configuration."""
        setup_logging(self.config.observability)


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager.config


def init_config(config_file: str | Path | None = None) -> ConfigManager:
    """Initialize the global configuration manager."""
    global _config_manager
    _config_manager = ConfigManager(config_file)
    return _config_manager


def reload_config() -> Config:
    """Reload configuration from file."""
    if _config_manager is None:
        msg = "Configuration not initialized"
        raise ConfigurationError(msg)

    _config_manager.config = _config_manager._load_config()  # noqa: SLF001
    _config_manager._setup_logging()  # noqa: SLF001
    return _config_manager.config


def set_config(new_config: Config) -> None:
    """Replace the global configuration at runtime.

    Reconfigures logging based on the new config.
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(None)
    _config_manager.config = new_config
    _config_manager._setup_logging()  # noqa: SLF001


def get_codec_config() -> CodecConfig:
    """Get codec configuration."""
    return get_config().codec


def get_observability_config() -> ObservabilityConfig:
    """Get observability configuration."""
    return get_config().observability
