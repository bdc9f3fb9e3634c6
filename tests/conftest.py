"""Pytest configuration and shared fixtures for bencodec tests."""

from __future__ import annotations

import logging

import pytest

from bencodec.config import config as config_module
from bencodec.config.config import ENV_MAPPINGS


def pytest_configure(config):
    """Register all project markers to avoid warnings when ini isn't loaded."""
    markers = [
        ("unit", "marks tests as unit tests"),
        ("core", "marks tests as core functionality tests"),
        ("config", "marks tests as configuration tests"),
        ("cli", "marks tests as CLI tests"),
        ("property", "marks tests as property-based tests"),
    ]
    for name, desc in markers:
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path):
    """Keep user config files and BENCODEC_* variables out of tests."""
    for env_name in ENV_MAPPINGS:
        monkeypatch.delenv(env_name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setattr(config_module, "_config_manager", None)


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Clean up logging handlers after each test to prevent closed file errors."""
    yield
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    # setup_logging detaches the package logger from the root logger
    package_logger = logging.getLogger("bencodec")
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def torrent_bytes() -> bytes:
    """Single-file torrent metadata in canonical form."""
    return (
        b"d8:announce42:http://tracker.archlinux.org:6969/announce"
        b"7:comment41:Arch Linux 2017.11.01 (www.archlinux.org)"
        b"10:created by13:mktorrent 1.1"
        b"13:creation datei1509525415e"
        b"4:infod6:lengthi548405248e4:name31:archlinux-2017.11.01-x86_64.iso"
        b"12:piece lengthi524288e6:pieces0:ee"
    )
