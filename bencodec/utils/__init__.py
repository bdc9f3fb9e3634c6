"""Shared utilities and infrastructure.

This module contains the exception hierarchy and logging setup.
"""

from __future__ import annotations

from bencodec.utils.exceptions import (
    BencodecError,
    BencodeDecodeError,
    BencodeEncodeError,
    BencodeError,
    ConfigurationError,
    DecodeErrorKind,
    ValidationError,
)
from bencodec.utils.logging_config import get_logger, setup_logging

__all__ = [
    # Exceptions
    "BencodeDecodeError",
    "BencodeEncodeError",
    "BencodeError",
    "BencodecError",
    "ConfigurationError",
    "DecodeErrorKind",
    "ValidationError",
    # Logging
    "get_logger",
    "setup_logging",
]
