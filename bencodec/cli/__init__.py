"""Command-line interface."""

from __future__ import annotations

from bencodec.cli.main import cli, main

__all__ = ["cli", "main"]
