#!/usr/bin/env python3
"""bencodec command-line entry point."""

from __future__ import annotations

from bencodec.cli.main import main

if __name__ == "__main__":
    main()
