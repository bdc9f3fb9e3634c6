"""Bencoding module.

This module provides a convenient interface to the core bencode functionality.
"""

from __future__ import annotations

from bencodec.core.decoder import BencodeDecoder, decode, decode_value
from bencodec.core.encoder import BencodeEncoder, encode
from bencodec.utils.exceptions import BencodeDecodeError, BencodeEncodeError

__all__ = [
    "BencodeDecodeError",
    "BencodeDecoder",
    "BencodeEncodeError",
    "BencodeEncoder",
    "decode",
    "decode_value",
    "encode",
]
