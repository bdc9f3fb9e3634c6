"""Core bencode implementation.

This module contains the codec components:
- Value model
- Decoding
- Encoding
"""

from __future__ import annotations

from bencodec.core.decoder import BencodeDecoder, ByteCursor, decode, decode_value
from bencodec.core.encoder import BencodeEncoder, encode
from bencodec.core.values import (
    ByteString,
    Dictionary,
    Integer,
    IntegerWidth,
    List,
    Value,
    from_python,
    to_python,
)

__all__ = [
    # Decoding
    "BencodeDecoder",
    # Encoding
    "BencodeEncoder",
    "ByteCursor",
    # Values
    "ByteString",
    "Dictionary",
    "Integer",
    "IntegerWidth",
    "List",
    "Value",
    "decode",
    "decode_value",
    "encode",
    "from_python",
    "to_python",
]
