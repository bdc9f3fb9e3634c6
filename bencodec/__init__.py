"""bencodec - Canonical bencode codec."""

from __future__ import annotations

__version__ = "0.1.0"

from bencodec.core.decoder import BencodeDecoder, decode, decode_value
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
from bencodec.utils.exceptions import (
    BencodecError,
    BencodeDecodeError,
    BencodeEncodeError,
    BencodeError,
    DecodeErrorKind,
)

__all__ = [
    "BencodeDecodeError",
    "BencodeDecoder",
    "BencodeEncodeError",
    "BencodeEncoder",
    "BencodeError",
    "BencodecError",
    "ByteString",
    "DecodeErrorKind",
    "Dictionary",
    "Integer",
    "IntegerWidth",
    "List",
    "Value",
    "__version__",
    "decode",
    "decode_value",
    "encode",
    "from_python",
    "to_python",
]
