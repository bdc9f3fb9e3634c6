"""Bencode encoder.

Depth-first walk of a value tree into an append-only buffer. Dictionary
keys are sorted byte-wise on every call, so output is canonical regardless
of mapping order.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, BinaryIO

from bencodec.core.values import (
    INT64_MAX,
    INT64_MIN,
    UINT64_MAX,
    ByteString,
    Dictionary,
    Integer,
    IntegerWidth,
    List,
)
from bencodec.utils.exceptions import BencodeEncodeError

if TYPE_CHECKING:
    from bencodec.models import CodecConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 256


class BencodeEncoder:
    """Encoder for value trees and their plain Python equivalents.

    With ``strict=False`` the encoder runs in compatibility mode: values it
    cannot represent are skipped without emitting anything, which can leave
    a dictionary key without a value. Strict mode raises instead.

    Containers nested deeper than ``max_depth`` raise in both modes.
    """

    def __init__(self, strict: bool = True, max_depth: int = DEFAULT_MAX_DEPTH):
        """Initialize encoder."""
        self.strict = strict
        self.max_depth = max_depth

    @classmethod
    def from_config(cls, config: CodecConfig) -> BencodeEncoder:
        """Create an encoder honouring ``strict_encode`` and ``max_depth``."""
        return cls(strict=config.strict_encode, max_depth=config.max_depth)

    def encode(self, value: Any) -> bytes:
        """Encode ``value`` to canonical bencode."""
        buf = bytearray()
        try:
            self.write_value(buf, value, set())
        except RecursionError as e:
            msg = f"nesting exceeds the interpreter recursion limit ({sys.getrecursionlimit()})"
            raise BencodeEncodeError(msg) from e
        return bytes(buf)

    def encode_to(self, value: Any, sink: BinaryIO) -> int:
        """Encode ``value`` into a binary file object. Returns bytes written."""
        data = self.encode(value)
        sink.write(data)
        return len(data)

    def write_value(self, buf: bytearray, value: Any, active: set[int]) -> None:
        """Append the encoding of ``value`` to ``buf``.

        ``active`` holds the ids of containers on the current path.
        """
        if isinstance(value, ByteString):
            self.write_byte_string(buf, value.data)
        elif isinstance(value, Integer):
            if value.width is IntegerWidth.UNSIGNED:
                self.write_unsigned_integer(buf, value.value)
            else:
                self.write_integer(buf, value.value)
        elif isinstance(value, List):
            self.write_list(buf, value.items, active)
        elif isinstance(value, Dictionary):
            self.write_dictionary(buf, value.entries, active)
        elif isinstance(value, (bytes, bytearray, memoryview)):
            self.write_byte_string(buf, bytes(value))
        elif isinstance(value, str):
            self.write_byte_string(buf, value.encode("utf-8"))
        elif isinstance(value, int) and not isinstance(value, bool):
            if INT64_MIN <= value <= INT64_MAX:
                self.write_integer(buf, value)
            elif 0 <= value <= UINT64_MAX:
                self.write_unsigned_integer(buf, value)
            else:
                self._unsupported(value, f"integer {value} is outside the 64-bit range")
        elif isinstance(value, (list, tuple)):
            self.write_list(buf, value, active)
        elif isinstance(value, dict):
            self.write_dictionary(buf, value, active)
        else:
            self._unsupported(value, f"cannot bencode type {type(value).__name__}")

    def _unsupported(self, value: Any, message: str) -> None:
        if self.strict:
            raise BencodeEncodeError(message, {"type": type(value).__name__})
        logger.warning("Skipping unsupported value: %s", message)

    def write_byte_string(self, buf: bytearray, data: bytes) -> None:
        """Append ``<length>:<data>``."""
        buf += str(len(data)).encode("ascii")
        buf += b":"
        buf += data

    def write_integer(self, buf: bytearray, value: int) -> None:
        """Append a signed 64-bit integer."""
        buf += b"i%de" % value

    def write_unsigned_integer(self, buf: bytearray, value: int) -> None:
        """Append an integer above the signed 64-bit range."""
        buf += b"i%de" % value

    def write_list(self, buf: bytearray, items: Any, active: set[int]) -> None:
        """Append ``l<items>e`` in original order."""
        self._check_depth(active)
        with _Visit(items, active):
            buf += b"l"
            for item in items:
                self.write_value(buf, item, active)
            buf += b"e"

    def write_dictionary(self, buf: bytearray, entries: dict, active: set[int]) -> None:
        """Append ``d<sorted pairs>e``."""
        self._check_depth(active)
        with _Visit(entries, active):
            buf += b"d"
            for key, value in _sorted_entries(entries):
                self.write_byte_string(buf, key)
                self.write_value(buf, value, active)
            buf += b"e"

    def _check_depth(self, active: set[int]) -> None:
        # active holds exactly the containers enclosing the one being entered
        if len(active) >= self.max_depth:
            msg = f"nesting deeper than {self.max_depth}"
            raise BencodeEncodeError(msg, {"max_depth": self.max_depth})


class _Visit:
    """Marks a container as being on the current encoding path."""

    def __init__(self, container: Any, active: set[int]):
        self.ident = id(container)
        self.active = active

    def __enter__(self) -> None:
        if self.ident in self.active:
            msg = "cannot bencode a cyclic structure"
            raise BencodeEncodeError(msg)
        self.active.add(self.ident)

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.active.discard(self.ident)
        return False


def _sorted_entries(entries: dict) -> list[tuple[bytes, Any]]:
    """Normalize keys to bytes and sort them byte-wise."""
    normalized: dict[bytes, Any] = {}
    for key, value in entries.items():
        if isinstance(key, str):
            raw = key.encode("utf-8")
        elif isinstance(key, (bytes, bytearray, memoryview)):
            raw = bytes(key)
        elif isinstance(key, ByteString):
            raw = key.data
        else:
            msg = f"dictionary keys must be bytes or str, got {type(key).__name__}"
            raise BencodeEncodeError(msg)
        if raw in normalized:
            msg = f"duplicate dictionary key after encoding: {raw!r}"
            raise BencodeEncodeError(msg)
        normalized[raw] = value
    return sorted(normalized.items(), key=lambda item: item[0])


def encode(value: Any, config: CodecConfig | None = None, *, strict: bool = True) -> bytes:
    """Encode a value tree (or plain Python data) to canonical bencode."""
    if config is not None:
        return BencodeEncoder.from_config(config).encode(value)
    return BencodeEncoder(strict=strict).encode(value)
