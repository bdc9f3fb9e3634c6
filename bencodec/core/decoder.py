"""Bencode decoder.

Reads a byte source left to right through a cursor with one byte of
pushback. The pushback is only used to hand the first digit of a byte
string length back to the length reader after type dispatch.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, BinaryIO, Union

from bencodec.core.values import (
    INT64_MAX,
    INT64_MIN,
    UINT64_MAX,
    ByteString,
    Dictionary,
    Integer,
    List,
    Value,
)
from bencodec.utils.exceptions import (
    IntegerOverflowError,
    InvalidCharacterError,
    InvalidIntegerStartError,
    InvalidTypeTagError,
    LeadingZeroError,
    LengthOverflowError,
    NegativeLengthError,
    NegativeZeroError,
    NestingTooDeepError,
    SourceReadError,
    TrailingDataError,
    UnexpectedEOFError,
)

if TYPE_CHECKING:
    from bencodec.models import CodecConfig

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, memoryview, BinaryIO]

DEFAULT_MAX_DEPTH = 256
DEFAULT_CHUNK_SIZE = 64 * 1024

_DIGITS = frozenset(b"0123456789")
_MINUS = ord("-")
_ZERO = ord("0")

# int64 minimum has 19 digits plus sign, uint64 maximum has 20 digits
_MAX_NUMBER_TOKEN = 20


class ByteCursor:
    """Forward-only reader over a byte source with a one-byte lookahead slot.

    ``offset`` counts bytes handed out and not pushed back.
    """

    def __init__(self, source: Source, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """Initialize cursor over ``bytes``-like data or a binary stream."""
        if isinstance(source, (bytes, bytearray, memoryview)):
            self._buf = bytes(source)
            self._stream: BinaryIO | None = None
        elif hasattr(source, "read"):
            self._buf = b""
            self._stream = source
        else:
            msg = f"Cannot decode from {type(source).__name__}"
            raise TypeError(msg)
        self._pos = 0
        self._chunk_size = chunk_size
        self._pushback: int | None = None
        self._last: int | None = None
        self.offset = 0

    def _fill(self) -> bool:
        """Refill the buffer from the stream. Returns False at end of input."""
        if self._stream is None:
            return False
        try:
            chunk = self._stream.read(self._chunk_size)
        except OSError as e:
            msg = f"read failed: {e}"
            raise SourceReadError(msg, self.offset) from e
        if not chunk:
            self._stream = None
            return False
        self._buf = bytes(chunk)
        self._pos = 0
        return True

    def read_byte(self) -> int | None:
        """Return the next byte, or None at end of input."""
        if self._pushback is not None:
            b = self._pushback
            self._pushback = None
        else:
            if self._pos >= len(self._buf) and not self._fill():
                return None
            b = self._buf[self._pos]
            self._pos += 1
        self._last = b
        self.offset += 1
        return b

    def unread_byte(self) -> None:
        """Push the most recently read byte back. Only one byte may be pending."""
        if self._last is None or self._pushback is not None:
            msg = "unread_byte without a preceding read_byte"
            raise RuntimeError(msg)
        self._pushback = self._last
        self._last = None
        self.offset -= 1

    def read_exact(self, n: int) -> bytes | None:
        """Return exactly ``n`` bytes, or None if the input ends first."""
        parts: list[bytes] = []
        remaining = n
        if remaining and self._pushback is not None:
            parts.append(bytes([self._pushback]))
            self._pushback = None
            remaining -= 1
        while remaining:
            available = len(self._buf) - self._pos
            if available <= 0:
                if not self._fill():
                    self.offset += n - remaining
                    return None
                continue
            take = min(available, remaining)
            parts.append(self._buf[self._pos : self._pos + take])
            self._pos += take
            remaining -= take
        self._last = None
        self.offset += n
        return b"".join(parts)

    def at_end(self) -> bool:
        """True when no bytes remain."""
        if self._pushback is not None:
            return False
        return self._pos >= len(self._buf) and not self._fill()


class BencodeDecoder:
    """Decoder producing a ``Value`` tree from bencoded input."""

    def __init__(
        self,
        source: Source,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        reject_trailing_data: bool = False,
        read_chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """Initialize decoder.

        Args:
            source: ``bytes``-like data or a binary file object with ``read``.
            max_depth: Maximum list/dictionary nesting.
            reject_trailing_data: Fail if bytes follow the top-level dictionary.
            read_chunk_size: Bytes requested per ``read`` on stream sources.

        """
        self.cursor = ByteCursor(source, read_chunk_size)
        self.max_depth = max_depth
        self.reject_trailing_data = reject_trailing_data
        self._depth = 0

    @classmethod
    def from_config(cls, source: Source, config: CodecConfig) -> BencodeDecoder:
        """Create a decoder with options taken from ``CodecConfig``."""
        return cls(
            source,
            max_depth=config.max_depth,
            reject_trailing_data=config.reject_trailing_data,
            read_chunk_size=config.read_chunk_size,
        )

    @property
    def offset(self) -> int:
        """Bytes consumed so far."""
        return self.cursor.offset

    def decode(self) -> Dictionary:
        """Decode a whole document, which must be a dictionary.

        Empty input yields an empty dictionary.
        """
        b = self.cursor.read_byte()
        if b is None:
            return Dictionary()
        if b != ord("d"):
            msg = f"data must begin with a dictionary, got {bytes([b])!r}"
            raise InvalidTypeTagError(msg, self.offset, b)
        try:
            result = self._decode_dictionary()
        except RecursionError as e:
            raise self._recursion_limit_error() from e
        if self.reject_trailing_data and not self.cursor.at_end():
            msg = "unexpected data after top-level dictionary"
            raise TrailingDataError(msg, self.offset)
        logger.debug("Decoded dictionary with %d keys (%d bytes)", len(result), self.offset)
        return result

    def decode_value(self) -> Value:
        """Decode the next single value of any kind."""
        try:
            return self._decode_value()
        except RecursionError as e:
            raise self._recursion_limit_error() from e

    def _recursion_limit_error(self) -> NestingTooDeepError:
        # max_depth may be set above what the interpreter stack allows
        msg = f"nesting exceeds the interpreter recursion limit ({sys.getrecursionlimit()})"
        return NestingTooDeepError(msg, self.offset)

    def _decode_value(self) -> Value:
        b = self._read_or_eof("value")
        if b == ord("d"):
            return self._decode_dictionary()
        if b == ord("l"):
            return self._decode_list()
        if b == ord("i"):
            return self._decode_integer()
        if b in _DIGITS or b == _MINUS:
            # A leading minus can only be a malformed string length
            self.cursor.unread_byte()
            return self._decode_byte_string()
        msg = f"invalid type {bytes([b])!r}"
        raise InvalidTypeTagError(msg, self.offset, b)

    def _read_or_eof(self, what: str) -> int:
        b = self.cursor.read_byte()
        if b is None:
            msg = f"unexpected end of input while reading {what}"
            raise UnexpectedEOFError(msg, self.offset)
        return b

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > self.max_depth:
            msg = f"nesting deeper than {self.max_depth}"
            raise NestingTooDeepError(msg, self.offset)

    def _decode_dictionary(self) -> Dictionary:
        self._enter()
        result = Dictionary()
        while True:
            b = self._read_or_eof("dictionary")
            if b == ord("e"):
                break
            self.cursor.unread_byte()
            key = self._decode_byte_string().data
            value = self._decode_value()
            if key in result.entries:
                # Last occurrence wins
                logger.debug("Duplicate dictionary key %r at offset %d", key, self.offset)
            result.entries[key] = value
        self._depth -= 1
        return result

    def _decode_list(self) -> List:
        self._enter()
        result = List()
        while True:
            b = self._read_or_eof("list")
            if b == ord("e"):
                break
            self.cursor.unread_byte()
            result.items.append(self._decode_value())
        self._depth -= 1
        return result

    def _decode_byte_string(self) -> ByteString:
        length = self._read_number(ord(":"))
        if not INT64_MIN <= length <= INT64_MAX:
            msg = "string length may not exceed the size of int64"
            raise LengthOverflowError(msg, self.offset)
        if length < 0:
            msg = "string length can not be a negative number"
            raise NegativeLengthError(msg, self.offset)
        data = self.cursor.read_exact(length)
        if data is None:
            msg = f"unexpected end of input in string of length {length}"
            raise UnexpectedEOFError(msg, self.offset)
        return ByteString(data)

    def _decode_integer(self) -> Integer:
        value = self._read_number(ord("e"))
        if INT64_MIN <= value <= INT64_MAX:
            return Integer(value)
        if 0 <= value <= UINT64_MAX:
            return Integer(value)
        msg = f"integer {value} overflows 64 bits"
        raise IntegerOverflowError(msg, self.offset)

    def _read_number(self, delim: int) -> int:
        """Read an optionally signed decimal token up to ``delim``.

        Range checks are left to the caller. Tokens too long to fit 64 bits
        are reported as ``UINT64_MAX + 1`` times their sign, which every
        caller rejects as overflow.
        """
        b = self._read_or_eof("number")
        if b not in _DIGITS and b != _MINUS:
            msg = "integers must begin with a digit or negative sign"
            raise InvalidIntegerStartError(msg, self.offset)
        token = bytearray()
        while b != delim:
            if b not in _DIGITS and not (b == _MINUS and not token):
                msg = f"invalid character {bytes([b])!r} for integer"
                raise InvalidCharacterError(msg, self.offset)
            token.append(b)
            if len(token) == 2:
                if token[0] == _ZERO:
                    msg = "invalid leading zero in integer"
                    raise LeadingZeroError(msg, self.offset)
                if token[0] == _MINUS and b == _ZERO:
                    msg = "invalid negative zero"
                    raise NegativeZeroError(msg, self.offset)
            b = self._read_or_eof("number")
        if token == b"-":
            msg = "integer has no digits"
            raise InvalidCharacterError(msg, self.offset)
        negative = token[0] == _MINUS
        digits = len(token) - 1 if negative else len(token)
        if digits > _MAX_NUMBER_TOKEN:
            overflow = UINT64_MAX + 1
            return -overflow if negative else overflow
        return int(token)


def decode(source: Source, config: CodecConfig | None = None, **options: Any) -> Dictionary:
    """Decode a bencoded document whose top level is a dictionary."""
    if config is not None:
        return BencodeDecoder.from_config(source, config).decode()
    return BencodeDecoder(source, **options).decode()


def decode_value(source: Source, config: CodecConfig | None = None, **options: Any) -> Value:
    """Decode one bencoded value of any kind."""
    if config is not None:
        return BencodeDecoder.from_config(source, config).decode_value()
    return BencodeDecoder(source, **options).decode_value()
