"""Exception hierarchy for bencodec.

Every decode failure is a ``BencodeDecodeError`` subclass carrying the
error kind and the consumed-byte offset at which it was detected.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar


class BencodecError(Exception):
    """Base exception for all bencodec errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize bencodec error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ValidationError(BencodecError):
    """Data validation errors."""


class ConfigurationError(ValidationError):
    """Configuration validation errors."""


class BencodeError(ValidationError):
    """Bencode encoding/decoding errors."""


class DecodeErrorKind(str, Enum):
    """Kinds of decode failure."""

    UNEXPECTED_EOF = "unexpected_eof"
    INVALID_TYPE_TAG = "invalid_type_tag"
    INVALID_INTEGER_START = "invalid_integer_start"
    LEADING_ZERO = "leading_zero"
    NEGATIVE_ZERO = "negative_zero"
    INVALID_CHARACTER = "invalid_character"
    INTEGER_OVERFLOW = "integer_overflow"
    NEGATIVE_LENGTH = "negative_length"
    LENGTH_OVERFLOW = "length_overflow"
    IO_ERROR = "io_error"
    NESTING_TOO_DEEP = "nesting_too_deep"
    TRAILING_DATA = "trailing_data"


class BencodeDecodeError(BencodeError):
    """Malformed or unreadable bencode input.

    The offset is best-effort and meant for humans reading the message; it
    is not a resume point.
    """

    kind: ClassVar[DecodeErrorKind]

    def __init__(
        self,
        message: str,
        offset: int,
        details: dict[str, Any] | None = None,
    ):
        """Initialize decode error."""
        super().__init__(f"bencode: {message} at offset 0x{offset:X}", details)
        self.offset = offset


class UnexpectedEOFError(BencodeDecodeError):
    """Input ended in the middle of a value."""

    kind = DecodeErrorKind.UNEXPECTED_EOF


class InvalidTypeTagError(BencodeDecodeError):
    """A value started with a byte that is not a type tag."""

    kind = DecodeErrorKind.INVALID_TYPE_TAG

    def __init__(self, message: str, offset: int, byte: int):
        """Initialize with the offending byte."""
        super().__init__(message, offset, {"byte": bytes([byte])})
        self.byte = byte


class InvalidIntegerStartError(BencodeDecodeError):
    """Integer token does not begin with a digit or minus sign."""

    kind = DecodeErrorKind.INVALID_INTEGER_START


class LeadingZeroError(BencodeDecodeError):
    """Multi-digit number with a leading zero."""

    kind = DecodeErrorKind.LEADING_ZERO


class NegativeZeroError(BencodeDecodeError):
    """Number starting with ``-0``."""

    kind = DecodeErrorKind.NEGATIVE_ZERO


class InvalidCharacterError(BencodeDecodeError):
    """Non-digit inside a number."""

    kind = DecodeErrorKind.INVALID_CHARACTER


class IntegerOverflowError(BencodeDecodeError):
    """Integer fits neither signed nor unsigned 64-bit."""

    kind = DecodeErrorKind.INTEGER_OVERFLOW


class NegativeLengthError(BencodeDecodeError):
    """Byte string declared a negative length."""

    kind = DecodeErrorKind.NEGATIVE_LENGTH


class LengthOverflowError(BencodeDecodeError):
    """Byte string length does not fit signed 64-bit."""

    kind = DecodeErrorKind.LENGTH_OVERFLOW


class SourceReadError(BencodeDecodeError):
    """The underlying byte source failed."""

    kind = DecodeErrorKind.IO_ERROR


class NestingTooDeepError(BencodeDecodeError):
    """Lists and dictionaries nested beyond the configured depth."""

    kind = DecodeErrorKind.NESTING_TOO_DEEP


class TrailingDataError(BencodeDecodeError):
    """Bytes left over after the top-level dictionary."""

    kind = DecodeErrorKind.TRAILING_DATA


class BencodeEncodeError(BencodeError):
    """A value cannot be represented in bencode."""
