"""Bencode value model.

A decoded document is a tree of exactly four variants: ``ByteString``,
``Integer``, ``List`` and ``Dictionary``. ``Value`` is their union, so code
consuming a tree can match exhaustively on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Union

from bencodec.utils.exceptions import BencodeEncodeError

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MAX = (1 << 64) - 1


class IntegerWidth(str, Enum):
    """Machine representation an integer needs."""

    SIGNED = "signed"
    UNSIGNED = "unsigned"


@dataclass(frozen=True)
class ByteString:
    """Raw byte string. Not necessarily valid text."""

    data: bytes

    def __post_init__(self) -> None:
        """Normalize bytes-like input to ``bytes``."""
        if isinstance(self.data, (bytearray, memoryview)):
            object.__setattr__(self, "data", bytes(self.data))
        elif not isinstance(self.data, bytes):
            msg = f"ByteString requires bytes, got {type(self.data).__name__}"
            raise TypeError(msg)

    def __bytes__(self) -> bytes:
        return self.data

    def __len__(self) -> int:
        return len(self.data)

    def text(self, encoding: str = "utf-8") -> str:
        """Decode the bytes as text, raising ``UnicodeDecodeError`` if invalid."""
        return self.data.decode(encoding)


@dataclass(frozen=True)
class Integer:
    """Whole number in the signed or unsigned 64-bit range."""

    value: int

    def __post_init__(self) -> None:
        """Reject non-integers and values outside ``[INT64_MIN, UINT64_MAX]``."""
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            msg = f"Integer requires int, got {type(self.value).__name__}"
            raise TypeError(msg)
        if not INT64_MIN <= self.value <= UINT64_MAX:
            msg = f"Integer {self.value} is outside the 64-bit range"
            raise ValueError(msg)

    @property
    def width(self) -> IntegerWidth:
        """``UNSIGNED`` only for values above ``INT64_MAX``."""
        if self.value > INT64_MAX:
            return IntegerWidth.UNSIGNED
        return IntegerWidth.SIGNED

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value


@dataclass
class List:
    """Ordered sequence of values."""

    items: list[Value] = field(default_factory=list)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> Value:
        return self.items[index]

    def append(self, value: Value) -> None:
        """Append a value at the end."""
        self.items.append(value)


def _key(key: bytes | str) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8")
    return bytes(key)


@dataclass
class Dictionary:
    """Mapping of byte-string keys to values.

    The mapping itself is unordered as far as bencode is concerned; the
    encoder sorts keys. ``str`` keys are accepted for lookup and stored as
    their UTF-8 encoding.
    """

    entries: dict[bytes, Value] = field(default_factory=dict)

    def __getitem__(self, key: bytes | str) -> Value:
        return self.entries[_key(key)]

    def __setitem__(self, key: bytes | str, value: Value) -> None:
        self.entries[_key(key)] = value

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (bytes, str)):
            return False
        return _key(key) in self.entries

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, key: bytes | str, default: Value | None = None) -> Value | None:
        """Return the value for ``key`` or ``default``."""
        return self.entries.get(_key(key), default)

    def items(self):
        """Entries in mapping order."""
        return self.entries.items()

    def sorted_items(self) -> list[tuple[bytes, Value]]:
        """Entries in canonical (byte-wise ascending key) order."""
        return sorted(self.entries.items(), key=lambda item: item[0])


Value = Union[ByteString, Integer, List, Dictionary]


def to_python(value: Value) -> Any:
    """Convert a value tree to plain ``bytes``/``int``/``list``/``dict``."""
    if isinstance(value, ByteString):
        return value.data
    if isinstance(value, Integer):
        return value.value
    if isinstance(value, List):
        return [to_python(item) for item in value.items]
    if isinstance(value, Dictionary):
        return {key: to_python(item) for key, item in value.entries.items()}
    msg = f"Not a bencode value: {type(value).__name__}"
    raise TypeError(msg)


def from_python(obj: Any) -> Value:
    """Build a value tree from plain Python objects.

    ``str`` becomes its UTF-8 bytes, tuples become lists. Value instances
    are returned unchanged.

    Raises:
        BencodeEncodeError: for unsupported types, integers outside the
            64-bit range, bad dictionary keys, or keys that collide once
            encoded.

    """
    if isinstance(obj, (ByteString, Integer, List, Dictionary)):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return ByteString(bytes(obj))
    if isinstance(obj, str):
        return ByteString(obj.encode("utf-8"))
    if isinstance(obj, int) and not isinstance(obj, bool):
        if not INT64_MIN <= obj <= UINT64_MAX:
            msg = f"Integer {obj} is outside the 64-bit range"
            raise BencodeEncodeError(msg)
        return Integer(obj)
    if isinstance(obj, (list, tuple)):
        return List([from_python(item) for item in obj])
    if isinstance(obj, dict):
        result = Dictionary()
        for key, item in obj.items():
            if not isinstance(key, (bytes, str)):
                msg = f"Dictionary keys must be bytes or str, got {type(key).__name__}"
                raise BencodeEncodeError(msg)
            if key in result:
                msg = f"Duplicate dictionary key after encoding: {key!r}"
                raise BencodeEncodeError(msg)
            result[key] = from_python(item)
        return result
    msg = f"Cannot bencode type {type(obj).__name__}"
    raise BencodeEncodeError(msg)
