"""Property-based tests for bencode encoding/decoding.

Tests invariants and properties of the bencode implementation
using Hypothesis for automatic test case generation.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from bencodec.core.decoder import BencodeDecoder, decode, decode_value
from bencodec.core.encoder import encode
from bencodec.core.values import (
    INT64_MIN,
    UINT64_MAX,
    ByteString,
    Dictionary,
    Integer,
    List,
    to_python,
)

pytestmark = [pytest.mark.property]

byte_strings = st.binary(max_size=64).map(ByteString)
integers = st.integers(min_value=INT64_MIN, max_value=UINT64_MAX).map(Integer)

values = st.recursive(
    byte_strings | integers,
    lambda children: (
        st.lists(children, max_size=5).map(List)
        | st.dictionaries(st.binary(max_size=16), children, max_size=5).map(Dictionary)
    ),
    max_leaves=25,
)

documents = st.dictionaries(st.binary(max_size=16), values, max_size=6).map(Dictionary)

# Plain Python trees, including str keys and insertion orders that are not sorted
plain_values = st.recursive(
    st.binary(max_size=32) | st.text(max_size=16) | st.integers(min_value=INT64_MIN, max_value=UINT64_MAX),
    lambda children: (
        st.lists(children, max_size=5)
        | st.dictionaries(st.text(max_size=8), children, max_size=5)
    ),
    max_leaves=25,
)


class TestBencodeProperties:
    """Property-based tests for bencode operations."""

    @given(values)
    def test_value_roundtrip(self, value):
        """Test that decoding the encoding of any tree reconstructs it."""
        assert decode_value(encode(value)) == value

    @given(documents)
    def test_document_roundtrip(self, document):
        """Test that top-level dictionaries survive decode(encode(v))."""
        assert decode(encode(document)) == document

    @given(plain_values)
    def test_canonicalization_idempotent(self, obj):
        """Test encode(decode(encode(v))) == encode(v)."""
        encoded = encode(obj)
        assert encode(decode_value(encoded)) == encoded

    @given(values)
    def test_encoding_deterministic(self, value):
        """Test that multiple encodings are identical."""
        assert encode(value) == encode(value)

    @given(values)
    def test_plain_python_equivalent(self, value):
        """Test a tree and its plain Python form encode identically."""
        assert encode(to_python(value)) == encode(value)

    @given(integers)
    def test_integer_width_preserved(self, value):
        """Test decoded integers keep their signed/unsigned class."""
        decoded = decode_value(encode(value))
        assert decoded.width is value.width

    @given(st.binary())
    def test_string_encoding_properties(self, data):
        """Test properties of binary string encoding."""
        encoded = encode(data)

        colon_pos = encoded.find(b":")
        assert int(encoded[:colon_pos].decode("ascii")) == len(data)
        assert encoded[colon_pos + 1 :] == data

    @given(st.integers(min_value=INT64_MIN, max_value=UINT64_MAX))
    def test_integer_encoding_properties(self, i):
        """Test properties of integer encoding."""
        assert encode(i) == b"i" + str(i).encode("ascii") + b"e"

    @given(documents)
    def test_dictionary_keys_sorted_in_output(self, document):
        """Test the top-level keys appear in ascending byte order."""
        decoder = BencodeDecoder(encode(document))
        decoder.cursor.read_byte()
        keys = []
        while True:
            b = decoder.cursor.read_byte()
            if b == ord("e"):
                break
            decoder.cursor.unread_byte()
            keys.append(decoder.decode_value().data)
            decoder.decode_value()
        assert keys == sorted(keys)

    @given(values)
    def test_decoder_position_invariant(self, value):
        """Test that the decoder consumes exactly the encoded bytes."""
        encoded = encode(value)
        decoder = BencodeDecoder(encoded + b"trailing")
        assert decoder.decode_value() == value
        assert decoder.offset == len(encoded)

    @given(st.binary(max_size=64))
    def test_arbitrary_input_fails_cleanly(self, data):
        """Test garbage either decodes or raises a decode error, nothing else."""
        from bencodec.utils.exceptions import BencodeDecodeError

        try:
            result = decode(data)
        except BencodeDecodeError:
            return
        assert isinstance(result, Dictionary)
