"""Unit tests for the value codec and checksum helpers."""

from __future__ import annotations

import hashlib

import pytest

from core.errors import SdbEncodeError
from core.types import RecordType
from store.codec import (
    compute_checksum,
    decode_header_row,
    decode_value,
    encode_header_row,
    encode_value,
    verify_checksum,
)


def test_encode_value_base64_encodes_binary() -> None:
    """Binary content should be written as base64 text."""
    encoded = encode_value(b"\x00\xffhi", RecordType.BINARY)

    assert encoded == "AP9oaQ=="


def test_encode_value_keeps_plain_text_raw() -> None:
    """Text that is not a JSON document should be written unchanged."""
    encoded = encode_value("Hello!", RecordType.TEXT)

    assert encoded == "Hello!"


@pytest.mark.parametrize("text", ["123", "true", "null", '"quoted"', "[1, 2]", " 7 "])
def test_text_that_looks_like_json_survives_decode(text: str) -> None:
    """Strings that parse as JSON should be quoted so decoding returns them."""
    encoded = encode_value(text, RecordType.TEXT)

    assert decode_value(encoded, RecordType.TEXT) == text


def test_encode_value_json_encodes_structured_text() -> None:
    """Non-string text content should be JSON encoded."""
    encoded = encode_value({"k": [1, 2]}, RecordType.TEXT)

    assert decode_value(encoded, RecordType.TEXT) == {"k": [1, 2]}


def test_encode_value_rejects_str_for_binary_types() -> None:
    """Binary types should require bytes content."""
    with pytest.raises(SdbEncodeError):
        encode_value("not bytes", RecordType.FILE)


def test_encode_value_rejects_unserializable_text() -> None:
    """Content that JSON cannot represent should raise an encode error."""
    with pytest.raises(SdbEncodeError):
        encode_value(object(), RecordType.TEXT)


def test_decode_value_rejects_invalid_base64() -> None:
    """Invalid base64 for binary types should raise an encode error."""
    with pytest.raises(SdbEncodeError):
        decode_value("!!!", RecordType.BINARY)


def test_header_row_is_bracketless_compact_json() -> None:
    """Header rows should drop the array brackets and parse back."""
    row = encode_header_row(["greeting", "TEXT", 1, 2, 1, 4, 6])

    assert row == '"greeting","TEXT",1,2,1,4,6' and decode_header_row(row)[0] == "greeting"


def test_compute_checksum_is_md5_hex_of_payload() -> None:
    """Checksum should be the MD5 hex digest of the exact bytes."""
    payload = b"0 \nHEAD\nHEAD END\nEND"

    assert compute_checksum(payload) == hashlib.md5(payload).hexdigest()


def test_verify_checksum_detects_changed_payload() -> None:
    """Verification should fail once the payload differs."""
    checksum = compute_checksum(b"payload")

    assert verify_checksum(b"payload", checksum) and not verify_checksum(b"Payload", checksum)
