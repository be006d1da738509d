"""Value codec and checksum helpers for artifacts.

Pure functions shared by the serializer and deserializer: type-aware
value encoding, header row encoding and payload checksums.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
from typing import Any

from core.constants import HASH_ALGORITHM
from core.errors import SdbEncodeError
from core.types import RecordContent, RecordType


def encode_value(value: RecordContent, record_type: RecordType) -> str:
    """Encode record content into its artifact text form.

    Binary and file content is base64 encoded. Strings are written raw
    unless they would themselves parse as JSON, in which case they are
    JSON-quoted so that ``decode_value`` returns the same string.

    Args:
        value: Record content.
        record_type: Record type selecting the encoding.

    Returns:
        Encoded text.

    Raises:
        SdbEncodeError: If the content cannot be represented as text.
    """
    if record_type.is_binary:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise SdbEncodeError(
                f"Cannot encode {record_type.value} content of type "
                f"{type(value).__name__}: expected bytes."
            )
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, str):
        return json.dumps(value) if _is_json_document(value) else value
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as error:
        raise SdbEncodeError(
            f"Cannot encode {record_type.value} content of type "
            f"{type(value).__name__} as JSON: {error}"
        ) from error


def decode_value(text: str, record_type: RecordType) -> RecordContent:
    """Decode artifact text back into record content.

    Args:
        text: Encoded value extracted from the data region.
        record_type: Record type from the header row.

    Returns:
        Raw bytes for binary types, otherwise the JSON-decoded value
        or the raw text when it is not a JSON document.

    Raises:
        SdbEncodeError: If binary content is not valid base64.
    """
    if record_type.is_binary:
        try:
            return base64.b64decode(text.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as error:
            raise SdbEncodeError(f"Invalid base64 content: {error}") from error
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def encode_header_row(fields: list[Any]) -> str:
    """Encode header fields as a JSON array without its brackets."""
    return json.dumps(fields, ensure_ascii=False, separators=(",", ":"))[1:-1]


def decode_header_row(line: str) -> list[Any]:
    """Parse a bracket-less header row.

    Args:
        line: One header line.

    Returns:
        Parsed field list.

    Raises:
        json.JSONDecodeError: If the row is not valid JSON.
    """
    fields = json.loads(f"[{line}]")
    return fields


def compute_checksum(payload: bytes) -> str:
    """Return the lower-case hex digest of the exact payload bytes."""
    return hashlib.new(HASH_ALGORITHM, payload).hexdigest()


def verify_checksum(payload: bytes, expected: str) -> bool:
    """Check a payload against a hex digest."""
    return compute_checksum(payload) == expected.strip().lower()


def _is_json_document(text: str) -> bool:
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return False
    return True


def utf16_length(text: str) -> int:
    """Count UTF-16 code units, the unit of the declared comment length."""
    return len(text.encode("utf-16-le", errors="surrogatepass")) // 2
