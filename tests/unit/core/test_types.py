"""Unit tests for shared record types."""

from __future__ import annotations

import pytest

from core.errors import SdbValidationError
from core.types import DataSpan, RecordType


def test_record_type_parses_wire_tags() -> None:
    """Wire tags should resolve to their enum members."""
    parsed = [RecordType.parse(tag) for tag in ("TEXT", "BIN", "FILE", "DIR")]

    assert parsed == [RecordType.TEXT, RecordType.BINARY, RecordType.FILE, RecordType.DIRECTORY]


def test_record_type_rejects_unknown_tag() -> None:
    """Unknown wire tags should be rejected as validation errors."""
    with pytest.raises(SdbValidationError):
        RecordType.parse("BLOB")


def test_only_file_and_binary_are_binary_types() -> None:
    """File and Binary content should be the byte-encoded types."""
    binary_types = {record_type for record_type in RecordType if record_type.is_binary}

    assert binary_types == {RecordType.BINARY, RecordType.FILE}


def test_data_span_end_is_exclusive() -> None:
    """Span end should be position plus length."""
    span = DataSpan(position=4, length=6)

    assert span.end == 10
