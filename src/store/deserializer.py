"""Artifact reader.

Structural and checksum failures reject the whole artifact. Problems
confined to a single header row only drop that record; each one is
reported as a ``RowDiagnostic`` on the returned ``LoadReport``.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any

from core.constants import (
    FOOTER,
    HEAD_END_MARKER,
    HEAD_MARKER,
    HEADER_FIELD_COUNT,
    MAGIC_LINE,
    RESERVED_ID_PREFIX,
    TEXT_ENCODING,
)
from core.errors import SdbChecksumError, SdbEncodeError, SdbFormatError, SdbValidationError
from core.logging_config import get_logger
from core.types import DataSpan, RecordContent, RecordMetadata, RecordType, RowDiagnostic
from store.codec import decode_header_row, decode_value, utf16_length, verify_checksum
from store.object_store import ObjectStore

_LOGGER = get_logger(__name__)

_MAGIC_PREFIX = f"{MAGIC_LINE}\n".encode(TEXT_ENCODING)
_HEAD_LINE = f"\n{HEAD_MARKER}\n".encode(TEXT_ENCODING)
_HEAD_END_LINE = f"\n{HEAD_END_MARKER}".encode(TEXT_ENCODING)
_FOOTER = FOOTER.encode(TEXT_ENCODING)


@dataclass(frozen=True)
class LoadReport:
    """Result of reading one artifact.

    Attributes:
        store: Store rebuilt from every row that could be loaded.
        written_at_ms: Timestamp line of the artifact.
        checksum: Verified payload checksum.
        comment: Artifact comment text.
        comment_length_matches: Whether the declared comment length
            agreed with the comment text.
        diagnostics: Header rows left out of ``store`` and why.
    """

    store: ObjectStore
    written_at_ms: int
    checksum: str
    comment: str
    comment_length_matches: bool
    diagnostics: tuple[RowDiagnostic, ...]


class DataRegion:
    """Read side of the data region written by ``DataCursor``."""

    def __init__(self, data: bytes) -> None:
        self._data = data

    def __len__(self) -> int:
        return len(self._data)

    def contains(self, span: DataSpan) -> bool:
        return span.position >= 0 and span.length >= 0 and span.end <= len(self._data)

    def extract(self, span: DataSpan) -> bytes:
        return self._data[span.position:span.end]


class _RowSkipped(Exception):
    """Internal signal that one header row cannot be loaded."""

    def __init__(self, reason: str, object_id: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.object_id = object_id


def deserialize(artifact: bytes | str) -> ObjectStore:
    """Rebuild an object store from artifact bytes.

    Args:
        artifact: Artifact bytes, or text that is UTF-8 encoded first.

    Returns:
        The rebuilt store.

    Raises:
        SdbFormatError: If the artifact structure is invalid.
        SdbChecksumError: If the payload checksum does not match.
    """
    return load_artifact(artifact).store


def load_artifact(artifact: bytes | str) -> LoadReport:
    """Verify and parse an artifact, keeping row diagnostics.

    Args:
        artifact: Artifact bytes, or text that is UTF-8 encoded first.

    Returns:
        Load report with the rebuilt store.

    Raises:
        SdbFormatError: If the artifact structure is invalid.
        SdbChecksumError: If the payload checksum does not match.
    """
    raw = artifact.encode(TEXT_ENCODING) if isinstance(artifact, str) else bytes(artifact)
    if not raw.startswith(_MAGIC_PREFIX):
        raise SdbFormatError(
            f"Invalid artifact: expected magic line '{MAGIC_LINE}'."
        )
    timestamp_line, checksum_offset = _read_line(raw, len(_MAGIC_PREFIX), "timestamp")
    checksum_line, payload_offset = _read_line(raw, checksum_offset, "checksum")
    written_at_ms = _parse_timestamp(timestamp_line)
    checksum = checksum_line.decode(TEXT_ENCODING, errors="replace").strip().lower()
    payload = raw[payload_offset:]
    if not verify_checksum(payload, checksum):
        raise SdbChecksumError(
            f"Artifact checksum mismatch: header declares '{checksum}'. "
            "The artifact is corrupt or was modified."
        )
    if not payload.endswith(_FOOTER):
        raise SdbFormatError(f"Invalid artifact: missing '{FOOTER.strip()}' footer.")
    comment, comment_length_matches, head_offset = _locate_head(payload)
    head_end_offset = payload.find(_HEAD_END_LINE, head_offset)
    if head_end_offset < 0:
        raise SdbFormatError(f"Invalid artifact: missing '{HEAD_END_MARKER}' marker.")
    data_start = head_end_offset + len(_HEAD_END_LINE)
    data_end = len(payload) - len(_FOOTER)
    if data_end < data_start:
        raise SdbFormatError(f"Invalid artifact: '{FOOTER.strip()}' footer overlaps the header.")
    rows = payload[head_offset + len(_HEAD_LINE):head_end_offset]
    region = DataRegion(payload[data_start:data_end])
    store, diagnostics = _load_rows(rows, region)
    _LOGGER.info(
        "artifact_loaded",
        record_count=len(store),
        skipped_rows=len(diagnostics),
        checksum=checksum,
    )
    return LoadReport(
        store=store,
        written_at_ms=written_at_ms,
        checksum=checksum,
        comment=comment,
        comment_length_matches=comment_length_matches,
        diagnostics=tuple(diagnostics),
    )


def _read_line(raw: bytes, offset: int, label: str) -> tuple[bytes, int]:
    """Return the line starting at ``offset`` and the next line offset.

    Raises:
        SdbFormatError: If no newline terminates the line.
    """
    line_end = raw.find(b"\n", offset)
    if line_end < 0:
        raise SdbFormatError(f"Invalid artifact: missing {label} line.")
    return raw[offset:line_end], line_end + 1


def _parse_timestamp(line: bytes) -> int:
    try:
        return int(line.decode(TEXT_ENCODING).strip())
    except (UnicodeDecodeError, ValueError) as error:
        raise SdbFormatError(
            f"Invalid artifact: timestamp line {line!r} is not an integer."
        ) from error


def _locate_head(payload: bytes) -> tuple[str, bool, int]:
    """Find the HEAD line and parse the comment line before it.

    The declared comment length is tried first so that comments
    containing newlines or the marker text still parse. When it does
    not lead to the marker, the first HEAD line is used instead.

    Returns:
        Comment, whether its declared length matched, and the offset of
        the newline that opens the HEAD line.

    Raises:
        SdbFormatError: If no HEAD line exists.
    """
    space_offset = payload.find(b" ")
    declared = _declared_comment_length(payload, space_offset)
    if declared is not None:
        tail = payload[space_offset + 1:].decode(TEXT_ENCODING, errors="surrogateescape")
        candidate = _take_utf16_units(tail, declared)
        head_offset = space_offset + 1 + len(candidate.encode(TEXT_ENCODING, errors="surrogateescape"))
        if utf16_length(candidate) == declared and payload.startswith(_HEAD_LINE, head_offset):
            return _clean_text(candidate), True, head_offset
    head_offset = payload.find(_HEAD_LINE)
    if head_offset < 0:
        raise SdbFormatError(f"Invalid artifact: missing '{HEAD_MARKER}' marker.")
    length_text, _, comment_bytes = payload[:head_offset].partition(b" ")
    comment = comment_bytes.decode(TEXT_ENCODING, errors="replace")
    _LOGGER.warning(
        "artifact_comment_length_mismatch",
        declared=length_text.decode(TEXT_ENCODING, errors="replace"),
        actual=utf16_length(comment),
    )
    return comment, False, head_offset


def _take_utf16_units(text: str, units: int) -> str:
    """Return the longest prefix of ``text`` spanning at most ``units`` UTF-16 units."""
    taken = 0
    for index, char in enumerate(text):
        taken += 2 if ord(char) > 0xFFFF else 1
        if taken > units:
            return text[:index]
    return text


def _declared_comment_length(payload: bytes, space_offset: int) -> int | None:
    if space_offset <= 0:
        return None
    length_text = payload[:space_offset]
    if not length_text.isdigit():
        return None
    return int(length_text)


def _clean_text(text: str) -> str:
    return text.encode(TEXT_ENCODING, errors="surrogateescape").decode(
        TEXT_ENCODING, errors="replace"
    )


def _load_rows(rows: bytes, region: DataRegion) -> tuple[ObjectStore, list[RowDiagnostic]]:
    store = ObjectStore()
    diagnostics: list[RowDiagnostic] = []
    for row_index, line in enumerate(rows.split(b"\n")):
        if not line.strip():
            continue
        try:
            object_id, content, metadata = _load_row(line, region)
            store.restore(object_id, content, metadata)
        except _RowSkipped as skipped:
            diagnostic = RowDiagnostic(
                row_index=row_index,
                object_id=skipped.object_id,
                reason=skipped.reason,
            )
            diagnostics.append(diagnostic)
            _LOGGER.warning(
                "artifact_row_skipped",
                row_index=row_index,
                object_id=skipped.object_id,
                reason=skipped.reason,
            )
    return store, diagnostics


def _load_row(line: bytes, region: DataRegion) -> tuple[str, RecordContent, RecordMetadata]:
    """Parse one header row and decode its value.

    Raises:
        _RowSkipped: If the row cannot be loaded.
    """
    fields = _parse_row_fields(line)
    object_id, type_tag, created_at, modified_at, version, position, length = fields
    if not isinstance(object_id, str) or not object_id:
        raise _RowSkipped("identifier is not a non-empty string")
    if object_id.startswith(RESERVED_ID_PREFIX):
        raise _RowSkipped(f"identifier uses reserved prefix '{RESERVED_ID_PREFIX}'", object_id)
    try:
        record_type = RecordType.parse(type_tag)
    except SdbValidationError:
        raise _RowSkipped(f"unknown record type {type_tag!r}", object_id) from None
    if not all(_is_integer(value) for value in (created_at, modified_at, version)):
        raise _RowSkipped("timestamps and version must be integers", object_id)
    if not (_is_integer(position) and _is_integer(length)):
        raise _RowSkipped("position and length must be integers", object_id)
    span = DataSpan(position=position, length=length)
    if not region.contains(span):
        raise _RowSkipped(
            f"span [{position}, {span.end}) is outside the data region of {len(region)} bytes",
            object_id,
        )
    try:
        content = decode_value(region.extract(span).decode(TEXT_ENCODING), record_type)
    except (UnicodeDecodeError, SdbEncodeError) as error:
        raise _RowSkipped(f"value cannot be decoded: {error}", object_id) from None
    metadata = RecordMetadata(
        created_at_ms=created_at,
        modified_at_ms=modified_at,
        version=version,
        record_type=record_type,
    )
    return object_id, content, metadata


def _parse_row_fields(line: bytes) -> list[Any]:
    try:
        fields = decode_header_row(line.decode(TEXT_ENCODING))
    except UnicodeDecodeError:
        raise _RowSkipped("row is not valid UTF-8") from None
    except json.JSONDecodeError as error:
        raise _RowSkipped(f"row is not valid JSON: {error.msg}") from None
    if len(fields) != HEADER_FIELD_COUNT:
        object_id = fields[0] if fields and isinstance(fields[0], str) else None
        raise _RowSkipped(
            f"expected {HEADER_FIELD_COUNT} fields, got {len(fields)}",
            object_id,
        )
    return fields


def _is_integer(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
