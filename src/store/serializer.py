"""Artifact writer.

This module flattens an object store into one checksum-protected
artifact: a magic line, a timestamp line, the payload checksum and
the payload itself (comment line, header rows, data region, footer).
"""

from __future__ import annotations

from dataclasses import dataclass

from core.constants import (
    FOOTER,
    HEAD_END_MARKER,
    HEAD_MARKER,
    MAGIC_LINE,
    RECORD_TAG,
    TEXT_ENCODING,
)
from core.errors import SdbEncodeError
from core.logging_config import get_logger
from core.types import DataSpan
from store.codec import compute_checksum, encode_header_row, encode_value, utf16_length
from store.object_store import ObjectStore, current_time_ms

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class SerializedArtifact:
    """Artifact bytes with the values written into its top lines.

    Attributes:
        data: Complete artifact bytes.
        checksum: Hex digest of the payload.
        written_at_ms: Timestamp line value.
        record_count: Number of records in the header.
    """

    data: bytes
    checksum: str
    written_at_ms: int
    record_count: int


class DataCursor:
    """Append-only writer for the data region.

    Each append writes the record tag followed by the encoded value and
    returns the span of the value alone, in bytes from the start of the
    region. ``DataRegion.extract`` on the reader side is its inverse.
    """

    def __init__(self, tag: bytes) -> None:
        self._tag = tag
        self._chunks: list[bytes] = []
        self._offset = 0

    def append(self, value: bytes) -> DataSpan:
        """Write one tagged value.

        Args:
            value: Encoded value bytes.

        Returns:
            Span of ``value`` within the region.
        """
        self._chunks.append(self._tag)
        self._offset += len(self._tag)
        span = DataSpan(position=self._offset, length=len(value))
        self._chunks.append(value)
        self._offset += len(value)
        return span

    def getvalue(self) -> bytes:
        return b"".join(self._chunks)


def serialize(
    store: ObjectStore,
    comment: str = "",
    timestamp_ms: int | None = None,
) -> bytes:
    """Serialize a store into artifact bytes.

    See ``build_artifact`` for the arguments.
    """
    return build_artifact(store, comment, timestamp_ms).data


def build_artifact(
    store: ObjectStore,
    comment: str = "",
    timestamp_ms: int | None = None,
) -> SerializedArtifact:
    """Serialize a store into an artifact.

    The comment length is written in UTF-16 code units. The store is
    only read. Pinning ``timestamp_ms`` makes the output
    reproducible for an unchanged store.

    Args:
        store: Store to serialize.
        comment: Free-text comment written into the payload.
        timestamp_ms: Artifact timestamp; wall-clock time when omitted.

    Returns:
        Artifact bytes with its checksum and timestamp.

    Raises:
        SdbEncodeError: If any record content cannot be encoded.
    """
    written_at_ms = current_time_ms() if timestamp_ms is None else timestamp_ms
    cursor = DataCursor(RECORD_TAG.encode(TEXT_ENCODING))
    spans: dict[str, DataSpan] = {}
    for record in store.records():
        encoded = encode_value(record.content, record.record_type)
        spans[record.object_id] = cursor.append(_to_bytes(encoded, record.object_id))
    header_lines = [f"{utf16_length(comment)} {comment}", HEAD_MARKER]
    for object_id, metadata in store.metadata_items():
        span = spans.get(object_id)
        if span is None:
            continue
        header_lines.append(
            encode_header_row(
                [
                    object_id,
                    metadata.record_type.value,
                    metadata.created_at_ms,
                    metadata.modified_at_ms,
                    metadata.version,
                    span.position,
                    span.length,
                ]
            )
        )
    header_lines.append(HEAD_END_MARKER)
    header = "\n".join(header_lines).encode(TEXT_ENCODING)
    payload = header + cursor.getvalue() + FOOTER.encode(TEXT_ENCODING)
    checksum = compute_checksum(payload)
    top = f"{MAGIC_LINE}\n{written_at_ms}\n{checksum}\n".encode(TEXT_ENCODING)
    _LOGGER.info(
        "artifact_serialized",
        record_count=len(spans),
        payload_bytes=len(payload),
        checksum=checksum,
    )
    return SerializedArtifact(
        data=top + payload,
        checksum=checksum,
        written_at_ms=written_at_ms,
        record_count=len(spans),
    )


def _to_bytes(encoded: str, object_id: str) -> bytes:
    try:
        return encoded.encode(TEXT_ENCODING)
    except UnicodeEncodeError as error:
        raise SdbEncodeError(
            f"Cannot encode content of '{object_id}' as {TEXT_ENCODING}: {error.reason}"
        ) from error
