"""Shared typed models.

This module defines the immutable value types used by the object
store, the codec and the artifact reader and writer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from core.errors import SdbValidationError

RecordContent = Union[str, bytes, int, float, bool, list[Any], dict[str, Any]]


class RecordType(Enum):
    """Closed set of record types with their wire tags."""

    TEXT = "TEXT"
    BINARY = "BIN"
    FILE = "FILE"
    DIRECTORY = "DIR"

    @property
    def is_binary(self) -> bool:
        """Whether content of this type is raw bytes on the wire."""
        return self in (RecordType.BINARY, RecordType.FILE)

    @classmethod
    def parse(cls, value: object) -> "RecordType":
        """Resolve a record type from an enum member or wire tag.

        Args:
            value: ``RecordType`` member or wire tag string.

        Returns:
            Matching record type.

        Raises:
            SdbValidationError: If the tag is unknown.
        """
        if isinstance(value, RecordType):
            return value
        try:
            return cls(value)
        except ValueError as error:
            supported = tuple(member.value for member in cls)
            raise SdbValidationError(
                f"Unsupported record type {value!r}: expected one of {supported}."
            ) from error


@dataclass(frozen=True)
class RecordMetadata:
    """Metadata row describing one stored record.

    Attributes:
        created_at_ms: Creation time in epoch milliseconds.
        modified_at_ms: Modification time in epoch milliseconds.
        version: Record version; every write sets it to 1.
        record_type: Record type, duplicated for header self-description.
    """

    created_at_ms: int
    modified_at_ms: int
    version: int
    record_type: RecordType


@dataclass(frozen=True)
class ObjectRecord:
    """One identifier with its content and type.

    Attributes:
        object_id: Unique record identifier.
        content: Text, raw bytes, or a JSON-serializable value.
        record_type: Record type.
    """

    object_id: str
    content: RecordContent
    record_type: RecordType


@dataclass(frozen=True)
class DataSpan:
    """Byte range of one encoded value inside the data region.

    Attributes:
        position: Offset of the first byte after the record tag.
        length: Encoded value length in bytes.
    """

    position: int
    length: int

    @property
    def end(self) -> int:
        return self.position + self.length


@dataclass(frozen=True)
class RowDiagnostic:
    """Reason a header row was left out of a loaded store.

    Attributes:
        row_index: Zero-based index of the row within the header block.
        object_id: Identifier from the row when it could be parsed.
        reason: Human-readable cause.
    """

    row_index: int
    object_id: str | None
    reason: str
