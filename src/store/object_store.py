"""In-memory keyed object store.

This module owns identifier validation, File and Directory reads
through a byte source, and the paired content and metadata mappings
consumed by the artifact serializer.
"""

from __future__ import annotations

import json
import math
import time
from typing import Callable, Iterator

from core.constants import (
    COMPOSITE_ID_SEPARATOR,
    INITIAL_RECORD_VERSION,
    MANIFEST_SEPARATOR,
    RESERVED_ID_PREFIX,
)
from core.errors import SdbValidationError
from core.logging_config import get_logger
from core.types import ObjectRecord, RecordContent, RecordMetadata, RecordType
from store.byte_io import ByteSource, LocalByteSource

_LOGGER = get_logger(__name__)

Clock = Callable[[], int]


def current_time_ms() -> int:
    """Return wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


class ObjectStore:
    """Mapping of identifiers to content and metadata records.

    Records are only added through ``insert``; there is no delete.
    Every insert overwrites any record under the same identifier and
    resets its timestamps and version.
    """

    def __init__(
        self,
        source: ByteSource | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Create an empty store.

        Args:
            source: Byte source used by File and Directory inserts.
            clock: Millisecond clock used for record timestamps.
        """
        self._source = source or LocalByteSource()
        self._clock = clock or current_time_ms
        self._objects: dict[str, RecordContent] = {}
        self._metadata: dict[str, RecordMetadata] = {}

    def insert(
        self,
        object_id: str,
        data: RecordContent,
        record_type: RecordType | str = RecordType.TEXT,
    ) -> None:
        """Insert or overwrite a record.

        Text and Binary data is stored as given. File data is a path
        whose bytes are read from the byte source. Directory data is a
        directory path: each regular file in it becomes a File record
        under ``<object_id>$<path>`` and ``object_id`` itself holds the
        manifest of those identifiers.

        Args:
            object_id: Record identifier.
            data: Content, or a path for File and Directory types.
            record_type: Record type member or wire tag.

        Raises:
            SdbValidationError: If the identifier, type or content is
                invalid. The store is left unchanged.
            OSError: If the byte source cannot read the path.
        """
        _validate_object_id(object_id)
        resolved_type = RecordType.parse(record_type)
        if resolved_type is RecordType.FILE:
            content: RecordContent = self._source.read_bytes(_require_path(data, resolved_type))
        elif resolved_type is RecordType.DIRECTORY:
            content = self._expand_directory(object_id, _require_path(data, resolved_type))
        else:
            content = _validate_inline_content(data, resolved_type)
        self._put(object_id, content, resolved_type)
        _LOGGER.debug("object_inserted", object_id=object_id, record_type=resolved_type.value)

    def get(self, object_id: str) -> RecordContent | None:
        """Return stored content, or None when the identifier is absent."""
        return self._objects.get(object_id)

    def get_metadata(self, object_id: str) -> RecordMetadata | None:
        """Return the metadata record, or None when the identifier is absent."""
        return self._metadata.get(object_id)

    def records(self) -> Iterator[ObjectRecord]:
        """Yield stored records in insertion order."""
        for object_id, content in self._objects.items():
            metadata = self._metadata[object_id]
            yield ObjectRecord(
                object_id=object_id,
                content=content,
                record_type=metadata.record_type,
            )

    def metadata_items(self) -> Iterator[tuple[str, RecordMetadata]]:
        """Yield identifier and metadata pairs in insertion order."""
        yield from self._metadata.items()

    def manifest_entries(self, object_id: str) -> list[str]:
        """Parse a Directory manifest into its composite identifiers.

        Args:
            object_id: Identifier of a Directory record.

        Returns:
            Composite identifiers listed by the manifest.

        Raises:
            SdbValidationError: If the record is missing or not a directory.
        """
        metadata = self._metadata.get(object_id)
        if metadata is None or metadata.record_type is not RecordType.DIRECTORY:
            raise SdbValidationError(
                f"Record '{object_id}' is not a directory manifest."
            )
        manifest = str(self._objects[object_id])
        return [json.loads(line) for line in manifest.split(MANIFEST_SEPARATOR) if line]

    def restore(self, object_id: str, content: RecordContent, metadata: RecordMetadata) -> None:
        """Place a record with existing metadata, as read from an artifact.

        Raises:
            SdbValidationError: If the identifier is not allowed.
        """
        _validate_object_id(object_id)
        self._objects[object_id] = content
        self._metadata[object_id] = metadata

    def __contains__(self, object_id: object) -> bool:
        return object_id in self._objects

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._objects))

    def _expand_directory(self, object_id: str, directory_path: str) -> str:
        """Read every regular file of a directory and build its manifest."""
        file_contents: list[tuple[str, bytes]] = []
        for entry in self._source.list_directory(directory_path):
            if not entry.is_regular_file:
                continue
            composite_id = f"{object_id}{COMPOSITE_ID_SEPARATOR}{entry.path}"
            file_contents.append((composite_id, self._source.read_bytes(entry.path)))
        for composite_id, content in file_contents:
            self._put(composite_id, content, RecordType.FILE)
        _LOGGER.info(
            "directory_expanded",
            object_id=object_id,
            directory_path=directory_path,
            file_count=len(file_contents),
        )
        return MANIFEST_SEPARATOR.join(
            json.dumps(composite_id) for composite_id, _ in file_contents
        )

    def _put(self, object_id: str, content: RecordContent, record_type: RecordType) -> None:
        now_ms = self._clock()
        self._objects[object_id] = content
        self._metadata[object_id] = RecordMetadata(
            created_at_ms=now_ms,
            modified_at_ms=now_ms,
            version=INITIAL_RECORD_VERSION,
            record_type=record_type,
        )


def _validate_object_id(object_id: object) -> None:
    """Reject identifiers the store does not accept.

    Raises:
        SdbValidationError: If the identifier is empty, not a string,
            or uses the reserved prefix.
    """
    if not isinstance(object_id, str) or not object_id:
        raise SdbValidationError(
            f"Invalid object id {object_id!r}: expected a non-empty string."
        )
    if object_id.startswith(RESERVED_ID_PREFIX):
        raise SdbValidationError(
            f"Invalid object id '{object_id}': ids starting with "
            f"'{RESERVED_ID_PREFIX}' are reserved."
        )


def _require_path(data: RecordContent, record_type: RecordType) -> str:
    if isinstance(data, str) and data:
        return data
    if hasattr(data, "__fspath__"):
        return str(data)
    raise SdbValidationError(
        f"{record_type.value} insert expects a path, got {type(data).__name__}."
    )


def _validate_inline_content(data: RecordContent, record_type: RecordType) -> RecordContent:
    if record_type is RecordType.BINARY:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise SdbValidationError(
                f"BIN insert expects bytes, got {type(data).__name__}."
            )
        return bytes(data)
    if not _is_json_native(data):
        raise SdbValidationError(
            f"{record_type.value} insert expects a string or JSON-native value "
            f"(dict with string keys, list, int, finite float, bool), got {type(data).__name__}."
        )
    return data


def _is_json_native(value: object) -> bool:
    """Whether a value survives a JSON encode and decode unchanged."""
    if isinstance(value, (str, bool, int)):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, list):
        return all(_is_json_native(item) for item in value)
    if isinstance(value, dict):
        return all(
            isinstance(key, str) and _is_json_native(item) for key, item in value.items()
        )
    return False
