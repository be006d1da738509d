"""Public SDK surface for SDB.

This module provides a stable import path for library users.
It re-exports the store, the artifact functions and typed models.
"""

from __future__ import annotations

from core.config import SdbConfig
from core.errors import (
    SdbChecksumError,
    SdbConfigError,
    SdbEncodeError,
    SdbError,
    SdbFormatError,
    SdbValidationError,
)
from core.types import ObjectRecord, RecordMetadata, RecordType, RowDiagnostic
from store.byte_io import DirectoryEntry, LocalByteSink, LocalByteSource
from store.deserializer import LoadReport, deserialize, load_artifact
from store.object_store import ObjectStore
from store.sdb_client import SdbClient
from store.serializer import SerializedArtifact, build_artifact, serialize

__all__ = [
    "DirectoryEntry",
    "LoadReport",
    "LocalByteSink",
    "LocalByteSource",
    "ObjectRecord",
    "ObjectStore",
    "RecordMetadata",
    "RecordType",
    "RowDiagnostic",
    "SdbChecksumError",
    "SdbClient",
    "SdbConfig",
    "SdbConfigError",
    "SdbEncodeError",
    "SdbError",
    "SdbFormatError",
    "SdbValidationError",
    "SerializedArtifact",
    "build_artifact",
    "deserialize",
    "load_artifact",
    "serialize",
]
