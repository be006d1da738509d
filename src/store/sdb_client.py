"""Python SDK for artifact save and load.

This module wires the object store, serializer and deserializer to
byte source and sink collaborators under one runtime config.
"""

from __future__ import annotations

from core.config import SdbConfig
from core.errors import SdbFormatError
from core.logging_config import configure_logging, get_logger
from store.byte_io import ByteSink, ByteSource, LocalByteSink, LocalByteSource
from store.deserializer import LoadReport, load_artifact
from store.object_store import ObjectStore
from store.serializer import build_artifact

_LOGGER = get_logger(__name__)


class SdbClient:
    """Primary SDK entry point for building, saving and loading stores."""

    def __init__(
        self,
        config: SdbConfig | None = None,
        source: ByteSource | None = None,
        sink: ByteSink | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            source: Byte source for artifacts and File/Directory inserts.
            sink: Byte sink for written artifacts.
        """
        self._config = config or SdbConfig.from_env()
        self._source = source or LocalByteSource()
        self._sink = sink or LocalByteSink()
        configure_logging(self._config.log_level)

    @property
    def source(self) -> ByteSource:
        return self._source

    def new_store(self) -> ObjectStore:
        """Create an empty store that reads through this client's source."""
        return ObjectStore(source=self._source)

    def save(self, store: ObjectStore, path: str, comment: str | None = None) -> str:
        """Serialize a store and write it to ``path``.

        Args:
            store: Store to persist.
            path: Destination handed to the byte sink.
            comment: Artifact comment; the configured default when omitted.

        Returns:
            Payload checksum of the written artifact.

        Raises:
            SdbEncodeError: If record content cannot be encoded.
            OSError: If the sink fails to write.
        """
        artifact_comment = self._config.default_comment if comment is None else comment
        artifact = build_artifact(store, artifact_comment)
        self._sink.write_bytes(path, artifact.data)
        _LOGGER.info(
            "artifact_saved",
            path=path,
            checksum=artifact.checksum,
            record_count=artifact.record_count,
        )
        return artifact.checksum

    def load(self, path: str) -> LoadReport:
        """Read and verify the artifact at ``path``.

        Args:
            path: Location handed to the byte source.

        Returns:
            Load report with the rebuilt store and row diagnostics.

        Raises:
            SdbFormatError: If the artifact is malformed, or rows were
                skipped while ``fail_on_skipped_rows`` is enabled.
            SdbChecksumError: If the checksum does not match.
            OSError: If the source fails to read.
        """
        report = load_artifact(self._source.read_bytes(path))
        if report.diagnostics and self._config.fail_on_skipped_rows:
            first = report.diagnostics[0]
            raise SdbFormatError(
                f"Artifact {path} has {len(report.diagnostics)} unreadable header rows; "
                f"first at row {first.row_index}: {first.reason}. "
                "Unset SDB_FAIL_ON_SKIPPED_ROWS to load the remaining records."
            )
        return report
