"""Unit tests for the in-memory object store."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from core.errors import SdbValidationError
from core.types import RecordMetadata, RecordType
from store.byte_io import DirectoryEntry
from store.object_store import ObjectStore


class _FakeSource:
    """In-memory byte source keyed by path."""

    def __init__(self, files: dict[str, bytes], listings: dict[str, list[DirectoryEntry]]) -> None:
        self.files = files
        self.listings = listings
        self.reads: list[str] = []

    def read_bytes(self, path: str) -> bytes:
        self.reads.append(path)
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        if path not in self.listings:
            raise NotADirectoryError(path)
        return self.listings[path]


def _fixed_clock() -> int:
    return 1_700_000_000_000


def _directory_source() -> _FakeSource:
    listing = [
        DirectoryEntry(name="a.txt", path="docs/a.txt", is_regular_file=True),
        DirectoryEntry(name="nested", path="docs/nested", is_regular_file=False),
        DirectoryEntry(name="link", path="docs/link", is_regular_file=False),
        DirectoryEntry(name="b.bin", path="docs/b.bin", is_regular_file=True),
    ]
    files = {"docs/a.txt": b"alpha", "docs/b.bin": b"\x00\x01"}
    return _FakeSource(files, {"docs": listing})


def test_insert_text_stores_content_and_metadata() -> None:
    """Text inserts should store the value with version 1 metadata."""
    store = ObjectStore(clock=_fixed_clock)

    store.insert("greeting", "Hello!", RecordType.TEXT)

    assert store.get("greeting") == "Hello!" and store.get_metadata("greeting") == RecordMetadata(
        created_at_ms=1_700_000_000_000,
        modified_at_ms=1_700_000_000_000,
        version=1,
        record_type=RecordType.TEXT,
    )


def test_insert_accepts_wire_tag_for_type() -> None:
    """Record types may be given as wire tags."""
    store = ObjectStore(clock=_fixed_clock)

    store.insert("raw", b"\x01", "BIN")

    assert store.get_metadata("raw").record_type is RecordType.BINARY


def test_get_returns_none_for_missing_id() -> None:
    """Lookups for absent identifiers should return None."""
    store = ObjectStore()

    assert store.get("missing") is None and store.get_metadata("missing") is None


def test_insert_rejects_reserved_prefix_without_mutation() -> None:
    """Reserved identifiers should fail and leave the store untouched."""
    store = ObjectStore(clock=_fixed_clock)
    store.insert("kept", "value")

    with pytest.raises(SdbValidationError):
        store.insert("__sdb_internal_x", "value")

    assert list(store) == ["kept"]


@pytest.mark.parametrize("object_id", ["", None, 7])
def test_insert_rejects_invalid_identifiers(object_id: object) -> None:
    """Identifiers must be non-empty strings."""
    store = ObjectStore()

    with pytest.raises(SdbValidationError):
        store.insert(object_id, "value")  # type: ignore[arg-type]

    assert len(store) == 0


def test_insert_rejects_unknown_type() -> None:
    """Unknown record types should be rejected."""
    store = ObjectStore()

    with pytest.raises(SdbValidationError):
        store.insert("x", "value", "BLOB")

    assert "x" not in store


def test_insert_rejects_non_bytes_binary() -> None:
    """Binary inserts should require bytes-like content."""
    store = ObjectStore()

    with pytest.raises(SdbValidationError):
        store.insert("x", "text", RecordType.BINARY)

    assert "x" not in store


def test_insert_overwrites_and_resets_metadata() -> None:
    """Overwriting should reset timestamps and keep version at 1."""
    ticks = iter([100, 200])
    store = ObjectStore(clock=lambda: next(ticks))
    store.insert("doc", "first")

    store.insert("doc", "second")

    metadata = store.get_metadata("doc")
    assert (store.get("doc"), metadata.created_at_ms, metadata.version) == ("second", 200, 1)


def test_insert_file_reads_bytes_from_source() -> None:
    """File inserts should store the bytes read from the source path."""
    source = _FakeSource({"package.json": b"{}"}, {})
    store = ObjectStore(source=source, clock=_fixed_clock)

    store.insert("config", "package.json", RecordType.FILE)

    assert store.get("config") == b"{}" and store.get_metadata("config").record_type is RecordType.FILE


def test_insert_file_propagates_source_errors() -> None:
    """Missing paths should surface the source OSError unchanged."""
    store = ObjectStore(source=_FakeSource({}, {}))

    with pytest.raises(FileNotFoundError):
        store.insert("config", "missing.json", RecordType.FILE)

    assert len(store) == 0


def test_insert_directory_expands_regular_files() -> None:
    """Directory inserts should add one File record per regular file."""
    store = ObjectStore(source=_directory_source(), clock=_fixed_clock)

    store.insert("docs", "docs", RecordType.DIRECTORY)

    assert list(store) == ["docs$docs/a.txt", "docs$docs/b.bin", "docs"]


def test_insert_directory_writes_json_quoted_manifest() -> None:
    """The directory record should list composite ids one per line."""
    store = ObjectStore(source=_directory_source(), clock=_fixed_clock)

    store.insert("docs", "docs", RecordType.DIRECTORY)

    assert store.get("docs") == '"docs$docs/a.txt"\n"docs$docs/b.bin"'


def test_directory_children_are_file_records() -> None:
    """Expanded children should carry File type and their raw bytes."""
    store = ObjectStore(source=_directory_source(), clock=_fixed_clock)

    store.insert("docs", "docs", RecordType.DIRECTORY)

    child = store.get_metadata("docs$docs/b.bin")
    assert child.record_type is RecordType.FILE and store.get("docs$docs/b.bin") == b"\x00\x01"


def test_manifest_entries_parses_directory_manifest() -> None:
    """Manifest parsing should return the composite identifiers."""
    store = ObjectStore(source=_directory_source(), clock=_fixed_clock)
    store.insert("docs", "docs", RecordType.DIRECTORY)

    entries = store.manifest_entries("docs")

    assert entries == ["docs$docs/a.txt", "docs$docs/b.bin"]


def test_manifest_entries_rejects_non_directory() -> None:
    """Only Directory records have manifests."""
    store = ObjectStore(clock=_fixed_clock)
    store.insert("note", "text")

    with pytest.raises(SdbValidationError):
        store.manifest_entries("note")


def test_insert_directory_on_local_filesystem_skips_non_regular(tmp_path: Path) -> None:
    """Sub-directories and symlinks should not become records."""
    directory = tmp_path / "bundle"
    directory.mkdir()
    (directory / "b.txt").write_bytes(b"bravo")
    (directory / "a.txt").write_bytes(b"alpha")
    (directory / "nested").mkdir()
    os.symlink(directory / "a.txt", directory / "link.txt")
    store = ObjectStore(clock=_fixed_clock)

    store.insert("bundle", str(directory), RecordType.DIRECTORY)

    expected_ids = [f"bundle${directory / 'a.txt'}", f"bundle${directory / 'b.txt'}"]
    assert store.get("bundle") == "\n".join(json.dumps(item) for item in expected_ids)


@pytest.mark.parametrize(
    "content",
    [(1, 2), b"raw", {1: "a"}, float("nan"), [1, object()], None],
)
def test_insert_rejects_text_that_cannot_roundtrip(content: object) -> None:
    """Text content must be a string or JSON-native value; others leave the store unchanged."""
    store = ObjectStore(clock=_fixed_clock)
    store.insert("kept", "value")

    with pytest.raises(SdbValidationError):
        store.insert("t", content, RecordType.TEXT)  # type: ignore[arg-type]

    assert list(store) == ["kept"]


def test_insert_accepts_json_native_text() -> None:
    """Dicts with string keys, lists and numbers should be accepted as text."""
    store = ObjectStore(clock=_fixed_clock)
    content = {"tags": ["a", 1, 2.5, True], "nested": {"n": 0}}

    store.insert("structured", content, RecordType.TEXT)

    assert store.get("structured") == content
