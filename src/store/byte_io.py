"""Byte source and sink collaborators.

The object store and SDK client read and write bytes only through
these interfaces. ``OSError`` from the local implementations is
propagated unchanged to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class DirectoryEntry:
    """One directory listing entry.

    Attributes:
        name: Entry name within the directory.
        path: Entry path joined onto the listed directory.
        is_regular_file: False for sub-directories, symlinks and other
            non-regular entries.
    """

    name: str
    path: str
    is_regular_file: bool


class ByteSource(Protocol):
    """Readable byte store."""

    def read_bytes(self, path: str) -> bytes:
        ...

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        ...


class ByteSink(Protocol):
    """Writable byte store."""

    def write_bytes(self, path: str, data: bytes) -> None:
        ...


class LocalByteSource:
    """Local filesystem byte source."""

    def read_bytes(self, path: str) -> bytes:
        return Path(path).expanduser().read_bytes()

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        """List directory entries sorted by name.

        Args:
            path: Directory path as given by the caller.

        Returns:
            Entries with their joined paths.
        """
        directory = Path(path).expanduser()
        entries: list[DirectoryEntry] = []
        for child in sorted(directory.iterdir(), key=lambda item: item.name):
            entries.append(
                DirectoryEntry(
                    name=child.name,
                    path=str(Path(path) / child.name),
                    is_regular_file=child.is_file() and not child.is_symlink(),
                )
            )
        return entries


class LocalByteSink:
    """Local filesystem byte sink that creates parent directories."""

    def write_bytes(self, path: str, data: bytes) -> None:
        target = Path(path).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
