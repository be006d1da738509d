"""SDB CLI entry points.
This module exposes pack, list, show and verify commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Callable, Sequence

from core.errors import SdbError
from core.types import RecordType
from store.sdb_client import SdbClient

_PackEntry = tuple[RecordType, str, str]


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="sdb", description="SDB object store CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_pack_command(subparsers)
    _add_list_command(subparsers)
    _add_show_command(subparsers)
    _add_verify_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the SDB CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    handlers: dict[str, Callable[[SdbClient, argparse.Namespace], int]] = {
        "pack": _run_pack_command,
        "list": _run_list_command,
        "show": _run_show_command,
        "verify": _run_verify_command,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.error(f"Unsupported command: {args.command}")
        return 2
    try:
        return handler(SdbClient(), args)
    except (SdbError, OSError) as error:
        print(f"error={error}")
        return 1


def _run_pack_command(client: SdbClient, args: argparse.Namespace) -> int:
    """Handle pack command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    store = client.new_store()
    source = client.source
    for record_type, object_id, value in args.entries or []:
        if record_type is RecordType.BINARY:
            store.insert(object_id, source.read_bytes(value), record_type)
        else:
            store.insert(object_id, value, record_type)
    checksum = client.save(store, args.output, comment=args.comment)
    print(checksum)
    return 0


def _run_list_command(client: SdbClient, args: argparse.Namespace) -> int:
    """Handle list command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    report = client.load(args.artifact)
    for record in report.store.records():
        metadata = report.store.get_metadata(record.object_id)
        version = metadata.version if metadata else "-"
        print(
            f"{record.object_id}\t"
            f"{record.record_type.value}\t"
            f"{version}\t"
            f"{_content_size(record.content)}"
        )
    for diagnostic in report.diagnostics:
        print(f"skipped\t{diagnostic.row_index}\t{diagnostic.object_id or '-'}\t{diagnostic.reason}")
    return 0


def _run_show_command(client: SdbClient, args: argparse.Namespace) -> int:
    """Handle show command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    store = client.load(args.artifact).store
    if args.object_id not in store:
        print(f"error=Object '{args.object_id}' not found in {args.artifact}")
        return 1
    content = store.get(args.object_id)
    if isinstance(content, bytes):
        sys.stdout.flush()
        sys.stdout.buffer.write(content)
        sys.stdout.buffer.flush()
    elif isinstance(content, str):
        print(content)
    else:
        print(json.dumps(content))
    return 0


def _run_verify_command(client: SdbClient, args: argparse.Namespace) -> int:
    """Handle verify command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    report = client.load(args.artifact)
    print(f"ok {report.checksum} records={len(report.store)} skipped={len(report.diagnostics)}")
    return 0


def _content_size(content: Any) -> int:
    if isinstance(content, bytes):
        return len(content)
    if isinstance(content, str):
        return len(content.encode("utf-8"))
    return len(json.dumps(content))


def _entry_parser(record_type: RecordType) -> Callable[[str], _PackEntry]:
    """Build an argparse type that splits ``ID=VALUE`` pairs."""

    def parse(raw_value: str) -> _PackEntry:
        object_id, separator, value = raw_value.partition("=")
        if not separator or not object_id:
            raise argparse.ArgumentTypeError(f"expected ID=VALUE, got '{raw_value}'")
        return record_type, object_id, value

    return parse


def _add_pack_command(subparsers: Any) -> None:
    """Register pack subcommand."""
    parser = subparsers.add_parser("pack", help="Build an artifact from inline values and paths")
    parser.add_argument("output", help="Artifact output path")
    parser.add_argument("--comment", help="Artifact comment; SDB_DEFAULT_COMMENT when omitted")
    parser.add_argument(
        "--text",
        dest="entries",
        action="append",
        type=_entry_parser(RecordType.TEXT),
        help="Text record as ID=VALUE",
    )
    parser.add_argument(
        "--binary-file",
        dest="entries",
        action="append",
        type=_entry_parser(RecordType.BINARY),
        help="Binary record read from ID=PATH",
    )
    parser.add_argument(
        "--file",
        dest="entries",
        action="append",
        type=_entry_parser(RecordType.FILE),
        help="File record read from ID=PATH",
    )
    parser.add_argument(
        "--dir",
        dest="entries",
        action="append",
        type=_entry_parser(RecordType.DIRECTORY),
        help="Directory record expanded from ID=PATH",
    )


def _add_list_command(subparsers: Any) -> None:
    """Register list subcommand."""
    parser = subparsers.add_parser("list", help="List records of an artifact")
    parser.add_argument("artifact", help="Artifact path")


def _add_show_command(subparsers: Any) -> None:
    """Register show subcommand."""
    parser = subparsers.add_parser("show", help="Print one record's content")
    parser.add_argument("artifact", help="Artifact path")
    parser.add_argument("object_id", help="Record identifier")


def _add_verify_command(subparsers: Any) -> None:
    """Register verify subcommand."""
    parser = subparsers.add_parser("verify", help="Check artifact structure and checksum")
    parser.add_argument("artifact", help="Artifact path")
