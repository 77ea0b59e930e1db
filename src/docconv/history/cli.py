"""CLI entry point for inspecting and editing the conversion history."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from docconv.convert.config import (
    ConfigOverrides,
    DocconvConfigError,
    load_config,
)
from docconv.errors import HistoryIoError

from .records import delete_entry, history_stats
from .store import HistoryEntry, HistoryStore


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docconv history",
        description="Inspect or edit the recorded conversion history.",
    )
    parser.add_argument(
        "--identifier",
        help="Installation identifier that locates the history file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="Show recorded conversions.")
    list_parser.add_argument(
        "--limit",
        type=int,
        help="Only show the most recent N entries.",
    )
    subparsers.add_parser("stats", help="Show success and failure counts.")
    subparsers.add_parser("clear", help="Remove every recorded conversion.")
    subparsers.add_parser("path", help="Print the history file location.")

    delete_parser = subparsers.add_parser(
        "delete", help="Remove the first entry recorded for a source path."
    )
    delete_parser.add_argument("path", help="Source path of the entry.")
    delete_parser.add_argument(
        "--output-path",
        help="Output path of the entry (omit for entries without one).",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        load_result = load_config(
            overrides=ConfigOverrides(identifier=args.identifier)
        )
    except DocconvConfigError as exc:
        parser.error(str(exc))

    identifier = load_result.config.identifier
    store = HistoryStore(lambda: identifier, env=load_result.env)

    if args.command == "path":
        sys.stdout.write(f"{store.path}\n")
        return 0

    try:
        if args.command == "clear":
            store.clear()
            sys.stdout.write("History cleared.\n")
            return 0

        entries = store.load()
        if args.command == "list":
            _render_table(entries, limit=args.limit)
        elif args.command == "stats":
            stats = history_stats(entries)
            sys.stdout.write(
                f"total: {stats.total}\n"
                f"successful: {stats.successful}\n"
                f"failed: {stats.failed}\n"
            )
        else:
            remaining, deleted = delete_entry(entries, args.path, args.output_path)
            if not deleted:
                sys.stderr.write(f"No history entry found for {args.path}\n")
                return 1
            store.save(remaining)
            sys.stdout.write(f"Deleted history entry for {args.path}\n")
    except HistoryIoError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1
    return 0


def _render_table(entries: Sequence[HistoryEntry], *, limit: int | None) -> None:
    console = Console(soft_wrap=True)
    if not entries:
        console.print("No conversions recorded yet.")
        return

    # Newest first; the file itself stays in append order.
    shown = list(reversed(entries))
    if limit is not None and limit > 0:
        shown = shown[:limit]

    table = Table(box=box.SIMPLE, show_lines=False)
    table.add_column("Status")
    table.add_column("Source", overflow="fold")
    table.add_column("Output", overflow="fold")
    table.add_column("Message", overflow="fold")
    for entry in shown:
        style = "green" if entry.is_success else "red"
        table.add_row(
            Text(entry.status, style=style),
            Text(_display(entry.source)),
            Text(_display(entry.output_path) if entry.output_path else "-"),
            Text(entry.message),
        )
    console.print(table)


def _display(value: str) -> str:
    path = Path(value)
    return path.name if path.name else value


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
