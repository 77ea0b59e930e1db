"""CLI entry point that prepares the per-installation workspace."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Mapping, Sequence

from docconv.convert.config import (
    CONFIG_FILENAME,
    DEFAULT_IDENTIFIER,
    DocconvConfigError,
    write_default_config,
)
from docconv.core import workspace as workspace_mod
from docconv.history.store import history_path


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docconv init",
        description=(
            "Create the docconv workspace (config and logs directories) for "
            "an installation identifier."
        ),
    )
    parser.add_argument(
        "--identifier",
        help=(
            "Installation identifier (defaults to DOCCONV_IDENTIFIER or "
            f"{DEFAULT_IDENTIFIER})."
        ),
    )
    parser.add_argument(
        "--path",
        type=Path,
        help="Override the workspace directory.",
    )
    parser.add_argument(
        "--config",
        action="store_true",
        help=f"Also write the default {CONFIG_FILENAME} template.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config when used with --config.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output on success.",
    )
    return parser


def _format_created(created: Mapping[str, bool], key: str) -> str:
    return "created" if created.get(key, False) else "exists"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    identifier = args.identifier or _env_identifier() or DEFAULT_IDENTIFIER
    try:
        layout = workspace_mod.ensure_workspace(identifier, path=args.path)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    lines = [
        f"Workspace ready at {layout.home} ({_format_created(layout.created, 'home')})"
    ]
    width = max(len(name) for name in layout.directories)
    for name, directory in layout.items():
        status = _format_created(layout.created, name)
        lines.append(f"  {name.ljust(width)}  {directory} ({status})")
    lines.append(f"History file: {history_path(identifier)}")

    if args.config:
        target = layout.path_for("config") / CONFIG_FILENAME
        try:
            written = write_default_config(target, overwrite=args.force)
        except DocconvConfigError as exc:
            sys.stderr.write(str(exc) + "\n")
            return 1
        lines.append(f"Wrote config to {written}")

    if not args.quiet:
        sys.stdout.write("\n".join(lines) + "\n")
    return 0


def _env_identifier() -> str | None:
    value = os.environ.get("DOCCONV_IDENTIFIER", "").strip()
    return value or None


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
