"""Hand paths to the operating system's file opener and file manager."""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path
from typing import Callable, Sequence

from docconv.errors import ShellError

Runner = Callable[..., "subprocess.CompletedProcess[bytes]"]


def open_command(path: Path, *, platform: str | None = None) -> list[str]:
    """Return the argv that opens ``path`` in its default application."""

    system = platform or sys.platform
    if system.startswith("win"):
        return ["cmd", "/c", "start", "", str(path)]
    if system == "darwin":
        return ["open", str(path)]
    return ["xdg-open", str(path)]


def reveal_command(path: Path, *, platform: str | None = None) -> list[str]:
    """Return the argv that shows ``path`` in the file manager.

    On Linux there is no portable "select this file" request, so the
    containing folder is opened instead.
    """

    system = platform or sys.platform
    if system.startswith("win"):
        return ["explorer", f"/select,{path}"]
    if system == "darwin":
        return ["open", "-R", str(path)]
    target = path if path.is_dir() else path.parent
    return ["xdg-open", str(target)]


def open_in_default_app(
    path: str | Path,
    *,
    runner: Runner = subprocess.run,
    platform: str | None = None,
) -> None:
    target = Path(path)
    _launch("open", target, open_command(target, platform=platform), runner)


def reveal_in_file_manager(
    path: str | Path,
    *,
    runner: Runner = subprocess.run,
    platform: str | None = None,
) -> None:
    system = platform or sys.platform
    argv = reveal_command(Path(path), platform=system)
    # explorer.exe exits with 1 even when it succeeds.
    _launch(
        "reveal",
        Path(path),
        argv,
        runner,
        check_exit=not system.startswith("win"),
    )


def _launch(
    action: str,
    path: Path,
    argv: list[str],
    runner: Runner,
    *,
    check_exit: bool = True,
) -> None:
    try:
        completed = runner(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            check=False,
        )
    except OSError as exc:
        raise ShellError(action, str(path), str(exc)) from exc

    if check_exit and completed.returncode != 0:
        detail = (completed.stderr or b"").decode("utf-8", errors="replace").strip()
        raise ShellError(
            action,
            str(path),
            detail or f"{argv[0]} exited with status {completed.returncode}",
        )


def open_main(argv: Sequence[str] | None = None) -> int:
    return _run(
        "open",
        "Open a file with its default application.",
        open_in_default_app,
        argv,
    )


def reveal_main(argv: Sequence[str] | None = None) -> int:
    return _run(
        "reveal",
        "Show a file in the system file manager.",
        reveal_in_file_manager,
        argv,
    )


def _run(
    name: str,
    description: str,
    action: Callable[[Path], None],
    argv: Sequence[str] | None,
) -> int:
    parser = argparse.ArgumentParser(
        prog=f"docconv {name}", description=description
    )
    parser.add_argument("path", type=Path, help="File to hand to the OS.")
    args = parser.parse_args(list(argv) if argv is not None else None)

    if not args.path.exists():
        sys.stderr.write(f"Path not found: {args.path}\n")
        return 1
    try:
        action(args.path)
    except ShellError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1
    return 0


__all__ = [
    "open_command",
    "open_in_default_app",
    "open_main",
    "reveal_command",
    "reveal_in_file_manager",
    "reveal_main",
]
