"""CLI entry points for conversion and preview."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from docconv.core.logging import configure_logger
from docconv.errors import DependencyError, HistoryIoError
from docconv.history.records import add_entry, entry_from_result
from docconv.history.store import HistoryStore

from .batch import BatchSummary, run_batch
from .config import (
    ConfigOverrides,
    DocconvConfigError,
    LoadResult,
    load_config,
)
from .engine import EngineAdapter, load_pandoc_engine
from .formats import supported_input_names, supported_output_names
from .orchestrator import (
    ConversionResult,
    convert_content,
    convert_file,
    preview_file,
)

LOGGER_NAME = "docconv.convert"


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a TOML config file (defaults to the workspace config).",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace directory used for config and logs.",
    )
    parser.add_argument(
        "--identifier",
        help="Installation identifier that locates the workspace and history.",
    )
    parser.add_argument(
        "--log-level",
        help="Set the logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log records to stderr.",
    )


def _add_history_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--no-history",
        dest="record_history",
        action="store_false",
        default=None,
        help="Do not record this conversion in the history log.",
    )


def _build_convert_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docconv convert",
        description="Convert documents between markup formats with pandoc.",
        epilog="Output formats: " + ", ".join(supported_output_names()),
    )
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Files or directories to convert.",
    )
    parser.add_argument(
        "--to",
        dest="output_format",
        help="Output format (defaults to the configured output format).",
    )
    parser.add_argument(
        "--from",
        dest="input_format",
        help="Input format: " + ", ".join(supported_input_names()) + ".",
    )
    destination = parser.add_mutually_exclusive_group()
    destination.add_argument(
        "--output",
        type=Path,
        help="Output file (single input only).",
    )
    destination.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for outputs (defaults to each input's directory).",
    )
    _add_history_option(parser)
    _add_common_options(parser)
    return parser


def _build_content_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docconv convert-content",
        description="Convert Markdown text into a document file.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--text", help="Markdown content to convert.")
    source.add_argument(
        "--input",
        help="Read Markdown from this file, or '-' for stdin (the default).",
    )
    parser.add_argument(
        "--to",
        dest="output_format",
        help="Output format (defaults to the configured output format).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Output file to write.",
    )
    _add_history_option(parser)
    _add_common_options(parser)
    return parser


def _build_preview_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docconv preview",
        description="Render a document as standalone HTML.",
    )
    parser.add_argument("path", type=Path, help="File to preview.")
    parser.add_argument(
        "--from",
        dest="input_format",
        help="Input format: " + ", ".join(supported_input_names()) + ".",
    )
    parser.add_argument(
        "--save",
        type=Path,
        help="Write the HTML to this file instead of stdout.",
    )
    _add_common_options(parser)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_convert_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.output is not None and len(args.paths) != 1:
        parser.error("--output requires exactly one input path.")

    load_result = _load(parser, args)
    config = load_result.config
    output_format = config.output_format
    input_format = config.input_format

    engine = _build_engine(load_result)
    if engine is None:
        return 1
    logger, log_path = _logger(load_result, args.verbose)
    logger.debug("convert CLI invoked")

    if args.output is not None:
        result = convert_file(
            args.paths[0],
            output_format,
            args.output,
            input_format,
            engine=engine,
            logger=logger,
        )
        _record(load_result, [result], logger)
        return _report(result)

    if args.output_dir is not None:
        try:
            args.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            sys.stderr.write(
                f"Cannot use output directory {args.output_dir}: {exc}\n"
            )
            return 1

    summary = run_batch(
        args.paths,
        output_format=output_format,
        input_format=input_format,
        output_dir=args.output_dir,
        engine=engine,
        logger=logger,
    )
    _record(load_result, summary.results, logger)
    _print_summary(summary, log_path)
    return summary.exit_code


def convert_content_main(argv: Sequence[str] | None = None) -> int:
    parser = _build_content_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        content = _read_content(args)
    except (OSError, UnicodeDecodeError) as exc:
        sys.stderr.write(f"Failed to read content: {exc}\n")
        return 1

    load_result = _load(parser, args)
    engine = _build_engine(load_result)
    if engine is None:
        return 1
    logger, _ = _logger(load_result, args.verbose)

    result = convert_content(
        content,
        load_result.config.output_format,
        args.output,
        engine=engine,
        logger=logger,
    )
    _record(load_result, [result], logger)
    return _report(result)


def preview_main(argv: Sequence[str] | None = None) -> int:
    parser = _build_preview_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    load_result = _load(parser, args)
    engine = _build_engine(load_result)
    if engine is None:
        return 1
    logger, _ = _logger(load_result, args.verbose)

    result = preview_file(
        args.path,
        load_result.config.input_format,
        engine=engine,
        logger=logger,
    )
    if not result.succeeded or result.html is None:
        sys.stderr.write(result.message + "\n")
        return 1

    if args.save is not None:
        try:
            args.save.parent.mkdir(parents=True, exist_ok=True)
            args.save.write_text(result.html, encoding="utf-8")
        except OSError as exc:
            sys.stderr.write(f"Failed to write preview: {exc}\n")
            return 1
        sys.stdout.write(f"Preview written to {args.save}\n")
        return 0

    sys.stdout.write(result.html)
    if not result.html.endswith("\n"):
        sys.stdout.write("\n")
    return 0


def _load(parser: argparse.ArgumentParser, args: argparse.Namespace) -> LoadResult:
    overrides = ConfigOverrides(
        identifier=args.identifier,
        input_format=getattr(args, "input_format", None),
        output_format=getattr(args, "output_format", None),
        record_history=getattr(args, "record_history", None),
        log_level=args.log_level,
    )
    try:
        return load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except DocconvConfigError as exc:
        parser.error(str(exc))
        raise  # pragma: no cover - parser.error exits


def _build_engine(load_result: LoadResult) -> EngineAdapter | None:
    try:
        return load_pandoc_engine(load_result.config.pandoc_args)
    except DependencyError as exc:
        sys.stderr.write(str(exc) + "\n")
        return None


def _logger(
    load_result: LoadResult, verbose: bool
) -> tuple[logging.Logger, Path]:
    return configure_logger(
        LOGGER_NAME,
        log_dir=load_result.layout.path_for("logs"),
        level=load_result.config.log_level,
        verbose=verbose,
    )


def _record(
    load_result: LoadResult,
    results: Sequence[ConversionResult],
    logger: logging.Logger,
) -> None:
    """Append successful results to the history file, if enabled."""

    successes = [result for result in results if result.succeeded]
    if not load_result.config.record_history or not successes:
        return

    identifier = load_result.config.identifier
    store = HistoryStore(lambda: identifier, env=load_result.env, logger=logger)
    try:
        log = store.load()
        for result in successes:
            log = add_entry(log, entry_from_result(result))
        store.save(log)
    except HistoryIoError as exc:
        logger.error("Failed to update history", extra={"reason": str(exc)})
        sys.stderr.write(f"Warning: {exc}\n")


def _read_content(args: argparse.Namespace) -> str:
    if args.text is not None:
        return args.text
    if args.input is None or args.input == "-":
        return sys.stdin.read()
    return Path(args.input).read_text(encoding="utf-8")


def _report(result: ConversionResult) -> int:
    if result.succeeded:
        sys.stdout.write(result.message + "\n")
        return 0
    sys.stderr.write(result.message + "\n")
    return 1


def _print_summary(summary: BatchSummary, log_path: Path) -> None:
    lines = [summary.message]
    for result in summary.results:
        marker = {
            "success": "ok",
            "error": "failed",
            "skipped": "skipped",
        }[result.status.value]
        detail = str(result.output_path) if result.succeeded else result.message
        lines.append(f"  [{marker}] {result.source}: {detail}")
    lines.append(f"  log file: {log_path}")
    sys.stdout.write("\n".join(lines) + "\n")


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
