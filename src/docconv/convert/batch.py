"""Sequential multi-file conversion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from docconv.errors import ConversionError

from .engine import EngineAdapter
from .formats import FormatId, format_for_path, resolve_output
from .orchestrator import ConversionResult, ConversionStatus, convert_file


@dataclass(frozen=True)
class BatchSummary:
    """Aggregated results for a batch conversion run."""

    requested: tuple[Path, ...]
    processed: tuple[Path, ...]
    results: tuple[ConversionResult, ...]

    @property
    def success_count(self) -> int:
        return sum(1 for result in self.results if _is(result, ConversionStatus.SUCCESS))

    @property
    def skipped_count(self) -> int:
        return sum(1 for result in self.results if _is(result, ConversionStatus.SKIPPED))

    @property
    def failure_count(self) -> int:
        return sum(1 for result in self.results if _is(result, ConversionStatus.FAILED))

    @property
    def exit_code(self) -> int:
        return 1 if self.failure_count else 0

    @property
    def message(self) -> str:
        successes = self.success_count
        failures = self.failure_count
        if failures:
            return (
                f"Batch conversion finished: {successes} succeeded, "
                f"{failures} failed."
            )
        if successes:
            return (
                f"Batch conversion finished: {successes} file(s) converted "
                "successfully."
            )
        return (
            "No files were converted (the list may be empty or every input "
            "was skipped)."
        )


def default_output_path(
    input_path: Path,
    format_id: FormatId,
    output_dir: Optional[Path] = None,
) -> Path:
    """Place ``<stem>.<ext>`` beside the input or inside ``output_dir``."""

    directory = output_dir if output_dir is not None else input_path.parent
    return directory / f"{input_path.stem}.{format_id.extension}"


def run_batch(
    inputs: Sequence[Path],
    *,
    output_format: str,
    engine: EngineAdapter,
    logger: logging.Logger,
    input_format: Optional[str] = None,
    output_dir: Optional[Path] = None,
) -> BatchSummary:
    """Convert every input in turn and return an aggregated summary."""

    requested = tuple(Path(raw).expanduser() for raw in inputs)
    candidates = tuple(_expand_inputs(requested))

    logger.info(
        "Starting batch conversion",
        extra={
            "input_count": len(requested),
            "candidate_count": len(candidates),
            "output_format": output_format,
            "output_dir": str(output_dir) if output_dir is not None else None,
        },
    )

    target_format: Optional[FormatId]
    try:
        target_format = resolve_output(output_format)
    except ConversionError:
        target_format = None

    results: list[ConversionResult] = []
    for source in candidates:
        if source.suffix.lower() == ".pdf":
            result = ConversionResult(
                source=str(source),
                status=ConversionStatus.SKIPPED,
                message="PDF files cannot be used as conversion input.",
            )
            results.append(result)
            logger.info("Skipped PDF input", extra={"source": str(source)})
            continue

        if target_format is not None:
            destination = default_output_path(source, target_format, output_dir)
        else:
            # convert_file reports the format error for this input.
            destination = source.with_suffix("")

        result = convert_file(
            source,
            output_format,
            destination,
            input_format,
            engine=engine,
            logger=logger,
        )
        results.append(result)

    summary = BatchSummary(
        requested=requested,
        processed=candidates,
        results=tuple(results),
    )

    logger.info(
        "Completed batch conversion",
        extra={
            "success_count": summary.success_count,
            "skipped_count": summary.skipped_count,
            "failure_count": summary.failure_count,
        },
    )
    return summary


def _expand_inputs(inputs: Sequence[Path]) -> Iterable[Path]:
    seen: set[Path] = set()
    for path in inputs:
        if path.is_dir():
            for child in _iter_directory(path):
                if child not in seen:
                    seen.add(child)
                    yield child
        elif path not in seen:
            seen.add(path)
            yield path


def _iter_directory(directory: Path) -> Iterable[Path]:
    for candidate in sorted(directory.rglob("*")):
        if candidate.is_file() and format_for_path(candidate) is not None:
            yield candidate


def _is(result: ConversionResult, status: ConversionStatus) -> bool:
    return result.status is status


__all__ = [
    "BatchSummary",
    "default_output_path",
    "run_batch",
]
