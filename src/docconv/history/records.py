"""Caller-side helpers for working with a loaded history log.

None of these functions touch disk and none mutate their input; each returns
a new list so the caller decides when to hand it to ``HistoryStore.save``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from docconv.convert.orchestrator import ConversionResult, ConversionStatus

from .store import HistoryEntry

__all__ = [
    "HistoryStats",
    "add_entry",
    "delete_entry",
    "entry_from_result",
    "find_entry",
    "history_stats",
]


@dataclass(frozen=True)
class HistoryStats:
    total: int
    successful: int
    failed: int


def entry_from_result(result: ConversionResult) -> HistoryEntry:
    output_path = str(result.output_path) if result.output_path is not None else None
    return HistoryEntry(
        source=result.source,
        status=result.status.value,
        message=result.message,
        is_success=result.succeeded,
        output_path=output_path,
    )


def add_entry(
    log: Sequence[HistoryEntry], entry: HistoryEntry
) -> list[HistoryEntry]:
    return [*log, entry]


def find_entry(
    log: Sequence[HistoryEntry],
    path: str,
    output_path: Optional[str] = None,
) -> Optional[HistoryEntry]:
    """Return the first entry recorded for ``path`` and ``output_path``."""

    for entry in log:
        if entry.source == path and entry.output_path == output_path:
            return entry
    return None


def delete_entry(
    log: Sequence[HistoryEntry],
    path: str,
    output_path: Optional[str] = None,
) -> tuple[list[HistoryEntry], bool]:
    # Only the first match goes; entries are not unique.
    for index, entry in enumerate(log):
        if entry.source == path and entry.output_path == output_path:
            return [*log[:index], *log[index + 1 :]], True
    return list(log), False


def history_stats(log: Sequence[HistoryEntry]) -> HistoryStats:
    successful = sum(
        1 for entry in log if entry.status == ConversionStatus.SUCCESS.value
    )
    failed = sum(
        1 for entry in log if entry.status == ConversionStatus.FAILED.value
    )
    return HistoryStats(total=len(log), successful=successful, failed=failed)
