"""Conversion history persistence and helpers."""

from __future__ import annotations

from .records import (
    HistoryStats,
    add_entry,
    delete_entry,
    entry_from_result,
    find_entry,
    history_stats,
)
from .store import HISTORY_FILENAME, HistoryEntry, HistoryStore, history_path

__all__ = [
    "HISTORY_FILENAME",
    "HistoryEntry",
    "HistoryStats",
    "HistoryStore",
    "add_entry",
    "delete_entry",
    "entry_from_result",
    "find_entry",
    "history_path",
    "history_stats",
]
