"""Whole-file JSON persistence for the conversion history."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, MutableMapping, Optional, Sequence

from docconv.core import workspace
from docconv.errors import HistoryIoError

__all__ = [
    "HISTORY_FILENAME",
    "HistoryEntry",
    "HistoryStore",
    "history_path",
]

HISTORY_FILENAME = "conversion_history.json"

_LOGGER = logging.getLogger("docconv.history")


class _SchemaError(ValueError):
    pass


@dataclass(frozen=True)
class HistoryEntry:
    """One recorded conversion outcome.

    Serialised with the keys ``path``, ``status``, ``message``,
    ``isSuccess`` and ``outputPath``.
    """

    source: str
    status: str
    message: str
    is_success: bool
    output_path: Optional[str] = None

    def to_dict(self) -> MutableMapping[str, Any]:
        return {
            "path": self.source,
            "status": self.status,
            "message": self.message,
            "isSuccess": self.is_success,
            "outputPath": self.output_path,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "HistoryEntry":
        if not isinstance(payload, Mapping):
            raise _SchemaError("History entries must be JSON objects.")
        try:
            source = payload["path"]
            status = payload["status"]
            message = payload["message"]
            is_success = payload["isSuccess"]
        except KeyError as exc:
            raise _SchemaError(f"History entry missing field: {exc}") from exc
        output_path = payload.get("outputPath")

        if not all(isinstance(value, str) for value in (source, status, message)):
            raise _SchemaError("History path, status and message must be strings.")
        if not isinstance(is_success, bool):
            raise _SchemaError("History isSuccess must be a boolean.")
        if output_path is not None and not isinstance(output_path, str):
            raise _SchemaError("History outputPath must be a string or null.")

        return cls(
            source=source,
            status=status,
            message=message,
            is_success=is_success,
            output_path=output_path,
        )


def history_path(
    identifier: str, *, env: Optional[Mapping[str, str]] = None
) -> Path:
    """Return ``<local data dir>/<identifier>/conversion_history.json``."""

    return workspace.app_data_dir(identifier, env=env) / HISTORY_FILENAME


class HistoryStore:
    """Load and save the full history log.

    ``identifier`` is called on every path lookup, so a host that changes its
    installation identifier is picked up without rebuilding the store. The
    store holds no entries itself; callers own the loaded list.
    """

    def __init__(
        self,
        identifier: Callable[[], str],
        *,
        env: Optional[Mapping[str, str]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._identifier = identifier
        self._env = env
        self._logger = logger or _LOGGER

    @property
    def path(self) -> Path:
        return history_path(self._identifier(), env=self._env)

    def load(self) -> list[HistoryEntry]:
        """Return every stored entry in order.

        A missing file is an empty history. A file that cannot be parsed is
        also treated as empty (a crash mid-save leaves it truncated); only
        real read failures are raised, as :class:`HistoryIoError`.
        """

        target = self.path
        try:
            raw = target.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise HistoryIoError("load", str(exc)) from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
            if not isinstance(payload, list):
                raise _SchemaError("History document must be a JSON array.")
            entries = [HistoryEntry.from_dict(item) for item in payload]
        except (UnicodeDecodeError, json.JSONDecodeError, _SchemaError) as exc:
            self._logger.warning(
                "Discarding unreadable history file",
                extra={"path": str(target), "reason": str(exc)},
            )
            return []

        self._logger.debug(
            "Loaded history",
            extra={"path": str(target), "entry_count": len(entries)},
        )
        return entries

    def save(self, entries: Sequence[HistoryEntry]) -> Path:
        """Overwrite the history file with ``entries``."""

        target = self.path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise HistoryIoError("create_dir", str(exc)) from exc

        try:
            document = json.dumps(
                [entry.to_dict() for entry in entries],
                indent=2,
                ensure_ascii=False,
            )
        except (TypeError, ValueError) as exc:
            raise HistoryIoError("serialize", str(exc)) from exc

        try:
            target.write_text(document, encoding="utf-8")
        except OSError as exc:
            raise HistoryIoError("write", str(exc)) from exc

        self._logger.debug(
            "Saved history",
            extra={"path": str(target), "entry_count": len(entries)},
        )
        return target

    def clear(self) -> Path:
        return self.save([])
