"""Local data directory and per-installation workspace layout."""

from __future__ import annotations

import os
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, MutableMapping


WORKSPACE_ENV = "DOCCONV_DATA_HOME"

_SUBDIRS = {
    "config": "config",
    "logs": "logs",
}


class WorkspaceError(RuntimeError):
    """Raised when the workspace layout cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Resolved workspace paths and creation metadata."""

    home: Path
    directories: Mapping[str, Path]
    created: Mapping[str, bool]

    def path_for(self, key: str) -> Path:
        try:
            return self.directories[key]
        except KeyError as exc:
            raise KeyError(f"Unknown workspace directory '{key}'.") from exc

    def items(self) -> tuple[tuple[str, Path], ...]:
        return tuple(self.directories.items())


def local_data_dir(
    *, env: Mapping[str, str] | None = None, platform: str | None = None
) -> Path:
    """Return the base local-data directory for this user.

    ``DOCCONV_DATA_HOME`` wins when set; otherwise the platform convention is
    used (``%LOCALAPPDATA%`` on Windows, ``~/Library/Application Support`` on
    macOS and ``$XDG_DATA_HOME`` or ``~/.local/share`` elsewhere).
    """

    env_map = _coerce_env(env)
    override = (env_map.get(WORKSPACE_ENV) or "").strip()
    if override:
        return Path(override).expanduser()

    system = platform or sys.platform
    if system.startswith("win"):
        local = (env_map.get("LOCALAPPDATA") or "").strip()
        if local:
            return Path(local)
        return Path.home() / "AppData" / "Local"
    if system == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = (env_map.get("XDG_DATA_HOME") or "").strip()
    if xdg:
        return Path(xdg).expanduser()
    return Path.home() / ".local" / "share"


def app_data_dir(
    identifier: str,
    *,
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> Path:
    """Return ``<local data dir>/<identifier>``."""

    return local_data_dir(env=env, platform=platform) / _validate_identifier(
        identifier
    )


def ensure_workspace(
    identifier: str,
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    create: bool = True,
) -> WorkspaceLayout:
    """Ensure the per-installation workspace exists and return its layout."""

    env_map = _coerce_env(env)
    if path is not None:
        base, has_override = _absolute(path.expanduser()), True
    else:
        base = _absolute(app_data_dir(identifier, env=env_map))
        has_override = bool((env_map.get(WORKSPACE_ENV) or "").strip())

    candidates: list[Path] = [base]
    if create and not has_override:
        fallback = _fallback_base(identifier)
        if fallback != base:
            candidates.append(fallback)

    last_error: Exception | None = None
    for candidate in candidates:
        try:
            return _materialize_layout(base=candidate, create=create)
        except PermissionError as exc:
            last_error = exc
            continue

    raise WorkspaceError(
        "Unable to prepare workspace at {0}".format(base)
    ) from last_error


def describe_layout(
    identifier: str,
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
) -> Mapping[str, Path]:
    """Return the workspace layout without creating directories."""

    layout = ensure_workspace(identifier, env=env, path=path, create=False)
    mapping: MutableMapping[str, Path] = {"home": layout.home}
    mapping.update(layout.directories)
    return MappingProxyType(dict(mapping))


def _coerce_env(env: Mapping[str, str] | None) -> Mapping[str, str]:
    if env is None:
        return os.environ
    return env


def _validate_identifier(identifier: str) -> str:
    candidate = (identifier or "").strip()
    if not candidate:
        raise WorkspaceError("Installation identifier must be a non-empty string.")
    if "/" in candidate or "\\" in candidate or candidate in (".", ".."):
        raise WorkspaceError(
            f"Installation identifier must be a single path segment: {identifier!r}"
        )
    return candidate


def _absolute(path: Path) -> Path:
    try:
        return path.resolve()
    except (FileNotFoundError, OSError):
        return path.absolute()


def _fallback_base(identifier: str) -> Path:
    return Path(tempfile.gettempdir()) / "docconv-data" / _validate_identifier(
        identifier
    )


def _materialize_layout(*, base: Path, create: bool) -> WorkspaceLayout:
    if base.exists() and not base.is_dir():
        raise WorkspaceError(
            "Configured workspace exists and is not a directory: {0}".format(base)
        )

    created: MutableMapping[str, bool] = {
        "home": _ensure_dir(base) if create else False
    }
    directories: MutableMapping[str, Path] = {}
    for key, relative in _SUBDIRS.items():
        candidate = base / relative
        if create:
            created[key] = _ensure_dir(candidate)
        else:
            created[key] = False
            if candidate.exists() and not candidate.is_dir():
                raise WorkspaceError(
                    "Expected workspace directory for '{0}' but found a file: "
                    "{1}".format(key, candidate)
                )
        directories[key] = candidate

    return WorkspaceLayout(
        home=base,
        directories=MappingProxyType(dict(directories)),
        created=MappingProxyType(dict(created)),
    )


def _ensure_dir(path: Path) -> bool:
    existed = path.exists()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except FileExistsError as exc:  # pragma: no cover - depends on platform
        raise WorkspaceError(
            "Expected directory but found a non-directory entry: {0}".format(path)
        ) from exc
    try:
        path.chmod(0o700)
    except (PermissionError, NotImplementedError):
        pass
    return not existed


__all__ = [
    "WORKSPACE_ENV",
    "WorkspaceError",
    "WorkspaceLayout",
    "app_data_dir",
    "describe_layout",
    "ensure_workspace",
    "local_data_dir",
]
