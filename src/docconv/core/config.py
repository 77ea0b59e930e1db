"""Parsing helpers behind ``docconv.toml``.

The file is a fixed set of tables (``[conversion]``, ``[history]``,
``[logging]``); these helpers read it, overlay it onto the built-in
defaults and write the commented starter file.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Mapping, MutableMapping

__all__ = [
    "TomlConfigError",
    "load_toml",
    "merge_defaults",
    "parse_bool",
    "write_toml_template",
]

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})


class TomlConfigError(RuntimeError):
    """Raised when ``docconv.toml`` cannot be read, parsed or validated."""


def load_toml(path: Path) -> dict[str, Any]:
    """Return the tables of the config file at ``path``.

    Every read failure (missing file, unreadable bytes, bad TOML syntax) is
    reported as :class:`TomlConfigError` naming the file.
    """

    try:
        raw = path.read_bytes()
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    except OSError as exc:
        raise TomlConfigError(f"Cannot read config {path}: {exc}") from exc

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise TomlConfigError(f"Config {path} is not valid UTF-8: {exc}") from exc

    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Invalid TOML in {path}: {exc}") from exc


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    prefix: str = "",
) -> None:
    """Overlay ``override`` onto the defaults in ``base``.

    ``base`` doubles as the schema: a key it lacks is rejected, and a key
    whose default is a table must be overridden by a table.
    """

    for key, value in override.items():
        dotted = f"{prefix}{key}"
        if key not in base:
            allowed = ", ".join(sorted(base)) or "none"
            raise TomlConfigError(
                f"Unknown configuration key '{dotted}' (expected one of: {allowed})."
            )
        current = base[key]
        if isinstance(current, MutableMapping):
            if not isinstance(value, Mapping):
                raise TomlConfigError(
                    f"'{dotted}' must be a [{dotted}] table, not {type(value).__name__}."
                )
            merge_defaults(current, value, prefix=f"{dotted}.")
        else:
            base[key] = value


def parse_bool(value: object, *, field: str) -> bool:
    """Accept TOML booleans as well as the usual env-var spellings."""

    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise TomlConfigError(f"{field} must be a boolean (true/false), got {value!r}.")


def write_toml_template(
    path: Path,
    *,
    template: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write the starter config to ``path``.

    Without ``overwrite`` the file is created exclusively, so an existing
    config is never replaced.
    """

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise TomlConfigError(f"Cannot write config {path}: {exc}") from exc
    try:
        with path.open("w" if overwrite else "x", encoding="utf-8") as handle:
            handle.write(template)
    except FileExistsError as exc:
        raise TomlConfigError(
            f"Config already exists: {path} (use --force to replace it)"
        ) from exc
    except OSError as exc:
        raise TomlConfigError(f"Cannot write config {path}: {exc}") from exc
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path
