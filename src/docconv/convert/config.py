"""Configuration loader for docconv commands."""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Mapping, MutableMapping, Optional, Sequence

from dotenv import load_dotenv

from docconv.core import config as core_config
from docconv.core import workspace as workspace_mod
from docconv.errors import ConversionError

from .formats import resolve_input, resolve_output

CONFIG_FILENAME = "docconv.toml"
CONFIG_ENV = "DOCCONV_CONFIG"
ENV_PREFIX = "DOCCONV_"
TEMPLATE_RESOURCE = "template.toml"

DEFAULT_IDENTIFIER = "io.github.docconv"
_DEFAULT_INPUT_FORMAT = "auto"
_DEFAULT_OUTPUT_FORMAT = "html"
_DEFAULT_LOG_LEVEL = "INFO"


class DocconvConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class DocconvConfig:
    """Fully resolved configuration for a docconv invocation."""

    identifier: str
    input_format: str
    output_format: str
    pandoc_args: tuple[str, ...]
    record_history: bool
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    identifier: Optional[str] = None
    input_format: Optional[str] = None
    output_format: Optional[str] = None
    record_history: Optional[bool] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    """Resolved configuration plus the workspace it was loaded from."""

    config: DocconvConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]
    env: Mapping[str, str]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults.

    When ``env`` is not given, a ``.env`` file in the working directory is
    loaded into the process environment first.
    """

    overrides = overrides or ConfigOverrides()
    if env is None:
        load_dotenv()
        env_map: Mapping[str, str] = os.environ
    else:
        env_map = env

    # The identifier decides where the workspace (and its config) live, so it
    # cannot come from the TOML file inside that workspace.
    identifier = _require_string(
        _pick_first(
            overrides.identifier,
            _env_string(env_map, "IDENTIFIER"),
            DEFAULT_IDENTIFIER,
        ),
        "identifier",
    )

    try:
        layout = workspace_mod.ensure_workspace(
            identifier, env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise DocconvConfigError(str(exc)) from exc

    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )

    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested_path.exists():
        loaded_path = requested_path
        try:
            core_config.merge_defaults(
                table, core_config.load_toml(requested_path)
            )
        except core_config.TomlConfigError as exc:
            raise DocconvConfigError(str(exc)) from exc
    elif config_path is not None or _env_string(env_map, "CONFIG"):
        raise DocconvConfigError(f"Config file not found: {requested_path}")

    input_format = _require_string(
        _pick_first(
            overrides.input_format,
            _env_string(env_map, "INPUT_FORMAT"),
            table["conversion"]["input_format"],
        ),
        "conversion.input_format",
    )
    output_format = _require_string(
        _pick_first(
            overrides.output_format,
            _env_string(env_map, "OUTPUT_FORMAT"),
            table["conversion"]["output_format"],
        ),
        "conversion.output_format",
    )
    _validate_formats(input_format, output_format)

    record_history = _resolve_history_flag(
        overrides.record_history,
        _env_string(env_map, "HISTORY"),
        table["history"]["enabled"],
    )
    log_level = _require_string(
        _pick_first(
            overrides.log_level,
            _env_string(env_map, "LOG_LEVEL"),
            table["logging"]["level"],
        ),
        "logging.level",
    ).upper()

    config = DocconvConfig(
        identifier=identifier,
        input_format=input_format,
        output_format=output_format,
        pandoc_args=_normalize_args(table["conversion"]["pandoc_args"]),
        record_history=record_history,
        log_level=log_level,
    )
    return LoadResult(
        config=config,
        layout=layout,
        config_path=loaded_path,
        env=env_map,
    )


def default_config_text() -> str:
    """Return the packaged, commented default ``docconv.toml``."""

    resource = resources.files("docconv.convert").joinpath(TEMPLATE_RESOURCE)
    return resource.read_text(encoding="utf-8")


def write_default_config(path: Path, *, overwrite: bool = False) -> Path:
    try:
        return core_config.write_toml_template(
            path, template=default_config_text(), overwrite=overwrite
        )
    except core_config.TomlConfigError as exc:
        raise DocconvConfigError(str(exc)) from exc


def _default_table() -> MutableMapping[str, MutableMapping[str, object]]:
    return {
        "conversion": {
            "input_format": _DEFAULT_INPUT_FORMAT,
            "output_format": _DEFAULT_OUTPUT_FORMAT,
            "pandoc_args": [],
        },
        "history": {"enabled": True},
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = _env_string(env_map, "CONFIG")
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _validate_formats(input_format: str, output_format: str) -> None:
    try:
        resolve_input(input_format)
        resolve_output(output_format)
    except ConversionError as exc:
        raise DocconvConfigError(str(exc)) from exc


def _resolve_history_flag(
    override: Optional[bool],
    env_value: Optional[str],
    file_value: object,
) -> bool:
    if override is not None:
        return override
    try:
        if env_value is not None:
            return core_config.parse_bool(env_value, field=f"{ENV_PREFIX}HISTORY")
        return core_config.parse_bool(file_value, field="history.enabled")
    except core_config.TomlConfigError as exc:
        raise DocconvConfigError(str(exc)) from exc


def _normalize_args(value: object) -> tuple[str, ...]:
    if not isinstance(value, Sequence) or isinstance(value, str):
        raise DocconvConfigError(
            "conversion.pandoc_args must be a list of strings."
        )
    args: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise DocconvConfigError(
                "conversion.pandoc_args entries must be non-empty strings."
            )
        args.append(item.strip())
    return tuple(args)


def _require_string(value: object, field: str) -> str:
    if not isinstance(value, str):
        raise DocconvConfigError(f"{field} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise DocconvConfigError(f"{field} must be a non-empty string.")
    return stripped


def _env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


__all__ = [
    "CONFIG_ENV",
    "CONFIG_FILENAME",
    "ConfigOverrides",
    "DEFAULT_IDENTIFIER",
    "DocconvConfig",
    "DocconvConfigError",
    "LoadResult",
    "default_config_text",
    "load_config",
    "write_default_config",
]
