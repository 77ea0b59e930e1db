"""Conversion orchestration: build engine jobs from caller requests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from docconv.errors import (
    ConversionError,
    DocconvError,
    EngineExecutionError,
    ErrorKind,
    InputNotFoundError,
    OutputDecodeError,
    UnexpectedEngineOutputError,
)

from .engine import (
    BufferResult,
    BufferSink,
    BufferSource,
    EngineAdapter,
    EngineRequest,
    EngineResult,
    FileSink,
    FileSource,
)
from .formats import FormatId, InputSelector, resolve_input, resolve_output

_LOGGER = logging.getLogger("docconv.convert")

CONTENT_SOURCE = "<editor content>"


class ConversionStatus(Enum):
    """Outcome status; values double as the persisted history status."""

    SUCCESS = "success"
    FAILED = "error"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ConversionResult:
    """Result of a single conversion or preview request."""

    source: str
    status: ConversionStatus
    message: str
    output_path: Optional[Path] = None
    html: Optional[str] = None
    error: Optional[DocconvError] = None

    @property
    def succeeded(self) -> bool:
        return self.status is ConversionStatus.SUCCESS

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None


@dataclass(frozen=True)
class FileConversionRequest:
    input_path: str
    output_format: str
    output_path: str
    input_format: Optional[str] = None


@dataclass(frozen=True)
class ContentConversionRequest:
    input_content: str
    output_format: str
    output_path: str


@dataclass(frozen=True)
class PreviewRequest:
    input_path: str
    input_format: Optional[str] = None


Request = Union[FileConversionRequest, ContentConversionRequest, PreviewRequest]


def convert_file(
    input_path: Union[str, Path],
    output_format: str,
    output_path: Union[str, Path],
    input_format: Optional[str] = None,
    *,
    engine: EngineAdapter,
    logger: Optional[logging.Logger] = None,
) -> ConversionResult:
    """Convert ``input_path`` into ``output_format`` at ``output_path``."""

    log = logger or _LOGGER
    source = str(input_path)
    try:
        target = Path(output_path)
        _require_input(source)
        output_id = resolve_output(output_format)
        selector = resolve_input(input_format)
        request = EngineRequest(
            source=FileSource(Path(source)),
            sink=FileSink(target),
            output_format=output_id,
            input_format=_engine_input_format(selector),
            standalone=True,
        )
        log.info(
            "Converting file",
            extra={
                "source": source,
                "output_format": output_id.value,
                "input_format": _describe(selector),
                "output_path": str(target),
            },
        )
        _execute(engine, request)
    except ConversionError as exc:
        return _failure(source, exc, log)

    message = f"Conversion succeeded. Output saved to: {target}"
    log.info("Converted file", extra={"source": source, "output_path": str(target)})
    return ConversionResult(
        source=source,
        status=ConversionStatus.SUCCESS,
        message=message,
        output_path=target,
    )


def convert_content(
    content: str,
    output_format: str,
    output_path: Union[str, Path],
    *,
    engine: EngineAdapter,
    logger: Optional[logging.Logger] = None,
) -> ConversionResult:
    """Convert in-memory Markdown ``content`` into a file."""

    log = logger or _LOGGER
    try:
        target = Path(output_path)
        output_id = resolve_output(output_format)
        request = EngineRequest(
            source=BufferSource(content.encode("utf-8")),
            sink=FileSink(target),
            output_format=output_id,
            input_format=FormatId.MARKDOWN,
            standalone=True,
        )
        log.info(
            "Converting editor content",
            extra={
                "content_length": len(content),
                "output_format": output_id.value,
                "output_path": str(target),
            },
        )
        _execute(engine, request)
    except ConversionError as exc:
        return _failure(CONTENT_SOURCE, exc, log)

    return ConversionResult(
        source=CONTENT_SOURCE,
        status=ConversionStatus.SUCCESS,
        message=f"Conversion succeeded. Output saved to: {target}",
        output_path=target,
    )


def preview_file(
    input_path: Union[str, Path],
    input_format: Optional[str] = None,
    *,
    engine: EngineAdapter,
    logger: Optional[logging.Logger] = None,
) -> ConversionResult:
    """Render ``input_path`` as standalone HTML without touching disk."""

    log = logger or _LOGGER
    source = str(input_path)
    try:
        _require_input(source)
        selector = resolve_input(input_format)
        request = EngineRequest(
            source=FileSource(Path(source)),
            sink=BufferSink(),
            output_format=FormatId.HTML5,
            input_format=_engine_input_format(selector),
            standalone=True,
        )
        log.info(
            "Generating preview",
            extra={"source": source, "input_format": _describe(selector)},
        )
        outcome = _execute(engine, request)
        if not isinstance(outcome, BufferResult):
            raise UnexpectedEngineOutputError(
                f"expected buffered HTML, got {type(outcome).__name__}"
            )
        try:
            html = outcome.data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise OutputDecodeError(str(exc)) from exc
    except ConversionError as exc:
        return _failure(source, exc, log)

    log.info("Generated preview", extra={"source": source, "length": len(html)})
    return ConversionResult(
        source=source,
        status=ConversionStatus.SUCCESS,
        message="Preview generated.",
        html=html,
    )


def run_request(
    request: Request,
    *,
    engine: EngineAdapter,
    logger: Optional[logging.Logger] = None,
) -> ConversionResult:
    """Dispatch any caller-facing request shape to its operation."""

    if isinstance(request, FileConversionRequest):
        return convert_file(
            request.input_path,
            request.output_format,
            request.output_path,
            request.input_format,
            engine=engine,
            logger=logger,
        )
    if isinstance(request, ContentConversionRequest):
        return convert_content(
            request.input_content,
            request.output_format,
            request.output_path,
            engine=engine,
            logger=logger,
        )
    if isinstance(request, PreviewRequest):
        return preview_file(
            request.input_path,
            request.input_format,
            engine=engine,
            logger=logger,
        )
    raise TypeError(f"Unsupported request type: {type(request).__name__}")


def request_from_mapping(payload: Mapping[str, Any]) -> Request:
    """Build a request from its wire dictionary.

    The shape is chosen by keys: ``input_content`` means content conversion,
    ``output_path`` means file conversion, anything else is a preview.
    """

    def _required(key: str) -> str:
        try:
            value = payload[key]
        except KeyError as exc:
            raise ValueError(f"Request is missing required field '{key}'.") from exc
        if not isinstance(value, str):
            raise ValueError(f"Request field '{key}' must be a string.")
        return value

    optional_format = payload.get("input_format")
    if optional_format is not None and not isinstance(optional_format, str):
        raise ValueError("Request field 'input_format' must be a string.")

    if "input_content" in payload:
        return ContentConversionRequest(
            input_content=_required("input_content"),
            output_format=_required("output_format"),
            output_path=_required("output_path"),
        )
    if "output_path" in payload or "output_format" in payload:
        return FileConversionRequest(
            input_path=_required("input_path"),
            output_format=_required("output_format"),
            output_path=_required("output_path"),
            input_format=optional_format,
        )
    return PreviewRequest(
        input_path=_required("input_path"),
        input_format=optional_format,
    )


def _require_input(source: str) -> None:
    # Path("") is the working directory, not a missing file.
    if not source or not Path(source).exists():
        raise InputNotFoundError(source)


def _engine_input_format(selector: InputSelector) -> Optional[FormatId]:
    if isinstance(selector, FormatId):
        return selector
    return None


def _describe(selector: InputSelector) -> str:
    if isinstance(selector, FormatId):
        return selector.value
    return "auto"


def _execute(engine: EngineAdapter, request: EngineRequest) -> EngineResult:
    try:
        return engine.convert(request)
    except EngineExecutionError:
        raise
    except Exception as exc:
        raise EngineExecutionError(str(exc)) from exc


def _failure(
    source: str, exc: ConversionError, log: logging.Logger
) -> ConversionResult:
    log.error(
        "Conversion failed",
        extra={"source": source, "kind": exc.kind.value, "reason": str(exc)},
    )
    return ConversionResult(
        source=source,
        status=ConversionStatus.FAILED,
        message=str(exc),
        error=exc,
    )


__all__ = [
    "CONTENT_SOURCE",
    "ContentConversionRequest",
    "ConversionResult",
    "ConversionStatus",
    "FileConversionRequest",
    "PreviewRequest",
    "Request",
    "convert_content",
    "convert_file",
    "preview_file",
    "request_from_mapping",
    "run_request",
]
