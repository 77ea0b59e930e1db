"""Engine boundary: job description, results, and the pandoc adapter."""

from __future__ import annotations

import glob
import importlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Protocol, Sequence, Union

from docconv.errors import DependencyError, EngineExecutionError

from .formats import FormatId


@dataclass(frozen=True)
class FileSource:
    path: Path


@dataclass(frozen=True)
class BufferSource:
    data: bytes


@dataclass(frozen=True)
class FileSink:
    path: Path


@dataclass(frozen=True)
class BufferSink:
    pass


Source = Union[FileSource, BufferSource]
Sink = Union[FileSink, BufferSink]


@dataclass(frozen=True)
class EngineRequest:
    """A fully resolved conversion job.

    ``input_format`` is ``None`` when the engine should infer the input
    format itself; auto-detection is never passed as an explicit value.
    """

    source: Source
    sink: Sink
    output_format: FormatId
    input_format: Optional[FormatId] = None
    standalone: bool = True


@dataclass(frozen=True)
class BufferResult:
    data: bytes


@dataclass(frozen=True)
class FileWritten:
    path: Path


EngineResult = Union[BufferResult, FileWritten]


class EngineAdapter(Protocol):
    def convert(self, request: EngineRequest) -> EngineResult:  # pragma: no cover - interface
        ...


@dataclass
class PandocEngine:
    """Run conversions through the ``pypandoc`` binding.

    ``module`` is the imported ``pypandoc`` module; tests pass any object
    exposing ``convert_file`` and ``convert_text``.
    """

    module: Any
    extra_args: Sequence[str] = field(default_factory=tuple)

    def convert(self, request: EngineRequest) -> EngineResult:
        args = list(self.extra_args)
        if request.standalone and "--standalone" not in args:
            args.insert(0, "--standalone")

        reader = (
            request.input_format.reader
            if request.input_format is not None
            else None
        )
        writer = request.output_format.writer
        outputfile = (
            str(request.sink.path)
            if isinstance(request.sink, FileSink)
            else None
        )

        try:
            if isinstance(request.source, FileSource):
                produced = self.module.convert_file(
                    # pypandoc globs file paths; escape so brackets stay literal.
                    glob.escape(str(request.source.path)),
                    writer,
                    format=reader,
                    extra_args=args,
                    outputfile=outputfile,
                )
            else:
                produced = self.module.convert_text(
                    request.source.data.decode("utf-8"),
                    writer,
                    format=reader,
                    extra_args=args,
                    outputfile=outputfile,
                )
        except (RuntimeError, OSError, ValueError) as exc:
            raise EngineExecutionError(str(exc)) from exc

        if isinstance(request.sink, FileSink):
            return FileWritten(path=request.sink.path)
        return BufferResult(data=_as_bytes(produced))


def load_pandoc_engine(extra_args: Sequence[str] = ()) -> PandocEngine:
    """Import ``pypandoc`` and return an engine bound to it."""

    try:
        module = importlib.import_module("pypandoc")
    except ImportError as exc:
        raise DependencyError(
            "The 'pypandoc' package is required for document conversion. "
            "Install it with `pip install pypandoc` (or `pypandoc_binary` "
            "to bundle pandoc itself)."
        ) from exc

    for attribute in ("convert_file", "convert_text"):
        if not hasattr(module, attribute):
            raise DependencyError(
                f"Dependency 'pypandoc' is installed but missing the "
                f"'{attribute}' attribute. Upgrade or reinstall the package."
            )

    return PandocEngine(module=module, extra_args=tuple(extra_args))


def _as_bytes(produced: Any) -> bytes:
    if isinstance(produced, bytes):
        return produced
    if isinstance(produced, str):
        return produced.encode("utf-8")
    raise EngineExecutionError(
        f"pandoc returned an unsupported response type: {type(produced).__name__}"
    )


__all__ = [
    "BufferResult",
    "BufferSink",
    "BufferSource",
    "EngineAdapter",
    "EngineRequest",
    "EngineResult",
    "FileSink",
    "FileSource",
    "FileWritten",
    "PandocEngine",
    "load_pandoc_engine",
]
