"""Public APIs for format resolution, conversion and preview."""

from __future__ import annotations

from .batch import BatchSummary, default_output_path, run_batch
from .engine import (
    BufferResult,
    BufferSink,
    BufferSource,
    EngineAdapter,
    EngineRequest,
    FileSink,
    FileSource,
    FileWritten,
    PandocEngine,
    load_pandoc_engine,
)
from .formats import (
    AUTO_DETECT,
    AutoDetect,
    FormatId,
    resolve_input,
    resolve_output,
)
from .orchestrator import (
    ContentConversionRequest,
    ConversionResult,
    ConversionStatus,
    FileConversionRequest,
    PreviewRequest,
    convert_content,
    convert_file,
    preview_file,
    request_from_mapping,
    run_request,
)

__all__ = [
    "AUTO_DETECT",
    "AutoDetect",
    "BatchSummary",
    "BufferResult",
    "BufferSink",
    "BufferSource",
    "ContentConversionRequest",
    "ConversionResult",
    "ConversionStatus",
    "EngineAdapter",
    "EngineRequest",
    "FileConversionRequest",
    "FileSink",
    "FileSource",
    "FileWritten",
    "FormatId",
    "PandocEngine",
    "PreviewRequest",
    "convert_content",
    "convert_file",
    "default_output_path",
    "load_pandoc_engine",
    "preview_file",
    "request_from_mapping",
    "resolve_input",
    "resolve_output",
    "run_batch",
    "run_request",
]
