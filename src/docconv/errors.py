"""Typed error taxonomy shared by the conversion and history layers."""

from __future__ import annotations

from enum import Enum

__all__ = [
    "ErrorKind",
    "DocconvError",
    "ConversionError",
    "InputNotFoundError",
    "UnsupportedFormatError",
    "RecognizedUnsupportedFormatError",
    "EngineExecutionError",
    "DependencyError",
    "UnexpectedEngineOutputError",
    "OutputDecodeError",
    "HistoryIoError",
    "ShellError",
]


class ErrorKind(Enum):
    """Failure categories surfaced to callers."""

    INPUT_NOT_FOUND = "input_not_found"
    UNSUPPORTED_FORMAT = "unsupported_format"
    RECOGNIZED_UNSUPPORTED_FORMAT = "recognized_unsupported_format"
    ENGINE_EXECUTION_FAILURE = "engine_execution_failure"
    OUTPUT_DECODE_FAILURE = "output_decode_failure"
    HISTORY_IO_FAILURE = "history_io_failure"
    SHELL_FAILURE = "shell_failure"


class DocconvError(RuntimeError):
    """Base class for every failure docconv reports to a caller."""

    kind: ErrorKind = ErrorKind.ENGINE_EXECUTION_FAILURE


class ConversionError(DocconvError):
    """Raised when a conversion job cannot be assembled or executed."""


class InputNotFoundError(ConversionError):
    """Raised when the declared input file does not exist."""

    kind = ErrorKind.INPUT_NOT_FOUND

    def __init__(self, path: str) -> None:
        super().__init__(f"Input file not found: {path}")
        self.path = path


class UnsupportedFormatError(ConversionError):
    """Raised when a format string matches no known alias."""

    kind = ErrorKind.UNSUPPORTED_FORMAT

    def __init__(self, raw: str, *, direction: str = "output") -> None:
        super().__init__(f"Unsupported {direction} format: {raw}")
        self.raw = raw
        self.direction = direction


class RecognizedUnsupportedFormatError(ConversionError):
    """Raised for formats that are known by name but cannot be produced."""

    kind = ErrorKind.RECOGNIZED_UNSUPPORTED_FORMAT

    def __init__(self, raw: str, remediation: str) -> None:
        super().__init__(f"Output format '{raw}' is not supported. {remediation}")
        self.raw = raw
        self.remediation = remediation


class EngineExecutionError(ConversionError):
    """Raised when the conversion engine reports a failure."""

    kind = ErrorKind.ENGINE_EXECUTION_FAILURE
    message_format = "Pandoc conversion failed: {diagnostic}"

    def __init__(self, diagnostic: str) -> None:
        super().__init__(self.message_format.format(diagnostic=diagnostic))
        self.diagnostic = diagnostic


class DependencyError(EngineExecutionError):
    """Raised when the engine binding is not installed.

    The message is the install hint itself.
    """

    message_format = "{diagnostic}"


class UnexpectedEngineOutputError(EngineExecutionError):
    """Raised when the engine answers with a result shape the job did not ask for."""


class OutputDecodeError(ConversionError):
    """Raised when buffered engine output is not valid UTF-8."""

    kind = ErrorKind.OUTPUT_DECODE_FAILURE

    def __init__(self, detail: str) -> None:
        super().__init__(f"Failed to decode preview output as UTF-8: {detail}")
        self.detail = detail


class HistoryIoError(DocconvError):
    """Raised when the history file cannot be read or written."""

    kind = ErrorKind.HISTORY_IO_FAILURE

    def __init__(self, operation: str, diagnostic: str) -> None:
        super().__init__(f"History {operation} failed: {diagnostic}")
        self.operation = operation
        self.diagnostic = diagnostic


class ShellError(DocconvError):
    """Raised when the OS refuses to open or reveal a path."""

    kind = ErrorKind.SHELL_FAILURE

    def __init__(self, action: str, path: str, diagnostic: str) -> None:
        super().__init__(f"Failed to {action} {path}: {diagnostic}")
        self.action = action
        self.path = path
        self.diagnostic = diagnostic
