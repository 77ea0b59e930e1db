"""Format resolution for user-supplied format names."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Union

from docconv.errors import (
    RecognizedUnsupportedFormatError,
    UnsupportedFormatError,
)


class FormatId(Enum):
    """Closed set of document formats docconv can hand to the engine."""

    MARKDOWN = "markdown"
    HTML5 = "html5"
    LATEX = "latex"
    RST = "rst"
    DOCX = "docx"
    OPEN_DOCUMENT = "odt"
    EPUB = "epub"

    @property
    def readable(self) -> bool:
        return _TRAITS[self].reader is not None

    @property
    def writable(self) -> bool:
        return _TRAITS[self].writer is not None

    @property
    def reader(self) -> str:
        """Engine reader name; only valid for readable formats."""

        name = _TRAITS[self].reader
        if name is None:
            raise ValueError(f"{self.name} cannot be used as an input format.")
        return name

    @property
    def writer(self) -> str:
        name = _TRAITS[self].writer
        if name is None:  # pragma: no cover - every member is writable
            raise ValueError(f"{self.name} cannot be used as an output format.")
        return name

    @property
    def extension(self) -> str:
        return _TRAITS[self].extension


class AutoDetect:
    """Input selector meaning "let the engine infer the input format"."""

    _instance: Optional["AutoDetect"] = None

    def __new__(cls) -> "AutoDetect":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "AUTO_DETECT"


AUTO_DETECT = AutoDetect()

InputSelector = Union[FormatId, AutoDetect]


@dataclass(frozen=True)
class _Traits:
    reader: Optional[str]
    writer: Optional[str]
    extension: str


_TRAITS: Mapping[FormatId, _Traits] = {
    FormatId.MARKDOWN: _Traits("markdown", "markdown", "md"),
    FormatId.HTML5: _Traits("html", "html5", "html"),
    FormatId.LATEX: _Traits("latex", "latex", "tex"),
    FormatId.RST: _Traits("rst", "rst", "rst"),
    FormatId.DOCX: _Traits("docx", "docx", "docx"),
    FormatId.OPEN_DOCUMENT: _Traits(None, "odt", "odt"),
    FormatId.EPUB: _Traits("epub", "epub", "epub"),
}

_OUTPUT_ALIASES: Mapping[str, FormatId] = {
    "docx": FormatId.DOCX,
    "html": FormatId.HTML5,
    "html5": FormatId.HTML5,
    "tex": FormatId.LATEX,
    "latex": FormatId.LATEX,
    "md": FormatId.MARKDOWN,
    "markdown": FormatId.MARKDOWN,
    "rst": FormatId.RST,
    "odt": FormatId.OPEN_DOCUMENT,
    "epub": FormatId.EPUB,
    "epub2": FormatId.EPUB,
    "epub3": FormatId.EPUB,
}

# odt is accepted as an output only.
_INPUT_ALIASES: Mapping[str, FormatId] = {
    "markdown": FormatId.MARKDOWN,
    "md": FormatId.MARKDOWN,
    "html": FormatId.HTML5,
    "html5": FormatId.HTML5,
    "latex": FormatId.LATEX,
    "tex": FormatId.LATEX,
    "rst": FormatId.RST,
    "docx": FormatId.DOCX,
    "epub": FormatId.EPUB,
}

_INTERMEDIATE_HINT = (
    "Use an intermediate format such as Html or Latex and convert that instead."
)

_RECOGNIZED_UNSUPPORTED: Mapping[str, str] = {
    "html4": (
        "Html4 output is not available from the engine. Try Html5. "
        + _INTERMEDIATE_HINT
    ),
    "pdf": (
        "Direct PDF output needs a dedicated PDF engine. "
        + _INTERMEDIATE_HINT
    ),
}

_EXTENSION_FORMATS: Mapping[str, FormatId] = {
    "md": FormatId.MARKDOWN,
    "markdown": FormatId.MARKDOWN,
    "html": FormatId.HTML5,
    "htm": FormatId.HTML5,
    "tex": FormatId.LATEX,
    "latex": FormatId.LATEX,
    "rst": FormatId.RST,
    "docx": FormatId.DOCX,
    "epub": FormatId.EPUB,
}


def resolve_output(raw: str) -> FormatId:
    """Map ``raw`` to an output :class:`FormatId`.

    Raises :class:`RecognizedUnsupportedFormatError` for names such as
    ``pdf`` and :class:`UnsupportedFormatError` for anything unknown. The
    original spelling is preserved on the raised error.
    """

    normalized = _normalize(raw)
    remediation = _RECOGNIZED_UNSUPPORTED.get(normalized)
    if remediation is not None:
        raise RecognizedUnsupportedFormatError(raw, remediation)
    try:
        return _OUTPUT_ALIASES[normalized]
    except KeyError:
        raise UnsupportedFormatError(raw, direction="output") from None


def resolve_input(raw: Optional[str]) -> InputSelector:
    """Map ``raw`` to an input :class:`FormatId` or :data:`AUTO_DETECT`."""

    if raw is None:
        return AUTO_DETECT
    normalized = _normalize(raw)
    if normalized == "auto":
        return AUTO_DETECT
    try:
        return _INPUT_ALIASES[normalized]
    except KeyError:
        raise UnsupportedFormatError(raw, direction="input") from None


def format_for_path(path: Path) -> Optional[FormatId]:
    """Return the readable format implied by ``path``'s extension, if any."""

    suffix = path.suffix.lstrip(".").lower()
    if not suffix:
        return None
    return _EXTENSION_FORMATS.get(suffix)


def supported_output_names() -> tuple[str, ...]:
    return tuple(_OUTPUT_ALIASES)


def supported_input_names() -> tuple[str, ...]:
    return ("auto", *_INPUT_ALIASES)


def _normalize(raw: str) -> str:
    return str(raw).lower()


__all__ = [
    "AUTO_DETECT",
    "AutoDetect",
    "FormatId",
    "InputSelector",
    "format_for_path",
    "resolve_input",
    "resolve_output",
    "supported_input_names",
    "supported_output_names",
]
