"""Document conversion and HTML preview on top of pandoc."""

from __future__ import annotations

from .errors import DocconvError, ErrorKind

__all__ = ["DocconvError", "ErrorKind"]
