"""Shared fakes and filesystem helpers for the docconv test suite."""

from .documents import DocumentTree, build_tree  # noqa: F401
from .engines import FakePandocModule, RecordingEngine  # noqa: F401

__all__ = [
    "DocumentTree",
    "FakePandocModule",
    "RecordingEngine",
    "build_tree",
]
