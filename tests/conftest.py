from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import DocumentTree, FakePandocModule, RecordingEngine  # noqa: E402

_DOCCONV_LOGGERS = ("docconv.convert", "docconv.history")


@pytest.fixture(autouse=True)
def _isolate_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Path]:
    """Point the data home at tmp and drop any DOCCONV_* leftovers."""

    for key in list(os.environ):
        if key.startswith("DOCCONV_"):
            monkeypatch.delenv(key, raising=False)
    data_home = tmp_path / "data-home"
    monkeypatch.setenv("DOCCONV_DATA_HOME", str(data_home))
    monkeypatch.chdir(tmp_path)
    yield data_home


@pytest.fixture(autouse=True)
def _close_log_handlers() -> Iterator[None]:
    yield
    for name in _DOCCONV_LOGGERS:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


@pytest.fixture
def data_home(_isolate_environment: Path) -> Path:
    return _isolate_environment


@pytest.fixture
def documents(tmp_path: Path) -> DocumentTree:
    """Helper bound to pytest's per-test tmp directory."""

    return DocumentTree(tmp_path / "docs")


@pytest.fixture
def engine() -> RecordingEngine:
    return RecordingEngine()


@pytest.fixture
def fake_pypandoc() -> FakePandocModule:
    return FakePandocModule()
