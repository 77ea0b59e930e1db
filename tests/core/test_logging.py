from __future__ import annotations

import json
import logging
from pathlib import Path

from docconv.core import logging as core_logging


def _close(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_configure_logger_writes_json_lines(tmp_path):
    logger, log_path = core_logging.configure_logger(
        "docconv.test_json",
        log_dir=tmp_path / "logs",
        level="INFO",
    )

    logger.debug("filtered out")
    logger.info(
        "Converted file",
        extra={"source": Path("a.md"), "formats": ("md", "html"), "count": 2},
    )
    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception("Conversion failed", extra={"reason": object()})
    for handler in logger.handlers:
        handler.flush()

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["level"] == "INFO"
    assert first["logger"] == "docconv.test_json"
    assert first["message"] == "Converted file"
    assert first["extra"] == {"source": "a.md", "formats": ["md", "html"], "count": 2}
    second = json.loads(lines[1])
    assert "ValueError: boom" in second["exception"]
    assert second["extra"]["reason"].startswith("<object")

    _close(logger)


def test_log_file_is_named_after_logger(tmp_path):
    logger, log_path = core_logging.configure_logger(
        "docconv.convert_names", log_dir=tmp_path
    )

    assert log_path == tmp_path / "convert_names.log"

    _close(logger)


def test_verbose_adds_single_console_handler(tmp_path):
    name = "docconv.test_verbose"
    logger, _ = core_logging.configure_logger(name, log_dir=tmp_path, verbose=True)
    core_logging.configure_logger(name, log_dir=tmp_path, verbose=True)

    consoles = [
        handler
        for handler in logger.handlers
        if getattr(handler, "_docconv_console", False)
    ]
    files = [
        handler
        for handler in logger.handlers
        if getattr(handler, "_docconv_file", False)
    ]
    assert len(consoles) == 1
    assert len(files) == 1

    core_logging.configure_logger(name, log_dir=tmp_path, verbose=False)
    assert not any(
        getattr(handler, "_docconv_console", False) for handler in logger.handlers
    )

    _close(logger)


def test_unknown_level_defaults_to_info(tmp_path):
    logger, _ = core_logging.configure_logger(
        "docconv.test_level", log_dir=tmp_path, level="chatty"
    )

    (handler,) = logger.handlers
    assert handler.level == logging.INFO

    _close(logger)


def test_unwritable_log_dir_falls_back_to_temp(monkeypatch, tmp_path):
    monkeypatch.setattr(
        core_logging.tempfile, "gettempdir", lambda: str(tmp_path / "tmp")
    )
    original_mkdir = Path.mkdir
    blocked = tmp_path / "blocked"

    def fake_mkdir(self, *args, **kwargs):
        if self == blocked:
            raise PermissionError("denied")
        return original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fake_mkdir)

    logger, log_path = core_logging.configure_logger(
        "docconv.test_fallback", log_dir=blocked
    )

    assert log_path == tmp_path / "tmp" / "docconv-logs" / "test_fallback.log"

    _close(logger)
