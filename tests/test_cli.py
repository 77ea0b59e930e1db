from __future__ import annotations

import types

import pytest

from docconv import cli


@pytest.fixture(autouse=True)
def fake_version(monkeypatch):
    def version(name: str) -> str:
        assert name == "docconv"
        return "0.0-test"

    monkeypatch.setattr(cli.metadata, "version", version)


def test_version_command(capsys):
    assert cli.main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == "0.0-test"


def test_version_handles_missing_package(monkeypatch, capsys):
    def missing(name: str) -> str:
        raise cli.metadata.PackageNotFoundError(name)

    monkeypatch.setattr(cli.metadata, "version", missing)

    assert cli.main(["version"]) == 0
    assert capsys.readouterr().out.strip() == "unknown"


def test_no_args_prints_usage(capsys):
    code = cli.main([])

    out = capsys.readouterr().out
    assert code == 2
    assert "Usage: docconv" in out
    assert "Available commands:" in out


def test_list_shows_every_command(capsys):
    assert cli.main(["list"]) == 0

    out = capsys.readouterr().out
    for name in (
        "init",
        "convert",
        "convert-content",
        "preview",
        "history",
        "open",
        "reveal",
    ):
        assert name in out


def test_help_for_command(capsys):
    assert cli.main(["help", "preview"]) == 0
    assert "docconv preview --help" in capsys.readouterr().out


def test_help_for_unknown_command(capsys):
    assert cli.main(["help", "nope"]) == 2
    assert "Unknown command 'nope'" in capsys.readouterr().err


def test_unknown_command(capsys):
    assert cli.main(["frobnicate"]) == 2
    assert "Unknown command" in capsys.readouterr().err


@pytest.mark.parametrize(
    "command, func",
    [
        ("convert", "main"),
        ("convert-content", "convert_content_main"),
        ("preview", "preview_main"),
        ("open", "open_main"),
    ],
)
def test_commands_dispatch_to_module_functions(monkeypatch, command, func):
    calls: list[list[str]] = []
    module = types.SimpleNamespace(**{func: lambda argv: calls.append(argv) or 7})
    monkeypatch.setattr(cli, "import_module", lambda name: module)

    assert cli.main([command, "a.md", "--to", "html"]) == 7
    assert calls == [["a.md", "--to", "html"]]


def test_system_exit_is_normalized(monkeypatch):
    def exits(argv):
        raise SystemExit(2)

    monkeypatch.setattr(
        cli, "import_module", lambda name: types.SimpleNamespace(main=exits)
    )

    assert cli.main(["history", "--bogus"]) == 2


def test_system_exit_message_becomes_error(monkeypatch, capsys):
    def exits(argv):
        raise SystemExit("fatal")

    monkeypatch.setattr(
        cli, "import_module", lambda name: types.SimpleNamespace(main=exits)
    )

    assert cli.main(["init"]) == 1
    assert "fatal" in capsys.readouterr().err


def test_init_runs_through_dispatcher(data_home, capsys):
    assert cli.main(["init", "--quiet"]) == 0
    assert data_home.is_dir()
