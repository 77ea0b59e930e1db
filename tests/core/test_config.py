from __future__ import annotations

import pytest

from docconv.core import config as core_config


def test_load_toml_reads_tables(tmp_path):
    path = tmp_path / "c.toml"
    path.write_text('[conversion]\noutput_format = "rst"\n', encoding="utf-8")

    assert core_config.load_toml(path) == {"conversion": {"output_format": "rst"}}


def test_load_toml_errors(tmp_path):
    with pytest.raises(core_config.TomlConfigError):
        core_config.load_toml(tmp_path / "missing.toml")

    broken = tmp_path / "broken.toml"
    broken.write_text("[conversion", encoding="utf-8")
    with pytest.raises(core_config.TomlConfigError):
        core_config.load_toml(broken)


def test_merge_defaults_overlays_nested_tables():
    base = {"conversion": {"output_format": "html", "pandoc_args": []}}

    core_config.merge_defaults(
        base, {"conversion": {"pandoc_args": ["--toc"]}}
    )

    assert base == {"conversion": {"output_format": "html", "pandoc_args": ["--toc"]}}


def test_merge_defaults_rejects_unknown_keys():
    with pytest.raises(core_config.TomlConfigError) as excinfo:
        core_config.merge_defaults({"conversion": {}}, {"conversion": {"bogus": 1}})

    assert "conversion.bogus" in str(excinfo.value)


def test_merge_defaults_requires_tables():
    with pytest.raises(core_config.TomlConfigError):
        core_config.merge_defaults({"history": {"enabled": True}}, {"history": 1})


@pytest.mark.parametrize(
    "value, expected",
    [(True, True), ("yes", True), ("ON", True), ("1", True), ("off", False), ("0", False)],
)
def test_parse_bool(value, expected):
    assert core_config.parse_bool(value, field="flag") is expected


def test_parse_bool_rejects_other_values():
    with pytest.raises(core_config.TomlConfigError):
        core_config.parse_bool(2, field="flag")


def test_write_toml_template_respects_overwrite(tmp_path):
    target = tmp_path / "nested" / "docconv.toml"

    core_config.write_toml_template(target, template="a = 1\n")
    with pytest.raises(core_config.TomlConfigError):
        core_config.write_toml_template(target, template="a = 2\n")
    core_config.write_toml_template(target, template="a = 2\n", overwrite=True)

    assert target.read_text(encoding="utf-8") == "a = 2\n"


def test_load_toml_names_file_in_syntax_errors(tmp_path):
    broken = tmp_path / "docconv.toml"
    broken.write_text("[conversion]\noutput_format = \n", encoding="utf-8")

    with pytest.raises(core_config.TomlConfigError) as excinfo:
        core_config.load_toml(broken)

    assert str(excinfo.value).startswith(f"Invalid TOML in {broken}")


def test_load_toml_rejects_non_utf8_bytes(tmp_path):
    latin1 = tmp_path / "docconv.toml"
    latin1.write_bytes(b'[logging]\nlevel = "caf\xe9"\n')

    with pytest.raises(core_config.TomlConfigError) as excinfo:
        core_config.load_toml(latin1)

    assert "not valid UTF-8" in str(excinfo.value)


def test_load_toml_reports_directory_as_unreadable(tmp_path):
    with pytest.raises(core_config.TomlConfigError) as excinfo:
        core_config.load_toml(tmp_path)

    assert "Cannot read config" in str(excinfo.value)


def test_merge_defaults_lists_allowed_keys():
    base = {"conversion": {"output_format": "html"}, "history": {"enabled": True}}

    with pytest.raises(core_config.TomlConfigError) as excinfo:
        core_config.merge_defaults(base, {"histroy": {"enabled": False}})

    assert "expected one of: conversion, history" in str(excinfo.value)


def test_write_toml_template_keeps_existing_file(tmp_path):
    target = tmp_path / "docconv.toml"
    target.write_text("mine = true\n", encoding="utf-8")

    with pytest.raises(core_config.TomlConfigError) as excinfo:
        core_config.write_toml_template(target, template="a = 1\n")

    assert "--force" in str(excinfo.value)
    assert target.read_text(encoding="utf-8") == "mine = true\n"


def test_write_toml_template_reports_unwritable_parent(tmp_path):
    blocker = tmp_path / "config"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(core_config.TomlConfigError) as excinfo:
        core_config.write_toml_template(blocker / "docconv.toml", template="a = 1\n")

    assert "Cannot write config" in str(excinfo.value)
