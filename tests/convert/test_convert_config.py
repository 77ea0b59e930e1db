from __future__ import annotations

from pathlib import Path

import pytest

from docconv.convert import config as cfg


def _write_config(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    return path


def test_defaults_without_config_file(tmp_path):
    env = {"DOCCONV_DATA_HOME": str(tmp_path / "data")}

    result = cfg.load_config(env=env)

    assert result.config_path is None
    assert result.config.identifier == cfg.DEFAULT_IDENTIFIER
    assert result.config.input_format == "auto"
    assert result.config.output_format == "html"
    assert result.config.pandoc_args == ()
    assert result.config.record_history is True
    assert result.config.log_level == "INFO"
    assert result.layout.home == (tmp_path / "data" / cfg.DEFAULT_IDENTIFIER).resolve()
    assert result.layout.path_for("logs").is_dir()


def test_workspace_config_file_is_loaded(tmp_path):
    env = {"DOCCONV_DATA_HOME": str(tmp_path / "data")}
    workspace_config = (
        tmp_path / "data" / "app.test" / "config" / cfg.CONFIG_FILENAME
    )
    _write_config(
        workspace_config,
        """
[conversion]
output_format = "docx"
pandoc_args = ["--toc", " --number-sections "]

[history]
enabled = false

[logging]
level = "debug"
""",
    )

    result = cfg.load_config(
        env=env, overrides=cfg.ConfigOverrides(identifier="app.test")
    )

    assert result.config_path == workspace_config.resolve()
    assert result.config.output_format == "docx"
    assert result.config.pandoc_args == ("--toc", "--number-sections")
    assert result.config.record_history is False
    assert result.config.log_level == "DEBUG"


def test_precedence_cli_over_env_over_file(tmp_path):
    config_path = _write_config(
        tmp_path / "custom.toml",
        '[conversion]\noutput_format = "rst"\ninput_format = "md"\n',
    )
    env = {
        "DOCCONV_DATA_HOME": str(tmp_path / "data"),
        "DOCCONV_OUTPUT_FORMAT": "latex",
        "DOCCONV_HISTORY": "off",
        "DOCCONV_IDENTIFIER": "from.env",
    }

    result = cfg.load_config(
        config_path=config_path,
        env=env,
        overrides=cfg.ConfigOverrides(output_format="epub"),
    )

    assert result.config.output_format == "epub"
    assert result.config.input_format == "md"
    assert result.config.record_history is False
    assert result.config.identifier == "from.env"


def test_env_config_path_is_used(tmp_path):
    config_path = _write_config(
        tmp_path / "env.toml", '[logging]\nlevel = "warning"\n'
    )
    env = {
        "DOCCONV_DATA_HOME": str(tmp_path / "data"),
        "DOCCONV_CONFIG": str(config_path),
    }

    result = cfg.load_config(env=env)

    assert result.config.log_level == "WARNING"


def test_missing_explicit_config_errors(tmp_path):
    env = {"DOCCONV_DATA_HOME": str(tmp_path / "data")}

    with pytest.raises(cfg.DocconvConfigError):
        cfg.load_config(config_path=tmp_path / "nope.toml", env=env)


@pytest.mark.parametrize(
    "body",
    [
        '[conversion]\nunknown = 1\n',
        '[conversion]\noutput_format = "pdf"\n',
        '[conversion]\ninput_format = "odt"\n',
        '[conversion]\npandoc_args = "--toc"\n',
        '[conversion]\npandoc_args = [""]\n',
        '[history]\nenabled = "maybe"\n',
        "[conversion\n",
    ],
)
def test_invalid_config_values_raise(tmp_path, body):
    config_path = _write_config(tmp_path / "bad.toml", body)
    env = {"DOCCONV_DATA_HOME": str(tmp_path / "data")}

    with pytest.raises(cfg.DocconvConfigError):
        cfg.load_config(config_path=config_path, env=env)


def test_identifier_must_be_single_segment(tmp_path):
    env = {"DOCCONV_DATA_HOME": str(tmp_path / "data")}

    with pytest.raises(cfg.DocconvConfigError):
        cfg.load_config(
            env=env, overrides=cfg.ConfigOverrides(identifier="a/b")
        )


def test_workspace_path_override(tmp_path):
    env = {"DOCCONV_DATA_HOME": str(tmp_path / "data")}
    custom = tmp_path / "custom"

    result = cfg.load_config(env=env, workspace_path=custom)

    assert result.layout.home == custom.resolve()


def test_process_environment_is_used_when_env_omitted(monkeypatch, data_home):
    monkeypatch.setenv("DOCCONV_LOG_LEVEL", "error")

    result = cfg.load_config()

    assert result.config.log_level == "ERROR"
    assert result.layout.home == (data_home / cfg.DEFAULT_IDENTIFIER).resolve()


def test_packaged_template_matches_loader_defaults(tmp_path):
    written = cfg.write_default_config(tmp_path / "docconv.toml")
    env = {"DOCCONV_DATA_HOME": str(tmp_path / "data")}

    result = cfg.load_config(config_path=written, env=env)

    assert result.config_path == written
    assert result.config.output_format == "html"
    assert result.config.input_format == "auto"
    assert result.config.record_history is True
    assert "[conversion]" in cfg.default_config_text()


def test_write_default_config_refuses_to_overwrite(tmp_path):
    target = tmp_path / "docconv.toml"
    target.write_text("# mine\n", encoding="utf-8")

    with pytest.raises(cfg.DocconvConfigError):
        cfg.write_default_config(target)

    cfg.write_default_config(target, overwrite=True)
    assert target.read_text(encoding="utf-8") != "# mine\n"
