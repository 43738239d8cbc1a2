"""Tests for kernel/config.py settings layering."""

from __future__ import annotations

from pathlib import Path

import pytest

from kernel.config import (
    CORPUS_FILE,
    ORACLE_CMD,
    ORACLE_TIMEOUT_SECONDS,
    Settings,
    load_settings,
)


def test_defaults_without_file_or_env(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "missing.yaml", env={})
    assert settings == Settings()
    assert settings.oracle_cmd == ORACLE_CMD
    assert settings.oracle_timeout == ORACLE_TIMEOUT_SECONDS
    assert settings.use_oracle is False


def test_yaml_file_overrides_defaults(tmp_path: Path) -> None:
    config = tmp_path / ".auditor.yaml"
    config.write_text(
        "oracle_cmd: my-agent\n"
        "oracle_timeout: 12\n"
        "benchmark_concurrency: 0\n"
        "use_oracle: yes\n"
    )
    settings = load_settings(config, env={})
    assert settings.oracle_cmd == "my-agent"
    assert settings.oracle_timeout == 12.0
    assert settings.benchmark_concurrency == 1
    assert settings.use_oracle is True


def test_environment_wins_over_file(tmp_path: Path) -> None:
    config = tmp_path / ".auditor.yaml"
    config.write_text("oracle_cmd: from-file\n")
    settings = load_settings(
        config,
        env={
            "AUDITOR_ORACLE_CMD": "from-env",
            "AUDITOR_ORACLE_TIMEOUT": "2.5",
            "AUDITOR_USE_ORACLE": "off",
        },
    )
    assert settings.oracle_cmd == "from-env"
    assert settings.oracle_timeout == 2.5
    assert settings.use_oracle is False


def test_unknown_keys_are_ignored(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    config = tmp_path / ".auditor.yaml"
    config.write_text("colour: blue\n")
    assert load_settings(config, env={}) == Settings()
    assert "unknown config key 'colour'" in caplog.text


def test_empty_file(tmp_path: Path) -> None:
    config = tmp_path / ".auditor.yaml"
    config.write_text("")
    assert load_settings(config, env={}) == Settings()


def test_bad_value_raises(tmp_path: Path) -> None:
    config = tmp_path / ".auditor.yaml"
    config.write_text("oracle_timeout: soon\n")
    with pytest.raises(ValueError):
        load_settings(config, env={})


def test_default_file_is_read_from_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".auditor.yaml").write_text("log_level: DEBUG\n")
    monkeypatch.chdir(tmp_path)
    assert load_settings(env={}).log_level == "DEBUG"


def test_corpus_file_ships_with_the_package() -> None:
    assert CORPUS_FILE.is_file()


def test_size_ladder_is_not_a_setting(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """The measurement ladder is passed to measure_at_sizes, not read from config."""
    config = tmp_path / ".auditor.yaml"
    config.write_text("sizes: [10, 20, 40]\n")
    assert load_settings(config, env={}) == Settings()
    assert "unknown config key 'sizes'" in caplog.text
    assert not hasattr(Settings(), "sizes")
