from __future__ import annotations

import pytest

from omni_identity.cli.config import DEFAULT_KEY_FILE, ConfigError, load_cli_config


def test_defaults_when_config_missing(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("OMNI_IDENTITY_KEY_FILE", raising=False)
    config = load_cli_config(tmp_path / "missing.toml")
    assert config.key_file == str(DEFAULT_KEY_FILE)
    assert config.output == "text"
    assert config.config_schema_version == 1


def test_env_key_file_used_when_config_missing(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("OMNI_IDENTITY_KEY_FILE", "/tmp/env-key.pem")
    config = load_cli_config(tmp_path / "missing.toml")
    assert config.key_file == "/tmp/env-key.pem"


def test_env_key_file_overrides_config_file(tmp_path, monkeypatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('key_file = "/tmp/file-key.pem"\n', encoding="utf-8")
    monkeypatch.setenv("OMNI_IDENTITY_KEY_FILE", "/tmp/env-key.pem")
    config = load_cli_config(config_path)
    assert config.key_file == "/tmp/env-key.pem"


def test_file_key_file_used_when_env_not_set(tmp_path, monkeypatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('[cli]\nkey_file = "/tmp/file-key.pem"\noutput = "JSON"\n', encoding="utf-8")
    monkeypatch.delenv("OMNI_IDENTITY_KEY_FILE", raising=False)
    config = load_cli_config(config_path)
    assert config.key_file == "/tmp/file-key.pem"
    assert config.output == "json"


def test_output_rejects_unknown_format(tmp_path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('output = "yaml"\n', encoding="utf-8")
    with pytest.raises(ConfigError):
        load_cli_config(config_path)


def test_config_schema_version_rejects_invalid_values(tmp_path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("config_schema_version = 0\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_cli_config(config_path)


def test_invalid_toml_raises_config_error(tmp_path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("key_file = \n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_cli_config(config_path)


def test_cli_section_must_be_a_table(tmp_path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('cli = "nope"\n', encoding="utf-8")
    with pytest.raises(ConfigError):
        load_cli_config(config_path)


def test_env_key_file_expands_home_with_and_without_config(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("OMNI_IDENTITY_KEY_FILE", "~/k.pem")
    expected = str(tmp_path / "k.pem")

    assert load_cli_config(tmp_path / "missing.toml").key_file == expected

    config_path = tmp_path / "config.toml"
    config_path.write_text('output = "text"\n', encoding="utf-8")
    assert load_cli_config(config_path).key_file == expected
