"""Configuration helpers for the omni-identity CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path.home() / ".omni_identity" / "config.toml"
DEFAULT_KEY_FILE = Path.home() / ".omni_identity" / "identity" / "ed25519.pem"
KEY_FILE_ENV_VAR = "OMNI_IDENTITY_KEY_FILE"
OUTPUT_FORMATS = ("text", "json")


@dataclass(frozen=True)
class CLIConfig:
    key_file: str = str(DEFAULT_KEY_FILE)
    output: str = "text"
    config_schema_version: int = 1


class ConfigError(ValueError):
    """Raised when CLI config is invalid."""


def _load_toml(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")

    try:  # Python 3.11+
        import tomllib  # type: ignore[attr-defined]
        try:
            return tomllib.loads(raw)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    except ModuleNotFoundError:
        try:
            import tomli
        except ModuleNotFoundError as exc:
            raise ConfigError("toml parser unavailable; install tomli for Python < 3.11") from exc
        try:
            return tomli.loads(raw)
        except tomli.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc


def load_cli_config(path: str | Path | None = None) -> CLIConfig:
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    env_key_file = os.getenv(KEY_FILE_ENV_VAR)
    if not config_path.exists():
        if env_key_file and env_key_file.strip():
            return CLIConfig(key_file=str(Path(env_key_file.strip()).expanduser()))
        return CLIConfig()

    parsed = _load_toml(config_path)
    section = parsed.get("cli")
    if isinstance(section, dict):
        source = section
    elif section is None:
        source = parsed
    else:
        raise ConfigError("[cli] must be a table")

    configured_key_file = str(source.get("key_file", DEFAULT_KEY_FILE)).strip()
    key_file = env_key_file.strip() if env_key_file else configured_key_file
    if not key_file:
        raise ConfigError("key_file must not be empty")

    output = str(source.get("output", "text")).strip().lower()
    if output not in OUTPUT_FORMATS:
        raise ConfigError("output must be one of: text, json")

    schema_version = source.get("config_schema_version", 1)
    if isinstance(schema_version, bool) or not isinstance(schema_version, int) or schema_version < 1:
        raise ConfigError("config_schema_version must be an integer >= 1")

    return CLIConfig(
        key_file=str(Path(key_file).expanduser()),
        output=output,
        config_schema_version=schema_version,
    )
