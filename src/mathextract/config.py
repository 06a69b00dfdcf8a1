"""Configuration loading, with defaults."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "mathextract.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "max_workers": 1,
    "logging_dir": None,  # None disables event logging
    "logging_fsync": False,
    "logging_tail_bytes": 2_097_152,  # 2 MB
}


class ConfigError(Exception):
    """Configuration file is malformed."""


def _flatten_logging_block(user_config: dict[str, Any]) -> dict[str, Any]:
    """Flatten a nested ``logging:`` block into flat config keys.

    Supports::

        logging:
          dir: .mathextract/logs
          fsync: true
          tail_bytes: 1048576

    Maps to ``logging_dir``, ``logging_fsync`` and ``logging_tail_bytes``.
    """
    block = user_config.pop("logging", None)
    if not isinstance(block, dict):
        return user_config
    for short_key in ("dir", "fsync", "tail_bytes"):
        if short_key in block:
            user_config[f"logging_{short_key}"] = block[short_key]
    return user_config


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from a YAML file, with defaults.

    Args:
        path: A config file, or a directory containing ``mathextract.yaml``.
            ``None`` looks in the current directory.

    Returns:
        Merged configuration dict.

    Raises:
        ConfigError: If the file is not a YAML mapping or a value has the
            wrong type.
    """
    config = dict(DEFAULT_CONFIG)
    config_path = Path(path) if path is not None else Path.cwd()
    if config_path.is_dir():
        config_path = config_path / CONFIG_FILENAME
    if config_path.exists():
        try:
            user_config = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(user_config, dict):
            raise ConfigError(f"{config_path} must contain a mapping")
        config.update(_flatten_logging_block(user_config))

    try:
        config["max_workers"] = max(1, int(config["max_workers"]))
        config["logging_tail_bytes"] = int(config["logging_tail_bytes"])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config value: {exc}") from exc
    config["logging_fsync"] = bool(config["logging_fsync"])
    return config
