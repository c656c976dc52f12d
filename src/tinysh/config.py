# tinysh — Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Configuration and data root resolution for tinysh.

Handles:
- Data root resolution (TINYSH_DATA_HOME, ~/.local/share)
- Packaged YAML defaults loading (tinysh/defaults/system.yaml)
- Optional user override file (TINYSH_CONFIG), deep-merged over defaults
- ANSI coloring constants for the prompt
"""

from __future__ import annotations

import copy
import os
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

# -----------------------
# UI constants
# -----------------------

ANSI_COLORS: dict[str, str] = {
    "cyan": "\033[38;5;69;1m",
    "pink": "\033[38;5;169;1m",
    "magenta": "\033[38;5;126;1m",
    "yellow": "\033[38;5;226;1m",
    "green": "\033[32m",
    "red": "\033[31m",
    "dim": "\033[2m",
    "reset": "\033[0m",
}


# -----------------------
# Config model wrapper
# -----------------------


class YAMLConfig:
    """Simple config wrapper that implements ConfigModel protocol."""

    def __init__(self, config_dict: dict[str, Any]):
        self._config = config_dict

    @property
    def system(self) -> dict[str, Any]:
        return self.get("system", {}) or {}

    @property
    def execution(self) -> dict[str, Any]:
        return self.get("execution", {}) or {}

    @property
    def builtins(self) -> dict[str, Any]:
        return self.get("builtins", {}) or {}

    @property
    def ui(self) -> dict[str, Any]:
        ui_cfg = self.get("ui", {})
        return ui_cfg if isinstance(ui_cfg, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def get_path(self, path: str, default: Any = None) -> Any:
        """
        Nested lookup using dot-separated path.
        Example: get_path("execution.timeout", None)
        """
        if not path:
            return default

        cur: Any = self._config
        for part in path.split("."):
            if not isinstance(cur, dict):
                return default
            if part not in cur:
                return default
            cur = cur[part]
        return cur

    def enabled_builtins(self) -> list[str]:
        names = self.builtins.get("enabled", []) or []
        if not isinstance(names, list):
            raise ConfigError("builtins.enabled must be a list of names")
        return [str(n) for n in names]


# -----------------------
# Data root
# -----------------------


def get_data_root() -> Path:
    """Get the data root directory for tinysh.

    Resolution order:
    1. TINYSH_DATA_HOME environment variable (if set)
    2. ~/.local/share (default, XDG_DATA_HOME is ignored)

    The directory is not created here; writers create what they need.
    """
    data_home = os.getenv("TINYSH_DATA_HOME")
    if data_home:
        return Path(data_home)
    return Path.home() / ".local" / "share"


# -----------------------
# YAML loading
# -----------------------


def _defaults_dir() -> Path:
    """Return the installed path to the packaged defaults directory."""
    return Path(
        importlib_resources.files("tinysh.defaults")
    )  # type: ignore[arg-type]


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config YAML {path} must load to a mapping/dict.")
    return data


def load_defaults_yaml(filename: str) -> dict[str, Any]:
    """
    Load a YAML file from tinysh/defaults/.
    """
    defaults_dir = _defaults_dir()
    path = defaults_dir / filename
    if not path.exists():
        raise FileNotFoundError(
            f"Missing defaults YAML: {filename} "
            f"(looked in {defaults_dir})"
        )
    return _load_yaml_mapping(path)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of base with override merged in (dicts merge, rest replaces)."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def user_config_path() -> Path | None:
    """Path named by TINYSH_CONFIG, or None."""
    value = os.getenv("TINYSH_CONFIG")
    if not value:
        return None
    return Path(value).expanduser()


def load_system_config() -> YAMLConfig:
    """
    Load packaged system.yaml, merge the user override if any, and wrap it.
    """
    data = load_defaults_yaml("system.yaml")

    override_path = user_config_path()
    if override_path is not None:
        if not override_path.exists():
            raise ConfigError(f"TINYSH_CONFIG file not found: {override_path}")
        data = deep_merge(data, _load_yaml_mapping(override_path))

    return YAMLConfig(data)
