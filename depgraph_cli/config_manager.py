"""Configuration manager for DepGraph CLI using TOML files."""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from . import config as paths
from .config import DEFAULT_LANGUAGES

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "resolver": {
        "workers": 1,
        "extra_builtins": [],
    },
    "parser": {
        "languages": list(DEFAULT_LANGUAGES),
        "skip_dirs": [],
    },
}


def _defaults() -> Dict[str, Dict[str, Any]]:
    return copy.deepcopy(DEFAULT_CONFIG)


def load_full_config(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load the entire TOML config (all sections); ``{}`` when missing or unreadable."""
    path = config_file or paths.CONFIG_FILE
    if not path.exists():
        return {}
    try:
        with open(path, "r") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}


def load_config(config_file: Optional[Path] = None) -> Dict[str, Dict[str, Any]]:
    """Effective configuration: file values layered over the defaults.

    Returns:
        ``{"resolver": {...}, "parser": {...}}`` with every key present.
    """
    config = _defaults()
    raw = load_full_config(config_file)
    for section, values in config.items():
        overrides = raw.get(section)
        if not isinstance(overrides, dict):
            continue
        for key, default in values.items():
            if key in overrides and isinstance(overrides[key], type(default)):
                values[key] = overrides[key]
            elif key in overrides:
                logger.warning("Ignoring [%s] %s: expected %s", section, key, type(default).__name__)
    return config


def load_resolver_config(config_file: Optional[Path] = None) -> Dict[str, Any]:
    return load_config(config_file)["resolver"]


def load_parser_config(config_file: Optional[Path] = None) -> Dict[str, Any]:
    return load_config(config_file)["parser"]


def save_config(config: Dict[str, Any], config_file: Optional[Path] = None) -> Path:
    """Write *config* to the TOML file, creating its directory."""
    path = config_file or paths.CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        toml.dump(config, f)
    return path
