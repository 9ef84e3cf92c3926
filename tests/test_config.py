"""Tests for TOML configuration loading."""

from pathlib import Path

import toml

from depgraph_cli import config
from depgraph_cli.config_manager import (
    DEFAULT_CONFIG,
    load_config,
    load_full_config,
    load_parser_config,
    load_resolver_config,
    save_config,
)


def test_defaults_when_file_missing(isolated_home: Path):
    assert not config.CONFIG_FILE.exists()
    settings = load_config()
    assert settings == DEFAULT_CONFIG
    assert settings["parser"]["languages"] == ["python", "go"]
    # callers get copies, never the module-level defaults
    settings["parser"]["languages"].append("cobol")
    assert DEFAULT_CONFIG["parser"]["languages"] == ["python", "go"]


def test_file_values_override_defaults():
    save_config({"resolver": {"workers": 4, "extra_builtins": ["log"]}, "parser": {"languages": ["go"]}})

    assert load_resolver_config() == {"workers": 4, "extra_builtins": ["log"]}
    parser_cfg = load_parser_config()
    assert parser_cfg["languages"] == ["go"]
    assert parser_cfg["skip_dirs"] == []


def test_wrong_types_ignored(temp_dir: Path, caplog):
    path = temp_dir / "custom.toml"
    path.write_text('[resolver]\nworkers = "many"\n', encoding="utf-8")
    with caplog.at_level("WARNING"):
        assert load_resolver_config(path)["workers"] == 1
    assert "expected int" in caplog.text


def test_unreadable_toml(temp_dir: Path, caplog):
    path = temp_dir / "broken.toml"
    path.write_text("[resolver\nworkers = ", encoding="utf-8")
    with caplog.at_level("WARNING"):
        assert load_full_config(path) == {}
    assert load_config(path) == DEFAULT_CONFIG
    assert "Ignoring unreadable config" in caplog.text


def test_unknown_sections_preserved_in_full_config(temp_dir: Path):
    path = temp_dir / "extra.toml"
    path.write_text('[export]\nformat = "json"\n', encoding="utf-8")
    assert load_full_config(path) == {"export": {"format": "json"}}
    assert "export" not in load_config(path)


def test_save_config_creates_directory(temp_dir: Path):
    target = temp_dir / "nested" / "dir" / "config.toml"
    written = save_config({"resolver": {"workers": 2}}, target)
    assert written == target
    assert toml.load(target) == {"resolver": {"workers": 2}}
