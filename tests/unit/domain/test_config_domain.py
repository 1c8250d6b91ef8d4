from __future__ import annotations

"""
Unit tests for the Config Domain.

Verifies:
1. Default configuration generation.
2. Merging of the project configuration file.
3. Resilience against corrupted config files.
4. Persistence (Save/Load) inside a temporary project.
"""

import json
from pathlib import Path

from zap.domain.config import get_config_path, get_default_config, load_config, save_config
from zap.domain.constants import CONFIG_FILE_NAME, CURRENT_CONFIG_VERSION


def test_default_config_values():
    cfg = get_default_config()

    assert cfg["runtime_dir"] == "zapped"
    assert cfg["development_mode"] is False
    assert cfg["install_runtime"] is True
    assert cfg["report_duplicate_keys"] is True
    assert "testdata" in cfg["skip_dirs"]
    assert ".git" in cfg["skip_entries"]


def test_default_lists_are_fresh_copies():
    first = get_default_config()
    first["skip_dirs"].append("mutated")

    assert "mutated" not in get_default_config()["skip_dirs"]


def test_load_without_file_returns_defaults(tmp_path: Path):
    cfg = load_config(str(tmp_path))

    assert cfg["project_path"] == str(tmp_path)
    assert cfg["runtime_dir"] == "zapped"


def test_load_merges_project_file(tmp_path: Path):
    (tmp_path / CONFIG_FILE_NAME).write_text(json.dumps({
        "version": "0.9.0",
        "runtime_dir": "vendor/zapped",
        "development_mode": True,
        "project_path": "/somewhere/else",
    }), encoding="utf-8")

    cfg = load_config(str(tmp_path))

    assert cfg["runtime_dir"] == "vendor/zapped"
    assert cfg["development_mode"] is True
    assert cfg["project_path"] == str(tmp_path)
    assert "version" not in cfg


def test_load_corrupted_file_returns_defaults(tmp_path: Path):
    (tmp_path / CONFIG_FILE_NAME).write_text("{ incomplete json ", encoding="utf-8")

    cfg = load_config(str(tmp_path))

    assert cfg["runtime_dir"] == "zapped"


def test_load_non_object_file_returns_defaults(tmp_path: Path):
    (tmp_path / CONFIG_FILE_NAME).write_text("[1, 2, 3]", encoding="utf-8")

    cfg = load_config(str(tmp_path))

    assert cfg["development_mode"] is False


def test_save_then_load(tmp_path: Path):
    cfg = get_default_config()
    cfg["max_workers"] = 8

    assert save_config(str(tmp_path), cfg) is True

    stored = json.loads(Path(get_config_path(str(tmp_path))).read_text(encoding="utf-8"))
    assert stored["version"] == CURRENT_CONFIG_VERSION
    assert "project_path" not in stored
    assert load_config(str(tmp_path))["max_workers"] == 8


def test_save_into_missing_directory_fails(tmp_path: Path):
    assert save_config(str(tmp_path / "missing"), get_default_config()) is False
