from __future__ import annotations

"""
Unit tests for the Package Discovery Service.

Verifies deterministic ordering, pruning of skipped and hidden directories,
and exclusion of previously generated artifacts.
"""

from pathlib import Path

import pytest

from zap.core.services.discovery import discover_packages


@pytest.fixture
def project_tree(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    for d in ["pkg/sub", "testdata", ".venv", "assets", "zapped", "zap_embed.egg-info"]:
        (root / d).mkdir(parents=True)

    (root / "setup.py").write_text("", encoding="utf-8")
    (root / "pkg" / "b.py").write_text("", encoding="utf-8")
    (root / "pkg" / "a.py").write_text("", encoding="utf-8")
    (root / "pkg" / "sub" / "c.py").write_text("", encoding="utf-8")
    (root / "testdata" / "fixture.py").write_text("", encoding="utf-8")
    (root / ".venv" / "site.py").write_text("", encoding="utf-8")
    (root / "assets" / "logo.png").write_bytes(b"\x89PNG")
    (root / "zapped" / "_zap_embed.py").write_text("", encoding="utf-8")
    (root / "zap_embed.egg-info" / "x.py").write_text("", encoding="utf-8")
    return root


def test_packages_in_sorted_order(project_tree: Path):
    packages = discover_packages(str(project_tree), skip_dirs=["testdata"])

    assert [p.directory for p in packages] == [
        str(project_tree),
        str(project_tree / "pkg"),
        str(project_tree / "pkg" / "sub"),
    ]
    assert packages[1].source_files == [
        str(project_tree / "pkg" / "a.py"),
        str(project_tree / "pkg" / "b.py"),
    ]


def test_generated_artifact_is_not_a_source(project_tree: Path):
    packages = discover_packages(str(project_tree), skip_dirs=["testdata"])

    assert str(project_tree / "zapped") not in [p.directory for p in packages]


def test_skip_dirs_are_configurable(project_tree: Path):
    packages = discover_packages(str(project_tree), skip_dirs=["pkg"])
    dirs = [p.directory for p in packages]

    assert str(project_tree / "testdata") in dirs
    assert str(project_tree / "pkg") not in dirs
    assert str(project_tree / "pkg" / "sub") not in dirs


def test_hidden_directories_are_always_pruned(project_tree: Path):
    packages = discover_packages(str(project_tree), skip_dirs=[])

    assert str(project_tree / ".venv") not in [p.directory for p in packages]


def test_missing_project_yields_nothing(tmp_path: Path):
    assert discover_packages(str(tmp_path / "missing")) == []
