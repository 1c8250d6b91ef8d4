from __future__ import annotations

"""
Integration tests for the Embedding Pipeline.

Runs the complete discovery, scan, collection and generation flow against
real temporary projects and loads the produced artifact back through the
runtime.
"""

import importlib.util
import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

from zap.core.pipeline.engine import check_duplicate_keys, install_runtime, run_embedding
from zap.domain.models import Resource
from zapped import load_registry


def config_for(project: Path, **overrides: Any) -> Dict[str, Any]:
    cfg: Dict[str, Any] = {"project_path": str(project), "max_workers": 2}
    cfg.update(overrides)
    return cfg


def load_artifact(path: Path):
    spec = importlib.util.spec_from_file_location("zap_artifact_under_test", str(path))
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_full_embedding_round_trip(sample_project: Path):
    result = run_embedding(config_for(sample_project))

    assert result.ok, result.diagnostics
    artifact = sample_project / "zapped" / "_zap_embed.py"
    assert result.artifact_path == str(artifact)
    assert artifact.exists()
    assert (sample_project / "zapped" / "__init__.py").exists()
    assert (sample_project / "zapped" / "runtime.py").exists()

    assert result.resources == [Resource("TEMPLATES", str(sample_project / "app" / "templates"))]
    assert result.summary["directories"] == 2
    assert result.summary["files_embedded"] == 2

    registry = load_registry(load_artifact(artifact))
    templates = registry.resources["TEMPLATES"]
    assert registry.development_mode is False
    assert templates.file("index.html").text() == "<h1>index</h1>"
    assert templates.directory("partials").file("header.html").text() == "<header/>"


def test_second_run_is_byte_identical(sample_project: Path):
    artifact = sample_project / "zapped" / "_zap_embed.py"

    assert run_embedding(config_for(sample_project)).ok
    first = artifact.read_bytes()
    assert run_embedding(config_for(sample_project)).ok

    assert artifact.read_bytes() == first


def test_vendored_runtime_matches_package(sample_project: Path):
    import zapped.runtime as runtime_module

    run_embedding(config_for(sample_project))

    vendored = (sample_project / "zapped" / "runtime.py").read_bytes()
    assert vendored == Path(runtime_module.__file__).read_bytes()


def test_runtime_is_vendored_from_the_tool_package(sample_project: Path, monkeypatch):
    from zapped import EmbeddedProvider, runtime

    # An embedded provider without runtime sources, as a vendored copy would be
    monkeypatch.setattr(runtime, "_provider", EmbeddedProvider({}))

    result = run_embedding(config_for(sample_project))

    assert result.ok, result.error
    vendored = (sample_project / "zapped" / "runtime.py").read_bytes()
    assert vendored == Path(runtime.__file__).read_bytes()


def test_install_runtime_reports_missing_sources(tmp_path: Path):
    with pytest.raises(OSError):
        install_runtime(str(tmp_path / "out"), source_dir=str(tmp_path / "nowhere"))

    assert not (tmp_path / "out").exists()


def test_scan_diagnostics_prevent_writing(sample_project: Path):
    (sample_project / "app" / "bad.py").write_text(
        'import zapped\nname = "X"\nzapped.Resource(name, "templates")\n', encoding="utf-8"
    )

    result = run_embedding(config_for(sample_project))

    assert not result.ok
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].startswith(f"{sample_project / 'app' / 'bad.py'}:3:17:")
    assert not (sample_project / "zapped").exists()


def test_missing_resource_directory_prevents_writing(sample_project: Path):
    (sample_project / "app" / "extra.py").write_text(
        'import zapped\nzapped.Resource("GONE", "does-not-exist")\n', encoding="utf-8"
    )

    result = run_embedding(config_for(sample_project))

    assert not result.ok
    assert any("does-not-exist" in d for d in result.diagnostics)
    assert not (sample_project / "zapped" / "_zap_embed.py").exists()


def test_development_mode_skips_collection(sample_project: Path):
    (sample_project / "app" / "extra.py").write_text(
        'import zapped\nzapped.Resource("LATER", "created-later")\n', encoding="utf-8"
    )

    result = run_embedding(config_for(sample_project, development_mode=True))

    assert result.ok, result.diagnostics
    assert result.development_mode is True
    registry = load_registry(load_artifact(Path(result.artifact_path)))
    assert registry.development_mode is True
    assert dict(registry.resources) == {}


def test_dry_run_writes_nothing(sample_project: Path):
    result = run_embedding(config_for(sample_project), dry_run=True)

    assert result.ok
    assert result.dry_run is True
    assert result.summary["artifact_bytes"] > 0
    assert not (sample_project / "zapped").exists()


def test_runtime_install_can_be_disabled(sample_project: Path):
    result = run_embedding(config_for(sample_project, install_runtime=False, runtime_dir="vendor"))

    assert result.ok
    assert (sample_project / "vendor" / "_zap_embed.py").exists()
    assert not (sample_project / "vendor" / "runtime.py").exists()


def test_invalid_project_directory(tmp_path: Path):
    result = run_embedding(config_for(tmp_path / "missing"))

    assert not result.ok
    assert "Invalid project directory" in result.error


def test_project_without_call_sites(tmp_path: Path):
    (tmp_path / "main.py").write_text("print('no resources')\n", encoding="utf-8")

    result = run_embedding(config_for(tmp_path))

    assert result.ok
    assert result.resources == []
    registry = load_registry(load_artifact(Path(result.artifact_path)))
    assert dict(registry.resources) == {}


# -----------------------------------------------------------------------------
# Duplicate keys
# -----------------------------------------------------------------------------

@pytest.fixture
def conflicting_project(sample_project: Path) -> Path:
    other = sample_project / "other"
    (other / "static").mkdir(parents=True)
    (other / "static" / "style.css").write_text("body{}", encoding="utf-8")
    (other / "views.py").write_text(
        'import zapped\nzapped.Resource("TEMPLATES", "static")\n', encoding="utf-8"
    )
    return sample_project


def test_conflicting_key_is_reported(conflicting_project: Path):
    result = run_embedding(config_for(conflicting_project))

    assert not result.ok
    assert len(result.diagnostics) == 1
    assert "resource key is already bound to another path" in result.diagnostics[0]
    assert str(conflicting_project / "other" / "views.py") in result.diagnostics[0]


def test_conflicting_key_last_wins_when_not_reported(conflicting_project: Path):
    result = run_embedding(config_for(conflicting_project, report_duplicate_keys=False))

    assert result.ok
    assert [r.path for r in result.resources] == [str(conflicting_project / "other" / "static")]


def test_same_key_same_path_collapses():
    resources = [
        Resource("K", "/data", file="a.py", line=1, column=1),
        Resource("K", "/data", file="b.py", line=5, column=1),
        Resource("J", "/other"),
    ]

    unique, diagnostics = check_duplicate_keys(resources)

    assert unique == [Resource("K", "/data"), Resource("J", "/other")]
    assert unique[0].file == "a.py"
    assert diagnostics == []


def test_conflict_is_positioned_at_later_call_site():
    resources = [
        Resource("K", "/data", file="a.py", line=1, column=1),
        Resource("K", "/else", file="b.py", line=5, column=3),
    ]

    unique, diagnostics = check_duplicate_keys(resources)

    assert unique == [Resource("K", "/data")]
    assert [(d.file, d.line, d.column) for d in diagnostics] == [("b.py", 5, 3)]


@pytest.mark.skipif(os.name != "posix" or sys.platform == "darwin",
                    reason="needs a filesystem that accepts arbitrary bytes in names")
def test_non_utf8_resource_subdirectory(sample_project: Path):
    templates = os.fsencode(str(sample_project / "app" / "templates"))
    try:
        os.mkdir(os.path.join(templates, b"caf\xe9"))
    except OSError:
        pytest.skip("filesystem rejects non-UTF-8 names")
    with open(os.path.join(templates, b"caf\xe9", b"menu.txt"), "wb") as f:
        f.write(b"soup")

    result = run_embedding(config_for(sample_project))

    assert result.ok, result.diagnostics
    registry = load_registry(load_artifact(Path(result.artifact_path)))
    name = os.fsdecode(b"caf\xe9")
    assert registry.resources["TEMPLATES"].directory(name).file("menu.txt").text() == "soup"
