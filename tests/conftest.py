from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures: a configuration dictionary and a sample project tree.
3. Isolation of the process-wide runtime provider between tests.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from zapped import runtime  # noqa: E402

SAMPLE_MAIN = '''\
import zapped

TEMPLATES = zapped.Resource("TEMPLATES", "templates")
'''


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def reset_runtime_provider(monkeypatch: pytest.MonkeyPatch) -> None:
    """Each test starts without a process-wide provider and leaves none behind."""
    monkeypatch.setattr(runtime, "_provider", None)


@pytest.fixture
def mock_config_dict(tmp_path: Path) -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Reflects the structure defined in 'zap.domain.config', ensuring all
    keys expected by the pipeline are present.
    """
    return {
        "project_path": str(tmp_path),
        "runtime_dir": "zapped",
        "development_mode": False,
        "install_runtime": True,
        "skip_dirs": ["testdata", "__pycache__"],
        "skip_entries": [".git", "__pycache__"],
        "max_workers": 2,
        "report_duplicate_keys": True,
    }


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """
    Create a small project embedding one directory.

    Structure:
    /project
      /app
        main.py
        /templates
          index.html
          /partials
            header.html
    """
    project = tmp_path / "project"
    app = project / "app"
    partials = app / "templates" / "partials"
    partials.mkdir(parents=True)

    (app / "main.py").write_text(SAMPLE_MAIN, encoding="utf-8")
    (app / "templates" / "index.html").write_text("<h1>index</h1>", encoding="utf-8")
    (partials / "header.html").write_text("<header/>", encoding="utf-8")

    return project
