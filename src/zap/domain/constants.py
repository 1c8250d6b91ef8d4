from __future__ import annotations

"""
Domain Constants.

Centralises the names shared between the embedding tool and the runtime
package it vendors into projects: the runtime module name, the entry-point
call recognised by the scanner and the generated artifact file name.
"""

from typing import List

CURRENT_CONFIG_VERSION = "1.0.0"
CONFIG_FILE_NAME = ".zap.json"

# Name under which applications import the runtime accessor library
RUNTIME_PACKAGE = "zapped"

# Call recognised by the scanner: <alias>.Resource("KEY", "path")
ENTRY_POINT_NAME = "Resource"

# Generated artifact, written inside the vendored runtime package
EMBED_MODULE_NAME = "_zap_embed"
EMBED_FILE_NAME = EMBED_MODULE_NAME + ".py"

# Runtime sources copied into the target project
RUNTIME_SOURCE_FILES: List[str] = ["__init__.py", "runtime.py"]

DEFAULT_RUNTIME_DIR = RUNTIME_PACKAGE
DEFAULT_MAX_WORKERS = 4

# Directories never scanned for call sites
DEFAULT_SKIP_DIRS: List[str] = [
    "testdata",
    "__pycache__",
    "build",
    "dist",
    "node_modules",
    "venv",
    "env",
]

# Entries never embedded into a directory tree
DEFAULT_SKIP_ENTRIES: List[str] = [
    ".git",
    ".hg",
    ".svn",
    "__pycache__",
]
