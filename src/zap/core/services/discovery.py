from __future__ import annotations

"""
Package Discovery Service.

Walks a project and lists every directory holding Python sources, pruning
version control, virtual environments, build output and any directory the
caller asks to skip.
"""

import logging
import os
from typing import Iterable, List, Set

from zap.domain.constants import EMBED_FILE_NAME
from zap.domain.models import SourcePackage

logger = logging.getLogger(__name__)

_SOURCE_EXTENSION = ".py"


def discover_packages(
        project_path: str,
        skip_dirs: Iterable[str] = (),
        skip_files: Iterable[str] = (EMBED_FILE_NAME,),
) -> List[SourcePackage]:
    """
    Find the source packages of a project.

    Directories are visited in sorted order so the result, and everything
    derived from it, is deterministic. Hidden directories are always pruned.

    Args:
        project_path: Root of the project.
        skip_dirs: Directory names never descended into.
        skip_files: File names never scanned (previously generated output).

    Returns:
        List[SourcePackage]: One entry per directory containing sources.
    """
    root_abs = os.path.abspath(project_path)
    skip_dir_set: Set[str] = set(skip_dirs)
    skip_file_set: Set[str] = set(skip_files)
    packages: List[SourcePackage] = []

    for root, dirs, files in os.walk(root_abs):
        # In-place pruning stops os.walk from descending
        dirs[:] = sorted(
            d for d in dirs
            if d not in skip_dir_set and not d.startswith(".") and not d.endswith(".egg-info")
        )

        sources = sorted(
            os.path.join(root, f) for f in files
            if f.endswith(_SOURCE_EXTENSION) and f not in skip_file_set
        )
        if sources:
            packages.append(SourcePackage(directory=root, source_files=sources))

    logger.debug(f"Discovered {len(packages)} source packages under {root_abs}")
    return packages
