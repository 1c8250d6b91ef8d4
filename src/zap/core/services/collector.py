from __future__ import annotations

"""
Directory Tree Collector.

Materialises the directories referenced by resources into DirectoryTree
records. Each directory is read once per collector, by absolute path, no
matter how many resources reach it. Unreadable entries are reported and
skipped so the rest of the tree is still collected.
"""

import logging
import os
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from zap.domain.constants import DEFAULT_SKIP_ENTRIES, EMBED_FILE_NAME
from zap.domain.diagnostics import CollectionError
from zap.domain.models import DirectoryTree

logger = logging.getLogger(__name__)

TreeMapping = Dict[str, DirectoryTree]


class DirectoryTreeCollector:
    """
    Accumulates directory trees across one or more collect() calls.

    The mapping only grows: a path already present is reused, never read
    again, even when a later root path reaches it from a different side.
    """

    def __init__(self, skip_entries: Optional[Iterable[str]] = None) -> None:
        names = DEFAULT_SKIP_ENTRIES if skip_entries is None else skip_entries
        self.skip_entries: FrozenSet[str] = frozenset(names) | {EMBED_FILE_NAME}
        self._trees: TreeMapping = {}

    @property
    def trees(self) -> TreeMapping:
        return dict(self._trees)

    def collect(self, root_paths: Iterable[str]) -> Tuple[TreeMapping, List[CollectionError]]:
        """
        Collect every root path not collected yet.

        Args:
            root_paths: Absolute directory paths.

        Returns:
            Tuple[TreeMapping, List[CollectionError]]: The full mapping so
            far, and the errors raised by this call.
        """
        errors: List[CollectionError] = []

        roots = {os.path.normpath(os.path.abspath(p)) for p in root_paths}
        for root in sorted(roots):
            if root in self._trees:
                logger.debug(f"Reusing collected tree: {root}")
                continue
            self._collect_dir(root, errors)

        return self.trees, errors

    def _collect_dir(self, path: str, errors: List[CollectionError]) -> bool:
        """Read one directory recursively. Returns False if it is unreadable."""
        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            errors.append(CollectionError(path, str(e)))
            logger.debug(f"Cannot list directory {path}: {e}")
            return False

        files: Dict[str, bytes] = {}
        subdirectories: Set[str] = set()

        for entry in entries:
            if entry.name in self.skip_entries:
                continue

            entry_path = os.path.join(path, entry.name)

            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                errors.append(CollectionError(entry_path, str(e)))
                continue

            if is_dir:
                if entry_path in self._trees or self._collect_dir(entry_path, errors):
                    subdirectories.add(entry_path)
                continue

            try:
                with open(entry_path, "rb") as f:
                    files[entry.name] = f.read()
            except OSError as e:
                errors.append(CollectionError(entry_path, str(e)))
                logger.debug(f"Cannot read file {entry_path}: {e}")

        self._trees[path] = DirectoryTree(
            path=path,
            files=files,
            subdirectories=frozenset(subdirectories),
        )
        return True


def collect_directories(
        root_paths: Iterable[str],
        skip_entries: Optional[Iterable[str]] = None,
) -> Tuple[TreeMapping, List[CollectionError]]:
    """
    Collect the trees below ``root_paths`` with a fresh collector.

    Args:
        root_paths: Absolute directory paths, typically resolved resource paths.
        skip_entries: Entry names never embedded nor descended into.

    Returns:
        Tuple[TreeMapping, List[CollectionError]]: Absolute path to tree,
        and every error encountered.
    """
    collector = DirectoryTreeCollector(skip_entries)
    return collector.collect(root_paths)
