from __future__ import annotations

"""
Embedding Domain Data Models.

Defines the records that flow through one discovery-and-generation pass:
resources extracted from call sites, packages found in the project, the
directory trees collected from disk and their serialisable counterparts.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

# -----------------------------------------------------------------------------
# CALL SITE MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Resource:
    """
    A named reference to a directory, extracted from a literal call site.

    Attributes:
        key: Caller-chosen identifier used at runtime to look the tree up.
        path: Directory path. Relative to the calling package until resolved.
              None when the call site had no valid path literal.
        file: Source file of the call site.
        line: 1-based line of the call site.
        column: 1-based column of the call site.
    """
    key: str
    path: Optional[str] = None

    file: str = field(default="", compare=False)
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    @property
    def is_complete(self) -> bool:
        """True once both key and path were captured."""
        return self.path is not None


@dataclass(frozen=True)
class SourcePackage:
    """
    A project directory containing Python sources.

    Attributes:
        directory: Absolute path of the package directory.
        source_files: Absolute paths of the source files to scan.
    """
    directory: str
    source_files: List[str] = field(default_factory=list)

# -----------------------------------------------------------------------------
# TREE MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DirectoryTree:
    """
    One directory as read from disk at embedding time.

    Subdirectories are stored by absolute path only, so a directory reached
    through several resources is materialised exactly once.

    Attributes:
        path: Absolute path, the identity key of the tree.
        files: Mapping of file name to raw contents.
        subdirectories: Absolute paths of the child directories.
    """
    path: str
    files: Dict[str, bytes] = field(default_factory=dict)
    subdirectories: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class GeneratedNode:
    """
    Serialisable counterpart of a DirectoryTree.

    Attributes:
        identifier: Hash-derived Python identifier of the node.
        path: Absolute path the node was generated from.
        files: Mapping of file name to raw contents.
        children: Mapping of relative child name to child identifier.
    """
    identifier: str
    path: str
    files: Dict[str, bytes] = field(default_factory=dict)
    children: Dict[str, str] = field(default_factory=dict)
