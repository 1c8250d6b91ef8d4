from __future__ import annotations

"""
Resource Path Resolver.

Rewrites the relative paths captured at call sites into absolute paths
anchored at the directory of the package that contained the call.
"""

import dataclasses
import os
from typing import List, Sequence

from zap.domain.models import Resource


def resolve_resources(package_dir: str, resources: Sequence[Resource]) -> List[Resource]:
    """
    Anchor every resource path at ``package_dir``.

    Pure function: no I/O. Key-only resources are passed through unchanged.

    Args:
        package_dir: Directory of the package the resources were found in.
        resources: Resources with paths relative to that directory.

    Returns:
        List[Resource]: New resources with joined, normalized paths.
    """
    resolved: List[Resource] = []
    for res in resources:
        if res.path is None:
            resolved.append(res)
            continue
        path = os.path.normpath(os.path.join(package_dir, res.path))
        resolved.append(dataclasses.replace(res, path=path))
    return resolved
