from __future__ import annotations

"""
Embedded Module Code Generator.

Serialises a collected tree mapping into the source of the generated
artifact module. Each directory becomes a node named after the SHA-1 of its
absolute path; nodes are emitted deepest first so a parent only ever links
to children that are already defined. Identical input always yields
byte-identical output.
"""

import ast
import hashlib
import logging
import os
import re
from typing import Dict, Iterable, List, Mapping, Optional, Set, Union

from zap.domain.diagnostics import GenerationError
from zap.domain.models import DirectoryTree, GeneratedNode, Resource

logger = logging.getLogger(__name__)

HEADER = "# Code generated by zap. DO NOT EDIT."

ResourceTable = Union[Mapping[str, str], Iterable[Resource]]


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def node_identifier(path: str) -> str:
    """Stable Python identifier for the directory at ``path``."""
    return "_" + hashlib.sha1(os.fsencode(path)).hexdigest()


def path_depth(path: str) -> int:
    """Number of named components in the normalised ``path``."""
    return sum(1 for part in os.path.normpath(path).split(os.sep) if part)


def build_nodes(trees: Mapping[str, DirectoryTree]) -> List[GeneratedNode]:
    """
    Convert trees into nodes, ordered so children precede their parents.

    Order is descending path depth, ties broken by path, which is a
    topological order of the containment graph. Depth counts path
    components, so the filesystem root sorts after its children.

    Args:
        trees: Absolute path to collected tree. Not modified.

    Returns:
        List[GeneratedNode]: Nodes in emission order.

    Raises:
        GenerationError: If a subdirectory is missing from the mapping or
                         cannot be expressed relative to its parent.
    """
    errors = GenerationError()
    nodes: List[GeneratedNode] = []

    for path in sorted(trees, key=lambda p: (-path_depth(p), p)):
        tree = trees[path]
        children: Dict[str, str] = {}

        for sub in sorted(tree.subdirectories):
            if sub not in trees:
                errors.add(f"{path}: subdirectory {sub} was never collected")
                continue
            try:
                rel = os.path.relpath(sub, path)
            except ValueError as e:
                errors.add(f"{path}: {e}")
                continue
            children[rel] = node_identifier(sub)

        nodes.append(GeneratedNode(
            identifier=node_identifier(path),
            path=path,
            files=dict(sorted(tree.files.items())),
            children=children,
        ))

    errors.safe_raise()
    return nodes


def generate_code(
        trees: Mapping[str, DirectoryTree],
        resources: Optional[ResourceTable] = None,
        development_mode: bool = False,
) -> str:
    """
    Produce the source text of the generated artifact module.

    Args:
        trees: Absolute path to collected tree.
        resources: Key to absolute path, either as a mapping or as resolved
                   Resource records. Every path must be present in ``trees``.
        development_mode: Flag baked into the module selecting filesystem
                          pass-through at runtime.

    Returns:
        str: Formatted Python source.

    Raises:
        GenerationError: On any emission or formatting failure.
    """
    nodes = build_nodes(trees)
    table = _resource_table(resources)

    errors = GenerationError()
    lines: List[str] = [
        HEADER,
        "",
        f"DEVELOPMENT_MODE = {bool(development_mode)!r}",
        "",
        "",
        "def init(new_directory, new_file):",
    ]

    emitted: Set[str] = set()
    for node in nodes:
        lines.extend(_emit_node(node, emitted, errors))

    lines.append("    resources = {}")
    for key, path in sorted(table.items()):
        ident = node_identifier(path)
        if ident not in emitted:
            errors.add(f"resource {key!r}: directory {path} was never collected")
            continue
        lines.append(f"    resources[{key!r}] = {ident}")
    lines.append("    return resources")

    errors.safe_raise()
    return format_source("\n".join(lines))


def format_source(source: str) -> str:
    """
    Validate and normalise generated Python source.

    The text must parse; trailing whitespace is stripped, runs of blank
    lines are capped at two and the file ends with exactly one newline.

    Raises:
        GenerationError: If the source is not valid Python.
    """
    try:
        ast.parse(source)
    except SyntaxError as e:
        raise GenerationError([f"generated code is invalid: {e.msg} (line {e.lineno})"]) from e

    text = "\n".join(line.rstrip() for line in source.splitlines())
    text = re.sub(r"\n{4,}", "\n\n\n", text)
    return text.strip("\n") + "\n"


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _emit_node(node: GeneratedNode, emitted: Set[str], errors: GenerationError) -> List[str]:
    """Statements building one node: constructor, files, child links."""
    ident = node.identifier
    lines = [
        f"    # {_comment_text(node.path)}",
        f"    {ident} = new_directory()",
    ]
    for name, body in node.files.items():
        lines.append(f"    {ident}.add_file({name!r}, new_file({body!r}))")
    for name, child in node.children.items():
        if child not in emitted:
            errors.add(f"{node.path}: child {name!r} referenced before definition")
            continue
        lines.append(f"    {ident}.add_directory({name!r}, {child})")
    lines.append("")
    emitted.add(ident)
    return lines


def _resource_table(resources: Optional[ResourceTable]) -> Dict[str, str]:
    if resources is None:
        return {}
    if isinstance(resources, Mapping):
        return dict(resources)
    return {res.key: res.path for res in resources if res.path is not None}


def _comment_text(path: str) -> str:
    # Comments end at a newline, so unprintable paths are escaped
    return path if path.isprintable() else repr(path)
