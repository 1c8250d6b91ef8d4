from __future__ import annotations

"""
Syntax Event Stream.

Flattens a Python AST into the ordered stream of identifiers, literals and
other positioned nodes consumed by the call-site scanner, and resolves the
local name under which a module imports the runtime library. The scanner
never touches ``ast`` node classes directly.
"""

import ast
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, List, Optional, Tuple

from zap.domain.constants import ENTRY_POINT_NAME, RUNTIME_PACKAGE

logger = logging.getLogger(__name__)

# Import alias values with a special meaning
NO_IMPORT = ""
BLANK_IMPORT = "_"
DIRECT_IMPORT = "."


# -----------------------------------------------------------------------------
# EVENT MODEL
# -----------------------------------------------------------------------------

class EventKind(Enum):
    IDENTIFIER = "identifier"
    LITERAL = "literal"
    NODE = "node"


@dataclass(frozen=True)
class SyntaxEvent:
    """
    A positioned element of the syntax stream.

    Attributes:
        kind: What sort of element this is.
        line: 1-based line number.
        column: 1-based column number.
        name: Identifier text (IDENTIFIER only).
        value: Literal value (LITERAL only).
    """
    kind: EventKind
    line: int
    column: int
    name: str = ""
    value: Any = None

    @property
    def is_string_literal(self) -> bool:
        return self.kind is EventKind.LITERAL and isinstance(self.value, str)


@dataclass(frozen=True)
class ImportBinding:
    """
    How a module refers to the runtime library.

    Attributes:
        alias: Local module name, or one of NO_IMPORT, BLANK_IMPORT, DIRECT_IMPORT.
        entry_point: Local name of the entry-point function.
    """
    alias: str
    entry_point: str = ENTRY_POINT_NAME

    @property
    def usable(self) -> bool:
        return self.alias not in (NO_IMPORT, BLANK_IMPORT)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def parse_source(file_path: str) -> ast.Module:
    """
    Read and parse a Python source file.

    Args:
        file_path: Path of the source file.

    Returns:
        ast.Module: The parsed module.

    Raises:
        OSError: If the file cannot be read.
        SyntaxError: If the file is not valid Python (includes decoding errors).
    """
    with open(file_path, "rb") as f:
        source = f.read()
    return ast.parse(source, filename=file_path)


def find_import_binding(tree: ast.Module, runtime_module: str = RUNTIME_PACKAGE) -> ImportBinding:
    """
    Resolve the name under which ``runtime_module`` is imported.

    Any module whose last dotted component equals ``runtime_module`` counts,
    so vendored copies such as ``myproject.zapped`` are recognised. The
    first matching import statement in document order wins.

    Args:
        tree: Parsed module.
        runtime_module: Module name of the runtime library.

    Returns:
        ImportBinding: The binding, with alias NO_IMPORT when not imported.
    """
    for node in _import_nodes(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if _last_component(alias.name) == runtime_module:
                    return ImportBinding(alias.asname or runtime_module)

        elif isinstance(node, ast.ImportFrom):
            module = node.module or ""
            if _last_component(module) == runtime_module:
                for alias in node.names:
                    if alias.name == "*":
                        return ImportBinding(DIRECT_IMPORT)
                    if alias.name == ENTRY_POINT_NAME:
                        return ImportBinding(DIRECT_IMPORT, alias.asname or ENTRY_POINT_NAME)
                continue

            # from package import zapped [as z]
            for alias in node.names:
                if alias.name == runtime_module:
                    return ImportBinding(alias.asname or runtime_module)

    return ImportBinding(NO_IMPORT)


def iter_syntax_events(tree: ast.AST) -> Iterator[SyntaxEvent]:
    """
    Yield the syntax events of ``tree`` in document order.

    Children are visited sorted by their source position. An attribute
    access yields its object expression first, then the attribute name as
    an identifier, so ``z.Resource`` reads as ``z`` followed by ``Resource``.
    Nodes without a source position (module, contexts, operators) yield
    nothing themselves.

    Args:
        tree: Any AST node, usually a parsed module.

    Yields:
        SyntaxEvent: The flattened stream.
    """
    stack: List[Tuple[ast.AST, bool]] = [(tree, False)]

    while stack:
        node, trailing = stack.pop()

        if trailing:
            # Attribute name, emitted once the object expression is done
            assert isinstance(node, ast.Attribute)
            yield SyntaxEvent(
                EventKind.IDENTIFIER,
                node.end_lineno or node.lineno,
                (node.end_col_offset or 0) - len(node.attr) + 1,
                name=node.attr,
            )
            continue

        if hasattr(node, "lineno"):
            if isinstance(node, ast.Name):
                yield SyntaxEvent(EventKind.IDENTIFIER, node.lineno, node.col_offset + 1, name=node.id)
            elif isinstance(node, ast.Constant):
                yield SyntaxEvent(EventKind.LITERAL, node.lineno, node.col_offset + 1, value=node.value)
            else:
                yield SyntaxEvent(EventKind.NODE, node.lineno, node.col_offset + 1)

        if isinstance(node, ast.Attribute):
            stack.append((node, True))

        # Reversed so the earliest child is popped first
        for child in reversed(_ordered_children(node)):
            stack.append((child, False))


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _import_nodes(tree: ast.Module) -> List[ast.stmt]:
    """Import statements anywhere in the module, in document order."""
    found = [n for n in ast.walk(tree) if isinstance(n, (ast.Import, ast.ImportFrom))]
    found.sort(key=lambda n: (n.lineno, n.col_offset))
    return found


def _last_component(module: str) -> str:
    return module.rsplit(".", 1)[-1]


def _start_position(node: ast.AST) -> Optional[Tuple[int, int]]:
    """Position of a node, or of its earliest positioned descendant."""
    if hasattr(node, "lineno"):
        return node.lineno, node.col_offset
    positions = [(n.lineno, n.col_offset) for n in ast.walk(node) if hasattr(n, "lineno")]
    return min(positions) if positions else None


def _ordered_children(node: ast.AST) -> List[ast.AST]:
    """Children carrying a source position, sorted into document order."""
    keyed = []
    for child in ast.iter_child_nodes(node):
        pos = _start_position(child)
        if pos is not None:
            keyed.append((pos, child))
    # Stable: children sharing a start keep field order
    keyed.sort(key=lambda item: item[0])
    return [child for _, child in keyed]
