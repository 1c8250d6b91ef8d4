from __future__ import annotations

"""
Call-Site Scanner.

Runs a four-state machine over the syntax event stream of one module to
extract ``(key, path)`` pairs from calls shaped like
``<alias>.Resource("KEY", "path")``. Calls that do not fit this exact
literal-literal shape produce a positioned diagnostic; every offending call
in the file is reported, not only the first.
"""

import ast
import dataclasses
import logging
from enum import Enum
from typing import Iterable, List, Tuple

from zap.core.analysis.syntax import (
    DIRECT_IMPORT,
    EventKind,
    ImportBinding,
    SyntaxEvent,
    find_import_binding,
    iter_syntax_events,
    parse_source,
)
from zap.domain.constants import ENTRY_POINT_NAME
from zap.domain.diagnostics import DiagnosticKind, ScanDiagnostic
from zap.domain.models import Resource

logger = logging.getLogger(__name__)


class ScanState(Enum):
    IDLE = "idle"
    EXPECTING_CALL_NAME = "expecting_call_name"
    EXPECTING_KEY_LITERAL = "expecting_key_literal"
    EXPECTING_PATH_LITERAL = "expecting_path_literal"


_EXPECTING_LITERAL = (ScanState.EXPECTING_KEY_LITERAL, ScanState.EXPECTING_PATH_LITERAL)


# -----------------------------------------------------------------------------
# STATE MACHINE
# -----------------------------------------------------------------------------

class CallSiteScanner:
    """
    Finite-state machine extracting resources from a syntax event stream.

    Transitions:
        IDLE --alias--> EXPECTING_CALL_NAME --Resource--> EXPECTING_KEY_LITERAL
        EXPECTING_KEY_LITERAL --"str"--> EXPECTING_PATH_LITERAL --"str"--> IDLE

    With a direct import (alias ``"."``) the entry-point identifier itself
    moves IDLE straight to EXPECTING_KEY_LITERAL. Anything other than a
    string literal while a literal is expected is a BadArgumentType at that
    element; a key whose path is rejected stays in the result key-only.
    """

    def __init__(
            self,
            import_alias: str,
            file_path: str = "",
            entry_point: str = ENTRY_POINT_NAME,
    ) -> None:
        self.import_alias = import_alias
        self.file_path = file_path
        self.entry_point = entry_point
        self.state = ScanState.IDLE
        self.resources: List[Resource] = []
        self.diagnostics: List[ScanDiagnostic] = []
        self._direct = import_alias == DIRECT_IMPORT
        # Position of the call currently being matched
        self._call_line = 0
        self._call_column = 0

    def feed(self, event: SyntaxEvent) -> None:
        """Advance the machine by one syntax event."""
        if event.kind is EventKind.IDENTIFIER:
            self.state = self._on_identifier(event)
        elif event.kind is EventKind.LITERAL:
            self.state = self._on_literal(event)
        else:
            self.state = self._on_node(event)

    def run(self, events: Iterable[SyntaxEvent]) -> Tuple[List[Resource], List[ScanDiagnostic]]:
        for event in events:
            self.feed(event)
        return self.resources, self.diagnostics

    # -- Transition handlers --

    def _on_identifier(self, event: SyntaxEvent) -> ScanState:
        if self.state is ScanState.IDLE:
            if self._direct and event.name == self.entry_point:
                self._call_line, self._call_column = event.line, event.column
                return ScanState.EXPECTING_KEY_LITERAL
            if not self._direct and event.name == self.import_alias:
                self._call_line, self._call_column = event.line, event.column
                return ScanState.EXPECTING_CALL_NAME
            return ScanState.IDLE

        if self.state is ScanState.EXPECTING_CALL_NAME:
            if event.name != self.entry_point:
                self._report(event, DiagnosticKind.UNKNOWN_CALL)
                return ScanState.IDLE
            return ScanState.EXPECTING_KEY_LITERAL

        self._report(event, DiagnosticKind.BAD_ARGUMENT_TYPE)
        return ScanState.IDLE

    def _on_literal(self, event: SyntaxEvent) -> ScanState:
        if self.state not in _EXPECTING_LITERAL:
            return self.state

        if not event.is_string_literal:
            self._report(event, DiagnosticKind.BAD_ARGUMENT_TYPE)
            return ScanState.IDLE

        if self.state is ScanState.EXPECTING_KEY_LITERAL:
            self.resources.append(Resource(
                key=event.value,
                file=self.file_path,
                line=self._call_line,
                column=self._call_column,
            ))
            return ScanState.EXPECTING_PATH_LITERAL

        self.resources[-1] = dataclasses.replace(self.resources[-1], path=event.value)
        return ScanState.IDLE

    def _on_node(self, event: SyntaxEvent) -> ScanState:
        if self.state in _EXPECTING_LITERAL:
            self._report(event, DiagnosticKind.BAD_ARGUMENT_TYPE)
        return ScanState.IDLE

    def _report(self, event: SyntaxEvent, kind: DiagnosticKind) -> None:
        self.diagnostics.append(ScanDiagnostic(self.file_path, event.line, event.column, kind))


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def scan_module(
        tree: ast.Module,
        import_alias: str,
        file_path: str = "",
        entry_point: str = ENTRY_POINT_NAME,
) -> Tuple[List[Resource], List[ScanDiagnostic]]:
    """
    Extract resources from a parsed module.

    Args:
        tree: Parsed module.
        import_alias: Local name of the runtime library. Empty or ``"_"``
                      means the library is unusable here and nothing is
                      scanned; ``"."`` selects direct-name calls.
        file_path: Path reported in diagnostics.
        entry_point: Local name of the entry-point function.

    Returns:
        Tuple[List[Resource], List[ScanDiagnostic]]: Resources in source
        order, and every diagnostic found.
    """
    binding = ImportBinding(import_alias, entry_point)
    if not binding.usable:
        return [], []

    scanner = CallSiteScanner(import_alias, file_path, entry_point)
    return scanner.run(iter_syntax_events(tree))


def scan_file(file_path: str) -> Tuple[List[Resource], List[ScanDiagnostic]]:
    """
    Parse a source file and extract its resources.

    Unreadable or unparseable files yield a single ParseError diagnostic
    instead of raising, so one broken file never hides the others.

    Args:
        file_path: Path of the Python source file.

    Returns:
        Tuple[List[Resource], List[ScanDiagnostic]]: Resources and diagnostics.
    """
    try:
        tree = parse_source(file_path)
    except SyntaxError as e:
        logger.debug(f"Syntax error in {file_path}: {e}")
        diag = ScanDiagnostic(
            file_path, e.lineno or 0, e.offset or 0, DiagnosticKind.PARSE_ERROR, detail=str(e.msg)
        )
        return [], [diag]
    except (OSError, ValueError) as e:
        logger.debug(f"Could not read {file_path}: {e}")
        return [], [ScanDiagnostic(file_path, 0, 0, DiagnosticKind.PARSE_ERROR, detail=str(e))]

    binding = find_import_binding(tree)
    return scan_module(tree, binding.alias, file_path, binding.entry_point)
