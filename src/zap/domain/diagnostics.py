from __future__ import annotations

"""
Diagnostic and Error Models.

Every phase of the pipeline collects its problems instead of stopping at the
first one. Scan diagnostics are positioned at the offending call site,
collection errors are scoped to a filesystem subtree and generation errors
indicate an internal inconsistency in the emitted code.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List


class DiagnosticKind(str, Enum):
    """Categories of problems found while scanning source files."""
    UNKNOWN_CALL = "UnknownCall"
    BAD_ARGUMENT_TYPE = "BadArgumentType"
    PARSE_ERROR = "ParseError"
    DUPLICATE_KEY = "DuplicateKey"


_MESSAGES = {
    DiagnosticKind.UNKNOWN_CALL: "expected Resource() but was something else",
    DiagnosticKind.BAD_ARGUMENT_TYPE: "calls to Resource() require string literals",
    DiagnosticKind.PARSE_ERROR: "source file could not be parsed",
    DiagnosticKind.DUPLICATE_KEY: "resource key is already bound to another path",
}

# -----------------------------------------------------------------------------
# SCAN DIAGNOSTICS
# -----------------------------------------------------------------------------

@dataclass(frozen=True, order=True)
class ScanDiagnostic:
    """
    A positioned problem found at a call site.

    Ordering follows (file, line, column) so diagnostics gathered from
    concurrent scans can be presented deterministically.

    Attributes:
        file: Path of the source file.
        line: 1-based line number.
        column: 1-based column number.
        kind: Category of the problem.
        detail: Optional extra context appended to the message.
    """
    file: str
    line: int
    column: int
    kind: DiagnosticKind
    detail: str = ""

    @property
    def message(self) -> str:
        msg = _MESSAGES[self.kind]
        if self.detail:
            msg = f"{msg} ({self.detail})"
        return msg

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}: {self.message}"


@dataclass(frozen=True)
class CollectionError:
    """
    A directory or file that could not be read while collecting a tree.

    Attributes:
        path: Absolute path of the unreadable entry.
        error: Description of the underlying I/O failure.
    """
    path: str
    error: str

    def __str__(self) -> str:
        return f"{self.path}: {self.error}"

# -----------------------------------------------------------------------------
# EXCEPTIONS
# -----------------------------------------------------------------------------

class AggregateError(Exception):
    """
    A collection of errors raised as one, keeping every message.

    The string form lists one error per line, in insertion order.
    """

    def __init__(self, errors: Iterable[object] = ()) -> None:
        self.errors: List[object] = list(errors)
        super().__init__(str(self))

    def add(self, error: object) -> None:
        self.errors.append(error)
        self.args = (str(self),)

    def __bool__(self) -> bool:
        return bool(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __str__(self) -> str:
        return "\n".join(str(e) for e in self.errors)

    def safe_raise(self) -> None:
        """Raise self only when at least one error was collected."""
        if self.errors:
            raise self


class GenerationError(AggregateError):
    """Emission or formatting failure of the code generator."""
