from __future__ import annotations

"""
Pipeline Domain Data Models.

Defines the result object handed from the embedding engine to the CLI, and
the factory functions used to build it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from zap.domain.models import Resource

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class EmbedResult:
    """
    Unified result object of a complete embedding run.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        project_path: Normalized project root that was processed.
        artifact_path: Path of the generated module (written or planned).
        runtime_path: Directory of the vendored runtime package.
        development_mode: Whether the artifact selects filesystem pass-through.
        dry_run: Whether writing to disk was skipped.
        resources: Resolved resources discovered in the project.
        diagnostics: Every scan, collection or generation problem, rendered.
        summary: Execution statistics.
    """
    ok: bool
    error: str

    project_path: str
    artifact_path: str = ""
    runtime_path: str = ""

    development_mode: bool = False
    dry_run: bool = False

    resources: List[Resource] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        cfg: Dict[str, Any],
        project_path: str,
        diagnostics: Optional[List[str]] = None,
        resources: Optional[List[Resource]] = None,
        summary_extra: Optional[Dict[str, Any]] = None,
) -> EmbedResult:
    """
    Create a failed embedding result.

    Args:
        error: Detailed error description.
        cfg: The configuration used during the failed run.
        project_path: The target project directory.
        diagnostics: Rendered problems that caused the failure.
        resources: Resources discovered before the failure.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        EmbedResult: An immutable error result object.
    """
    return EmbedResult(
        ok=False,
        error=error,
        project_path=project_path,
        development_mode=bool(cfg.get("development_mode", False)),
        resources=resources or [],
        diagnostics=diagnostics or [],
        summary=summary_extra or {},
    )


def create_success_result(
        cfg: Dict[str, Any],
        project_path: str,
        artifact_path: str,
        runtime_path: str,
        resources: List[Resource],
        dry_run: bool = False,
        summary_extra: Optional[Dict[str, Any]] = None,
) -> EmbedResult:
    """
    Create a successful embedding result.

    Args:
        cfg: Final configuration used during execution.
        project_path: Normalized project directory.
        artifact_path: Path of the generated module.
        runtime_path: Directory of the vendored runtime package.
        resources: Resolved resources embedded into the artifact.
        dry_run: Whether writing was simulated.
        summary_extra: Final execution metrics.

    Returns:
        EmbedResult: An immutable success result object.
    """
    return EmbedResult(
        ok=True,
        error="",
        project_path=project_path,
        artifact_path=artifact_path,
        runtime_path=runtime_path,
        development_mode=bool(cfg.get("development_mode", False)),
        dry_run=dry_run,
        resources=resources,
        summary=summary_extra or {},
    )
