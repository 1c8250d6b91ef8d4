from __future__ import annotations

"""
Embedding Orchestration Pipeline.

Coordinates one discovery-and-generation pass:
1. Validates configuration and the project path.
2. Discovers source packages and scans every file for call sites.
3. Resolves resource paths and checks key uniqueness.
4. Collects the referenced directory trees.
5. Generates the artifact module.
6. Vendors the runtime package and writes the artifact.

Diagnostics from every phase are aggregated; if any exist nothing is
written, so a partially correct artifact is never produced.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Optional, Tuple

from zap.core.analysis.scanner import scan_file
from zap.core.codegen.generator import generate_code
from zap.core.pipeline.validator import validate_config
from zap.core.services.collector import TreeMapping, collect_directories
from zap.core.services.discovery import discover_packages
from zap.core.services.resolver import resolve_resources
from zap.domain.constants import EMBED_FILE_NAME, RUNTIME_PACKAGE, RUNTIME_SOURCE_FILES
from zap.domain.diagnostics import (
    CollectionError,
    DiagnosticKind,
    GenerationError,
    ScanDiagnostic,
)
from zap.domain.models import Resource, SourcePackage
from zap.domain.pipeline_models import (
    EmbedResult,
    create_error_result,
    create_success_result,
)
from zap.infra.fs import safe_mkdir, write_file_atomic
logger = logging.getLogger(__name__)

# The runtime package is installed next to the zap package, never looked up
# through sys.path, where a project's own vendored copy may come first.
RUNTIME_SOURCE_DIR = os.path.normpath(
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "..", "..", RUNTIME_PACKAGE)
)


# -----------------------------------------------------------------------------
# PHASES
# -----------------------------------------------------------------------------

def get_resources_in_packages(
        packages: Iterable[SourcePackage],
        max_workers: int = 1,
) -> Tuple[List[Resource], List[ScanDiagnostic]]:
    """
    Scan every source file of every package and resolve the resources found.

    Files are scanned concurrently; resources keep package and file order,
    and diagnostics are sorted by position.

    Args:
        packages: Packages to scan.
        max_workers: Size of the scanning thread pool.

    Returns:
        Tuple[List[Resource], List[ScanDiagnostic]]: Resolved resources and
        every scan diagnostic.
    """
    jobs: List[Tuple[str, str]] = [
        (pkg.directory, source) for pkg in packages for source in pkg.source_files
    ]

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ZapScanner") as executor:
        results = list(executor.map(scan_file, [source for _, source in jobs]))

    resources: List[Resource] = []
    diagnostics: List[ScanDiagnostic] = []
    for (package_dir, source), (found, diags) in zip(jobs, results):
        if found:
            logger.debug(f"{source}: {len(found)} resource(s)")
        resources.extend(resolve_resources(package_dir, found))
        diagnostics.extend(diags)

    return resources, sorted(diagnostics)


def check_duplicate_keys(
        resources: Iterable[Resource],
        report: bool = True,
) -> Tuple[List[Resource], List[ScanDiagnostic]]:
    """
    Reduce resources to one per key.

    Repeats of a key with the same path collapse silently. A key rebound to
    another path is a DuplicateKey diagnostic when ``report`` is set;
    otherwise the last binding wins.

    Args:
        resources: Resolved, complete resources in discovery order.
        report: Whether conflicting bindings are diagnostics.

    Returns:
        Tuple[List[Resource], List[ScanDiagnostic]]: Unique resources in
        first-seen key order, and conflicts found.
    """
    by_key: Dict[str, Resource] = {}
    diagnostics: List[ScanDiagnostic] = []

    for res in resources:
        first = by_key.get(res.key)
        if first is None or first.path == res.path:
            by_key.setdefault(res.key, res)
            continue
        if report:
            diagnostics.append(ScanDiagnostic(
                res.file, res.line, res.column, DiagnosticKind.DUPLICATE_KEY,
                detail=f"{res.key!r} first bound to {first.path} at {first.file}:{first.line}",
            ))
        else:
            logger.warning(f"Resource key {res.key!r} rebound from {first.path} to {res.path}")
            by_key[res.key] = res

    return list(by_key.values()), diagnostics


def embed_resources(
        resources: Iterable[Resource],
        skip_entries: Optional[Iterable[str]] = None,
) -> Tuple[TreeMapping, List[CollectionError]]:
    """
    Collect the directory trees referenced by complete resources.

    Args:
        resources: Resolved resources.
        skip_entries: Entry names never embedded.

    Returns:
        Tuple[TreeMapping, List[CollectionError]]: Path to tree, and errors.
    """
    paths = {res.path for res in resources if res.path is not None}
    return collect_directories(paths, skip_entries)


def install_runtime(target_dir: str, source_dir: str = RUNTIME_SOURCE_DIR) -> List[str]:
    """
    Copy the runtime package sources into ``target_dir``.

    The sources come from the runtime package shipped with this tool, so a
    vendored copy earlier on sys.path is never what gets installed.

    Args:
        target_dir: Directory of the vendored runtime package.
        source_dir: Directory holding the runtime sources.

    Returns:
        List[str]: Paths written.

    Raises:
        OSError: If a runtime file cannot be read or written.
    """
    written: List[str] = []
    for name in RUNTIME_SOURCE_FILES:
        with open(os.path.join(source_dir, name), "rb") as f:
            data = f.read()
        dest = os.path.join(target_dir, name)
        write_file_atomic(dest, data)
        written.append(dest)
    return written


# -----------------------------------------------------------------------------
# ENTRYPOINT
# -----------------------------------------------------------------------------

def run_embedding(
        config: Optional[Dict[str, Any]],
        *,
        dry_run: bool = False,
) -> EmbedResult:
    """
    Execute the full embedding pipeline.

    Args:
        config: The configuration dictionary (raw or partial).
        dry_run: If True, generate but do not write anything to disk.

    Returns:
        EmbedResult: Status, resources, diagnostics and summary.
    """
    logger.info("Embedding run started.")

    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    project_path = cfg["project_path"]
    if not os.path.isdir(project_path):
        msg = f"Invalid project directory: {project_path}"
        logger.error(msg)
        return create_error_result(msg, cfg, project_path)

    development_mode = cfg["development_mode"]
    runtime_path = os.path.join(project_path, cfg["runtime_dir"])
    artifact_path = os.path.join(runtime_path, EMBED_FILE_NAME)

    # 1) Discovery & scanning
    packages = discover_packages(project_path, cfg["skip_dirs"])
    found, scan_diags = get_resources_in_packages(packages, cfg["max_workers"])
    complete = [res for res in found if res.is_complete]
    resources, dup_diags = check_duplicate_keys(complete, cfg["report_duplicate_keys"])
    logger.info(f"Found {len(resources)} resource(s) in {len(packages)} package(s).")

    # 2) Collection (skipped when reading from disk at runtime)
    trees: TreeMapping = {}
    collection_errors: List[CollectionError] = []
    if not development_mode:
        trees, collection_errors = embed_resources(resources, cfg["skip_entries"])

    diagnostics = [str(d) for d in scan_diags + dup_diags] + [str(e) for e in collection_errors]
    summary: Dict[str, Any] = {
        "packages": len(packages),
        "files_scanned": sum(len(p.source_files) for p in packages),
        "resources": len(resources),
        "directories": len(trees),
        "files_embedded": sum(len(t.files) for t in trees.values()),
        "bytes_embedded": sum(len(b) for t in trees.values() for b in t.files.values()),
    }

    if diagnostics:
        for line in diagnostics:
            logger.error(line)
        return create_error_result(
            f"{len(diagnostics)} problem(s) found; artifact not written.",
            cfg, project_path, diagnostics, resources, summary,
        )

    # 3) Generation
    table = {} if development_mode else {res.key: res.path for res in resources}
    try:
        code = generate_code(trees, table, development_mode=development_mode)
    except GenerationError as e:
        logger.critical(f"Code generation failed:\n{e}")
        return create_error_result(
            "Code generation failed.", cfg, project_path, [str(x) for x in e.errors], resources, summary,
        )

    # 4) Deployment
    if dry_run:
        logger.info("Dry run: skipping artifact deployment.")
    else:
        ok, err = safe_mkdir(runtime_path)
        if not ok:
            msg = f"Failed to create runtime directory {runtime_path}: {err}"
            logger.critical(msg)
            return create_error_result(msg, cfg, project_path, resources=resources, summary_extra=summary)
        try:
            if cfg["install_runtime"]:
                install_runtime(runtime_path)
            write_file_atomic(artifact_path, code.encode("utf-8"))
        except OSError as e:
            msg = f"Failed to write artifact: {e}"
            logger.critical(msg)
            return create_error_result(msg, cfg, project_path, resources=resources, summary_extra=summary)
        logger.info(f"Artifact written to {artifact_path}")

    summary["artifact_bytes"] = len(code.encode("utf-8"))
    return create_success_result(
        cfg, project_path, artifact_path, runtime_path, resources, dry_run, summary,
    )
