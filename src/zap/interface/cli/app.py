from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration resolution
(defaults, project file and CLI overrides), pipeline execution and result
rendering.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from zap.core.pipeline.engine import run_embedding
from zap.core.pipeline.validator import validate_config
from zap.domain.config import get_config_path, get_default_config, load_config, save_config
from zap.domain.pipeline_models import EmbedResult
from zap.infra.fs import normalize_path
from zap.infra.logging import LoggingConfig, configure_logging, get_logger
from zap.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 2 bad project path,
             130 interrupted).
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console on stderr, optional rotating file)
    configure_logging(LoggingConfig.for_cli(debug=args.debug, log_file=args.log_file))

    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    # 3. Resolve base configuration (defaults vs project file)
    project_path = normalize_path(args.project_path, os.getcwd())
    if args.use_defaults:
        base_conf = get_default_config()
        base_conf["project_path"] = project_path
    else:
        base_conf = load_config(project_path)

    # 4. Merge overrides and validate
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    # 5. Pre-flight project verification
    if not os.path.isdir(clean_conf["project_path"]):
        msg = f"Project directory does not exist: {clean_conf['project_path']}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 2

    # Persist the resolved configuration instead of running
    if args.save_config:
        if not save_config(clean_conf["project_path"], clean_conf):
            print("ERROR: Failed to save configuration.", file=sys.stderr)
            return 1
        print(f"Configuration saved to {get_config_path(clean_conf['project_path'])}")
        return 0

    # 6. Pipeline execution phase
    logger.info(f"Targeting project directory: {clean_conf['project_path']}")
    try:
        result = run_embedding(clean_conf, dry_run=bool(args.dry_run))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return 130
    except Exception as e:
        msg = f"Embedding failed: {e}"
        logger.critical(msg, exc_info=True)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 1

    # 7. Output rendering phase
    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result)

    return 0 if result.ok else 1

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow merge of override values into the base configuration.

    Only known keys with a value are merged.
    """
    out = dict(base)
    keys_to_merge = [
        "project_path", "runtime_dir", "development_mode", "install_runtime",
        "max_workers", "skip_dirs",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: EmbedResult) -> None:
    """Print the run result as a terminal report."""
    if not result.ok:
        for line in result.diagnostics:
            print(line, file=sys.stderr)
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    summary = result.summary
    mode = "development" if result.development_mode else "embedded"
    print(f"Embedding completed ({mode} mode).")

    for res in result.resources:
        print(f"  - {res.key}: {res.path}")

    stats_keys = {
        "packages": "Packages scanned",
        "files_scanned": "Source files scanned",
        "directories": "Directories embedded",
        "files_embedded": "Files embedded",
        "bytes_embedded": "Bytes embedded",
    }
    for key, label in stats_keys.items():
        if key in summary:
            print(f"{label}: {summary[key]}")

    if result.dry_run:
        print(f"Dry run: {result.artifact_path} was not written.")
    else:
        print(f"Artifact: {result.artifact_path}")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
