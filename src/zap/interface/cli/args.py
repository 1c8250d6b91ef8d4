from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema of the ``zap`` tool and translates the
parsed namespace into configuration overrides.
"""

import argparse
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the zap CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="zap",
        description="Embed resource directories referenced by zapped.Resource() "
                    "calls into a generated Python module.",
    )

    # --- Path Management ---
    p.add_argument(
        "-p", "--project",
        dest="project_path",
        default=None,
        help="Project root to scan (default: current directory).",
    )
    p.add_argument(
        "--runtime-dir",
        dest="runtime_dir",
        default=None,
        help="Directory, relative to the project, receiving the runtime package and artifact.",
    )

    # --- Generation Mode ---
    p.add_argument(
        "--dev",
        action="store_true",
        help="Generate a development artifact that reads resources from disk.",
    )
    p.add_argument(
        "--no-runtime",
        action="store_true",
        help="Do not copy the runtime package next to the artifact.",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Scan and generate without writing anything.",
    )
    p.add_argument(
        "--workers",
        dest="max_workers",
        type=int,
        default=None,
        help="Number of threads used to scan source files.",
    )
    p.add_argument(
        "--skip",
        dest="skip_dirs",
        default=None,
        help="Comma-separated directory names excluded from scanning.",
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the project configuration file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the resolved configuration and exit.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Write the resolved configuration to the project .zap.json and exit.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write logs to this file (rotated).",
    )

    # --- Format Selection ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the run result as JSON.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration dictionary.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset. Options left unset
        map to None.
    """
    overrides: Dict[str, Any] = {}

    overrides["project_path"] = args.project_path
    overrides["runtime_dir"] = args.runtime_dir
    overrides["max_workers"] = args.max_workers
    overrides["skip_dirs"] = _split_csv(args.skip_dirs)

    if args.dev:
        overrides["development_mode"] = True
    if args.no_runtime:
        overrides["install_runtime"] = False

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Convert a comma-separated string into a list of trimmed strings."""
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]
