from __future__ import annotations

"""
Configuration Validation Service.

Ensures the configuration dictionary handed to the engine matches the
expected schema. Coerces types, normalises paths and injects defaults, or
raises in strict mode.
"""

import logging
from typing import Any, Dict, List, Tuple

from zap.domain.config import get_default_config
from zap.infra.fs import normalize_path

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and
                                          a list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    string_fields = ["project_path", "runtime_dir"]
    bool_fields = ["development_mode", "install_runtime", "report_duplicate_keys"]
    list_fields = ["skip_dirs", "skip_entries"]

    for name in string_fields:
        merged[name] = _as_str(merged.get(name), defaults[name], name, warnings, strict)

    for name in bool_fields:
        merged[name] = _as_bool(merged.get(name), defaults[name], name, warnings, strict)

    for name in list_fields:
        merged[name] = _as_list_str(merged.get(name), defaults[name], name, warnings, strict)

    merged["max_workers"] = _as_positive_int(
        merged.get("max_workers"), defaults["max_workers"], "max_workers", warnings, strict
    )

    merged["project_path"] = normalize_path(merged["project_path"], defaults["project_path"])

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _reject(msg: str, warnings: List[str], strict: bool) -> None:
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")


def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    _reject(f"Invalid field '{field}': expected str, received {type(value).__name__}.", warnings, strict)
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Validate boolean inputs, accepting common string spellings."""
    if value is None:
        return fallback
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False

    _reject(f"Invalid field '{field}': expected bool, received {value!r}.", warnings, strict)
    return fallback


def _as_list_str(
        value: Any,
        fallback: List[str],
        field: str,
        warnings: List[str],
        strict: bool,
) -> List[str]:
    """Validate list inputs, accepting a comma-separated string."""
    if value is None:
        return list(fallback)
    if isinstance(value, str):
        return [x.strip() for x in value.split(",") if x.strip()]
    if isinstance(value, (list, tuple)) and all(isinstance(x, str) for x in value):
        return [x for x in value if x]

    _reject(f"Invalid field '{field}': expected list of str.", warnings, strict)
    return list(fallback)


def _as_positive_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    if value is None:
        return fallback
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value

    _reject(f"Invalid field '{field}': expected positive int, received {value!r}.", warnings, strict)
    return fallback
