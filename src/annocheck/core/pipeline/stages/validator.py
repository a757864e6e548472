from __future__ import annotations

"""
Configuration Validation Service.

Gatekeeper for both the runner configuration and the per-group 'test.json'
descriptor. Coerces untrusted values (JSON files, CLI flags) into strictly
typed parameters, injects defaults, and reports every correction as a warning.
"""

import logging
from typing import Any, Dict, List, Tuple

from annocheck.domain.config import get_default_config

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
    Validate and normalize the runner configuration dictionary.

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

    string_fields = ["groups_dir", "engine", "vendor_dir", "defs_dir", "plugin_dir"]
    list_fields = ["groups", "case_extensions"]

    for field in string_fields:
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    for field in list_fields:
        merged[field] = _as_list_str(merged.get(field), defaults[field], field, warnings, strict)

    merged["workers"] = _as_int(
        merged.get("workers"), defaults["workers"], "workers", 1, warnings, strict
    )
    merged["settle_timeout"] = _as_float(
        merged.get("settle_timeout"), defaults["settle_timeout"], "settle_timeout", warnings, strict
    )

    merged["case_extensions"] = _normalize_extensions(merged["case_extensions"], warnings, strict)

    return merged, warnings


def validate_group_descriptor(
        descriptor: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a group 'test.json' descriptor.

    Recognized keys are 'defs', 'plugins', 'loadEagerly' and 'engine'.
    Unknown keys are preserved untouched.

    Args:
        descriptor: Parsed JSON content of the descriptor.
        strict: If True, raises exceptions on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized descriptor and warnings.
    """
    warnings: List[str] = []

    if not isinstance(descriptor, dict):
        msg = f"Invalid descriptor type: expected object, received {type(descriptor).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using an empty descriptor.")
        descriptor = {}

    out: Dict[str, Any] = dict(descriptor)
    out["defs"] = _as_list_str(out.get("defs"), [], "defs", warnings, strict)
    out["loadEagerly"] = _as_list_str(out.get("loadEagerly"), [], "loadEagerly", warnings, strict)
    out["engine"] = _as_str(out.get("engine"), "", "engine", warnings, strict)

    plugins = out.get("plugins")
    if plugins is None:
        out["plugins"] = {}
    elif isinstance(plugins, dict):
        out["plugins"] = {str(k): v for k, v in plugins.items()}
    else:
        msg = f"Invalid field 'plugins': expected object, received {type(plugins).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using no plugins.")
        out["plugins"] = {}

    return out, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_int(
        value: Any,
        fallback: int,
        field: str,
        minimum: int,
        warnings: List[str],
        strict: bool,
) -> int:
    """Coerce numeric and numeric-string inputs into a bounded integer."""
    if value is None:
        return fallback

    result = None
    if isinstance(value, int) and not isinstance(value, bool):
        result = value
    elif not strict and isinstance(value, str) and value.strip().lstrip("-").isdigit():
        result = int(value.strip())
        warnings.append(f"Field '{field}' converted from '{value}' to int.")

    if result is None:
        msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    if result < minimum:
        msg = f"Field '{field}' must be >= {minimum}, received {result}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using {minimum}.")
        return minimum
    return result


def _as_float(value: Any, fallback: float, field: str, warnings: List[str], strict: bool) -> float:
    """Coerce numeric inputs into a positive float."""
    if value is None:
        return fallback

    result = None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        result = float(value)
    elif not strict and isinstance(value, str):
        try:
            result = float(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to float.")
        except ValueError:
            result = None

    if result is None or result <= 0:
        msg = f"Invalid field '{field}': expected a positive number, received {value!r}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback
    return result


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure input is a list of sanitized strings, supporting CSV parsing."""
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        if items:
            warnings.append(f"Field '{field}' converted from CSV string to list.")
            return items
        return list(fallback)

    if isinstance(value, list):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: DOMAIN NORMALIZATION
# -----------------------------------------------------------------------------

def _normalize_extensions(exts: List[str], warnings: List[str], strict: bool) -> List[str]:
    """Ensure all case extensions are prefixed with a dot."""
    out: List[str] = []
    for ext in exts:
        e = ext.strip()
        if not e:
            continue
        if not e.startswith("."):
            if strict:
                raise ValueError(f"Invalid extension '{ext}': must start with '.'.")
            warnings.append(f"Extension '{ext}' corrected to '.{e}'.")
            e = "." + e
        out.append(e)
    return out if out else [".js"]
