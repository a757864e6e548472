from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Declares the command-line schema and translates a parsed namespace into
configuration overrides understood by validate_config.
"""

import argparse
from typing import Any, Dict, List, Optional

from annocheck.domain import constants as const

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the annocheck CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog=const.APP_NAME,
        description="Verify static-analysis results against directives embedded in JavaScript fixtures.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {const.APP_VERSION}")

    # --- Discovery ---
    p.add_argument(
        "groups_dir",
        nargs="?",
        default=None,
        help="Directory whose sub-directories are test groups.",
    )
    p.add_argument(
        "-g", "--group",
        dest="groups",
        action="append",
        default=None,
        help="Run only this group (repeatable, or comma-separated).",
    )
    p.add_argument(
        "--ext",
        dest="case_extensions",
        default=None,
        help="Comma-separated case file extensions (default: .js).",
    )

    # --- Analysis Engine ---
    p.add_argument(
        "-e", "--engine",
        dest="engine",
        default=None,
        help="Engine factory import path, 'package.module:attr'.",
    )
    p.add_argument("--vendor-dir", dest="vendor_dir", default=None, help="Replacement for $(VENDOR).")
    p.add_argument("--defs-dir", dest="defs_dir", default=None, help="Shared definition files directory.")
    p.add_argument("--plugin-dir", dest="plugin_dir", default=None, help="Shared plugin directory.")

    # --- Execution ---
    p.add_argument(
        "-j", "--workers",
        dest="workers",
        type=int,
        default=None,
        help="Verification threads per group (default: 1).",
    )
    p.add_argument(
        "--settle-timeout",
        dest="settle_timeout",
        type=float,
        default=None,
        help="Seconds to wait for the engine to settle (default: 60).",
    )

    # --- Configuration and Diagnostics ---
    p.add_argument("--config", dest="config_file", default=None, help="JSON configuration file.")
    p.add_argument("--use-defaults", action="store_true", help="Ignore any configuration file.")
    p.add_argument("--dump-config", action="store_true", help="Print the effective configuration and exit.")
    p.add_argument("--debug", action="store_true", help="Elevate logging verbosity to DEBUG.")
    p.add_argument("--log-file", dest="log_file", default=None, help="Also write logs to this file.")

    # --- Format Selection ---
    p.add_argument("--json", dest="json_output", action="store_true", help="Print results as JSON.")

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Options that were not given map to None and are ignored by the merge.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {
        "groups_dir": args.groups_dir,
        "engine": args.engine,
        "vendor_dir": args.vendor_dir,
        "defs_dir": args.defs_dir,
        "plugin_dir": args.plugin_dir,
        "workers": args.workers,
        "settle_timeout": args.settle_timeout,
    }

    if args.groups:
        overrides["groups"] = [name for value in args.groups for name in _split_csv(value) or []]
    if args.case_extensions:
        overrides["case_extensions"] = _split_csv(args.case_extensions)

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Convert a comma-separated string into a list of non-empty stripped strings."""
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]
