from __future__ import annotations

"""
Command Line Interface Application Controller.

Drives one CLI run: logging bootstrap, configuration layering (defaults,
JSON file, command-line overrides), pre-flight checks, suite execution and
result rendering.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from annocheck.core.engine.loader import load_engine_factory
from annocheck.core.pipeline.runner import run_suite
from annocheck.core.pipeline.stages.validator import validate_config
from annocheck.domain.config import get_default_config, load_config
from annocheck.domain.errors import EngineLoadError
from annocheck.domain.verification_models import GroupResult, SuiteResult
from annocheck.infra.logging import LoggingConfig, configure_logging, get_logger
from annocheck.interface.cli import args as cli_args

logger = get_logger(__name__)

_MERGE_KEYS = (
    "groups_dir", "groups", "case_extensions", "engine",
    "vendor_dir", "defs_dir", "plugin_dir", "workers", "settle_timeout",
)
_INDENT = "    "

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Command line arguments. Defaults to sys.argv.

    Returns:
        int: 0 if every group passed, 1 on any failure, 2 on invalid
             input, 130 when interrupted.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    configure_logging(LoggingConfig(
        level="DEBUG" if args.debug else "WARNING",
        console=True,
        log_file=args.log_file,
    ))

    # 1. Configuration layering
    base_conf = get_default_config() if args.use_defaults else load_config(args.config_file)
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    # 2. Pre-flight checks
    groups_dir = clean_conf["groups_dir"]
    if not os.path.isdir(groups_dir):
        msg = f"Groups directory does not exist: {groups_dir}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 2

    if clean_conf["engine"]:
        try:
            load_engine_factory(clean_conf["engine"])
        except EngineLoadError as e:
            logger.error(str(e))
            print(f"ERROR: {e}", file=sys.stderr)
            return 2

    # 3. Suite execution
    try:
        result = run_suite(clean_conf, debug=bool(args.debug))
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130

    # 4. Rendering
    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result)

    return 0 if result.ok else 1

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow-merge the known, non-None overrides into the base configuration."""
    out = dict(base)
    for k in _MERGE_KEYS:
        if overrides.get(k) is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: SuiteResult) -> None:
    """Print one line per case, diagnostics under failures, and the totals."""
    for group in result.groups:
        _print_group(group)

    s = result.summary
    print(
        f"\n{s['cases_passed']}/{s['cases']} cases passed, "
        f"{s['groups'] - s['groups_failed']}/{s['groups']} groups passed "
        f"({s['directives']} directives checked)."
    )


def _print_group(group: GroupResult) -> None:
    print(f"[{group.name}]")
    for case in group.cases:
        status = "PASS" if case.ok else "FAIL"
        print(f"  {status} {case.name} ({case.directives} directives)")
        for diagnostic in case.failures:
            print(_indent(diagnostic.render()))
    if group.error:
        print(f"  ERROR {group.error}")


def _indent(text: str) -> str:
    return "\n".join(_INDENT + line for line in text.splitlines())


if __name__ == "__main__":
    sys.exit(main())
