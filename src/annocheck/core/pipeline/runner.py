from __future__ import annotations

"""
Suite Runner.

Entry point of the verification pipeline: validates the runner settings,
discovers the test groups and runs them one after another. Groups share no
state; a group that cannot be loaded or aborts with a fixture error is
reported as failed and the run continues with the next one.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from annocheck.core.pipeline.orchestrator import run_group
from annocheck.core.pipeline.stages.validator import validate_config
from annocheck.core.services.discovery import list_group_dirs, load_group
from annocheck.domain.errors import FixtureError
from annocheck.domain.verification_models import (
    GroupResult,
    SuiteResult,
    create_group_error,
    create_suite_result,
)
from annocheck.infra.fs import normalize_path

logger = logging.getLogger(__name__)


def run_suite(config: Optional[Dict[str, Any]], *, debug: bool = False) -> SuiteResult:
    """
    Run every selected test group.

    Args:
        config: Runner configuration (raw or partial); validated here.
        debug: Forwarded to every engine factory.

    Returns:
        SuiteResult: Group results in sorted group order plus summary counters.
    """
    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    base = os.getcwd()
    for key in ("groups_dir", "vendor_dir", "defs_dir", "plugin_dir"):
        cfg[key] = normalize_path(cfg[key], base)

    groups_dir = cfg["groups_dir"]
    if not os.path.isdir(groups_dir):
        raise FixtureError(f"Invalid groups directory: {groups_dir}")

    logger.info(f"Suite execution started in {groups_dir}")
    results: List[GroupResult] = []

    for group_dir in list_group_dirs(groups_dir, cfg["groups"]):
        try:
            group = load_group(group_dir, cfg["case_extensions"])
        except FixtureError as e:
            logger.error(f"Group '{os.path.basename(group_dir)}' could not be loaded: {e}")
            results.append(create_group_error(os.path.basename(group_dir), str(e)))
            continue
        results.append(run_group(group, cfg, debug=debug))

    suite = create_suite_result(results)
    s = suite.summary
    logger.info(
        f"Suite finished. Groups: {s['groups']} ({s['groups_failed']} failed). "
        f"Cases: {s['cases_passed']}/{s['cases']} passed. Directives: {s['directives']}."
    )
    return suite
