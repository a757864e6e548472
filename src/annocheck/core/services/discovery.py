from __future__ import annotations

"""
Test Group Discovery Service.

Every immediate sub-directory of the groups directory is a test group. A
group's cases are its files with a case extension, sorted by name, and its
engine setup comes from the 'test.json' descriptor in the same directory.
"""

import json
import logging
import os
from typing import List, Optional, Sequence

from annocheck.core.pipeline.stages.validator import validate_group_descriptor
from annocheck.domain import constants as const
from annocheck.domain.errors import FixtureError
from annocheck.domain.group_models import TestGroup
from annocheck.infra.fs import list_files, list_subdirectories

logger = logging.getLogger(__name__)


# ==============================================================================
# PUBLIC API
# ==============================================================================

def discover_groups(
        groups_dir: str,
        extensions: Sequence[str],
        only: Optional[Sequence[str]] = None,
) -> List[TestGroup]:
    """
    Find every test group under a directory.

    Args:
        groups_dir: Directory whose sub-directories are groups.
        extensions: Case file extensions, including the leading dot.
        only: Optional whitelist of group names; unknown names are logged.

    Returns:
        List[TestGroup]: Groups in sorted directory order.

    Raises:
        FixtureError: A selected group has a missing or malformed descriptor.
    """
    groups = [load_group(path, extensions) for path in list_group_dirs(groups_dir, only)]
    logger.debug(f"Discovered {len(groups)} groups in {groups_dir}")
    return groups


def list_group_dirs(groups_dir: str, only: Optional[Sequence[str]] = None) -> List[str]:
    """
    List the group directories under a groups directory, in sorted order.

    Args:
        groups_dir: Directory whose sub-directories are groups.
        only: Optional whitelist of group names; unknown names are logged.

    Returns:
        List[str]: Absolute group directory paths.
    """
    names = list_subdirectories(groups_dir)

    if only:
        wanted = set(only)
        for name in sorted(wanted.difference(names)):
            logger.warning(f"Requested group not found: {name}")
        names = [n for n in names if n in wanted]

    return [os.path.abspath(os.path.join(groups_dir, n)) for n in names]


def load_group(group_dir: str, extensions: Sequence[str]) -> TestGroup:
    """
    Build a TestGroup from a directory and its descriptor.

    Args:
        group_dir: Absolute path of the group directory.
        extensions: Case file extensions.

    Returns:
        TestGroup: The loaded group.

    Raises:
        FixtureError: The descriptor is missing or is not valid JSON.
    """
    descriptor_path = os.path.join(group_dir, const.GROUP_DESCRIPTOR_FILE)
    if not os.path.isfile(descriptor_path):
        raise FixtureError(f"Missing {const.GROUP_DESCRIPTOR_FILE} in {group_dir}")

    try:
        with open(descriptor_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        raise FixtureError(f"Cannot read {descriptor_path}: {e}") from e

    try:
        descriptor, warnings = validate_group_descriptor(raw, strict=True)
    except (TypeError, ValueError) as e:
        raise FixtureError(f"Malformed {descriptor_path}: {e}") from e
    for w in warnings:
        logger.warning(f"{descriptor_path}: {w}")

    return TestGroup(
        name=os.path.basename(os.path.normpath(group_dir)),
        path=os.path.abspath(group_dir),
        cases=tuple(list_files(group_dir, list(extensions))),
        defs=tuple(descriptor["defs"]),
        plugins=dict(descriptor["plugins"]),
        load_eagerly=tuple(descriptor["loadEagerly"]),
        engine=descriptor["engine"] or None,
    )
