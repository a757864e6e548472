from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation so that 'src' and the scripted engine in 'tests/support'
   are importable.
2. Shared fixtures for parsing fixtures, building settled sessions and
   writing test groups to disk.
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_TESTS_DIR = os.path.dirname(os.path.abspath(__file__))
_SRC_PATH = os.path.abspath(os.path.join(_TESTS_DIR, "..", "src"))
_SUPPORT_PATH = os.path.join(_TESTS_DIR, "support")
for _path in (_SRC_PATH, _SUPPORT_PATH):
    if _path not in sys.path:
        sys.path.insert(0, _path)

import fake_engine  # noqa: E402
from annocheck.core.analysis.parser import parse_source  # noqa: E402
from annocheck.core.engine.session import AnalysisSession  # noqa: E402
from annocheck.domain.config import get_default_config  # noqa: E402
from annocheck.domain.syntax_models import SourceFile  # noqa: E402


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def parse() -> Callable[..., SourceFile]:
    """Parse JavaScript text into a SourceFile named 'case.js' by default."""

    def _parse(text: str, name: str = "case.js") -> SourceFile:
        return parse_source(name, text)

    return _parse


@pytest.fixture
def settled_session() -> Callable[..., AnalysisSession]:
    """
    Build a session over the scripted engine, register the given files,
    settle, and enter verification.

    Returns:
        Callable[[Dict[str, str]], AnalysisSession]: Session factory.
    """
    sessions = []

    def _build(files: Dict[str, str], engine: Optional[fake_engine.FakeEngine] = None) -> AnalysisSession:
        session = AnalysisSession(engine or fake_engine.FakeEngine(), files.__getitem__, name="fixture")
        session.register_cases(sorted(files))
        session.settle()
        session.begin_verification()
        sessions.append(session)
        return session

    yield _build

    for s in sessions:
        s.close()


@pytest.fixture
def write_group(tmp_path: Path) -> Callable[..., Path]:
    """
    Write a test group directory (case files + test.json) under tmp_path/groups.

    Returns:
        Callable: (name, files, descriptor) -> group directory path.
    """

    def _write(name: str, files: Dict[str, str], descriptor: Optional[Any] = None) -> Path:
        group_dir = tmp_path / "groups" / name
        group_dir.mkdir(parents=True, exist_ok=True)
        for file_name, text in files.items():
            (group_dir / file_name).write_text(text, encoding="utf-8")
        if descriptor is not None:
            payload = descriptor if isinstance(descriptor, str) else json.dumps(descriptor)
            (group_dir / "test.json").write_text(payload, encoding="utf-8")
        return group_dir

    return _write


@pytest.fixture
def runner_config(tmp_path: Path) -> Dict[str, Any]:
    """Return a complete runner configuration rooted in tmp_path."""
    cfg = get_default_config()
    cfg.update({
        "groups_dir": str(tmp_path / "groups"),
        "engine": "fake_engine:create_engine",
        "vendor_dir": str(tmp_path / "vendor"),
        "defs_dir": str(tmp_path / "vendor" / "defs"),
        "plugin_dir": str(tmp_path / "vendor" / "plugins"),
        "settle_timeout": 5.0,
    })
    return cfg


@pytest.fixture(autouse=True)
def _reset_created_engines():
    fake_engine.created_engines.clear()
    yield
    fake_engine.created_engines.clear()
