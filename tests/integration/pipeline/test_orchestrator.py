from __future__ import annotations

"""
Integration tests for the Group Orchestrator.

Runs whole groups from disk through the scripted engine:
registration order, settle count, cross-file resolution, eager files,
definitions, parallel verification and every group-fatal path.
"""

import json
from pathlib import Path

import fake_engine
import pytest

from annocheck.core.pipeline.orchestrator import run_group
from annocheck.core.services.discovery import load_group

CROSS_FILE = {
    "a_use.js": "later/*TYPE:number*/;\n",
    "b_decl.js": "var later/*DEF:later:local*/ = 2;\n",
}


def _run(write_group, runner_config, name, files, descriptor=None, **overrides):
    path = write_group(name, files, descriptor if descriptor is not None else {})
    cfg = dict(runner_config, **overrides)
    return run_group(load_group(str(path), cfg["case_extensions"]), cfg)

# -----------------------------------------------------------------------------
# Session lifecycle
# -----------------------------------------------------------------------------

def test_forward_reference_across_files(write_group, runner_config) -> None:
    """TC-01: A name declared in a later case resolves in an earlier one."""
    result = _run(write_group, runner_config, "cross", CROSS_FILE)

    assert result.ok, [d.render() for c in result.cases for d in c.failures]
    assert [c.name for c in result.cases] == ["a_use.js", "b_decl.js"]
    assert [c.directives for c in result.cases] == [1, 1]


def test_registration_order_and_settles(write_group, runner_config) -> None:
    """TC-02: Cases are registered sorted and the engine settles exactly twice."""
    _run(write_group, runner_config, "order", {"c.js": "", "a.js": "", "b.js": ""})

    engine = fake_engine.created_engines[-1]
    assert engine.registered == ["a.js", "b.js", "c.js"]
    assert engine.settle_calls == 2
    assert engine.closed


def test_eager_files_with_vendor_placeholder(write_group, runner_config) -> None:
    """TC-03: Eager files are expanded, registered first and visible to cases."""
    vendor = Path(runner_config["vendor_dir"])
    vendor.mkdir(parents=True)
    (vendor / "lib.js").write_text("var libValue = 'lib';\n", encoding="utf-8")

    result = _run(
        write_group, runner_config, "eager",
        {"case.js": "libValue/*TYPE:string*/;\n"},
        {"loadEagerly": ["$(VENDOR)/lib.js"]},
    )

    assert result.ok
    engine = fake_engine.created_engines[-1]
    assert engine.registered == [str(vendor / "lib.js"), "case.js"]


def test_shared_definitions(write_group, runner_config) -> None:
    """TC-04: Definition files come from the shared defs directory."""
    defs_dir = Path(runner_config["defs_dir"])
    defs_dir.mkdir(parents=True)
    (defs_dir / "server.json").write_text(json.dumps({"!name": "server", "PORT": "number"}), encoding="utf-8")

    result = _run(write_group, runner_config, "defs", {"case.js": "PORT/*TYPE:number*/;\n"}, {"defs": ["server"]})

    assert result.ok


def test_engine_override_from_descriptor(write_group, runner_config) -> None:
    """TC-05: A group may pick its own engine factory, here one settling asynchronously."""
    result = _run(
        write_group, runner_config, "async", CROSS_FILE,
        {"engine": "fake_engine:create_async_engine"},
    )

    assert result.ok
    assert fake_engine.created_engines[-1].settle_mode == "async"


def test_failures_do_not_abort_group(write_group, runner_config) -> None:
    """TC-06: A failing case is reported and later cases still run."""
    result = _run(write_group, runner_config, "mixed", {
        "a.js": "var n = 1;\nn/*TYPE:string*/;\n",
        "b.js": "var s = 'x';\ns/*TYPE:string*/;\n",
    })

    assert not result.ok
    assert result.error == ""
    assert [c.ok for c in result.cases] == [False, True]


def test_rerun_is_idempotent(write_group, runner_config) -> None:
    """TC-07: Running the same group twice yields identical results."""
    path = write_group("again", {**CROSS_FILE, "c.js": "var o = {a: 1};\no/*HAS_PROPS:a,z*/;\n"}, {})
    group = load_group(str(path), [".js"])

    first = run_group(group, runner_config)
    second = run_group(group, runner_config)

    assert first == second
    assert len(fake_engine.created_engines) == 2


def test_parallel_verification_keeps_order(write_group, runner_config) -> None:
    """TC-08: Worker threads produce the same ordered results as a single thread."""
    files = {}
    for i in range(8):
        want = "number" if i % 3 else "string"
        files[f"case_{i}.js"] = f"var v{i} = {i};\nv{i}/*TYPE:{want}*/;\n"
    path = write_group("parallel", files, {})
    group = load_group(str(path), [".js"])

    sequential = run_group(group, dict(runner_config, workers=1))
    parallel = run_group(group, dict(runner_config, workers=4))

    assert parallel == sequential
    assert [c.name for c in parallel.cases] == sorted(files)
    assert [c.ok for c in parallel.cases] == [bool(i % 3) for i in range(8)]

# -----------------------------------------------------------------------------
# Group-fatal errors
# -----------------------------------------------------------------------------

def test_settle_failure_aborts_group(write_group, runner_config) -> None:
    """TC-09: An engine reporting a settle error fails the group without cases."""
    result = _run(write_group, runner_config, "bad_settle", CROSS_FILE, {"engine": "fake_engine:create_failing_engine"})

    assert not result.ok
    assert "failed to settle" in result.error
    assert result.cases == ()
    assert fake_engine.created_engines[-1].closed


def test_settle_timeout_aborts_group(write_group, runner_config) -> None:
    """TC-10: An engine that never calls back times out."""
    result = _run(
        write_group, runner_config, "silent", CROSS_FILE,
        {"engine": "fake_engine:create_silent_engine"},
        settle_timeout=0.1,
    )

    assert not result.ok
    assert "did not settle" in result.error


def test_missing_definition_file(write_group, runner_config) -> None:
    """TC-11: An unknown definition name fails the group."""
    result = _run(write_group, runner_config, "no_defs", CROSS_FILE, {"defs": ["missing"]})

    assert result.error == "def not found: missing.json"
    assert fake_engine.created_engines == []


def test_missing_engine(write_group, runner_config) -> None:
    """TC-12: Without any engine path the group cannot run."""
    result = _run(write_group, runner_config, "no_engine", CROSS_FILE, engine="")

    assert "No analysis engine configured" in result.error


def test_engine_factory_error(write_group, runner_config) -> None:
    """TC-13: A factory that raises is reported as a load failure."""
    result = _run(write_group, runner_config, "broken", CROSS_FILE, {"engine": "fake_engine:create_broken_engine"})

    assert "engine exploded" in result.error


@pytest.mark.parametrize("workers", [1, 3])
def test_malformed_directive_aborts_group(write_group, runner_config, workers) -> None:
    """TC-14: A malformed directive stops the group; earlier cases are kept."""
    result = _run(
        write_group, runner_config, f"malformed_{workers}",
        {
            "a.js": "var x = 1;\nx/*TYPE:number*/;\n",
            "b.js": "var y = 1;\ny/*BOGUS:1*/;\n",
            "c.js": "var z = 1;\nz/*TYPE:number*/;\n",
        },
        workers=workers,
    )

    assert not result.ok
    assert "Unknown directive 'BOGUS'" in result.error
    assert [c.name for c in result.cases] == ["a.js"]
    assert fake_engine.created_engines[-1].closed


def test_missing_eager_file_fails_settle(write_group, runner_config) -> None:
    """TC-15: An eager file that does not exist fails the initial settle."""
    result = _run(write_group, runner_config, "no_eager", CROSS_FILE, {"loadEagerly": ["missing.js"]})

    assert not result.ok
    assert "file not found: missing.js" in result.error
    assert fake_engine.created_engines[-1].closed


def test_engine_query_crash_aborts_group(write_group, runner_config) -> None:
    """TC-16: An engine exception during verification fails the group, not the run."""
    result = _run(
        write_group, runner_config, "query_crash", CROSS_FILE,
        {"engine": "fake_engine:create_crashing_query_engine"},
    )

    assert not result.ok
    assert "failed to infer a type: type query crashed" in result.error
    assert fake_engine.created_engines[-1].closed


class _ExplodingValue:
    def get_type(self):
        raise ValueError("type object is corrupt")

    def get_function_type(self):
        return None


class _ExplodingValueEngine(fake_engine.FakeEngine):
    def expression_type(self, expression):
        return _ExplodingValue()


def test_unexpected_error_aborts_group(write_group, runner_config, monkeypatch) -> None:
    """TC-17: Errors raised by engine-side objects still end up as a group error."""
    monkeypatch.setattr(fake_engine, "create_engine", lambda options: fake_engine._track(_ExplodingValueEngine(options)))

    result = _run(write_group, runner_config, "bad_value", CROSS_FILE, workers=2)

    assert not result.ok
    assert result.error == "Unexpected error: type object is corrupt"
    assert fake_engine.created_engines[-1].closed
