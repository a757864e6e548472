from __future__ import annotations

"""
Analysis Engine Loader.

Resolves everything an engine needs for one test group and instantiates it:
1. The engine factory, named by an import path ('package.module:attr').
2. Definition files, looked up in the group directory then the shared defs dir.
3. Plugins, looked up as '<name>.py' in the group directory then the shared
   plugin dir, and imported from their file location.

Every resolution failure is a FixtureError: the group cannot run.
"""

import importlib
import importlib.util
import json
import logging
import os
from functools import partial
from types import ModuleType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from annocheck.core.engine.protocol import (
    AnalysisEngine,
    EngineFactory,
    EngineOptions,
    SourceProvider,
)
from annocheck.domain import constants as const
from annocheck.domain.errors import EngineLoadError, FixtureError
from annocheck.domain.group_models import TestGroup
from annocheck.infra.fs import find_file, read_text

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def create_engine(
        group: TestGroup,
        config: Mapping[str, Any],
        *,
        debug: bool = False,
) -> Tuple[AnalysisEngine, SourceProvider]:
    """
    Build the engine for a group from its descriptor and the runner config.

    Args:
        group: The group to build an engine for.
        config: Validated runner configuration.
        debug: Forwarded to the engine options.

    Returns:
        Tuple[AnalysisEngine, SourceProvider]: The engine and the provider it
                                               was configured with.

    Raises:
        FixtureError: A definition file, plugin or the factory cannot be resolved.
    """
    factory_path = group.engine or config.get("engine", "")
    if not factory_path:
        raise EngineLoadError(
            f"No analysis engine configured for group '{group.name}' "
            f"(set 'engine' in the runner config or in {const.GROUP_DESCRIPTOR_FILE})"
        )

    factory = load_engine_factory(factory_path)
    source_provider = partial(read_source, group.path)
    plugins, plugin_modules = resolve_plugins(group.plugins, group.path, config.get("plugin_dir"))

    options = EngineOptions(
        project_dir=group.path,
        source_provider=source_provider,
        defs=resolve_definitions(group.defs, group.path, config.get("defs_dir")),
        plugins=plugins,
        plugin_modules=plugin_modules,
        debug=debug,
    )

    try:
        engine = factory(options)
    except FixtureError:
        raise
    except Exception as e:
        raise EngineLoadError(f"Engine factory '{factory_path}' failed: {e}") from e

    logger.debug(
        f"Engine '{factory_path}' created for group '{group.name}' "
        f"({len(options.defs)} defs, {len(plugins)} plugins)."
    )
    return engine, source_provider


def load_engine_factory(path: str) -> EngineFactory:
    """
    Import an engine factory from a 'package.module:attr' path.

    Args:
        path: Import path of the factory callable.

    Returns:
        EngineFactory: The resolved callable.
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise EngineLoadError(f"Invalid engine path '{path}': expected 'module:attribute'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise EngineLoadError(f"Cannot import engine module '{module_name}': {e}") from e

    target: Any = module
    for part in attr.split("."):
        target = getattr(target, part, None)
        if target is None:
            raise EngineLoadError(f"Engine module '{module_name}' has no attribute '{attr}'")

    if not callable(target):
        raise EngineLoadError(f"Engine factory '{path}' is not callable")
    return target


def resolve_definitions(
        names: Sequence[str],
        group_dir: str,
        defs_dir: Optional[str],
) -> List[Dict[str, Any]]:
    """
    Locate and parse the group's definition files.

    Args:
        names: Definition names; '.json' is appended when missing.
        group_dir: Directory searched first.
        defs_dir: Shared directory searched second.

    Returns:
        List[Dict[str, Any]]: Parsed definitions in declaration order.
    """
    defs: List[Dict[str, Any]] = []
    for name in names:
        file_name = name if name.endswith(const.DEFINITION_FILE_SUFFIX) else name + const.DEFINITION_FILE_SUFFIX
        path = find_file(file_name, group_dir, defs_dir)
        if not path:
            raise FixtureError(f"def not found: {file_name}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise FixtureError(f"Cannot read definition file '{path}': {e}") from e
        if not isinstance(data, dict):
            raise FixtureError(f"Definition file '{path}' must contain a JSON object")
        defs.append(data)
    return defs


def resolve_plugins(
        plugins: Mapping[str, Any],
        group_dir: str,
        plugin_dir: Optional[str],
) -> Tuple[Dict[str, Any], Dict[str, ModuleType]]:
    """
    Load every enabled plugin module.

    Args:
        plugins: Plugin name to options; falsy values disable the plugin.
        group_dir: Directory searched first.
        plugin_dir: Shared directory searched second.

    Returns:
        Tuple[Dict[str, Any], Dict[str, ModuleType]]: Options and loaded
            modules, both keyed by the plugin's base name.
    """
    options: Dict[str, Any] = {}
    modules: Dict[str, ModuleType] = {}
    for name, value in plugins.items():
        if not value:
            continue
        path = find_file(name + const.PLUGIN_FILE_SUFFIX, group_dir, plugin_dir)
        if not path:
            raise FixtureError(f"Failed to find plugin {name}.")
        key = os.path.basename(name)
        modules[key] = _import_from_path(f"annocheck_plugin_{key}", path)
        options[key] = value
    return options, modules


def read_source(group_dir: str, name: str) -> str:
    """
    Source provider handed to engines: reads a file relative to the group.

    Raises:
        FixtureError: The file is missing, unreadable or not UTF-8.
    """
    try:
        return read_text(group_dir, name)
    except OSError as e:
        raise FixtureError(f"file not found: {name}") from e
    except UnicodeDecodeError as e:
        raise FixtureError(f"file is not valid UTF-8: {name}") from e


def expand_eager_files(names: Sequence[str], vendor_dir: str) -> List[str]:
    """Replace the vendor placeholder in eagerly loaded file names."""
    return [name.replace(const.VENDOR_PLACEHOLDER, vendor_dir) for name in names]


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _import_from_path(module_name: str, path: str) -> ModuleType:
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise FixtureError(f"Cannot load plugin from '{path}'")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise FixtureError(f"Plugin '{path}' failed to load: {e}") from e
    logger.debug(f"Loaded plugin module '{module_name}' from {path}")
    return module
