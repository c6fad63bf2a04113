"""Plugin loader, discovers command plugins from the plugins directory."""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

import structlog
import yaml

from relaybot.plugins.base import CommandEntry, CommandPlugin

logger = structlog.get_logger()


async def load_plugins(plugins_dir: str) -> dict[str, CommandEntry]:
    """Discover and load all command plugins.

    Layout::

        <plugins_dir>/<category>/plugin.yaml       (optional)
        <plugins_dir>/<category>/<module>.py
        <plugins_dir>/<category>/<package>/__init__.py

    Directories and files are visited in sorted order; when two plugins claim
    the same name the later one wins. A module that fails to import is
    skipped. Returns a mapping of lowercase command name to entry.
    """
    plugins_path = Path(plugins_dir)
    commands: dict[str, CommandEntry] = {}

    if not plugins_path.is_dir():
        logger.info("plugins.dir_not_found", path=plugins_dir)
        return commands

    for category_dir in sorted(plugins_path.iterdir()):
        if not category_dir.is_dir() or category_dir.name.startswith((".", "_")):
            continue

        meta = _load_category_meta(category_dir)
        if meta.get("disabled"):
            logger.info("plugins.category_disabled", category=category_dir.name)
            continue

        for module_file in _module_files(category_dir):
            try:
                plugins = await _load_module_plugins(category_dir.name, module_file)
            except Exception as e:
                logger.error(
                    "plugins.load_failed",
                    category=category_dir.name,
                    file=module_file.name,
                    error=str(e),
                )
                continue

            for plugin in plugins:
                for entry in _entries_for(plugin, category_dir.name, module_file, meta):
                    if entry.name in commands:
                        logger.warning(
                            "plugins.duplicate",
                            name=entry.name,
                            previous=commands[entry.name].source,
                            replacement=entry.source,
                        )
                    commands[entry.name] = entry

    logger.info("plugins.loaded", count=len(commands))
    return commands


def _load_category_meta(category_dir: Path) -> dict[str, Any]:
    meta_path = category_dir / "plugin.yaml"
    if not meta_path.exists():
        return {}
    try:
        with open(meta_path) as f:
            meta = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("plugins.bad_meta", category=category_dir.name, error=str(e))
        return {}
    return meta if isinstance(meta, dict) else {}


def _module_files(category_dir: Path) -> list[Path]:
    files: list[Path] = []
    for child in sorted(category_dir.iterdir()):
        if child.name.startswith((".", "_")):
            continue
        if child.is_file() and child.suffix == ".py":
            files.append(child)
        elif child.is_dir() and (child / "__init__.py").exists():
            files.append(child / "__init__.py")
    return files


def _stem(module_file: Path) -> str:
    return module_file.parent.name if module_file.name == "__init__.py" else module_file.stem


def _source(category: str, module_file: Path) -> str:
    return f"{category}/{_stem(module_file)}"


def _import_module(category: str, module_file: Path) -> ModuleType:
    stem = _stem(module_file)
    module_name = f"relaybot_plugin_{category}_{stem}"
    spec = importlib.util.spec_from_file_location(module_name, module_file)
    if not spec or not spec.loader:
        raise ImportError(f"cannot import {module_file}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        raise
    return module


async def _load_module_plugins(category: str, module_file: Path) -> list[CommandPlugin]:
    """Instantiate every CommandPlugin subclass defined in one module."""
    module = _import_module(category, module_file)

    plugins: list[CommandPlugin] = []
    for attr in vars(module).values():
        if (
            isinstance(attr, type)
            and issubclass(attr, CommandPlugin)
            and attr.__module__ == module.__name__
            and not getattr(attr, "__abstractmethods__", None)
        ):
            plugin = attr()
            await plugin.on_load()
            plugins.append(plugin)

    if not plugins:
        logger.warning("plugins.no_class", category=category, file=module_file.name)
    return plugins


def _entries_for(
    plugin: CommandPlugin,
    category: str,
    module_file: Path,
    meta: dict[str, Any],
) -> list[CommandEntry]:
    owner_only_names = {str(n).lower() for n in meta.get("owner_only") or []}
    names = [plugin.name, *plugin.aliases]
    entries = []
    for raw in names:
        name = raw.strip().lower()
        if not name:
            continue
        entries.append(
            CommandEntry(
                name=name,
                category=plugin.category or category,
                owner_only=plugin.owner_only or plugin.name.lower() in owner_only_names,
                handler=plugin,
                description=plugin.description,
                usage=plugin.usage,
                source=_source(category, module_file),
            )
        )
    return entries
