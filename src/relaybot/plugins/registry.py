"""Command registry, the live mapping from command name to plugin entry."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from types import MappingProxyType

import structlog

from relaybot.plugins.base import CommandEntry

logger = structlog.get_logger()

PluginLoader = Callable[[], Awaitable[Mapping[str, CommandEntry]]]


class CommandRegistry:
    """Read-mostly registry rebuilt wholesale by ``reload``.

    The current table is a single read-only mapping. A reload builds a new
    one completely and then swaps the reference, so a lookup sees either the
    old table or the new one.
    """

    def __init__(self, loader: PluginLoader | None = None) -> None:
        self._loader = loader
        self._commands: Mapping[str, CommandEntry] = MappingProxyType({})

    def lookup(self, name: str) -> CommandEntry | None:
        """Get an entry by command name."""
        return self._commands.get(name.lower())

    def names(self) -> list[str]:
        return sorted(self._commands)

    def entries(self) -> list[CommandEntry]:
        commands = self._commands
        return [commands[name] for name in sorted(commands)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._commands

    def __len__(self) -> int:
        return len(self._commands)

    def register(self, entry: CommandEntry) -> None:
        """Add or replace one entry (copy-and-swap, like reload)."""
        name = entry.name.lower()
        if name in self._commands:
            logger.warning("command.duplicate", name=name, action="replacing")
        updated = dict(self._commands)
        updated[name] = entry
        self._commands = MappingProxyType(updated)

    def replace(self, commands: Mapping[str, CommandEntry]) -> int:
        """Swap in a complete table and return its size."""
        table = {name.lower(): entry for name, entry in commands.items()}
        self._commands = MappingProxyType(table)
        return len(table)

    async def reload(self) -> int:
        """Rebuild the table from the plugin loader.

        Returns the number of commands now registered, or 0 when loading
        failed; a failed reload keeps the previous table.
        """
        if self._loader is None:
            logger.warning("registry.reload_skipped", reason="no loader configured")
            return 0

        try:
            loaded = await self._loader()
        except Exception as e:
            logger.error("registry.reload_failed", error=str(e))
            return 0

        previous = self._commands
        count = self.replace(loaded)
        logger.info("registry.reloaded", count=count, previous=len(previous))
        await self._unload_replaced(previous)
        return count

    async def _unload_replaced(self, previous: Mapping[str, CommandEntry]) -> None:
        current = {id(entry.handler) for entry in self._commands.values()}
        seen: set[int] = set()
        for entry in previous.values():
            key = id(entry.handler)
            if key in current or key in seen:
                continue
            seen.add(key)
            try:
                await entry.handler.on_unload()
            except Exception as e:
                logger.warning("registry.unload_failed", name=entry.name, error=str(e))
