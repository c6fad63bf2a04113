"""Plugin base class, the contract for relaybot commands."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from relaybot.dispatch.context import DispatchContext


class CommandPlugin(ABC):
    """Base class for all relaybot command plugins.

    To create a plugin:
    1. Create a category directory in the plugins dir, e.g. plugins/tools/
    2. Add a module with a class that inherits CommandPlugin
    3. Set ``name`` (and optionally ``aliases``, ``owner_only``)
    4. Implement execute() to answer the command
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Command name, matched case-insensitively after the prefix."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """What this command does."""
        ...

    @property
    def aliases(self) -> tuple[str, ...]:
        return ()

    @property
    def category(self) -> str | None:
        """Category label. None means the name of the containing directory."""
        return None

    @property
    def usage(self) -> str:
        return ""

    @property
    def owner_only(self) -> bool:
        """Restrict the command to creators (the bot itself and owners)."""
        return False

    async def on_load(self) -> None:
        """Called once after the plugin is instantiated by the loader."""
        pass

    async def on_unload(self) -> None:
        """Called when a reload replaces this plugin. Clean up resources."""
        pass

    @abstractmethod
    async def execute(self, ctx: DispatchContext) -> None:
        """Run the command. Exceptions are reported to the sender."""
        ...

    def __repr__(self) -> str:
        return f"<Command: {self.name}>"


@dataclass(frozen=True)
class CommandEntry:
    """One registry row: a command name bound to the plugin that serves it."""

    name: str
    category: str
    owner_only: bool
    handler: CommandPlugin
    description: str = ""
    usage: str = ""
    source: str = ""
