import asyncio

import pytest

from relaybot.plugins.base import CommandEntry, CommandPlugin
from relaybot.plugins.registry import CommandRegistry


class _Named(CommandPlugin):
    def __init__(self, name: str, generation: str) -> None:
        self._name = name
        self.generation = generation
        self.unloaded = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return f"{self._name} ({self.generation})"

    async def on_unload(self) -> None:
        self.unloaded = True

    async def execute(self, ctx) -> None:
        return None


def _table(generation: str, *names: str) -> dict[str, CommandEntry]:
    return {
        name: CommandEntry(name=name, category="test", owner_only=False, handler=_Named(name, generation))
        for name in names
    }


class _SequenceLoader:
    def __init__(self, *tables) -> None:
        self._tables = list(tables)
        self.gate: asyncio.Event | None = None

    async def __call__(self):
        if self.gate is not None:
            await self.gate.wait()
        table = self._tables.pop(0)
        if isinstance(table, Exception):
            raise table
        return table


@pytest.mark.asyncio
async def test_reload_returns_count_and_enables_lookup() -> None:
    registry = CommandRegistry(_SequenceLoader(_table("v1", "ping", "Menu")))

    assert await registry.reload() == 2
    assert registry.lookup("PING") is not None
    assert "menu" in registry
    assert registry.names() == ["menu", "ping"]
    assert registry.lookup("missing") is None


@pytest.mark.asyncio
async def test_failed_reload_keeps_previous_table() -> None:
    registry = CommandRegistry(_SequenceLoader(_table("v1", "ping"), RuntimeError("disk gone")))
    await registry.reload()

    assert await registry.reload() == 0
    assert registry.lookup("ping") is not None


@pytest.mark.asyncio
async def test_reload_without_loader_is_zero() -> None:
    assert await CommandRegistry().reload() == 0


@pytest.mark.asyncio
async def test_reload_unloads_replaced_plugins() -> None:
    first = _table("v1", "ping")
    registry = CommandRegistry(_SequenceLoader(first, _table("v2", "ping")))
    await registry.reload()
    await registry.reload()

    assert first["ping"].handler.unloaded is True
    assert registry.lookup("ping").handler.generation == "v2"


@pytest.mark.asyncio
async def test_lookups_during_reload_never_mix_generations() -> None:
    loader = _SequenceLoader(_table("old", "a", "b", "c"), _table("new", "a", "b", "c"))
    registry = CommandRegistry(loader)
    await registry.reload()

    loader.gate = asyncio.Event()
    reload_task = asyncio.create_task(registry.reload())
    await asyncio.sleep(0)

    observed: list[set[str]] = []
    for step in range(5):
        if step == 2:
            loader.gate.set()
            await reload_task
        generations = {registry.lookup(name).handler.generation for name in ("a", "b", "c")}
        observed.append(generations)
        await asyncio.sleep(0)

    assert all(len(generations) == 1 for generations in observed)
    assert observed[0] == {"old"}
    assert observed[-1] == {"new"}


def test_register_replaces_entry() -> None:
    registry = CommandRegistry()
    registry.register(_table("v1", "ping")["ping"])
    registry.register(_table("v2", "ping")["ping"])

    assert len(registry) == 1
    assert registry.lookup("ping").handler.generation == "v2"
