"""Ping: measures how long one reply round-trip takes."""

from __future__ import annotations

import time

from relaybot.dispatch.context import DispatchContext
from relaybot.plugins.base import CommandPlugin


class PingCommand(CommandPlugin):
    @property
    def name(self) -> str:
        return "ping"

    @property
    def description(self) -> str:
        return "Test bot response time"

    @property
    def usage(self) -> str:
        return ".ping"

    async def execute(self, ctx: DispatchContext) -> None:
        start = time.perf_counter()
        await ctx.reply("Pinging...")
        elapsed_ms = round((time.perf_counter() - start) * 1000)
        await ctx.reply(f"🏓 Pong!\nResponse time: {elapsed_ms}ms")
