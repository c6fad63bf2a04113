"""Status: owner-only runtime summary."""

from __future__ import annotations

import platform
import time

from relaybot.dispatch.context import DispatchContext
from relaybot.plugins.base import CommandPlugin


class StatusCommand(CommandPlugin):
    def __init__(self) -> None:
        self._loaded_at = time.monotonic()

    @property
    def name(self) -> str:
        return "status"

    @property
    def description(self) -> str:
        return "Runtime summary for the owner"

    @property
    def owner_only(self) -> bool:
        return True

    async def execute(self, ctx: DispatchContext) -> None:
        uptime_s = int(time.monotonic() - self._loaded_at)
        await ctx.reply(
            f"*{ctx.bot_name}* ({'public' if ctx.is_public else 'self'} mode)\n"
            f"owner: {ctx.owner_name}\n"
            f"python: {platform.python_version()}\n"
            f"plugin uptime: {uptime_s}s"
        )
