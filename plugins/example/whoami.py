"""Whoami: echoes what the bot knows about the sender."""

from __future__ import annotations

from relaybot.dispatch.context import DispatchContext
from relaybot.plugins.base import CommandPlugin


class WhoamiCommand(CommandPlugin):
    @property
    def name(self) -> str:
        return "whoami"

    @property
    def aliases(self) -> tuple[str, ...]:
        return ("me",)

    @property
    def description(self) -> str:
        return "Show your id and permissions"

    async def execute(self, ctx: DispatchContext) -> None:
        who = ctx.identity
        lines = [
            f"*{who.push_name}*",
            f"id: {who.sender_id}",
            f"owner: {'yes' if who.is_owner else 'no'}",
            f"creator: {'yes' if who.is_creator else 'no'}",
        ]
        if who.is_developer:
            lines.append("developer: yes")
        if ctx.group is not None:
            lines.append(f"group admin: {'yes' if ctx.group.sender_is_admin else 'no'}")
        lines.append(f"time: {ctx.clock.timestamp()}")
        await ctx.reply("\n".join(lines))
