"""Group info: name, size and admins of the current group."""

from __future__ import annotations

from relaybot.dispatch.context import DispatchContext
from relaybot.plugins.base import CommandPlugin


class GroupInfoCommand(CommandPlugin):
    @property
    def name(self) -> str:
        return "groupinfo"

    @property
    def description(self) -> str:
        return "Describe the current group"

    async def execute(self, ctx: DispatchContext) -> None:
        if ctx.group is None:
            await ctx.reply("This command only works in groups.")
            return

        group = ctx.group
        admins = "\n".join(f"- @{admin.split('@', 1)[0]}" for admin in sorted(group.admin_ids))
        await ctx.reply(
            f"*{group.name or 'Unknown group'}*\n"
            f"members: {len(group.participants)}\n"
            f"bot is admin: {'yes' if group.bot_is_admin else 'no'}\n"
            f"admins:\n{admins or '- none'}"
        )
