"""Built-in mode commands."""

from __future__ import annotations

from relaybot.dispatch.context import DispatchContext
from relaybot.mode import BotMode, ModeGate

BUILTIN_COMMAND_IDS = frozenset({BotMode.SELF.value, BotMode.PUBLIC.value})

MODE_SWITCHED_TEXT = {
    BotMode.SELF: "Bot switched to *SELF MODE*. Only the owner can use commands.",
    BotMode.PUBLIC: "Bot switched to *PUBLIC MODE*. Everyone can use commands.",
}


def already_in_mode_text(mode: BotMode) -> str:
    return f"Bot is already in {mode.value} mode!"


async def handle_mode_command(ctx: DispatchContext, gate: ModeGate) -> bool | None:
    """Apply ``self`` / ``public`` for a creator.

    Returns True when the mode changed, False when it was already set, and
    None when the sender is not allowed (nothing is sent in that case).
    """
    if not ctx.is_creator:
        return None

    mode = BotMode(ctx.command)
    if not gate.switch(mode):
        await ctx.reply(already_in_mode_text(mode))
        return False

    await ctx.reply(MODE_SWITCHED_TEXT[mode])
    return True
