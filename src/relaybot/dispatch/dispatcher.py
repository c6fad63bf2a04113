"""Inbound message dispatcher."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any

import structlog

from relaybot.commands.parse import ParsedCommand, parse_command
from relaybot.config import BotConfig
from relaybot.debug import DebugConsole
from relaybot.dispatch.builtin import BUILTIN_COMMAND_IDS, handle_mode_command
from relaybot.dispatch.context import BotClock, DispatchContext
from relaybot.identity import Identity, resolve_group_context, resolve_identity
from relaybot.logging import bound_event
from relaybot.messages.models import InboundEvent
from relaybot.messages.normalizer import NormalizedMessage, normalize
from relaybot.mode import ModeGate
from relaybot.plugins.base import CommandEntry
from relaybot.plugins.registry import CommandRegistry
from relaybot.transport.base import Transport

logger = structlog.get_logger()


class DispatchOutcome(str, Enum):
    """Terminal state reached for one event."""

    GATED = "gated"
    HANDLED = "handled"
    HANDLER_FAILED = "handler_failed"
    DENIED = "denied"
    MODE_CHANGED = "mode_changed"
    MODE_UNCHANGED = "mode_unchanged"
    DEBUG = "debug"
    UNKNOWN_COMMAND = "unknown_command"
    IGNORED = "ignored"


class Dispatcher:
    """Turns one inbound event into at most one action.

    Order: mode gate, registered command, ``self``/``public`` built-ins,
    privileged debug sigils. Unknown commands and unauthorized attempts are
    dropped without a reply.
    """

    def __init__(
        self,
        *,
        config: BotConfig,
        registry: CommandRegistry,
        gate: ModeGate,
        transport: Transport,
        debug: DebugConsole | None = None,
    ) -> None:
        self.config = config
        self.registry = registry
        self.gate = gate
        self.transport = transport
        self.debug = debug
        self.clock = BotClock(
            timezone=config.timezone,
            time_format=config.time_format,
            date_format=config.date_format,
            datetime_format=config.datetime_format,
        )

    async def dispatch(self, event: InboundEvent) -> DispatchOutcome:
        """Handle one event end-to-end. Never raises."""
        try:
            return await self._dispatch(event)
        except Exception:
            logger.exception("dispatch.unhandled_error", chat=event.chat, message_id=event.key.id)
            return DispatchOutcome.IGNORED

    async def _dispatch(self, event: InboundEvent) -> DispatchOutcome:
        normalized = normalize(event)
        parsed = parse_command(normalized.body, self.config.prefix)

        identity = resolve_identity(
            event,
            bot_id=self.transport.resolve_self_id(),
            owners=self.config.owners,
            jid_domain=self.config.jid_domain,
        )
        if not self.gate.should_respond(identity, event):
            return DispatchOutcome.GATED

        with bound_event(chat=event.chat, message_id=event.key.id, sender=identity.sender_id):
            ctx = await self._build_context(event, normalized, parsed, identity)

            if parsed.is_command:
                entry = self.registry.lookup(parsed.command)
                if entry is not None:
                    return await self._run_handler(entry, ctx)

                if parsed.command in BUILTIN_COMMAND_IDS:
                    changed = await handle_mode_command(ctx, self.gate)
                    if changed is None:
                        return DispatchOutcome.IGNORED
                    return DispatchOutcome.MODE_CHANGED if changed else DispatchOutcome.MODE_UNCHANGED

            outcome = await self._run_debug(ctx)
            if outcome is not None:
                return outcome

            if parsed.is_command:
                logger.info(
                    "dispatch.unknown_command",
                    command=parsed.command,
                    push_name=identity.push_name,
                )
                return DispatchOutcome.UNKNOWN_COMMAND
            return DispatchOutcome.IGNORED

    async def _build_context(
        self,
        event: InboundEvent,
        normalized: NormalizedMessage,
        parsed: ParsedCommand,
        identity: Identity,
    ) -> DispatchContext:
        group = await resolve_group_context(event, identity, self.transport)
        return DispatchContext(
            event=event,
            transport=self.transport,
            body=normalized.body,
            text=normalized.text,
            quoted=normalized.quoted,
            quoted_content=normalized.quoted_content,
            mime=normalized.mime,
            is_media=normalized.is_media,
            prefix=parsed.prefix,
            is_command=parsed.is_command,
            command=parsed.command,
            args=parsed.args,
            args_text=parsed.text,
            identity=identity,
            group=group,
            bot_name=self.config.bot_name,
            owner_name=self.config.owner_name,
            is_public=self.gate.is_public,
            clock=self.clock,
        )

    async def _run_handler(self, entry: CommandEntry, ctx: DispatchContext) -> DispatchOutcome:
        if entry.owner_only and not ctx.is_creator:
            logger.info("dispatch.owner_only_denied", command=entry.name)
            return DispatchOutcome.DENIED

        timeout = self.config.handler_timeout_s or None
        deadline = asyncio.timeout(timeout)
        try:
            async with deadline:
                await entry.handler.execute(ctx)
        except Exception as e:
            if isinstance(e, TimeoutError) and deadline.expired():
                logger.warning("dispatch.command.timeout", command=entry.name, timeout_s=timeout)
                await ctx.reply(f"Error executing command: timed out after {timeout}s")
                return DispatchOutcome.HANDLER_FAILED
            logger.exception("dispatch.command.failed", command=entry.name, error=str(e))
            await ctx.reply(f"Error executing command: {e}")
            return DispatchOutcome.HANDLER_FAILED

        logger.info(
            "dispatch.command.executed",
            command=entry.name,
            category=entry.category,
            prefix=ctx.prefix,
            mode=self.gate.mode.value,
            group=ctx.group.name if ctx.group else None,
        )
        return DispatchOutcome.HANDLED

    async def _run_debug(self, ctx: DispatchContext) -> DispatchOutcome | None:
        if self.debug is None or not self.debug.enabled:
            return None
        matched = self.debug.match(ctx.text)
        if matched is None:
            return None
        if not ctx.is_creator:
            return DispatchOutcome.IGNORED

        operation, payload = matched
        logger.warning("dispatch.debug", operation=operation)
        result = await self.debug.run(operation, payload, self._debug_namespace(ctx))
        if result:
            await ctx.reply(result)
        return DispatchOutcome.DEBUG

    def _debug_namespace(self, ctx: DispatchContext) -> dict[str, Any]:
        return {
            "ctx": ctx,
            "event": ctx.event,
            "registry": self.registry,
            "gate": self.gate,
            "config": self.config,
            "dispatcher": self,
        }
