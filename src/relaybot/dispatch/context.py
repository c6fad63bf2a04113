"""Per-event context handed to command handlers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from relaybot.identity import GroupContext, Identity
from relaybot.messages.models import InboundEvent
from relaybot.transport.base import Transport


@dataclass(frozen=True)
class BotClock:
    """Wall-clock helpers in the bot's configured timezone."""

    timezone: str = "UTC"
    time_format: str = "%H:%M:%S"
    date_format: str = "%d/%m/%Y"
    datetime_format: str = "%d/%m/%Y %H:%M:%S"

    def current(self) -> datetime:
        return datetime.now(ZoneInfo(self.timezone))

    def now(self) -> str:
        return self.current().strftime(self.time_format)

    def date(self) -> str:
        return self.current().strftime(self.date_format)

    def timestamp(self) -> str:
        return self.current().strftime(self.datetime_format)


@dataclass(frozen=True)
class DispatchContext:
    """Everything a handler may read about the event it is answering.

    Built once per event before any handler runs; frozen afterwards.
    """

    event: InboundEvent
    transport: Transport

    # Normalized message
    body: str
    text: str
    quoted: InboundEvent | Mapping[str, Any]
    quoted_content: Mapping[str, Any]
    mime: str
    is_media: bool

    # Parsed command
    prefix: str
    is_command: bool
    command: str
    args: tuple[str, ...]
    args_text: str

    # Who
    identity: Identity
    group: GroupContext | None

    # Bot
    bot_name: str
    owner_name: str
    is_public: bool
    clock: BotClock

    @property
    def is_group(self) -> bool:
        return self.event.is_group

    @property
    def sender(self) -> str:
        return self.identity.sender_id

    @property
    def is_creator(self) -> bool:
        return self.identity.is_creator

    async def reply(self, text: str) -> None:
        """Answer the event in its chat."""
        await self.transport.reply(self.event, text)
