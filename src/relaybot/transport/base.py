"""Core transport abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod

from relaybot.messages.models import GroupMetadata, InboundEvent


class Transport(ABC):
    """Interface implemented by every messaging transport.

    The dispatcher only needs three primitives: who the bot is, what a group
    looks like right now, and a way to answer an event.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def resolve_self_id(self) -> str:
        """The bot's own id, possibly carrying a device suffix."""
        ...

    @abstractmethod
    async def fetch_group_metadata(self, chat_id: str) -> GroupMetadata:
        """Current metadata for a group chat. May raise when unavailable."""
        ...

    @abstractmethod
    async def reply(self, event: InboundEvent, text: str) -> None:
        """Answer ``event`` in its chat. Send failures are logged, not raised."""
        ...
