"""Console transport for local dry runs."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from relaybot.messages.models import GroupMetadata, InboundEvent
from relaybot.transport.base import Transport


class ConsoleTransport(Transport):
    """Prints replies instead of sending them. Group metadata is static."""

    def __init__(
        self,
        *,
        self_id: str,
        groups: dict[str, GroupMetadata] | None = None,
        console: Console | None = None,
    ) -> None:
        self._self_id = self_id
        self._groups = groups or {}
        self.console = console or Console()
        self.replies: list[str] = []

    @property
    def name(self) -> str:
        return "console"

    def resolve_self_id(self) -> str:
        return self._self_id

    async def fetch_group_metadata(self, chat_id: str) -> GroupMetadata:
        try:
            return self._groups[chat_id]
        except KeyError:
            raise LookupError(f"No metadata for group {chat_id}") from None

    async def reply(self, event: InboundEvent, text: str) -> None:
        self.replies.append(text)
        self.console.print(Panel(Text(text), title=f"reply → {event.chat}", title_align="left"))
