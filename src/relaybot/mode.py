"""Public/self response mode."""

from __future__ import annotations

from enum import Enum

import structlog

from relaybot.identity import Identity
from relaybot.messages.models import InboundEvent

logger = structlog.get_logger()


class BotMode(str, Enum):
    PUBLIC = "public"
    SELF = "self"


class ModeGate:
    """Decides whether the bot serves a sender at all.

    In SELF mode only creators and the bot's own messages get through. One
    instance lives for the whole process and is handed to the dispatcher;
    ``switch`` is the only way to change it.
    """

    def __init__(self, initial: BotMode = BotMode.PUBLIC) -> None:
        self._mode = initial

    @property
    def mode(self) -> BotMode:
        return self._mode

    @property
    def is_public(self) -> bool:
        return self._mode is BotMode.PUBLIC

    def should_respond(self, identity: Identity, event: InboundEvent) -> bool:
        return self.is_public or identity.is_creator or event.key.from_me

    def switch(self, mode: BotMode) -> bool:
        """Set the mode. Returns False (and changes nothing) if already set."""
        if self._mode is mode:
            return False
        self._mode = mode
        logger.info("mode.switched", mode=mode.value)
        return True
