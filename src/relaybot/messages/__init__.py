"""Inbound message models and normalization."""

from relaybot.messages.models import (
    GroupMetadata,
    InboundEvent,
    MessageKey,
    MessageKind,
    Participant,
)
from relaybot.messages.normalizer import NormalizedMessage, normalize

__all__ = [
    "GroupMetadata",
    "InboundEvent",
    "MessageKey",
    "MessageKind",
    "NormalizedMessage",
    "Participant",
    "normalize",
]
