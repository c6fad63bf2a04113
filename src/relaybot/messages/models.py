"""Inbound message and group metadata models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

GROUP_SUFFIX = "@g.us"


class MessageKind(str, Enum):
    """Closed set of message envelope kinds, valued by their transport type tag."""

    CONVERSATION = "conversation"
    EXTENDED_TEXT = "extendedTextMessage"
    IMAGE = "imageMessage"
    VIDEO = "videoMessage"
    AUDIO = "audioMessage"
    STICKER = "stickerMessage"
    BUTTONS_RESPONSE = "buttonsResponseMessage"
    LIST_RESPONSE = "listResponseMessage"
    TEMPLATE_BUTTON_REPLY = "templateButtonReplyMessage"
    INTERACTIVE_RESPONSE = "interactiveResponseMessage"
    MESSAGE_CONTEXT_INFO = "messageContextInfo"
    # Reply containers, only meaningful as quoted messages
    BUTTONS = "buttonsMessage"
    TEMPLATE = "templateMessage"
    PRODUCT = "product"
    UNKNOWN = "unknown"

    @classmethod
    def from_type(cls, mtype: str | None) -> MessageKind:
        """Map a transport type tag to a kind; anything unrecognized is UNKNOWN."""
        try:
            return cls(mtype)
        except ValueError:
            return cls.UNKNOWN


def detect_kind(message: Mapping[str, Any]) -> MessageKind:
    """Pick the kind of a raw message mapping from its first recognized key."""
    context_only = False
    for key in message:
        kind = MessageKind.from_type(key)
        if kind is MessageKind.MESSAGE_CONTEXT_INFO:
            context_only = True
            continue
        if kind is not MessageKind.UNKNOWN:
            return kind
    return MessageKind.MESSAGE_CONTEXT_INFO if context_only else MessageKind.UNKNOWN


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class MessageKey:
    """Addressing part of a message: where it came from and who sent it."""

    remote_jid: str
    from_me: bool = False
    participant: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class InboundEvent:
    """A decoded message as delivered by the transport. Never mutated."""

    kind: MessageKind
    key: MessageKey
    message: Mapping[str, Any] = field(default_factory=dict)
    text: str | None = None
    push_name: str | None = None
    is_group: bool = False
    quoted: InboundEvent | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def chat(self) -> str:
        return self.key.remote_jid

    @property
    def content(self) -> Any:
        """Payload stored under this event's own type tag."""
        return self.message.get(self.kind.value)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> InboundEvent:
        """Build an event from a transport JSON envelope.

        Expected shape::

            {"key": {"remoteJid": ..., "fromMe": ..., "participant": ..., "id": ...},
             "message": {"<type tag>": {...}},
             "text": ..., "pushName": ..., "isGroup": ..., "quoted": {...}}
        """
        raw_key = payload.get("key")
        if not isinstance(raw_key, Mapping):
            raw_key = {}
        key = MessageKey(
            remote_jid=str(raw_key.get("remoteJid") or ""),
            from_me=bool(raw_key.get("fromMe", False)),
            participant=_optional_str(raw_key.get("participant")),
            id=_optional_str(raw_key.get("id")),
        )

        message = payload.get("message") or {}
        if not isinstance(message, Mapping):
            message = {}

        mtype = payload.get("mtype")
        kind = MessageKind.from_type(mtype) if mtype else detect_kind(message)

        quoted_payload = payload.get("quoted")
        quoted = cls.from_payload(quoted_payload) if isinstance(quoted_payload, Mapping) else None

        is_group = payload.get("isGroup")
        if is_group is None:
            is_group = key.remote_jid.endswith(GROUP_SUFFIX)

        metadata = payload.get("metadata")
        if not isinstance(metadata, Mapping):
            metadata = {}

        text = payload.get("text")
        return cls(
            kind=kind,
            key=key,
            message=dict(message),
            text=text if isinstance(text, str) else None,
            push_name=_optional_str(payload.get("pushName")),
            is_group=bool(is_group),
            quoted=quoted,
            metadata=dict(metadata),
        )


@dataclass(frozen=True)
class Participant:
    id: str
    admin: str | None = None


@dataclass(frozen=True)
class GroupMetadata:
    """Group snapshot as reported by the transport."""

    id: str
    subject: str = ""
    participants: tuple[Participant, ...] = ()
    owner: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> GroupMetadata:
        participants = tuple(
            Participant(id=str(item.get("id") or ""), admin=item.get("admin") or None)
            for item in payload.get("participants") or []
            if isinstance(item, Mapping)
        )
        return cls(
            id=str(payload.get("id") or ""),
            subject=str(payload.get("subject") or ""),
            participants=participants,
            owner=payload.get("owner") or None,
        )
