"""Extract a canonical body, quoted payload and media info from an inbound event."""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from relaybot.messages.models import InboundEvent, MessageKind

_MEDIA_RE = re.compile(r"image|video|sticker|audio")


@dataclass(frozen=True)
class NormalizedMessage:
    body: str
    text: str
    quoted: InboundEvent | Mapping[str, Any]
    quoted_content: Mapping[str, Any]
    mime: str
    is_media: bool


def _string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _field(container: Any, *path: str) -> str:
    """Walk nested mappings; any missing or non-mapping step yields ""."""
    current = container
    for name in path:
        if not isinstance(current, Mapping):
            return ""
        current = current.get(name)
    return _string(current)


def _conversation(event: InboundEvent) -> str:
    return _string(event.content)


def _extended_text(event: InboundEvent) -> str:
    return _field(event.content, "text")


def _caption(event: InboundEvent) -> str:
    return _field(event.content, "caption")


def _button_reply(event: InboundEvent) -> str:
    return _field(event.message, MessageKind.BUTTONS_RESPONSE.value, "selectedButtonId")


def _list_reply(event: InboundEvent) -> str:
    return _field(
        event.message,
        MessageKind.LIST_RESPONSE.value,
        "singleSelectReply",
        "selectedRowId",
    )


def _template_reply(event: InboundEvent) -> str:
    return _field(event.content, "selectedId")


def _interactive_reply(event: InboundEvent) -> str:
    params = _field(event.content, "nativeFlowResponseMessage", "paramsJson")
    if not params:
        return ""
    try:
        decoded = json.loads(params)
    except (ValueError, RecursionError):
        return ""
    return _field(decoded, "id")


def _context_info(event: InboundEvent) -> str:
    return _button_reply(event) or _list_reply(event) or _string(event.text)


def _empty(event: InboundEvent) -> str:
    return ""


BODY_EXTRACTORS: dict[MessageKind, Callable[[InboundEvent], str]] = {
    MessageKind.CONVERSATION: _conversation,
    MessageKind.EXTENDED_TEXT: _extended_text,
    MessageKind.IMAGE: _caption,
    MessageKind.VIDEO: _caption,
    MessageKind.AUDIO: _caption,
    MessageKind.STICKER: _caption,
    MessageKind.BUTTONS_RESPONSE: _button_reply,
    MessageKind.LIST_RESPONSE: _list_reply,
    MessageKind.TEMPLATE_BUTTON_REPLY: _template_reply,
    MessageKind.INTERACTIVE_RESPONSE: _interactive_reply,
    MessageKind.MESSAGE_CONTEXT_INFO: _context_info,
    MessageKind.BUTTONS: _empty,
    MessageKind.TEMPLATE: _empty,
    MessageKind.PRODUCT: _empty,
    MessageKind.UNKNOWN: _empty,
}

_missing = set(MessageKind) - set(BODY_EXTRACTORS)
if _missing:
    raise RuntimeError(f"No body extractor for message kinds: {sorted(k.value for k in _missing)}")


def extract_body(event: InboundEvent) -> str:
    """Text-bearing field for the event's kind, "" when there is none."""
    return BODY_EXTRACTORS[event.kind](event)


def _positional(container: Any, index: int) -> Mapping[str, Any]:
    """Value of the index-th declared field of a mapping, {} when absent."""
    if not isinstance(container, Mapping):
        return {}
    values = list(container.values())
    if index >= len(values) or not isinstance(values[index], Mapping):
        return {}
    return values[index]


def resolve_quoted(event: InboundEvent) -> InboundEvent | Mapping[str, Any]:
    """Unwrap reply containers to their embedded payload.

    Buttons containers carry the payload in their second field, template
    containers in the second field of ``hydratedTemplate`` and product
    containers in their first field.
    """
    target = event.quoted or event
    if target.kind is MessageKind.BUTTONS:
        return _positional(target.content, 1)
    if target.kind is MessageKind.TEMPLATE:
        hydrated = target.content.get("hydratedTemplate") if isinstance(target.content, Mapping) else None
        return _positional(hydrated, 1)
    if target.kind is MessageKind.PRODUCT:
        return _positional(target.content, 0)
    return target


def _quoted_content(quoted: InboundEvent | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(quoted, InboundEvent):
        content = quoted.content
        return content if isinstance(content, Mapping) else {}
    return quoted


def normalize(event: InboundEvent) -> NormalizedMessage:
    """Normalize one event. Total over every kind, never raises."""
    body = extract_body(event)
    quoted = resolve_quoted(event)
    quoted_content = _quoted_content(quoted)
    mime = _string(quoted_content.get("mimetype"))
    return NormalizedMessage(
        body=body,
        text=event.text if isinstance(event.text, str) else body,
        quoted=quoted,
        quoted_content=quoted_content,
        mime=mime,
        is_media=bool(_MEDIA_RE.search(mime)),
    )
