from __future__ import annotations

import json

import httpx
import pytest

from relaybot.config import BridgeConfig
from relaybot.messages.models import InboundEvent, MessageKey, MessageKind
from relaybot.transport.bridge import BridgeTransport

BASE = "http://bridge.test"


def _event() -> InboundEvent:
    return InboundEvent(
        kind=MessageKind.CONVERSATION,
        key=MessageKey(remote_jid="1203@g.us", participant="62811@s.whatsapp.net", id="ABC"),
        message={"conversation": ".ping"},
        is_group=True,
    )


def _transport(handler, **config) -> tuple[BridgeTransport, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.AsyncClient(base_url=BASE, transport=httpx.MockTransport(record))
    return BridgeTransport(BridgeConfig(base_url=BASE, **config), client=client), seen


@pytest.mark.asyncio
async def test_start_loads_self_id_from_bridge() -> None:
    transport, seen = _transport(lambda request: httpx.Response(200, json={"id": " 62800:1@s.whatsapp.net "}))

    await transport.start()

    assert transport.resolve_self_id() == "62800:1@s.whatsapp.net"
    assert seen[0].url.path == "/me"


@pytest.mark.asyncio
async def test_configured_self_id_skips_lookup() -> None:
    transport, seen = _transport(lambda request: httpx.Response(500), self_id="62800@s.whatsapp.net")

    await transport.start()

    assert transport.resolve_self_id() == "62800@s.whatsapp.net"
    assert seen == []


@pytest.mark.asyncio
async def test_self_id_lookup_failure_leaves_it_empty() -> None:
    transport, _ = _transport(lambda request: httpx.Response(503, text="not paired"))

    await transport.start()

    assert transport.resolve_self_id() == ""


@pytest.mark.asyncio
async def test_fetch_group_metadata_parses_participants() -> None:
    payload = {
        "id": "1203@g.us",
        "subject": "Team",
        "owner": "62811@s.whatsapp.net",
        "participants": [
            {"id": "62811@s.whatsapp.net", "admin": "superadmin"},
            {"id": "62822@s.whatsapp.net", "admin": None},
        ],
    }
    transport, seen = _transport(lambda request: httpx.Response(200, json=payload), self_id="x")
    await transport.start()

    metadata = await transport.fetch_group_metadata("1203@g.us")

    assert seen[0].url.path == "/groups/1203@g.us"
    assert metadata.subject == "Team"
    assert metadata.owner == "62811@s.whatsapp.net"
    assert [p.admin for p in metadata.participants] == ["superadmin", None]


@pytest.mark.asyncio
async def test_fetch_group_metadata_raises_on_http_error() -> None:
    transport, _ = _transport(lambda request: httpx.Response(404), self_id="x")
    await transport.start()

    with pytest.raises(httpx.HTTPStatusError):
        await transport.fetch_group_metadata("1203@g.us")


@pytest.mark.asyncio
async def test_reply_posts_quoted_message() -> None:
    transport, seen = _transport(lambda request: httpx.Response(200, json={"ok": True}), self_id="x")
    await transport.start()

    await transport.reply(_event(), "pong")

    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/messages"
    assert json.loads(request.content) == {"chat_id": "1203@g.us", "text": "pong", "quoted_id": "ABC"}


@pytest.mark.asyncio
async def test_reply_failure_is_logged_not_raised() -> None:
    def fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("bridge down", request=request)

    transport, _ = _transport(fail, self_id="x")
    await transport.start()

    await transport.reply(_event(), "pong")
    await transport.stop()


@pytest.mark.asyncio
async def test_calls_before_start_raise() -> None:
    transport = BridgeTransport(BridgeConfig(base_url=BASE))

    with pytest.raises(RuntimeError):
        await transport.fetch_group_metadata("1203@g.us")
