"""Event ingress: the bridge posts decoded messages here."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field

from relaybot.api.middleware.auth import verify_api_key
from relaybot.messages.models import InboundEvent

router = APIRouter()


class MessageKeyPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    remote_jid: str = Field(alias="remoteJid")
    from_me: bool = Field(default=False, alias="fromMe")
    participant: str | None = None
    id: str | None = None


class InboundEventRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: MessageKeyPayload
    message: dict[str, Any] = Field(default_factory=dict)
    mtype: str | None = None
    text: str | None = None
    push_name: str | None = Field(default=None, alias="pushName")
    is_group: bool | None = Field(default=None, alias="isGroup")
    quoted: dict[str, Any] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


@router.post("/v1/events")
async def receive_event(
    request: Request,
    body: InboundEventRequest,
    _api_key: str | None = Depends(verify_api_key),
) -> dict:
    event = InboundEvent.from_payload(body.model_dump(by_alias=True, exclude_none=True))
    outcome = await request.app.state.dispatcher.dispatch(event)
    return {"status": "ok", "kind": event.kind.value, "outcome": outcome.value}
