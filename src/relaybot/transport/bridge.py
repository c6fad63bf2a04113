"""HTTP bridge transport.

The messaging session itself lives in a separate bridge process. This
transport talks to it over a small JSON API:

- ``GET  /me``               -> ``{"id": "<bot jid>"}``
- ``GET  /groups/{chat_id}`` -> group metadata
- ``POST /messages``         <- ``{"chat_id", "text", "quoted_id"}``
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from relaybot.config import BridgeConfig
from relaybot.messages.models import GroupMetadata, InboundEvent
from relaybot.transport.base import Transport

logger = structlog.get_logger()


class BridgeTransport(Transport):
    def __init__(self, config: BridgeConfig, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._client = client
        self._owns_client = client is None
        self._self_id = config.self_id or ""

    @property
    def name(self) -> str:
        return "bridge"

    async def start(self) -> None:
        if self._client is None:
            headers = {"X-API-Key": self.config.api_key} if self.config.api_key else {}
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.config.timeout_s),
            )
        if not self._self_id:
            await self._load_self_id()

    async def stop(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def resolve_self_id(self) -> str:
        return self._self_id

    async def fetch_group_metadata(self, chat_id: str) -> GroupMetadata:
        resp = await self._http().get(f"/groups/{chat_id}")
        resp.raise_for_status()
        payload = resp.json()
        if not isinstance(payload, dict):
            raise ValueError(f"Unexpected group metadata payload for {chat_id}")
        return GroupMetadata.from_payload(payload)

    async def reply(self, event: InboundEvent, text: str) -> None:
        payload: dict[str, Any] = {
            "chat_id": event.chat,
            "text": text,
            "quoted_id": event.key.id,
        }
        try:
            resp = await self._http().post("/messages", json=payload)
        except httpx.HTTPError as e:
            logger.warning("transport.bridge.send_error", chat=event.chat, error=str(e))
            return
        if resp.status_code >= 400:
            logger.warning(
                "transport.bridge.send_failed",
                chat=event.chat,
                status_code=resp.status_code,
                body=resp.text[:300],
            )

    async def _load_self_id(self) -> None:
        try:
            resp = await self._http().get("/me")
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("transport.bridge.identity_failed", error=str(e))
            return
        bot_id = data.get("id") if isinstance(data, dict) else None
        if isinstance(bot_id, str) and bot_id.strip():
            self._self_id = bot_id.strip()
            logger.info("transport.bridge.identity", bot_id=self._self_id)

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("BridgeTransport.start() has not been called")
        return self._client
