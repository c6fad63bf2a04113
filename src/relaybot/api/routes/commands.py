"""Command registry and mode endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from relaybot.api.middleware.auth import verify_api_key

router = APIRouter()


@router.get("/v1/commands")
async def list_commands(
    request: Request,
    _api_key: str | None = Depends(verify_api_key),
) -> dict:
    registry = request.app.state.registry
    return {
        "commands": [
            {
                "name": entry.name,
                "category": entry.category,
                "owner_only": entry.owner_only,
                "description": entry.description,
                "usage": entry.usage,
                "source": entry.source,
            }
            for entry in registry.entries()
        ],
    }


@router.post("/v1/commands/reload")
async def reload_commands(
    request: Request,
    _api_key: str | None = Depends(verify_api_key),
) -> dict:
    loaded = await request.app.state.registry.reload()
    return {"loaded": loaded}


@router.get("/v1/mode")
async def get_mode(
    request: Request,
    _api_key: str | None = Depends(verify_api_key),
) -> dict:
    return {"mode": request.app.state.gate.mode.value}
