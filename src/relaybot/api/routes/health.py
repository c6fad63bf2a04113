"""Health check endpoint."""

from __future__ import annotations

import time

from fastapi import APIRouter, Request

from relaybot import __version__

router = APIRouter()

_start_time = time.time()


@router.get("/health")
async def health(request: Request) -> dict:
    """Health check: uptime, mode and command count."""
    state = request.app.state
    return {
        "status": "ok",
        "version": __version__,
        "uptime_seconds": round(time.time() - _start_time, 1),
        "bot_name": state.config.bot_name,
        "mode": state.gate.mode.value,
        "transport": state.transport.name,
        "bot_id": state.transport.resolve_self_id(),
        "commands_loaded": len(state.registry),
    }
