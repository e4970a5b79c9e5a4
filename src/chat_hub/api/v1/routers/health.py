from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from chat_hub.api.deps import HubDep
from chat_hub.infrastructure.db.session import engine

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(hub: HubDep) -> JSONResponse:
    errors: list[str] = []

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:  # noqa: BLE001
        errors.append(f"postgres: {exc}")

    stats = await hub.stats()
    if not stats.running:
        errors.append("hub: not running")

    hub_info = {
        "users": stats.users,
        "connections": stats.connections,
        "channels": stats.channels,
    }
    if errors:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "errors": errors, "hub": hub_info},
        )
    return JSONResponse(content={"status": "ready", "hub": hub_info})
