"""Event source settings endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from auditwatch_common import SourceSettings

from auditwatch.runtime import Runtime
from auditwatch_api.deps import get_runtime

router = APIRouter(tags=["setup"])


def _public(settings: SourceSettings, cursor: str | None) -> dict:
    return {
        "org_id": settings.org_id,
        "base_url": settings.base_url,
        "api_key": settings.api_key[:4] + "...",
        "cursor": cursor,
    }


@router.get("/setup/source")
async def get_source(rt: Runtime = Depends(get_runtime)):
    settings = await rt.settings.load_source()
    if settings is None:
        raise HTTPException(status_code=404, detail="Event source not configured")
    return _public(settings, await rt.settings.get_cursor())


@router.put("/setup/source")
async def put_source(settings: SourceSettings, rt: Runtime = Depends(get_runtime)):
    await rt.settings.save_source(settings)
    return _public(settings, await rt.settings.get_cursor())


@router.post("/setup/source/test")
async def test_source(rt: Runtime = Depends(get_runtime)):
    source = await rt.event_source()
    return {"connected": await source.test_connection()}
