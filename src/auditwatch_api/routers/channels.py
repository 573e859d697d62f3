"""Alert channel endpoints. Secrets are never echoed back."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from auditwatch_common import AlertChannel

from auditwatch.runtime import Runtime
from auditwatch_api.deps import get_runtime

router = APIRouter(tags=["channels"])


@router.get("/channels")
async def list_channels(rt: Runtime = Depends(get_runtime)):
    return [channel.redacted() for channel in await rt.channels.all()]


@router.post("/channels", status_code=201)
async def save_channel(channel: AlertChannel, rt: Runtime = Depends(get_runtime)):
    return (await rt.channels.save(channel)).redacted()


@router.delete("/channels/{channel_id}")
async def delete_channel(channel_id: int, rt: Runtime = Depends(get_runtime)):
    if not await rt.channels.delete(channel_id):
        raise HTTPException(status_code=404, detail=f"Channel {channel_id} not found")
    return {"deleted": channel_id}


@router.post("/channels/{channel_id}/test")
async def test_channel(channel_id: int, rt: Runtime = Depends(get_runtime)):
    status = await rt.test_channel(channel_id)
    return {"id": channel_id, "status": status.value}
