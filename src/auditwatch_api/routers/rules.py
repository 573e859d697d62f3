"""Alert rule endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from auditwatch_common import AlertRule

from auditwatch.runtime import Runtime
from auditwatch_api.deps import get_runtime

router = APIRouter(tags=["rules"])


@router.get("/rules")
async def list_rules(rt: Runtime = Depends(get_runtime)):
    return [rule.model_dump(mode="json") for rule in await rt.rules.all()]


@router.post("/rules", status_code=201)
async def save_rule(rule: AlertRule, rt: Runtime = Depends(get_runtime)):
    """Create a rule, or replace one when the body carries an existing id."""
    return (await rt.rules.save(rule)).model_dump(mode="json")


@router.delete("/rules/{rule_id}")
async def delete_rule(rule_id: int, rt: Runtime = Depends(get_runtime)):
    if not await rt.rules.delete(rule_id):
        raise HTTPException(status_code=404, detail=f"Rule {rule_id} not found")
    return {"deleted": rule_id}
