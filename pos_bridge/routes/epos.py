# pos_bridge/routes/epos.py
"""
Admin endpoints for the ePOS Now integration.

The full sync runs as a background task so callers get an immediate response
and poll for the result. Outbound endpoints run inline and report what the POS
returned.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from pos_bridge.core.config import Settings, get_settings
from pos_bridge.dependencies import (
    get_entity_store,
    get_outbound_service,
    get_reconciliation_locks,
    get_sync_log,
)
from pos_bridge.services.entity_store import EntityStore
from pos_bridge.services.epos.jobs import run_full_sync_job
from pos_bridge.services.epos.outbound import EposOutboundService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/epos", tags=["epos"])

_active_sync_tasks: Dict[str, asyncio.Task] = {}
_cancel_events: Dict[str, asyncio.Event] = {}
_sync_history: Dict[str, Dict[str, Any]] = {}

# Only the most recent runs are kept for status polling
MAX_SYNC_HISTORY = 50


def _remember_run(run_id: str, entry: Dict[str, Any]) -> None:
    _sync_history[run_id] = entry
    while len(_sync_history) > MAX_SYNC_HISTORY:
        _sync_history.pop(next(iter(_sync_history)))


async def _run_full_sync_background(run_id: str, settings: Settings, cancel_event: asyncio.Event):
    entry = _sync_history[run_id]
    entry.update(status="running")
    try:
        result = await run_full_sync_job(
            settings,
            get_sync_log(),
            locks=get_reconciliation_locks(),
            cancel_event=cancel_event
        )
        entry.update(status="completed", result=result.to_dict())
    except Exception as e:
        logger.exception(f"Full sync run {run_id} failed")
        entry.update(status="error", error=str(e))
    finally:
        entry["finished_at"] = datetime.now().isoformat()


@router.post("/full-sync")
async def start_full_sync(settings: Settings = Depends(get_settings)):
    """Queue a full stock sync without blocking the request."""
    if _active_sync_tasks:
        running = next(iter(_active_sync_tasks))
        raise HTTPException(status_code=409, detail=f"Full sync {running} is already running")

    run_id = str(uuid.uuid4())
    cancel_event = asyncio.Event()
    _remember_run(run_id, {
        "sync_run_id": run_id,
        "status": "queued",
        "started_at": datetime.now().isoformat(),
    })
    logger.info(f"Queueing full stock sync {run_id}")

    task = asyncio.get_running_loop().create_task(
        _run_full_sync_background(run_id, settings, cancel_event)
    )
    _active_sync_tasks[run_id] = task
    _cancel_events[run_id] = cancel_event

    def _finalize(_task: asyncio.Task, sync_id: str = run_id) -> None:
        _active_sync_tasks.pop(sync_id, None)
        _cancel_events.pop(sync_id, None)

    task.add_done_callback(_finalize)

    return {"sync_run_id": run_id, "status": "queued"}


@router.get("/full-sync/{run_id}")
async def get_full_sync_status(run_id: str):
    if run_id not in _sync_history:
        raise HTTPException(status_code=404, detail="Unknown sync run")
    return _sync_history[run_id]


@router.post("/full-sync/{run_id}/cancel")
async def cancel_full_sync(run_id: str):
    cancel_event = _cancel_events.get(run_id)
    if cancel_event is None:
        raise HTTPException(status_code=404, detail="No running sync with that id")
    cancel_event.set()
    return {"sync_run_id": run_id, "status": "cancelling"}


@router.post("/customers/{customer_id}/sync")
async def sync_customer(
    customer_id: int,
    store: EntityStore = Depends(get_entity_store),
    outbound: EposOutboundService = Depends(get_outbound_service)
):
    customer = await store.get_customer(customer_id)
    pos_id = await outbound.create_customer(customer)
    return {"customer_id": customer_id, "pos_id": pos_id, "synced": pos_id is not None}


@router.put("/customers/{customer_id}")
async def update_customer(
    customer_id: int,
    store: EntityStore = Depends(get_entity_store),
    outbound: EposOutboundService = Depends(get_outbound_service)
):
    customer = await store.get_customer(customer_id)
    return {"customer_id": customer_id, "updated": await outbound.update_customer(customer)}


@router.delete("/customers/{customer_id}")
async def remove_customer(
    customer_id: int,
    store: EntityStore = Depends(get_entity_store),
    outbound: EposOutboundService = Depends(get_outbound_service)
):
    customer = await store.get_customer(customer_id)
    return {"customer_id": customer_id, "removed": await outbound.remove_customer(customer)}


@router.post("/orders/{order_id}/sync")
async def sync_order(
    order_id: int,
    store: EntityStore = Depends(get_entity_store),
    outbound: EposOutboundService = Depends(get_outbound_service)
):
    order = await store.get_order(order_id)
    pos_id = await outbound.create_order(order)
    return {"order_id": order_id, "pos_id": pos_id, "synced": pos_id is not None}


@router.post("/orders/{order_id}/confirm")
async def confirm_order(
    order_id: int,
    store: EntityStore = Depends(get_entity_store),
    outbound: EposOutboundService = Depends(get_outbound_service)
):
    order = await store.get_order(order_id)
    return {"order_id": order_id, "confirmed": await outbound.confirm_order(order)}


@router.post("/orders/{order_id}/cancel")
async def cancel_order(
    order_id: int,
    store: EntityStore = Depends(get_entity_store),
    outbound: EposOutboundService = Depends(get_outbound_service)
):
    order = await store.get_order(order_id)
    return {"order_id": order_id, "cancelled": await outbound.cancel_order(order)}
