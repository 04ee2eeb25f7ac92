from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Depends, Request
from pydantic import ValidationError

from pos_bridge.core.security import verify_webhook_signature
from pos_bridge.dependencies import get_entity_store, get_inbound_service
from pos_bridge.models.webhook import WebhookEvent
from pos_bridge.schemas.epos import CatalogChangePayload, StockChangePayload
from pos_bridge.services.entity_store import EntityStore
from pos_bridge.services.epos.inbound import EposInboundService

router = APIRouter(prefix="/webhooks/epos", tags=["webhooks"])


async def _record_event(store: EntityStore, event_type: str, request: Request) -> WebhookEvent:
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Body is not valid JSON")

    return await store.save(WebhookEvent(event_type=event_type, platform="epos", payload=payload))


async def _mark_processed(store: EntityStore, event: WebhookEvent):
    event.processed = True
    event.processed_at = datetime.now(timezone.utc)
    await store.save(event)


def _parse(schema, payload):
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/product")
async def epos_product_webhook(
    request: Request,
    store: EntityStore = Depends(get_entity_store),
    inbound: EposInboundService = Depends(get_inbound_service),
    _: None = Depends(verify_webhook_signature)
):
    """Endpoint to receive product (name/price) changes from ePOS Now"""
    event = await _record_event(store, "product", request)
    payload = _parse(CatalogChangePayload, event.payload)

    product = await inbound.handle_product_change(payload)
    await _mark_processed(store, event)

    return {"status": "received", "applied": product is not None}


@router.post("/stock")
async def epos_stock_webhook(
    request: Request,
    store: EntityStore = Depends(get_entity_store),
    inbound: EposInboundService = Depends(get_inbound_service),
    _: None = Depends(verify_webhook_signature)
):
    """Endpoint to receive product stock changes from ePOS Now"""
    event = await _record_event(store, "stock", request)
    payload = _parse(StockChangePayload, event.payload)

    products = await inbound.handle_stock_change(payload)
    await _mark_processed(store, event)

    return {"status": "received", "reconciled": [product.id for product in products]}
