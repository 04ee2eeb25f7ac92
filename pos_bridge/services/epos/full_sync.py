# pos_bridge/services/epos/full_sync.py
"""
Periodic full stock reconciliation.

Walks the POS ProductStock listing page by page and feeds every item through
the same reconciliation as the stock webhook. Used to correct drift left by
missed or failed webhooks.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, List, Optional, Tuple

from pydantic import ValidationError

from pos_bridge.core.config import Settings
from pos_bridge.core.enums import FullSyncStopReason
from pos_bridge.core.exceptions import InvalidInput
from pos_bridge.schemas.epos import StockListingItem, StockReport
from pos_bridge.services.epos.client import EposClient
from pos_bridge.services.epos.inbound import EposInboundService

logger = logging.getLogger(__name__)


@dataclass
class FullSyncResult:
    pages: int = 0
    items: int = 0
    skipped: int = 0       # other locations
    reconciled: int = 0    # local products updated
    errors: List[str] = field(default_factory=list)
    stop_reason: Optional[FullSyncStopReason] = None

    def to_dict(self):
        return {
            "pages": self.pages,
            "items": self.items,
            "skipped": self.skipped,
            "reconciled": self.reconciled,
            "errors": self.errors,
            "stop_reason": self.stop_reason.value if self.stop_reason else None,
        }


class EposFullSyncService:
    def __init__(self, client: EposClient, inbound: EposInboundService, settings: Settings):
        self.client = client
        self.inbound = inbound
        self.settings = settings
        self.stop_reason: Optional[FullSyncStopReason] = None

    async def iter_stock_pages(
        self,
        max_pages: Optional[int] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> AsyncIterator[Tuple[int, list]]:
        """
        Yield (page_index, items) until the POS returns an empty page.

        The walk also stops on a failed request, after `max_pages` pages or
        when `cancel_event` is set. The reason is left in `self.stop_reason`.
        """
        max_pages = max_pages if max_pages is not None else self.settings.EPOS_FULL_SYNC_MAX_PAGES
        self.stop_reason = None
        page = 0

        while True:
            if cancel_event is not None and cancel_event.is_set():
                self.stop_reason = FullSyncStopReason.CANCELLED
                return
            if page >= max_pages:
                logger.warning(f"Full sync stopped at the safety cap of {max_pages} pages")
                self.stop_reason = FullSyncStopReason.MAX_PAGES
                return

            response = await self.client.get_stock_page(page)
            if not response.ok:
                logger.error(f"Full sync aborted: stock page {page} request {response.outcome.value}")
                self.stop_reason = FullSyncStopReason.REQUEST_FAILED
                return

            items = response.data
            if not items:
                self.stop_reason = FullSyncStopReason.EXHAUSTED
                return
            if not isinstance(items, list):
                logger.error(f"Full sync aborted: stock page {page} is not a list")
                self.stop_reason = FullSyncStopReason.REQUEST_FAILED
                return

            yield page, items
            page += 1

    async def run_full_sync(self, cancel_event: Optional[asyncio.Event] = None) -> FullSyncResult:
        result = FullSyncResult()
        logger.info("Starting ePOS Now full stock sync")

        async for page, items in self.iter_stock_pages(cancel_event=cancel_event):
            result.pages += 1
            for raw_item in items:
                result.items += 1
                try:
                    item = StockListingItem.model_validate(raw_item)
                except ValidationError as e:
                    logger.error(f"Skipping malformed stock item on page {page}: {e}")
                    result.errors.append(f"page {page}: malformed item")
                    continue

                if item.LocationID != self.settings.EPOS_LOCATION_ID:
                    result.skipped += 1
                    continue

                try:
                    products = await self.inbound.apply_stock_report(StockReport.from_listing_item(item))
                except InvalidInput as e:
                    logger.error(f"Cannot reconcile POS product {item.ProductID}: {e}")
                    result.errors.append(f"{item.ProductID}: {e}")
                    continue
                result.reconciled += len(products)

        result.stop_reason = self.stop_reason
        logger.info(
            f"Full stock sync finished ({result.stop_reason.value if result.stop_reason else 'unknown'}): "
            f"{result.pages} pages, {result.items} items, {result.reconciled} products reconciled, "
            f"{len(result.errors)} errors"
        )
        return result
