# pos_bridge/services/epos/inbound.py
import logging
from numbers import Real
from typing import List, Optional

from pos_bridge.core.config import Settings
from pos_bridge.models.product import Product
from pos_bridge.schemas.epos import CatalogChangePayload, StockChangePayload, StockReport
from pos_bridge.services.entity_store import EntityStore
from pos_bridge.services.epos.allocator import apply_allocation
from pos_bridge.services.epos.locks import KeyedLocks
from pos_bridge.services.sync_log import SyncLog

logger = logging.getLogger(__name__)


class EposInboundService:
    """
    Applies changes pushed by ePOS Now to the local catalogue.

    Products the POS mentions but which are not provisioned locally are
    ignored. Stock for locations other than the configured one is ignored.
    """

    def __init__(self, store: EntityStore, sync_log: SyncLog, settings: Settings, locks: Optional[KeyedLocks] = None):
        self.store = store
        self.sync_log = sync_log
        self.settings = settings
        self.locks = locks or KeyedLocks()

    async def handle_product_change(self, payload: CatalogChangePayload) -> Optional[Product]:
        """Overwrite name and price of the product with the given POS code."""
        product = await self.store.find_product_by_code(payload.ProductID)
        if product is None:
            logger.debug(f"Product change for unknown POS product {payload.ProductID} ignored")
            return None

        product.name = payload.Description
        product.price_per_kilo = round(payload.SalePrice * self.settings.EPOS_UNIT_SCALE, 2)
        await self.store.save(product)

        self.sync_log.incoming(
            f"Simple update of product: {payload.Description} with price per kilo: {product.price_per_kilo}"
        )
        return product

    async def handle_stock_change(self, payload: StockChangePayload) -> List[Product]:
        return await self.apply_stock_report(StockReport.from_stock_change(payload))

    async def apply_stock_report(self, report: StockReport) -> List[Product]:
        """
        Reconcile every local product mapped to the report's POS product.

        Returns:
            List[Product]: The reconciled products (empty for foreign locations
            and unknown products)

        Raises:
            InvalidInput: If a mapped product has no variants or a variant
                without a positive weight
        """
        if report.location_id != self.settings.EPOS_LOCATION_ID:
            logger.debug(
                f"Stock for POS product {report.product_id} at location {report.location_id} ignored"
            )
            return []

        products = await self.store.find_products_by_master_id(report.product_id)
        for product in products:
            async with self.locks.hold(product.id):
                if report.min_stock is not None:
                    product.minimal_quantity = report.min_stock
                    await self.store.save(product)
                await self._reconcile(product, report.total)

        return products

    async def _reconcile(self, product: Product, total: Real) -> None:
        apply_allocation(product, total)
        await self.store.save(product)

        self.sync_log.incoming(f"Update of product stock in product: {product.name} with variants: ")
        for variant in product.variants:
            self.sync_log.incoming(f"   → {variant.weight:g} x {variant.amount}")
