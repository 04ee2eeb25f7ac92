# pos_bridge/services/entity_store.py
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pos_bridge.core.exceptions import NotFound
from pos_bridge.models.config_entry import ConfigEntry
from pos_bridge.models.customer import Customer
from pos_bridge.models.order import Order
from pos_bridge.models.product import Product

logger = logging.getLogger(__name__)


class EntityStore:
    """
    Read/write access to the local entities the POS sync touches.

    Every save commits immediately so a failure later in a multi-step sync
    never rolls back what was already confirmed by the POS.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_config_value(self, key: str) -> Optional[str]:
        return await self.db.scalar(select(ConfigEntry.value).where(ConfigEntry.key == key))

    async def set_config_value(self, key: str, value: str) -> ConfigEntry:
        entry = await self.db.scalar(select(ConfigEntry).where(ConfigEntry.key == key))
        if entry is None:
            entry = ConfigEntry(key=key)
        entry.value = value
        return await self.save(entry)

    async def find_product_by_code(self, code: str) -> Optional[Product]:
        result = await self.db.execute(select(Product).where(Product.code == str(code)).limit(1))
        return result.scalars().first()

    async def find_products_by_master_id(self, pos_master_id: str) -> List[Product]:
        result = await self.db.execute(
            select(Product).where(Product.pos_master_id == str(pos_master_id)).order_by(Product.id)
        )
        return list(result.scalars().all())

    async def get_customer(self, customer_id: int) -> Customer:
        customer = await self.db.get(Customer, customer_id)
        if customer is None:
            raise NotFound(f"Customer {customer_id} not found")
        return customer

    async def get_order(self, order_id: int) -> Order:
        order = await self.db.get(Order, order_id)
        if order is None:
            raise NotFound(f"Order {order_id} not found")
        return order

    async def save(self, entity):
        self.db.add(entity)
        await self.db.commit()
        return entity
