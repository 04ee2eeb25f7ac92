# pos_bridge/services/epos/outbound.py
"""
Pushes local customers and orders to ePOS Now.

Each operation maps local fields onto the POS payload, sends it through
EposClient and, for creations, stores the identifier assigned by the POS on
the local entity. A failed request leaves the local entity untouched and is
only visible in the logs; every operation can simply be run again.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from pos_bridge.core.config import Settings
from pos_bridge.core.enums import PaymentStatus
from pos_bridge.core.exceptions import InvalidInput
from pos_bridge.models.customer import Customer
from pos_bridge.models.order import Order
from pos_bridge.services.entity_store import EntityStore
from pos_bridge.services.epos.client import EposClient
from pos_bridge.services.sync_log import SyncLog

logger = logging.getLogger(__name__)

POS_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def apply_discounts(amount: float, order: Order) -> float:
    """Order discount first, then the discount code. Each needs a name and a percent."""
    if order.discount_name and order.discount_percent:
        amount *= (100 - order.discount_percent) / 100
    if order.discount_code_name and order.discount_code_percent:
        amount *= (100 - order.discount_code_percent) / 100
    return amount


def _pos_datetime(value: Optional[datetime]) -> str:
    return (value or datetime.now()).strftime(POS_DATETIME_FORMAT)


class EposOutboundService:
    def __init__(self, client: EposClient, store: EntityStore, sync_log: SyncLog, settings: Settings):
        self.client = client
        self.store = store
        self.sync_log = sync_log
        self.settings = settings

    # Customers

    async def is_customer_registered(self, customer: Customer) -> bool:
        response = await self.client.get_customer(customer.pos_id)
        return response.get("CustomerID") is not None

    async def has_customer_address(self, customer: Customer) -> bool:
        response = await self.client.get_customer(customer.pos_id)
        return bool(response.get("MainAddressID"))

    async def create_customer(self, customer: Customer) -> Optional[str]:
        """
        Register the customer in the POS unless it already is.

        Returns:
            The POS customer id, or None if the POS did not return one
        """
        if customer.pos_id and await self.is_customer_registered(customer):
            return customer.pos_id

        response = await self.client.create_customer({
            "Forename": customer.public_name,
            "MaxCredit": 0,
            "SignUpDate": _pos_datetime(customer.created_at),
            "EmailAddress": customer.email,
            "ContactNumber": customer.phone,
        })
        pos_id = response.get("CustomerID")
        if pos_id is None:
            logger.warning(f"Customer {customer.id} was not created in ePOS Now")
            return None

        customer.pos_id = str(pos_id)
        await self.store.save(customer)
        logger.info(f"Customer {customer.id} registered in ePOS Now as {customer.pos_id}")

        if customer.city:
            await self.create_customer_address(customer)

        return customer.pos_id

    async def create_customer_address(self, customer: Customer) -> Optional[str]:
        """Create the customer's main address and link it to the POS customer."""
        response = await self.client.create_customer_address({
            "CustomerID": customer.pos_id,
            "Name": "Main address",
            "AddressLine1": customer.street,
            "AddressLine2": f"{customer.post_code} - {customer.city}",
            "Town": customer.city,
            "PostCode": customer.post_code,
        })
        address_id = response.get("CustomerAddressID")
        if address_id is None:
            logger.warning(f"Address of customer {customer.id} was not created in ePOS Now")
            return None

        await self.client.update_customer(customer.pos_id, {"MainAddressID": address_id})
        return str(address_id)

    async def update_customer(self, customer: Customer) -> bool:
        if not self._has_pos_id(customer, "update"):
            return False
        response = await self.client.update_customer(customer.pos_id, {
            "Forename": customer.public_name,
            "EmailAddress": customer.email,
            "ContactNumber": (customer.phone or "").replace("+", ""),
        })
        return response.ok

    async def remove_customer(self, customer: Customer) -> bool:
        if not self._has_pos_id(customer, "removal"):
            return False
        response = await self.client.delete_customer(customer.pos_id)
        return response.ok

    # Orders

    def resolve_tender_type(self, payment: str) -> int:
        tender_type = self.settings.EPOS_TENDER_TYPES.get(payment)
        if tender_type is None:
            self.sync_log.outgoing(
                f"Cannot create tender with type: {payment}. Missing map in {self.__class__.__name__}"
            )
            raise InvalidInput(f"No ePOS Now tender type mapped for payment method '{payment}'")
        return tender_type

    def build_transaction_items(self, order: Order) -> List[Dict]:
        items = []
        for line in order.lines:
            items.append({
                "ProductID": line.variant.product.code,
                "Quantity": line.weight * line.amount,
                "Price": apply_discounts(line.price / line.weight, order),
            })
        return items

    def build_transaction(self, order: Order, tender_type: int) -> Dict:
        return {
            "DateTime": _pos_datetime(order.created_at),
            "CustomerID": order.customer.pos_id if order.customer else None,
            "EatOut": self.settings.EPOS_EAT_OUT,
            "TransactionItems": self.build_transaction_items(order),
            "Tenders": [
                {"TypeID": tender_type, "Amount": order.total_cost}
            ],
            "BaseItems": [
                {
                    "ItemTypeID": self.settings.EPOS_DELIVERY_ITEM_TYPE_ID,
                    "Amount": apply_discounts(order.delivery_cost or 0, order),
                    "Notes": order.delivery_name,
                }
            ],
        }

    async def create_order(self, order: Order) -> Optional[str]:
        """
        Create the order as a complete transaction in the POS.

        The customer is registered first when needed.

        Returns:
            The POS transaction id, or None if the POS did not return one

        Raises:
            InvalidInput: If the order's payment method has no tender type.
                Nothing is sent in that case.
        """
        tender_type = self.resolve_tender_type(order.payment)

        if order.pos_id:
            logger.info(f"Order {order.id} already exists in ePOS Now as {order.pos_id}")
            return order.pos_id

        if order.customer:
            await self.create_customer(order.customer)

        response = await self.client.create_complete_transaction(self.build_transaction(order, tender_type))
        transaction_id = response.get("TransactionID")
        if transaction_id is None:
            logger.warning(f"Order {order.id} was not created in ePOS Now")
            return None

        order.pos_id = str(transaction_id)
        await self.store.save(order)
        logger.info(f"Order {order.id} created in ePOS Now as transaction {order.pos_id}")
        return order.pos_id

    async def confirm_order(self, order: Order) -> bool:
        return await self._set_payment_status(order, PaymentStatus.COMPLETE)

    async def cancel_order(self, order: Order) -> bool:
        return await self._set_payment_status(order, PaymentStatus.HOLD)

    async def _set_payment_status(self, order: Order, status: PaymentStatus) -> bool:
        if not self._has_pos_id(order, f"payment status {status.value}"):
            return False
        response = await self.client.update_transaction(order.pos_id, {"PaymentStatus": status.value})
        return response.ok

    def _has_pos_id(self, entity, action: str) -> bool:
        if entity.pos_id:
            return True
        self.sync_log.outgoing(
            f"Skipping {action} of {entity.__class__.__name__} {entity.id}: not registered in ePOS Now"
        )
        return False
