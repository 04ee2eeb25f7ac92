from .product import Product, Variant
from .customer import Customer
from .order import Order, OrderLine
from .config_entry import ConfigEntry
from .webhook import WebhookEvent

# This ensures all models are registered with SQLAlchemy
__all__ = [
    'Product',
    'Variant',
    'Customer',
    'Order',
    'OrderLine',
    'ConfigEntry',
    'WebhookEvent',
]
