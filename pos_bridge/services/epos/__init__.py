"""
ePOS Now integration.

Outgoing: local customers and orders are pushed to the POS (outbound.py).
Incoming: product and stock webhooks (inbound.py) and the periodic paginated
stock walk (full_sync.py) both end in the stock allocator (allocator.py).
All network traffic goes through EposClient (client.py).
"""
from .allocator import allocate, apply_allocation
from .client import EposClient, EposResponse, create_epos_client
from .locks import KeyedLocks
from .inbound import EposInboundService
from .outbound import EposOutboundService, apply_discounts
from .full_sync import EposFullSyncService, FullSyncResult

__all__ = [
    "allocate",
    "apply_allocation",
    "EposClient",
    "EposResponse",
    "create_epos_client",
    "KeyedLocks",
    "EposInboundService",
    "EposOutboundService",
    "apply_discounts",
    "EposFullSyncService",
    "FullSyncResult",
]
