"""
Shared enums and constants used across the application.
"""

from enum import Enum


class SyncDirection(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"

    @property
    def tag(self):
        return f"#{self.value}"


class ResponseOutcome(str, Enum):
    """Classification of a single POS request"""
    OK = "ok"
    REJECTED = "rejected"
    TRANSPORT_FAILED = "transport_failed"
    UNPARSABLE = "unparsable"


class PaymentMethod(str, Enum):
    CLASSIC = "classic"
    PAYPAL = "paypal"


class PaymentStatus(str, Enum):
    """Values accepted by the POS for Transaction.PaymentStatus"""
    COMPLETE = "Complete"
    HOLD = "Hold"


class FullSyncStopReason(str, Enum):
    EXHAUSTED = "exhausted"
    REQUEST_FAILED = "request_failed"
    MAX_PAGES = "max_pages"
    CANCELLED = "cancelled"
