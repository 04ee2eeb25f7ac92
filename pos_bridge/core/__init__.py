"""
Core module exports.
"""
from .enums import (
    SyncDirection,
    ResponseOutcome,
    PaymentMethod,
    PaymentStatus,
    FullSyncStopReason
)

from .exceptions import (
    BaseServiceError,
    PosSyncError,
    TransportFailure,
    UnparsableResponse,
    RemoteRejected,
    InvalidInput,
    NotFound,
    ConfigurationError
)
