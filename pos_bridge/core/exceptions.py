class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class PosSyncError(BaseServiceError):
    """Base exception for POS synchronisation errors."""
    pass

class TransportFailure(PosSyncError):
    """Raised when the POS could not be reached."""
    pass

class UnparsableResponse(PosSyncError):
    """Raised when the POS answered with a body that is not JSON."""
    pass

class RemoteRejected(PosSyncError):
    """Raised when the POS answered with a non-2xx status."""

    def __init__(self, message, status_code=None, body=None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

class InvalidInput(PosSyncError):
    """Raised when a caller-side precondition is violated."""
    pass

class NotFound(PosSyncError):
    """Raised when a referenced local entity does not exist."""
    pass

class ConfigurationError(BaseServiceError):
    """Raised when required configuration is missing."""
    pass
