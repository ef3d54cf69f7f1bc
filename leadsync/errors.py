class LeadSyncError(Exception):
    """Base class for lead sync failures."""


class FetchError(LeadSyncError):
    """Raised when the session listing cannot be retrieved; aborts the pass."""


class DeliveryTransportError(LeadSyncError):
    """Raised when the delivery channel cannot be reached for a single lead."""


class ConfigurationError(LeadSyncError):
    """Raised when a required setting is missing."""
