"""
Custom domain exceptions for the entire system.
Every error has a name, not chaos.
"""


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


class ExternalServiceError(Exception):
    """Raised when an external service (browser, AI) fails."""
    pass


class ExtractionError(ExternalServiceError):
    """Raised when the extraction oracle fails or returns a shape mismatch."""
    pass


class NavigationError(ExternalServiceError):
    """Raised when the browser cannot load or drive a page."""
    pass


class DocumentStoreError(Exception):
    """Base class for document store failures."""
    pass


class StoreConnectionError(DocumentStoreError):
    """Raised when the document store cannot be reached."""
    pass


class WriteError(DocumentStoreError):
    """Raised when an insert is rejected by the document store."""
    pass


class ReadError(DocumentStoreError):
    """Raised when a find, count or aggregation fails."""
    pass
