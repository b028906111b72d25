"""
Shop Scraper - AI-assisted e-commerce scraping into MongoDB.
"""

__version__ = "1.0.0"
__author__ = "Engineering Team"

# Export main components for easy import
from shopscraper.config import config
from shopscraper.logger import logger
from shopscraper.errors import (
    ConfigError,
    ExternalServiceError,
    ExtractionError,
    NavigationError,
    DocumentStoreError,
    StoreConnectionError,
    WriteError,
    ReadError
)

__all__ = [
    'config',
    'logger',
    'ConfigError',
    'ExternalServiceError',
    'ExtractionError',
    'NavigationError',
    'DocumentStoreError',
    'StoreConnectionError',
    'WriteError',
    'ReadError'
]
