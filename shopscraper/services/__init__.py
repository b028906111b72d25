"""
Services package initialization.
Centralizes service imports.
"""

from shopscraper.services.document_store import DocumentStore
from shopscraper.services.ai_service import ExtractionService
from shopscraper.services.browser_service import BrowserService, ScraperPage

__all__ = [
    'DocumentStore',
    'ExtractionService',
    'BrowserService',
    'ScraperPage'
]
