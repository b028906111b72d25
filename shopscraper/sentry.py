"""
Sentry initialization for centralized error tracking.
Observes reality, never controls logic.
"""
import logging
from typing import Dict, Any

import sentry_sdk
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from shopscraper.config import config
from shopscraper.logger import logger


def initialize_sentry():
    """Initialize Sentry SDK if DSN is configured."""
    if not config.has_sentry:
        logger.info("Sentry not configured, skipping initialization")
        return

    try:
        sentry_sdk.init(
            dsn=config.SENTRY_DSN,
            environment=config.ENVIRONMENT,
            integrations=[
                AsyncioIntegration(),
                LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)
            ],
            traces_sample_rate=0.1,
            send_default_pii=False,
            default_integrations=False,
            debug=config.DEBUG,
            before_send=_enrich_sentry_event
        )

        logger.info("Sentry initialized for error tracking")

    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}")


def _enrich_sentry_event(event: Dict[str, Any], hint: Dict[str, Any]) -> Dict[str, Any]:
    """Enrich Sentry events with system context."""
    try:
        event.setdefault("tags", {})
        event["tags"]["system"] = "shopscraper"
        event["tags"]["environment"] = config.ENVIRONMENT

        # Group by exception type and module
        if "exception" in event:
            exceptions = event["exception"].get("values", [])
            if exceptions:
                exc = exceptions[0]
                event["fingerprint"] = [
                    "{{ default }}",
                    exc.get("type", "Unknown"),
                    exc.get("module", "unknown")
                ]

    except Exception as e:
        logger.error(f"Failed to enrich Sentry event: {e}")

    return event


def capture_scrape_failure(product_url: str, product_name: str, error: Exception):
    """Capture a per-product scrape failure that the pipeline skipped past."""
    if not config.has_sentry:
        return

    with sentry_sdk.new_scope() as scope:
        scope.set_tag("operation", "scrape_product")
        scope.set_tag("error_type", type(error).__name__)
        scope.set_extra("product_url", product_url)
        scope.set_extra("product_name", product_name)
        scope.set_level("error")

        sentry_sdk.capture_exception(error)


def capture_extraction_error(url: str, schema_name: str, error: str):
    """Capture an oracle failure or shape mismatch."""
    if not config.has_sentry:
        return

    with sentry_sdk.new_scope() as scope:
        scope.set_tag("error_type", "extraction")
        scope.set_tag("schema", schema_name)
        scope.set_extra("url", url)
        scope.set_extra("error", error)
        scope.set_level("warning")

        sentry_sdk.capture_message(
            f"Extraction failed for {schema_name} at {url}",
            "warning"
        )
