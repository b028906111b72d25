"""
Explicit normalization layer.
URL rewriting, identifier derivation and text-to-value parsing for
Amazon pages and the raw strings the extraction oracle hands back.
"""
import re
from typing import Any, Optional
from datetime import datetime, timezone

from shopscraper.logger import logger


DETAIL_MARKER = "/dp/"
REVIEWS_MARKER = "/product-reviews/"

_ASIN_PATTERN = re.compile(r'/(?:dp|product-reviews|gp/product)/([A-Z0-9]{10})', re.IGNORECASE)
_PRICE_NOISE = re.compile(r'[\s,$€£¥₹]')
_PRICE_VALUE = re.compile(r'\d+(?:\.\d+)?')

_REVIEW_DATE_PREFIX =re.compile(r"^.*?\bon\s+(?=\S)", re.IGNORECASE)
_REVIEW_DATE_FORMATS = (
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%Y-%m-%d",
    "%m/%d/%Y",
)


class AmazonNormalizer:
    """
    Normalizes URLs and oracle text values for Amazon pages.
    """

    @staticmethod
    def reviews_url(product_url: str) -> str:
        """
        Derive the reviews page URL from a product URL.

        Only a literal '/dp/' segment is rewritten. Any other URL shape is
        returned unchanged, so the reviews scrape lands on the product page.
        """
        if DETAIL_MARKER in product_url:
            return product_url.replace(DETAIL_MARKER, REVIEWS_MARKER, 1)

        logger.warning(f"No '{DETAIL_MARKER}' segment in {product_url}; reviews URL left unchanged")
        return product_url

    @staticmethod
    def extract_asin(url: str) -> Optional[str]:
        """Extract ASIN from a /dp/ or /product-reviews/ URL."""
        if not url:
            return None

        match = _ASIN_PATTERN.search(url)
        if match:
            return match.group(1).upper()

        return None

    @staticmethod
    def parse_price(raw_price: Any) -> Optional[float]:
        """
        Normalize price text to float.

        Currency symbols, thousands separators and whitespace are stripped;
        anything but a single number left behind yields None.
        """
        if raw_price is None or raw_price == "":
            return None

        try:
            if isinstance(raw_price, str):
                clean_price = _PRICE_NOISE.sub('', raw_price)
                if _PRICE_VALUE.fullmatch(clean_price):
                    return float(clean_price)
            elif isinstance(raw_price, (int, float)):
                return float(raw_price)
        except (ValueError, TypeError):
            pass

        return None

    @staticmethod
    def parse_review_date(raw_date: Optional[str]) -> Optional[datetime]:
        """
        Parse a review date string into a UTC datetime.

        Handles ISO dates and Amazon's "Reviewed in the United States on
        January 5, 2024" form. Unparseable text yields None.
        """
        if not raw_date:
            return None

        text = raw_date.strip()

        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        except ValueError:
            pass

        text = _REVIEW_DATE_PREFIX.sub("", text).strip()
        for fmt in _REVIEW_DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
            except ValueError:
                continue

        logger.debug(f"Unparseable review date: {raw_date!r}")
        return None
