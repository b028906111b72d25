"""
Scrape-and-store orchestration.
List page first, then details and reviews for the first N products,
one at a time. A failing product is logged and skipped.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from shopscraper.config import config
from shopscraper.logger import logger
from shopscraper.models.product import Product, ProductList
from shopscraper.scrapers.amazon import AmazonScraper
from shopscraper.sentry import capture_scrape_failure


@dataclass
class ScrapeOutcome:
    """Result of scraping one listed product."""
    name: str
    url: str
    product: Optional[Product] = None
    reviews_stored: int = 0
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PipelineSummary:
    product_list: ProductList
    outcomes: List[ScrapeOutcome] = field(default_factory=list)

    @property
    def failures(self) -> List[ScrapeOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def succeeded(self) -> int:
        return len(self.outcomes) - len(self.failures)


async def scrape_one(scraper: AmazonScraper, page, listed: Product) -> ScrapeOutcome:
    """Scrape detail and reviews for one listed product. Never raises."""
    outcome = ScrapeOutcome(name=listed.name, url=listed.url)

    try:
        outcome.product = await scraper.scrape_product_details(page, listed.url)
        logger.info(f"Scraped detailed information for: {outcome.product.name}")

        logger.info(f"Scraping reviews for: {outcome.product.name}")
        reviews = await scraper.scrape_product_reviews(page, listed.url)
        outcome.reviews_stored = len(reviews)

    except Exception as e:
        logger.error(f"Error scraping product {listed.name}: {e}", exc_info=True)
        capture_scrape_failure(listed.url, listed.name, e)
        outcome.error = e

    return outcome


async def run_pipeline(scraper: AmazonScraper, page, category_url: str,
                       max_products: Optional[int] = None,
                       item_delay_ms: Optional[int] = None) -> PipelineSummary:
    """
    Scrape one category, then the first `max_products` listed products.

    List scrape errors propagate; per-product errors are collected
    on the summary.
    """
    max_products = config.MAX_PRODUCTS if max_products is None else max_products
    item_delay_ms = config.ITEM_DELAY_MS if item_delay_ms is None else item_delay_ms

    logger.info(f"Starting to scrape product listing: {category_url}")
    product_list = await scraper.scrape_product_list(page, category_url)
    logger.info(
        f"Scraped {len(product_list.products)} products from category: {product_list.category}"
    )

    summary = PipelineSummary(product_list=product_list)
    to_scrape = product_list.products[:max_products]

    for index, listed in enumerate(to_scrape, 1):
        logger.info(f"Scraping details for product {index}/{len(to_scrape)}: {listed.name}")
        outcome = await scrape_one(scraper, page, listed)
        summary.outcomes.append(outcome)

        if outcome.ok:
            # Throttle requests to the target site
            await page.wait(item_delay_ms)

    logger.info(
        f"Pipeline finished: {summary.succeeded}/{len(summary.outcomes)} products scraped"
    )
    for failure in summary.failures:
        logger.warning(f"Failed product: {failure.name} ({failure.url}): {failure.error}")

    return summary
