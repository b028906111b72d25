"""
Main application entry point.

    shopscraper run [--category-url URL] [--max-products N]
    shopscraper report
"""
import argparse
import asyncio
import sys
from typing import Optional

from shopscraper.config import config
from shopscraper.logger import logger
from shopscraper.pipeline import run_pipeline
from shopscraper.reporting import run_report
from shopscraper.scrapers.amazon import AmazonScraper
from shopscraper.sentry import initialize_sentry
from shopscraper.services.ai_service import ExtractionService
from shopscraper.services.browser_service import BrowserService
from shopscraper.services.document_store import DocumentStore


async def run(category_url: str, max_products: Optional[int] = None) -> bool:
    """Scrape one category, then report. Returns False if the run failed."""
    store = DocumentStore()
    extractor = ExtractionService()

    try:
        async with store.session(), extractor, BrowserService(extractor) as browser:
            page = await browser.new_page()
            scraper = AmazonScraper(store)

            summary = await run_pipeline(scraper, page, category_url, max_products=max_products)

            logger.info("Querying MongoDB for statistics")
            await run_report(store)

            logger.info(
                f"Scraping and MongoDB operations completed "
                f"({len(summary.failures)} product failures)"
            )
            return True

    except Exception as e:
        logger.error(f"Error during scraping: {e}", exc_info=True)
        return False


async def report() -> bool:
    """Connect, print the reports, disconnect. No scraping."""
    store = DocumentStore()

    try:
        async with store.session():
            await run_report(store)
            return True

    except Exception as e:
        logger.error(f"Error running queries: {e}", exc_info=True)
        return False


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or greater, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AI-assisted e-commerce scraper")
    commands = parser.add_subparsers(dest="command", required=True)

    run_cmd = commands.add_parser("run", help="Scrape a category and report")
    run_cmd.add_argument(
        "--category-url", type=str, default=config.CATEGORY_URL,
        help="Category page to scrape"
    )
    run_cmd.add_argument(
        "--max-products", type=non_negative_int, default=config.MAX_PRODUCTS,
        help="Number of listed products to scrape in detail"
    )

    commands.add_parser("report", help="Print reports from stored data only")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    initialize_sentry()

    if not config.has_ai and args.command == "run":
        logger.warning("DEEPSEEK_API_KEY not set; extraction calls will fail")

    if args.command == "run":
        ok = asyncio.run(run(args.category_url, args.max_products))
    else:
        ok = asyncio.run(report())

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
