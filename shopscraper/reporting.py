"""
Read-only reporting over the scraped collections.
Query functions return plain data; run_report renders console tables.
"""
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from shopscraper.logger import logger
from shopscraper.models.product import COLLECTIONS
from shopscraper.normalizers.amazon import AmazonNormalizer
from shopscraper.services.document_store import DocumentStore


console = Console()

TOP_RATED_MIN_RATING = 4
MOST_REVIEWED_LIMIT = 10

CATEGORY_COUNTS_PIPELINE = [
    {"$group": {"_id": "$category", "count": {"$sum": 1}}},
    {"$sort": {"count": -1}},
]


async def collection_counts(store: DocumentStore) -> Dict[str, int]:
    counts = {}
    for name, collection in COLLECTIONS.all().items():
        counts[name] = await store.count(collection)
    return counts


async def products_by_category(store: DocumentStore) -> List[Dict[str, Any]]:
    """Category counts, largest first. Missing categories come back as None."""
    return await store.aggregate(COLLECTIONS.PRODUCTS, CATEGORY_COUNTS_PIPELINE)


async def price_range(store: DocumentStore) -> Optional[Dict[str, float]]:
    """
    Average, minimum and maximum price over all products.

    Prices are stored as page text; they are parsed here so that one
    unparseable price does not fail the whole report.
    """
    documents = await store.find(
        COLLECTIONS.PRODUCTS, {"price": {"$exists": True}}, {"price": 1}
    )
    prices = [
        price for price in (AmazonNormalizer.parse_price(d.get("price")) for d in documents)
        if price is not None
    ]
    if not prices:
        return None

    return {
        "avg_price": sum(prices) / len(prices),
        "min_price": min(prices),
        "max_price": max(prices),
    }


async def top_rated_products(store: DocumentStore) -> List[Dict[str, Any]]:
    return await store.find(COLLECTIONS.PRODUCTS, {"rating": {"$gte": TOP_RATED_MIN_RATING}})


async def most_reviewed_products(store: DocumentStore,
                                 limit: int = MOST_REVIEWED_LIMIT) -> List[Dict[str, Any]]:
    products = await store.find(COLLECTIONS.PRODUCTS, {"review_count": {"$exists": True}})
    products.sort(key=lambda p: p.get("review_count") or 0, reverse=True)
    return products[:limit]


def _table(title: str, *columns: str) -> Table:
    table = Table(title=title, title_justify="left")
    for column in columns:
        table.add_column(column)
    return table


async def run_report(store: DocumentStore):
    """Print every report section."""
    console.print("\n[yellow]Collection Counts:[/yellow]")
    for name, count in (await collection_counts(store)).items():
        console.print(f"[green]{name}[/green]: {count} documents")

    categories = await products_by_category(store)
    table = _table("Products by Category", "Category", "Count")
    for item in categories:
        table.add_row(str(item["_id"] or "Unknown"), str(item["count"]))
    console.print(table)

    console.print("\n[yellow]Price Range Analysis:[/yellow]")
    stats = await price_range(store)
    if stats:
        console.print(f"Average Price: ${stats['avg_price']:.2f}")
        console.print(f"Minimum Price: ${stats['min_price']:.2f}")
        console.print(f"Maximum Price: ${stats['max_price']:.2f}")
    else:
        console.print("No parseable prices found")

    top_rated = await top_rated_products(store)
    if top_rated:
        table = _table(f"Top Rated Products ({len(top_rated)})", "Name", "Price", "Rating", "Category")
        for product in top_rated:
            table.add_row(
                str(product.get("name")),
                str(product.get("price")),
                str(product.get("rating")),
                str(product.get("category") or "Unknown"),
            )
        console.print(table)
    else:
        console.print("No highly rated products found")

    most_reviewed = await most_reviewed_products(store)
    if most_reviewed:
        table = _table("Products with Most Reviews", "Name", "Reviews", "Rating")
        for product in most_reviewed:
            table.add_row(
                str(product.get("name")),
                str(product.get("review_count") or 0),
                str(product.get("rating") or "N/A"),
            )
        console.print(table)
    else:
        console.print("No products with review counts found")

    logger.info("Reporting queries completed")
