"""
Amazon scrape operations.
Each operation navigates, waits for the page to settle, asks the oracle
for a shape, stamps the result and persists it. Errors propagate.
"""
from typing import List, Optional

from shopscraper.config import config
from shopscraper.logger import logger
from shopscraper.models.product import (
    COLLECTIONS,
    Product,
    ProductDetails,
    ProductList,
    ProductListExtraction,
    Review,
    ReviewExtraction,
    utcnow,
)
from shopscraper.normalizers.amazon import AmazonNormalizer
from shopscraper.services.document_store import DocumentStore


LIST_INSTRUCTION = (
    "Extract all product information from this Amazon category page, including "
    "product names, prices, URLs, ratings, and image URLs"
)
DETAIL_INSTRUCTION = (
    "Extract detailed product information from this Amazon product page, including "
    "name, price, description, specifications, brand, category, image URL, rating, "
    "review count, and availability"
)
REVIEWS_INSTRUCTION = (
    "Extract all product reviews from this Amazon reviews page, including review "
    "text, rating, author, title, date, and helpful count"
)


class AmazonScraper:
    """Scrapes category, product and review pages into the document store."""

    def __init__(self, store: DocumentStore, website_name: Optional[str] = None,
                 page_settle_ms: Optional[int] = None, scroll_settle_ms: Optional[int] = None):
        self.store = store
        self.website_name = website_name or config.WEBSITE_NAME
        self.page_settle_ms = config.PAGE_SETTLE_MS if page_settle_ms is None else page_settle_ms
        self.scroll_settle_ms = config.SCROLL_SETTLE_MS if scroll_settle_ms is None else scroll_settle_ms

    async def _load(self, page, url: str, scroll_fractions=()):
        """Navigate, then scroll step by step with a fixed wait after each step."""
        await page.goto(url)
        await page.wait(self.page_settle_ms)

        for fraction in scroll_fractions:
            await page.scroll_to(fraction)
            await page.wait(self.scroll_settle_ms)

    async def scrape_product_list(self, page, category_url: str) -> ProductList:
        """Scrape a category page; stores the snapshot and its products."""
        await self._load(page, category_url, scroll_fractions=(1 / 2, 1))

        data = await page.extract(LIST_INSTRUCTION, ProductListExtraction)

        products = [
            Product(**listed.model_dump(), date_scraped=utcnow())
            for listed in data.products
        ]

        product_list = ProductList(
            products=products,
            category=data.category,
            page=1,
            total_products=data.total_products,
            website_name=self.website_name,
            date_scraped=utcnow(),
        )

        await self.store.store(COLLECTIONS.PRODUCT_LISTS, product_list)
        await self.store.store(COLLECTIONS.PRODUCTS, products)

        return product_list

    async def scrape_product_details(self, page, product_url: str) -> Product:
        """Scrape a single product page and store it."""
        await self._load(page, product_url, scroll_fractions=(1 / 3, 2 / 3))

        details = await page.extract(DETAIL_INSTRUCTION, ProductDetails)

        fields = details.model_dump()
        fields["url"] = product_url
        fields["id"] = details.id or AmazonNormalizer.extract_asin(product_url)
        product = Product(**fields, date_scraped=utcnow())

        await self.store.store(COLLECTIONS.PRODUCTS, product)

        return product

    async def scrape_product_reviews(self, page, product_url: str) -> List[Review]:
        """
        Scrape the reviews page for a product.

        Every review is marked verified whatever the page says. An empty
        extraction stores nothing.
        """
        reviews_url = AmazonNormalizer.reviews_url(product_url)

        await self._load(page, reviews_url)

        data = await page.extract(REVIEWS_INSTRUCTION, ReviewExtraction)

        reviews = [
            Review(
                product_id=data.product_id,
                author=review.author,
                rating=review.rating,
                title=review.title,
                content=review.content,
                date=AmazonNormalizer.parse_review_date(review.date),
                helpful=review.helpful,
                verified=True,
                date_scraped=utcnow(),
            )
            for review in data.reviews
        ]

        if reviews:
            await self.store.store(COLLECTIONS.REVIEWS, reviews)
            logger.info(f"Stored {len(reviews)} reviews for product {data.product_id}")

        return reviews
