"""
Canonical data contracts.
Oracle result shapes and the records persisted to the document store.
"""
from datetime import datetime, timezone
from typing import Optional, List, Dict

from pydantic import BaseModel, Field


# Collection names in the document store
class COLLECTIONS:
    PRODUCTS = "products"
    PRODUCT_LISTS = "product_lists"
    REVIEWS = "reviews"

    @classmethod
    def all(cls) -> Dict[str, str]:
        return {
            "PRODUCTS": cls.PRODUCTS,
            "PRODUCT_LISTS": cls.PRODUCT_LISTS,
            "REVIEWS": cls.REVIEWS,
        }


def utcnow() -> datetime:
    """Capture timestamp for scraped records."""
    return datetime.now(timezone.utc)


class ProductDetails(BaseModel):
    """
    Product as returned by the extraction oracle on a detail page.
    Price stays as page text; it is only normalized at report time.
    """
    id: Optional[str] = None
    name: str
    price: str
    currency: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    url: str
    brand: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    in_stock: Optional[bool] = None
    specs: Optional[Dict[str, str]] = None


class Product(ProductDetails):
    """Product record as persisted in the products collection."""
    date_scraped: datetime = Field(default_factory=utcnow)


class ListedProduct(BaseModel):
    """Partial product entry on a category page."""
    name: str
    price: str
    url: str
    image_url: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None


class ProductListExtraction(BaseModel):
    """Oracle result shape for a category page."""
    products: List[ListedProduct]
    category: str
    total_products: Optional[int] = None


class ProductList(BaseModel):
    """Snapshot of a category page, stored in product_lists."""
    products: List[Product]
    category: Optional[str] = None
    page: Optional[int] = None
    total_products: Optional[int] = None
    website_name: str
    date_scraped: datetime = Field(default_factory=utcnow)


class ExtractedReview(BaseModel):
    """Single review entry as returned by the oracle. Date is raw page text."""
    author: Optional[str] = None
    rating: float
    title: Optional[str] = None
    content: str
    date: Optional[str] = None
    helpful: Optional[int] = None


class ReviewExtraction(BaseModel):
    """Oracle result shape for a reviews page."""
    product_id: str
    reviews: List[ExtractedReview]


class Review(BaseModel):
    """Review record as persisted in the reviews collection."""
    id: Optional[str] = None
    product_id: str
    author: Optional[str] = None
    rating: float
    title: Optional[str] = None
    content: str
    date: Optional[datetime] = None
    verified: Optional[bool] = None
    helpful: Optional[int] = None
    date_scraped: datetime = Field(default_factory=utcnow)
