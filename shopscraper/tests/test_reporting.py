"""
Reporting queries over the in-memory store.
"""
import pytest

from shopscraper.models.product import COLLECTIONS
from shopscraper import reporting


def product(name, price="$10.00", **fields):
    return {"name": name, "price": price, "url": f"https://x/{name}", **fields}


@pytest.mark.asyncio
async def test_price_range(memory_store):
    await memory_store.store(COLLECTIONS.PRODUCTS, [
        product("a", "$19.99"),
        product("b", "$1,234.56"),
    ])

    stats = await reporting.price_range(memory_store)

    assert stats["min_price"] == pytest.approx(19.99)
    assert stats["max_price"] == pytest.approx(1234.56)
    assert stats["avg_price"] == pytest.approx(627.275)


@pytest.mark.asyncio
async def test_price_range_skips_unparseable_prices(memory_store):
    await memory_store.store(COLLECTIONS.PRODUCTS, [
        product("a", "$20.00"),
        product("b", "Currently unavailable"),
    ])

    stats = await reporting.price_range(memory_store)

    assert stats == {"avg_price": 20.0, "min_price": 20.0, "max_price": 20.0}


@pytest.mark.asyncio
async def test_price_range_ignores_multi_offer_text(memory_store):
    await memory_store.store(COLLECTIONS.PRODUCTS, [
        product("a", "$19.99"),
        product("b", "4 offers from $12.99"),
    ])

    stats = await reporting.price_range(memory_store)

    assert stats == {"avg_price": 19.99, "min_price": 19.99, "max_price": 19.99}


@pytest.mark.asyncio
async def test_price_range_empty(memory_store):
    assert await reporting.price_range(memory_store) is None


@pytest.mark.asyncio
async def test_products_by_category_sorted_descending(memory_store):
    await memory_store.store(COLLECTIONS.PRODUCTS, [
        product("a", category="A"),
        product("b", category="B"),
        product("c", category="A"),
    ])

    groups = await reporting.products_by_category(memory_store)

    assert groups == [{"_id": "A", "count": 2}, {"_id": "B", "count": 1}]


@pytest.mark.asyncio
async def test_top_rated_products(memory_store):
    await memory_store.store(COLLECTIONS.PRODUCTS, [
        product("good", rating=4.0),
        product("great", rating=4.8),
        product("meh", rating=3.9),
        product("unrated"),
    ])

    names = {p["name"] for p in await reporting.top_rated_products(memory_store)}

    assert names == {"good", "great"}


@pytest.mark.asyncio
async def test_most_reviewed_products_top_ten(memory_store):
    await memory_store.store(COLLECTIONS.PRODUCTS, [
        product(f"p{i}", review_count=i) for i in range(12)
    ] + [product("no-count")])

    results = await reporting.most_reviewed_products(memory_store)

    assert len(results) == 10
    assert [p["review_count"] for p in results] == list(range(11, 1, -1))


@pytest.mark.asyncio
async def test_collection_counts(memory_store):
    await memory_store.store(COLLECTIONS.PRODUCTS, [product("a"), product("b")])
    await memory_store.store(COLLECTIONS.REVIEWS, {"product_id": "a", "rating": 5, "content": "ok"})

    counts = await reporting.collection_counts(memory_store)

    assert counts == {"PRODUCTS": 2, "PRODUCT_LISTS": 0, "REVIEWS": 1}


@pytest.mark.asyncio
async def test_run_report_renders_without_error(memory_store, capsys):
    await memory_store.store(COLLECTIONS.PRODUCTS, [
        product("a", "$20.00", category="A", rating=4.5, review_count=3),
        product("b", "$5.00"),
    ])

    await reporting.run_report(memory_store)

    out = capsys.readouterr().out
    assert "Products by Category" in out
    assert "Average Price: $12.50" in out
