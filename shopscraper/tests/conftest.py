"""
Shared test doubles: an in-memory document store and a scripted page.
"""
import copy
from contextlib import asynccontextmanager
from collections import defaultdict
from typing import Any, Dict, List, Optional

import pytest

from shopscraper.services.document_store import to_document


def _matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for field, condition in query.items():
        if isinstance(condition, dict):
            for op, operand in condition.items():
                if op == "$exists":
                    if (field in document) != bool(operand):
                        return False
                elif op == "$gte":
                    value = document.get(field)
                    if value is None or value < operand:
                        return False
                else:
                    raise NotImplementedError(op)
        elif document.get(field) != condition:
            return False
    return True


class InMemoryDocumentStore:
    """Same async surface as DocumentStore, backed by dicts."""

    def __init__(self):
        self.collections: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.insert_calls = 0
        self.connected = False
        self.closed = False

    async def connect(self):
        self.connected = True
        return self

    async def close(self):
        self.closed = True

    @asynccontextmanager
    async def session(self):
        try:
            yield await self.connect()
        finally:
            await self.close()

    async def store(self, collection_name, data) -> int:
        if isinstance(data, (list, tuple)):
            if not data:
                return 0
            documents = [to_document(record) for record in data]
        else:
            documents = [to_document(data)]
        self.insert_calls += 1
        self.collections[collection_name].extend(documents)
        return len(documents)

    async def find(self, collection_name, query=None, projection=None):
        return [
            copy.deepcopy(d) for d in self.collections[collection_name]
            if _matches(d, query or {})
        ]

    async def count(self, collection_name, query=None) -> int:
        return len(await self.find(collection_name, query))

    async def aggregate(self, collection_name, pipeline):
        rows = await self.find(collection_name)
        for stage in pipeline:
            if "$group" in stage:
                grouping = stage["$group"]
                key_field = grouping["_id"].lstrip("$")
                groups: Dict[Any, Dict[str, Any]] = {}
                for row in rows:
                    key = row.get(key_field)
                    group = groups.setdefault(key, {"_id": key})
                    for out, acc in grouping.items():
                        if out != "_id":
                            group[out] = group.get(out, 0) + acc["$sum"]
                rows = list(groups.values())
            elif "$sort" in stage:
                for field, direction in reversed(list(stage["$sort"].items())):
                    rows.sort(key=lambda r: r.get(field), reverse=direction < 0)
            else:
                raise NotImplementedError(stage)
        return rows


class FakePage:
    """Scripted page: extract() returns queued results keyed by schema name."""

    def __init__(self, responses: Optional[Dict[str, list]] = None):
        self.responses = {k: list(v) for k, v in (responses or {}).items()}
        self.visited: List[str] = []
        self.scrolls: List[float] = []
        self.waits: List[int] = []
        self.extract_calls: List[str] = []
        self.url = ""

    def queue(self, schema_name: str, *results):
        self.responses.setdefault(schema_name, []).extend(results)

    async def goto(self, url: str):
        self.url = url
        self.visited.append(url)

    async def wait(self, ms: int):
        self.waits.append(ms)

    async def scroll_to(self, fraction: float):
        self.scrolls.append(fraction)

    async def extract(self, instruction, schema):
        self.extract_calls.append(schema.__name__)
        queued = self.responses.get(schema.__name__)
        if not queued:
            raise AssertionError(f"No scripted response for {schema.__name__}")
        result = queued.pop(0)
        if isinstance(result, Exception):
            raise result
        return schema.model_validate(result)


@pytest.fixture
def memory_store():
    return InMemoryDocumentStore()


@pytest.fixture
def fake_page():
    return FakePage()


def listing(count: int, category: str = "Laptops") -> Dict[str, Any]:
    """Oracle reply for a category page with `count` products."""
    return {
        "products": [
            {
                "name": f"Laptop {i}",
                "price": f"${100 * i}.99",
                "url": f"https://www.amazon.com/dp/B0000000{i:02d}",
                "rating": 4.0 + i / 10,
                "review_count": 10 * i,
            }
            for i in range(1, count + 1)
        ],
        "category": category,
        "total_products": count,
    }


def details(index: int) -> Dict[str, Any]:
    """Oracle reply for a product page."""
    return {
        "name": f"Laptop {index} Detailed",
        "price": f"${100 * index}.99",
        "url": "https://ignored.example",
        "brand": "Acme",
        "category": "Laptops",
        "rating": 4.5,
        "review_count": 120,
        "in_stock": True,
        "specs": {"RAM": "16 GB"},
    }


def review_page(product_id: str, count: int) -> Dict[str, Any]:
    """Oracle reply for a reviews page."""
    return {
        "product_id": product_id,
        "reviews": [
            {
                "author": f"Reviewer {i}",
                "rating": 5,
                "title": "Great",
                "content": "Works well",
                "date": "Reviewed in the United States on January 5, 2024",
                "helpful": i,
            }
            for i in range(count)
        ],
    }
