"""Shared fixtures: a product factory and a fixed clock."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from shoprank.models import Product

NOW = datetime(2026, 10, 19, tzinfo=timezone.utc)


def build_product(product_id: int = 1, **overrides) -> Product:
    metadata = overrides.pop("metadata", {"brand": "Apple", "category": "phone"})
    fields = {
        "product_id": product_id,
        "title": f"Product {product_id}",
        "description": "",
        "rating": 4.0,
        "rating_count": 100,
        "price": 10000,
        "mrp": 12000,
        "stock": 50,
        "units_sold": 1000,
        "return_rate": 0,
        "complaints": 0,
        "created_at": NOW - timedelta(days=400),
        "metadata": metadata,
    }
    fields.update(overrides)
    return Product(**fields)


@pytest.fixture
def make_product():
    return build_product


@pytest.fixture
def now() -> datetime:
    return NOW
