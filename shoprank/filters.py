"""Candidate filtering that runs before ranking.

Explicit request filters are hard excludes. Intent-derived price bounds only
apply for a bound the request did not set itself, an ``accessory`` intent
category is a hard exclude unless the request names a category, and an intent
colour only moves matching products to the front.
"""
from __future__ import annotations

import logging
from typing import Iterable, List

from .models import Product, QueryIntent, SearchRequest
from .vocabulary import ACCESSORY_CATEGORY

logger = logging.getLogger(__name__)


def _matches(value: str | None, wanted: str) -> bool:
    return (value or "").lower() == wanted.lower()


def matches_color(product: Product, color: str) -> bool:
    return _matches(product.metadata.color, color) or color.lower() in product.title.lower()


def apply_filters(products: Iterable[Product], request: SearchRequest, intent: QueryIntent) -> List[Product]:
    intents = intent.intents
    filtered = list(products)
    before = len(filtered)

    if request.category:
        filtered = [p for p in filtered if _matches(p.metadata.category, request.category)]
    elif intents.category == ACCESSORY_CATEGORY:
        filtered = [p for p in filtered if _matches(p.metadata.category, ACCESSORY_CATEGORY)]

    if request.brand:
        filtered = [p for p in filtered if _matches(p.metadata.brand, request.brand)]

    price_range = intents.price_range
    min_price = request.min_price if request.min_price is not None else (price_range.min if price_range else None)
    max_price = request.max_price if request.max_price is not None else (price_range.max if price_range else None)
    if min_price is not None:
        filtered = [p for p in filtered if p.price >= min_price]
    if max_price is not None:
        filtered = [p for p in filtered if p.price <= max_price]

    if request.min_rating is not None:
        filtered = [p for p in filtered if p.rating >= request.min_rating]

    if request.in_stock:
        filtered = [p for p in filtered if p.in_stock]

    if intents.color:
        color = intents.color
        filtered = [p for p in filtered if matches_color(p, color)] + [
            p for p in filtered if not matches_color(p, color)
        ]

    logger.debug("apply_filters kept=%s of %s", len(filtered), before)
    return filtered
