"""Search service: interpret, filter, rank, sort and paginate."""
from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import Executor
from dataclasses import dataclass
from datetime import datetime
from time import perf_counter
from typing import Callable, Dict, List, Optional, Sequence

from .catalog import ProductStore, PurchaseHistory
from .filters import apply_filters
from .models import (
    Pagination,
    Product,
    QueryIntent,
    ScoredCandidate,
    SearchRequest,
    SearchResponse,
    SearchResult,
)
from .query import interpret
from .ranking import rank

logger = logging.getLogger(__name__)

_SortKey = Callable[[ScoredCandidate], tuple]

# Every key ends with product_id so equal values keep a stable order.
SORT_KEYS: Dict[str, _SortKey] = {
    "price_asc": lambda c: (c.product.price, c.product.product_id),
    "price_desc": lambda c: (-c.product.price, c.product.product_id),
    "rating": lambda c: (-c.product.rating, -c.product.rating_count, c.product.product_id),
    "newest": lambda c: (-c.product.created_at.timestamp(), c.product.product_id),
    "popularity": lambda c: (-c.product.units_sold, c.product.product_id),
    "discount": lambda c: (-c.product.discount_percent, c.product.product_id),
}


@dataclass(frozen=True)
class SearchOutcome:
    results: List[SearchResult]
    total: int
    intent: QueryIntent
    took_ms: float


class _RequestPurchases:
    """Remembers purchase counts so each product is looked up once per request."""

    def __init__(self, history: PurchaseHistory) -> None:
        self._history = history
        self._counts: Dict[tuple[str, int], int] = {}
        self._lock = threading.Lock()

    def purchase_count(self, user_id: str, product_id: int) -> int:
        key = (user_id, product_id)
        with self._lock:
            if key not in self._counts:
                self._counts[key] = self._history.purchase_count(user_id, product_id)
            return self._counts[key]


def apply_sorting(ranked: Sequence[ScoredCandidate], sort_by: Optional[str]) -> List[ScoredCandidate]:
    """Reorder ranked candidates for an explicit sort; relevance keeps rank order."""

    if not sort_by or sort_by == "relevance":
        return list(ranked)
    key = SORT_KEYS.get(sort_by)
    if key is None:
        raise ValueError(f"Unsupported sort order: {sort_by!r}")
    return sorted(ranked, key=key)


def paginate(items: Sequence[ScoredCandidate], page: int, limit: int) -> List[ScoredCandidate]:
    start = (page - 1) * limit
    return list(items[start : start + limit])


def to_search_result(
    product: Product,
    score: Optional[float] = None,
    repeat_purchase_count: Optional[int] = None,
) -> SearchResult:
    return SearchResult(
        product_id=product.product_id,
        title=product.title,
        description=product.description,
        mrp=product.mrp,
        selling_price=product.price,
        metadata=product.metadata.model_dump(exclude_none=True),
        stock=product.stock,
        rating=product.rating,
        rating_count=product.rating_count,
        score=round(score, 2) if score is not None else None,
        repeat_purchase_count=repeat_purchase_count or None,
    )


def search(
    request: SearchRequest,
    store: ProductStore,
    purchases: Optional[PurchaseHistory] = None,
    *,
    executor: Optional[Executor] = None,
    now: Optional[datetime] = None,
) -> SearchOutcome:
    t0 = perf_counter()
    intent = interpret(request.query)
    t1 = perf_counter()
    candidates = apply_filters(store.snapshot(), request, intent)
    t2 = perf_counter()
    lookup = _RequestPurchases(purchases) if request.user_id and purchases is not None else None
    ranked = rank(candidates, intent, request.user_id, lookup, now=now, executor=executor)
    t3 = perf_counter()
    ordered = apply_sorting(ranked, request.sort_by)
    page = paginate(ordered, request.page, request.limit)

    results = []
    for candidate in page:
        repeat_count = None
        if lookup is not None and request.user_id:
            repeat_count = lookup.purchase_count(request.user_id, candidate.product.product_id)
        results.append(to_search_result(candidate.product, candidate.score, repeat_count))
    t4 = perf_counter()

    total_ms = (t4 - t0) * 1000
    logger.info(
        "timing: total=%.2fms interpret=%.2fms filter=%.2fms rank=%.2fms post=%.2fms q=%r candidates=%s ranked=%s",
        total_ms,
        (t1 - t0) * 1000,
        (t2 - t1) * 1000,
        (t3 - t2) * 1000,
        (t4 - t3) * 1000,
        request.query,
        len(candidates),
        len(ranked),
    )
    return SearchOutcome(results=results, total=len(ordered), intent=intent, took_ms=total_ms)


def build_response(outcome: SearchOutcome, request: SearchRequest) -> SearchResponse:
    limit = request.limit
    return SearchResponse(
        data=outcome.results,
        pagination=Pagination(
            page=request.page,
            limit=limit,
            total=outcome.total,
            total_pages=math.ceil(outcome.total / limit),
        ),
        query_info=outcome.intent,
        latency_ms=round(outcome.took_ms, 2),
    )


def suggestions(partial_query: str, store: ProductStore, limit: int = 10) -> List[str]:
    """Titles, then brands and models, containing the processed query."""

    processed = interpret(partial_query).processed_query
    if not processed:
        return []
    products = store.snapshot()
    found: Dict[str, None] = {}
    for product in products:
        if processed in product.title.lower():
            found.setdefault(product.title)
        if len(found) >= limit * 2:
            break
    for field in ("brand", "model"):
        for product in products:
            value = product.metadata.get(field)
            if value and processed in value.lower():
                found.setdefault(value)
    return list(found)[:limit]


def _best_sellers(products: Sequence[Product], limit: int) -> List[SearchResult]:
    in_stock = [p for p in products if p.in_stock]
    in_stock.sort(key=lambda p: (-p.units_sold, p.product_id))
    return [to_search_result(p) for p in in_stock[:limit]]


def trending(store: ProductStore, limit: int = 10) -> List[SearchResult]:
    return _best_sellers(store.snapshot(), limit)


def by_category(category: str, store: ProductStore, limit: int = 20) -> List[SearchResult]:
    wanted = category.lower()
    products = [p for p in store.snapshot() if (p.metadata.category or "").lower() == wanted]
    return _best_sellers(products, limit)
