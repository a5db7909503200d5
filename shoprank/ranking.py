"""Scoring and ordering of candidate products for a query intent.

Each product's score blends seven 0-100 sub-scores (text relevance, rating,
popularity, price fit, stock, recency, discount) by ``RANKING_WEIGHTS``, then
subtracts capped penalties and adds intent and repeat-purchase boosts before
clamping to [0, 100]. :func:`rank` sorts by score with ``product_id`` as the
tie-break and finally applies the stock placement rule.
"""
from __future__ import annotations

import logging
import math
import re
from concurrent.futures import Executor
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol, Sequence

from .matching import text_similarity
from .models import InvalidCandidateError, Product, QueryIntent, ScoredCandidate
from .vocabulary import (
    BACKFILL_TARGET,
    BRAND_BOOST,
    CATEGORY_BOOST,
    COLOR_BOOST,
    COMPLAINT_PENALTY,
    COMPLAINT_THRESHOLD,
    IN_STOCK_HEAD_SIZE,
    LATEST_BOOST,
    MAX_PENALTY,
    MAX_PERSONALIZATION_BOOST,
    OUT_OF_RANGE_PRICE_SCORE,
    OUT_OF_STOCK_PENALTY,
    POPULARITY_CAP,
    PRICE_CAP,
    RANKING_WEIGHTS,
    RATING_PRIOR_COUNT,
    RATING_PRIOR_MEAN,
    RECENT_MODEL_KEYWORDS,
    RELEVANT_OUT_OF_STOCK_SCORE,
    REPEAT_PURCHASE_BASE_BOOST,
    REPEAT_PURCHASE_STEP_BOOST,
    RETURN_RATE_PENALTY,
    RETURN_RATE_THRESHOLD,
    STORAGE_256_BOOST,
    STORAGE_512_BOOST,
    STORAGE_MATCH_BOOST,
    UNRATED_SCORE,
)

logger = logging.getLogger(__name__)

_TITLE_TOKEN_RE = re.compile(r"[0-9a-z]+")
_SIZE_RE = re.compile(r"\s+")


class PurchaseLookup(Protocol):
    def purchase_count(self, user_id: str, product_id: int) -> int: ...


def rating_score(product: Product) -> float:
    if product.rating_count == 0:
        return UNRATED_SCORE
    shrunk = (product.rating_count * product.rating + RATING_PRIOR_COUNT * RATING_PRIOR_MEAN) / (
        product.rating_count + RATING_PRIOR_COUNT
    )
    return shrunk / 5 * 100


def popularity_score(product: Product) -> float:
    normalized = min(product.units_sold, POPULARITY_CAP) / POPULARITY_CAP
    return math.log10(1 + 9 * normalized) * 100


def discount_score(product: Product) -> float:
    return min(product.discount_percent * 2, 100.0)


def price_score(product: Product, intent: QueryIntent) -> float:
    intents = intent.intents
    capped = min(product.price, PRICE_CAP) / PRICE_CAP
    if intents.is_cheap:
        return (1 - capped) * 100
    if intents.is_expensive:
        return capped * 100

    price_range = intents.price_range
    if price_range is None or (price_range.min is None and price_range.max is None):
        return discount_score(product)

    low, high = price_range.min, price_range.max
    if high is not None and product.price > high:
        return OUT_OF_RANGE_PRICE_SCORE
    if low is not None:
        return 100.0 if product.price >= low else OUT_OF_RANGE_PRICE_SCORE
    if high <= 0:
        return 100.0
    # Only a ceiling: prefer the richer products that still fit the budget.
    return product.price / high * 100


def stock_score(product: Product) -> float:
    if product.stock == 0:
        return 0.0
    if product.stock < 5:
        return 30.0
    if product.stock < 20:
        return 60.0
    if product.stock < 100:
        return 80.0
    return 100.0


def recency_score(product: Product, now: datetime) -> float:
    age_days = (now - product.created_at).total_seconds() / 86400
    if age_days <= 30:
        return 100.0
    if age_days <= 90:
        return 70.0
    if age_days <= 180:
        return 50.0
    if age_days <= 365:
        return 30.0
    return 10.0


def penalties(product: Product) -> float:
    penalty = 0.0
    if product.stock == 0:
        penalty += OUT_OF_STOCK_PENALTY
    if product.return_rate > RETURN_RATE_THRESHOLD:
        penalty += (product.return_rate - RETURN_RATE_THRESHOLD) * RETURN_RATE_PENALTY
    if product.complaints > COMPLAINT_THRESHOLD:
        penalty += (product.complaints - COMPLAINT_THRESHOLD) * COMPLAINT_PENALTY
    return min(penalty, MAX_PENALTY)


def _same(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a) and bool(b) and a.strip().lower() == b.strip().lower()


def _storage_key(value: str) -> str:
    return _SIZE_RE.sub("", value).upper()


def storage_boost(product: Product, storage_tier: Optional[str]) -> float:
    if not storage_tier:
        return 0.0
    if storage_tier == "high":
        size = product.metadata.storage_value()
        if size is None:
            return 0.0
        if size >= 512:
            return STORAGE_512_BOOST
        if size >= 256:
            return STORAGE_256_BOOST
        return 0.0
    storage = product.metadata.storage
    if storage and _storage_key(storage) == _storage_key(storage_tier):
        return STORAGE_MATCH_BOOST
    return 0.0


def intent_boost(product: Product, intent: QueryIntent) -> float:
    intents = intent.intents
    metadata = product.metadata
    boost = 0.0
    if _same(metadata.color, intents.color):
        boost += COLOR_BOOST
    boost += storage_boost(product, intents.storage_tier)
    if _same(metadata.brand, intents.brand):
        boost += BRAND_BOOST
    if _same(metadata.category, intents.category):
        boost += CATEGORY_BOOST
    if intents.is_latest:
        title_tokens = set(_TITLE_TOKEN_RE.findall(product.title.lower()))
        if title_tokens & RECENT_MODEL_KEYWORDS:
            boost += LATEST_BOOST
    return boost


def personalization_boost(purchase_count: int) -> float:
    """Reward products the user has bought before, more for repeat buys."""

    if purchase_count <= 0:
        return 0.0
    boost = REPEAT_PURCHASE_BASE_BOOST + (purchase_count - 1) * REPEAT_PURCHASE_STEP_BOOST
    return min(boost, MAX_PERSONALIZATION_BOOST)


def calculate_score(
    product: Product,
    intent: QueryIntent,
    similarity: float,
    *,
    now: datetime,
    purchase_count: int = 0,
) -> float:
    weighted = (
        similarity * 100 * RANKING_WEIGHTS["text_relevance"]
        + rating_score(product) * RANKING_WEIGHTS["rating"]
        + popularity_score(product) * RANKING_WEIGHTS["popularity"]
        + price_score(product, intent) * RANKING_WEIGHTS["price"]
        + stock_score(product) * RANKING_WEIGHTS["stock"]
        + recency_score(product, now) * RANKING_WEIGHTS["recency"]
        + discount_score(product) * RANKING_WEIGHTS["discount"]
    )
    score = (
        weighted
        - penalties(product)
        + intent_boost(product, intent)
        + personalization_boost(purchase_count)
    )
    return max(0.0, min(100.0, score))


def _score_candidate(
    product: Product,
    intent: QueryIntent,
    now: datetime,
    user_id: Optional[str],
    purchases: Optional[PurchaseLookup],
) -> Optional[ScoredCandidate]:
    if not isinstance(product, Product):
        raise InvalidCandidateError(f"candidate must be a Product, got {type(product).__name__}")
    similarity = text_similarity(product, intent.tokens)
    if similarity is None:
        return None
    purchase_count = 0
    if user_id and purchases is not None:
        purchase_count = purchases.purchase_count(user_id, product.product_id)
    score = calculate_score(product, intent, similarity, now=now, purchase_count=purchase_count)
    return ScoredCandidate(product=product, score=score, text_similarity=similarity)


def sort_key(candidate: ScoredCandidate) -> tuple[float, int]:
    return (-candidate.score, candidate.product.product_id)


def apply_placement_rules(ranked: Sequence[ScoredCandidate]) -> list[ScoredCandidate]:
    """Keep available inventory at the head of a score-sorted list.

    Out-of-stock items only follow a full head of in-stock items when they
    score above ``RELEVANT_OUT_OF_STOCK_SCORE``; a short in-stock list is
    backfilled with the best out-of-stock items up to ``BACKFILL_TARGET``.
    """

    in_stock = [candidate for candidate in ranked if candidate.product.in_stock]
    out_of_stock = [candidate for candidate in ranked if not candidate.product.in_stock]
    if len(in_stock) >= IN_STOCK_HEAD_SIZE:
        extras = [candidate for candidate in out_of_stock if candidate.score > RELEVANT_OUT_OF_STOCK_SCORE]
    else:
        extras = out_of_stock[: max(0, BACKFILL_TARGET - len(in_stock))]
    return in_stock + extras


def rank(
    candidates: Iterable[Product],
    intent: QueryIntent,
    user_id: Optional[str] = None,
    purchases: Optional[PurchaseLookup] = None,
    *,
    now: Optional[datetime] = None,
    executor: Optional[Executor] = None,
) -> list[ScoredCandidate]:
    """Score, sort and place ``candidates`` for ``intent``.

    Products that do not fuzzy-match the query tokens are left out. When an
    ``executor`` is given the per-candidate scoring is fanned out over it; the
    output is identical to serial scoring.
    """

    now = now or datetime.now(timezone.utc)
    products = list(candidates)

    def score(product: Product) -> Optional[ScoredCandidate]:
        return _score_candidate(product, intent, now, user_id, purchases)

    if executor is not None and len(products) > 1:
        results = list(executor.map(score, products))
    else:
        results = [score(product) for product in products]

    scored = sorted((candidate for candidate in results if candidate is not None), key=sort_key)
    placed = apply_placement_rules(scored)
    logger.debug(
        "rank candidates=%s matched=%s placed=%s tokens=%s",
        len(products),
        len(scored),
        len(placed),
        list(intent.tokens),
    )
    return placed
