"""Fuzzy text matching of query tokens against weighted product fields."""
from __future__ import annotations

import logging
import math

from rapidfuzz import fuzz, utils

from .models import Product
from .vocabulary import EMPTY_QUERY_SIMILARITY, FIELD_WEIGHTS, MATCH_THRESHOLD

logger = logging.getLogger(__name__)

# Stands in for a perfect (zero-distance) field so the product stays finite.
_EPSILON = 0.001


def field_text(product: Product, field: str) -> str:
    if field == "title":
        return product.title
    if field == "description":
        return product.description
    return product.metadata.get(field) or ""


def field_similarity(phrase: str, text: str) -> float:
    """Similarity in [0, 1] of ``phrase`` anywhere inside ``text``."""

    phrase = utils.default_process(phrase)
    text = utils.default_process(text)
    if not phrase or not text:
        return 0.0
    score = fuzz.token_set_ratio(phrase, text)
    # Substring alignment only when the phrase fits inside the field, so a
    # short field such as brand "hp" cannot match inside "iphone".
    if len(phrase) <= len(text):
        score = max(score, fuzz.partial_ratio(phrase, text))
    return score / 100


def text_similarity(product: Product, tokens: tuple[str, ...] | list[str]) -> float | None:
    """Score ``product`` against the joined search tokens.

    Returns ``None`` when no field comes within ``MATCH_THRESHOLD`` of the
    phrase; the caller drops such products. With no tokens at all every
    product gets ``EMPTY_QUERY_SIMILARITY``.
    """

    phrase = " ".join(tokens)
    if not phrase:
        return EMPTY_QUERY_SIMILARITY

    combined = 1.0
    matched = False
    for field, weight in FIELD_WEIGHTS:
        distance = 1 - field_similarity(phrase, field_text(product, field))
        if distance > MATCH_THRESHOLD:
            continue
        matched = True
        combined *= math.pow(max(distance, _EPSILON), weight)

    if not matched:
        return None
    similarity = 1 - combined
    logger.debug("text_similarity product=%s phrase=%r -> %.3f", product.product_id, phrase, similarity)
    return similarity
