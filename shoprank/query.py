"""Query interpreter: free text -> :class:`~shoprank.models.QueryIntent`.

Stages run in a fixed order, each consuming the previous stage's output:
normalize, spell-correct, translate colloquial terms, normalize colours, then
extract intents and tokenize from the fully normalized string.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .models import Intents, InvalidQueryError, PriceRange, QueryIntent
from .text import (
    clean_text,
    contains_phrase,
    correct_spelling,
    normalize_colors,
    translate_colloquial,
)
from .vocabulary import (
    ACCESSORY_CATEGORY,
    ACCESSORY_KEYWORDS,
    AROUND_PRICE_BAND,
    BRAND_ALIASES,
    CATEGORY_KEYWORDS,
    CHEAP_KEYWORDS,
    COLORS,
    EXPENSIVE_KEYWORDS,
    HIGH_STORAGE_PHRASES,
    INTENT_WORDS,
    LATEST_KEYWORDS,
    PRICE_PATTERNS,
    STOP_WORDS,
    STORAGE_PATTERN,
)

logger = logging.getLogger(__name__)

_PRICE_TOKEN_RE = re.compile(r"^\d+(?:\.\d+)?k?$")


def _any_phrase(text: str, phrases: tuple[str, ...]) -> bool:
    return any(contains_phrase(text, phrase) for phrase in phrases)


def extract_price_flags(text: str) -> dict[str, Any]:
    return {
        "is_cheap": _any_phrase(text, CHEAP_KEYWORDS),
        "is_expensive": _any_phrase(text, EXPENSIVE_KEYWORDS),
        "is_latest": _any_phrase(text, LATEST_KEYWORDS),
    }


def extract_price_range(text: str) -> dict[str, Any]:
    for price_pattern in PRICE_PATTERNS:
        match = price_pattern.pattern.search(text)
        if not match:
            continue
        value = float(match.group(1))
        if match.group(2) and value < 1000:
            value *= 1000
        if price_pattern.kind == "around":
            band = PriceRange(min=value * (1 - AROUND_PRICE_BAND), max=value * (1 + AROUND_PRICE_BAND))
        else:
            band = PriceRange(max=value)
        logger.debug("price pattern %r matched %r -> %s", price_pattern.pattern.pattern, match.group(0), band)
        return {"price_range": band}
    return {}


def extract_color(text: str) -> dict[str, Any]:
    for color in COLORS:
        if contains_phrase(text, color):
            return {"color": color}
    return {}


def extract_storage(text: str) -> dict[str, Any]:
    if _any_phrase(text, HIGH_STORAGE_PHRASES):
        return {"storage_tier": "high"}
    match = STORAGE_PATTERN.search(text)
    if match:
        return {"storage_tier": f"{match.group(1)}{match.group(2).upper()}"}
    return {}


def extract_brand(text: str) -> dict[str, Any]:
    for alias, brand in BRAND_ALIASES.items():
        if contains_phrase(text, alias):
            return {"brand": brand}
    return {}


def extract_category(text: str) -> dict[str, Any]:
    # Accessory words first: "iphone cover" is an accessory, not a phone.
    if _any_phrase(text, ACCESSORY_KEYWORDS):
        return {"category": ACCESSORY_CATEGORY}
    for category, keywords in CATEGORY_KEYWORDS:
        if _any_phrase(text, keywords):
            return {"category": category}
    return {}


@dataclass(frozen=True)
class IntentRule:
    """A named extractor returning the ``Intents`` fields it recognised."""

    name: str
    extract: Callable[[str], dict[str, Any]]


INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule("price_flags", extract_price_flags),
    IntentRule("price_range", extract_price_range),
    IntentRule("color", extract_color),
    IntentRule("storage", extract_storage),
    IntentRule("brand", extract_brand),
    IntentRule("category", extract_category),
)


def extract_intents(text: str, rules: tuple[IntentRule, ...] = INTENT_RULES) -> Intents:
    fields: dict[str, Any] = {}
    for rule in rules:
        found = rule.extract(text)
        if found:
            logger.debug("intent rule %s -> %s", rule.name, found)
        fields.update(found)
    return Intents(**fields)


def tokenize(text: str) -> tuple[str, ...]:
    """Residual search terms: no stop-words, intent words or bare prices."""

    return tuple(
        token
        for token in text.split()
        if len(token) > 1
        and token not in STOP_WORDS
        and token not in INTENT_WORDS
        and not _PRICE_TOKEN_RE.match(token)
    )


def normalize_query(raw_query: str) -> str:
    cleaned = clean_text(raw_query)
    corrected = correct_spelling(cleaned)
    translated = translate_colloquial(corrected)
    normalized = normalize_colors(translated)
    logger.debug(
        "normalize_query cleaned=%r corrected=%r translated=%r normalized=%r",
        cleaned,
        corrected,
        translated,
        normalized,
    )
    return normalized


def interpret(raw_query: Optional[str]) -> QueryIntent:
    """Turn a raw query into normalized text, tokens and structured intents."""

    if raw_query is None:
        raw_query = ""
    if not isinstance(raw_query, str):
        raise InvalidQueryError(f"query must be text, got {type(raw_query).__name__}")

    processed = normalize_query(raw_query)
    if not processed:
        return QueryIntent(original_query=raw_query, processed_query="")

    intent = QueryIntent(
        original_query=raw_query,
        processed_query=processed,
        tokens=tokenize(processed),
        intents=extract_intents(processed),
    )
    logger.info(
        "interpret q=%r processed=%r tokens=%s intents=%s",
        raw_query,
        processed,
        list(intent.tokens),
        intent.intents.model_dump(exclude_none=True),
    )
    return intent
