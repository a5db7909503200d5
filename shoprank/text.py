"""Lexical normalization helpers used by the query interpreter.

The interpreter runs these in a fixed order:

    1) :func:`clean_text` lowercases, folds accents (``unidecode``), strips
       punctuation and collapses whitespace.
    2) :func:`apply_spelling_corrections` substitutes known misspellings, then
       :func:`correct_brand_typos` snaps near-miss tokens onto brand names by
       Levenshtein distance.
    3) :func:`translate_colloquial` and :func:`normalize_colors` rewrite
       Hinglish and Hindi colour words into English.

Every helper is a pure ``str -> str`` function over module-level tables.
"""
from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Iterable, Mapping

from rapidfuzz.distance import Levenshtein
from unidecode import unidecode

from .vocabulary import (
    BRAND_ALIASES,
    BRANDS,
    CATEGORY_KEYWORDS,
    COLLOQUIAL_MAPPINGS,
    COLOR_MAPPINGS,
    PROTECTED_WORDS,
    SPELLING_CORRECTIONS,
)

logger = logging.getLogger(__name__)

# Keep letters, digits, spaces, the hyphen used by names like "fire-boltt"
# and the decimal point in prices like "1.5k".
_DISALLOWED_CHARS_RE = re.compile(r"[^0-9a-z.\- ]+")
_STRAY_DOT_RE = re.compile(r"(?<!\d)\.|\.(?!\d)")
# "rs500" and "₹500" are split into "rs 500" so price rules see the amount.
_CURRENCY_PREFIX_RE = re.compile(r"\brs(?=\d)")
_DIGIT_RE = re.compile(r"\d")
_MIN_FUZZY_TOKEN_LEN = 4
_MAX_BRAND_DISTANCE = 1


@lru_cache(maxsize=None)
def _whole_word_pattern(phrase: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE)


def _compile_substitutions(mapping: Mapping[str, str]) -> tuple[tuple[re.Pattern[str], str], ...]:
    # Longest phrases first so multi-word entries are not pre-empted.
    ordered = sorted(mapping.items(), key=lambda kv: -len(kv[0]))
    return tuple((_whole_word_pattern(source), target) for source, target in ordered)


_SPELLING_RULES = _compile_substitutions(SPELLING_CORRECTIONS)
_COLLOQUIAL_RULES = tuple(
    (_whole_word_pattern(word), synonyms[0] if synonyms else "")
    for word, synonyms in COLLOQUIAL_MAPPINGS.items()
)
_COLOR_RULES = _compile_substitutions(COLOR_MAPPINGS)

_KNOWN_WORDS: frozenset[str] = frozenset(
    set(BRANDS)
    | set(BRAND_ALIASES)
    | set(SPELLING_CORRECTIONS.values())
    | {keyword for _, keywords in CATEGORY_KEYWORDS for keyword in keywords}
)


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def clean_text(text: str) -> str:
    """Lowercase, ASCII-fold and strip punctuation from raw input."""

    lowered = unidecode((text or "").replace("₹", " rs ")).lower()
    cleaned = _DISALLOWED_CHARS_RE.sub(" ", lowered)
    cleaned = _STRAY_DOT_RE.sub(" ", cleaned)
    cleaned = _CURRENCY_PREFIX_RE.sub("rs ", cleaned)
    compact = collapse_whitespace(cleaned)
    logger.debug("clean_text raw=%r lowered=%r compact=%r", text, lowered, compact)
    return compact


def substitute_words(text: str, rules: Iterable[tuple[re.Pattern[str], str]]) -> str:
    """Apply whole-word substitutions in order and tidy the spacing."""

    result = text
    for pattern, replacement in rules:
        result = pattern.sub(replacement, result)
    return collapse_whitespace(result)


def apply_spelling_corrections(text: str) -> str:
    return substitute_words(text, _SPELLING_RULES)


def closest_brand(token: str, brands: Iterable[str] = BRANDS) -> str | None:
    """Return the brand within one edit of ``token``, if any.

    Candidates whose length differs from the token by more than one are
    skipped; on equal distance the earliest brand in ``brands`` wins.
    """

    best: str | None = None
    best_distance = _MAX_BRAND_DISTANCE + 1
    for brand in brands:
        if abs(len(brand) - len(token)) > 1:
            continue
        distance = Levenshtein.distance(token, brand, score_cutoff=_MAX_BRAND_DISTANCE)
        if distance < best_distance:
            best, best_distance = brand, distance
    return best


def _is_correctable(token: str) -> bool:
    return (
        len(token) >= _MIN_FUZZY_TOKEN_LEN
        and token not in PROTECTED_WORDS
        and token not in _KNOWN_WORDS
        and not _DIGIT_RE.search(token)
    )


def correct_brand_typos(text: str) -> str:
    corrected: list[str] = []
    for token in text.split():
        replacement = closest_brand(token) if _is_correctable(token) else None
        if replacement and replacement != token:
            logger.debug("brand typo %r -> %r", token, replacement)
            corrected.append(replacement)
        else:
            corrected.append(token)
    return " ".join(corrected)


def correct_spelling(text: str) -> str:
    return correct_brand_typos(apply_spelling_corrections(text))


def translate_colloquial(text: str) -> str:
    return substitute_words(text, _COLLOQUIAL_RULES)


def normalize_colors(text: str) -> str:
    return substitute_words(text, _COLOR_RULES)


@lru_cache(maxsize=None)
def _intent_pattern(phrase: str) -> re.Pattern[str]:
    # A glued model code may follow ("iphone15", "galaxys24") but not a longer
    # word ("redmi" is not "red").
    return re.compile(rf"\b{re.escape(phrase)}(?=$|[^a-z]|[a-z]\d)", re.IGNORECASE)


def contains_phrase(text: str, phrase: str) -> bool:
    """Phrase check used by the intent rules; must start on a word boundary."""

    return _intent_pattern(phrase).search(text) is not None
