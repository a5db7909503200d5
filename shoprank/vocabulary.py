"""Static lookup tables shared by the query interpreter and the ranker.

Everything here is built once at import time and exposed read-only
(``MappingProxyType``, tuples, frozensets) so concurrent requests can share it
without locking.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

# Known misspellings, matched as whole phrases. Longer phrases are applied
# first so "one plus" wins over any single-word rule.
SPELLING_CORRECTIONS: Mapping[str, str] = MappingProxyType(
    {
        "ifone": "iphone",
        "iphon": "iphone",
        "ipone": "iphone",
        "aiphone": "iphone",
        "i phone": "iphone",
        "samung": "samsung",
        "samsang": "samsung",
        "samsun": "samsung",
        "sumsung": "samsung",
        "one plus": "oneplus",
        "onplus": "oneplus",
        "realmy": "realme",
        "relme": "realme",
        "redme": "redmi",
        "redemy": "redmi",
        "xaomi": "xiaomi",
        "xiomi": "xiaomi",
        "mi": "xiaomi",
        "opoo": "oppo",
        "loptop": "laptop",
        "laptap": "laptop",
        "hedphone": "headphone",
        "headfone": "headphone",
        "earpod": "earpods",
        "airpod": "airpods",
        "charjer": "charger",
        "chargr": "charger",
    }
)

# Hinglish -> English. Only the first synonym is substituted; an empty first
# synonym drops the word.
COLLOQUIAL_MAPPINGS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "sasta": ("cheap", "budget", "affordable", "low price"),
        "sastha": ("cheap", "budget", "affordable", "low price"),
        "mehnga": ("expensive", "premium", "high end"),
        "mahenga": ("expensive", "premium", "high end"),
        "accha": ("good", "best", "quality"),
        "acha": ("good", "best", "quality"),
        "bekaar": ("bad", "poor"),
        "bekar": ("bad", "poor"),
        "naya": ("latest", "new", "recent"),
        "naye": ("latest", "new", "recent"),
        "purana": ("old", "previous"),
        "bada": ("big", "large", "plus", "max"),
        "badi": ("big", "large", "plus", "max"),
        "chota": ("small", "mini", "compact"),
        "choti": ("small", "mini", "compact"),
        "wala": ("",),
        "wali": ("",),
        "ka": ("",),
        "ki": ("",),
        "ke": ("",),
        "mobile": ("phone", "smartphone"),
    }
)

COLOR_MAPPINGS: Mapping[str, str] = MappingProxyType(
    {
        "lal": "red",
        "neela": "blue",
        "nila": "blue",
        "hara": "green",
        "peela": "yellow",
        "kaala": "black",
        "kala": "black",
        "safed": "white",
        "gulabi": "pink",
        "grey": "gray",
    }
)

COLORS: tuple[str, ...] = (
    "black",
    "white",
    "blue",
    "red",
    "green",
    "gold",
    "silver",
    "purple",
    "pink",
    "gray",
    "yellow",
    "orange",
)

CHEAP_KEYWORDS: tuple[str, ...] = ("cheap", "budget", "affordable", "low price", "sasta", "value")
EXPENSIVE_KEYWORDS: tuple[str, ...] = ("expensive", "premium", "flagship", "high end", "best", "top")
LATEST_KEYWORDS: tuple[str, ...] = ("latest", "new", "newest", "recent", "2024", "2025", "launched")

HIGH_STORAGE_PHRASES: tuple[str, ...] = (
    "more storage",
    "high storage",
    "maximum storage",
    "max storage",
    "bigger storage",
    "large storage",
    "highest storage",
    "most storage",
    "zyada storage",
    "big storage",
)

STORAGE_PATTERN = re.compile(r"(?<![\d.])(\d+)\s*(gb|tb)\b", re.IGNORECASE)

# "around" price intents are widened into a band of +/- this fraction.
AROUND_PRICE_BAND = 0.20


@dataclass(frozen=True)
class PricePattern:
    """A numeric price phrase; ``kind`` is ``"max"`` or ``"around"``."""

    pattern: re.Pattern[str]
    kind: str


# An amount with an optional decimal part and "k" suffix: "60000", "60k", "1.5k".
_AMOUNT = r"(\d+(?:\.\d+)?)(k)?"

# Order is precedence: the first pattern that matches decides the range.
PRICE_PATTERNS: tuple[PricePattern, ...] = (
    PricePattern(re.compile(rf"\bunder\s*(?:rs\s*)?{_AMOUNT}\b"), "max"),
    PricePattern(re.compile(rf"\bbelow\s*(?:rs\s*)?{_AMOUNT}\b"), "max"),
    PricePattern(re.compile(rf"\b{_AMOUNT}\s*rupees?\b"), "around"),
    PricePattern(re.compile(rf"\b{_AMOUNT}\s*rs\b"), "around"),
    PricePattern(re.compile(rf"\brs\s*{_AMOUNT}\b"), "around"),
    PricePattern(re.compile(rf"\bbudget\s*(?:rs\s*)?{_AMOUNT}\b"), "max"),
    PricePattern(re.compile(rf"\b{_AMOUNT}\s*budget\b"), "max"),
    PricePattern(re.compile(rf"\b{_AMOUNT}\s*(?:ke\s*)?andar\b"), "max"),
    PricePattern(re.compile(rf"\b{_AMOUNT}\s*tak\b"), "max"),
)

BRANDS: tuple[str, ...] = (
    "apple",
    "samsung",
    "oneplus",
    "xiaomi",
    "redmi",
    "realme",
    "oppo",
    "vivo",
    "motorola",
    "nokia",
    "sony",
    "lg",
    "google",
    "asus",
    "lenovo",
    "hp",
    "dell",
    "acer",
    "msi",
    "boat",
    "jbl",
    "bose",
    "sennheiser",
    "skullcandy",
    "anker",
    "belkin",
    "spigen",
    "ringke",
    "noise",
    "fire-boltt",
    "amazfit",
)

# Product-line nicknames and brand spellings -> canonical brand name.
BRAND_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "iphone": "Apple",
        "ipad": "Apple",
        "macbook": "Apple",
        "airpods": "Apple",
        "apple watch": "Apple",
        "apple": "Apple",
        "galaxy": "Samsung",
        "samsung": "Samsung",
        "oneplus": "OnePlus",
        "xiaomi": "Xiaomi",
        "redmi": "Redmi",
        "poco": "Poco",
        "realme": "Realme",
        "oppo": "Oppo",
        "vivo": "Vivo",
        "motorola": "Motorola",
        "moto": "Motorola",
        "nokia": "Nokia",
        "google": "Google",
        "pixel": "Google",
        "sony": "Sony",
        "jbl": "JBL",
        "boat": "Boat",
        "noise": "Noise",
        "bose": "Bose",
        "sennheiser": "Sennheiser",
        "hp": "HP",
        "dell": "Dell",
        "lenovo": "Lenovo",
        "asus": "Asus",
        "acer": "Acer",
        "msi": "MSI",
    }
)

ACCESSORY_CATEGORY = "accessory"
ACCESSORY_KEYWORDS: tuple[str, ...] = (
    "cover",
    "case",
    "charger",
    "cable",
    "adapter",
    "screen guard",
    "tempered glass",
    "power bank",
    "protector",
)

# Checked in this order; the first category with a keyword hit wins.
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("phone", ("phone", "mobile", "smartphone", "iphone", "samsung", "oneplus", "xiaomi", "redmi", "realme", "oppo", "vivo")),
    ("laptop", ("laptop", "notebook", "macbook", "chromebook")),
    ("headphone", ("headphone", "earphone", "earbud", "earbuds", "airpods", "headset", "tws")),
    ("tablet", ("tablet", "ipad", "tab")),
    ("smartwatch", ("watch", "smartwatch", "band", "fitness band")),
)

STOP_WORDS: frozenset[str] = frozenset(
    {
        "a", "an", "the", "is", "are", "was", "were", "for", "of", "to", "in", "on",
        "with", "and", "or", "i", "want", "need", "looking", "search", "find", "show",
        "me", "please",
    }
)

# Consumed into intents, never text-matched.
INTENT_WORDS: frozenset[str] = frozenset(
    {
        "cheap", "budget", "affordable", "expensive", "premium", "latest", "new", "best",
        "good", "top", "under", "below", "rupees", "rupee", "rs", "price", "color", "colour",
        "more", "storage", "tak", "andar", "ke",
    }
)

# Words the brand fuzzy-corrector must leave alone.
PROTECTED_WORDS: frozenset[str] = frozenset(
    {
        "good", "best", "cheap", "sale", "deal", "fast", "slim", "thin", "mini", "plus",
        "pro", "max", "ultra", "lite", "large", "small", "big", "dual", "gold", "blue",
        "pink", "gray", "black", "white", "green", "silver", "purple", "yellow", "orange",
        "red", "sell", "note", "band", "case", "cover", "phone", "tab", "more",
        "under", "below", "with", "nice", "bass", "wireless", "smart",
    }
    # Everyday words one edit away from a brand name.
    | {
        "cell", "well", "tell", "bell", "fell", "yell", "doll", "dull", "song", "tony",
        "pony", "bony", "base", "nose", "rose", "lose", "hose", "pose", "dose", "boss",
        "bone", "beat", "boot", "coat", "goat", "moat", "bolt", "boats", "goggle",
        "noisy", "poise", "apply", "anger", "aces",
    }
    | set(COLORS)
    | set(COLOR_MAPPINGS)
    | STOP_WORDS
    | INTENT_WORDS
)

RECENT_MODEL_KEYWORDS: frozenset[str] = frozenset({"16", "15", "24", "14", "13", "pro", "ultra", "max", "plus"})

RANKING_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "text_relevance": 0.35,
        "rating": 0.20,
        "popularity": 0.15,
        "price": 0.10,
        "stock": 0.10,
        "recency": 0.05,
        "discount": 0.05,
    }
)

FIELD_WEIGHTS: tuple[tuple[str, float], ...] = (
    ("title", 0.4),
    ("description", 0.2),
    ("brand", 0.15),
    ("model", 0.15),
    ("category", 0.1),
)
MATCH_THRESHOLD = 0.4
EMPTY_QUERY_SIMILARITY = 0.5

RATING_PRIOR_COUNT = 100
RATING_PRIOR_MEAN = 3.5
UNRATED_SCORE = 30.0
POPULARITY_CAP = 100_000
PRICE_CAP = 200_000
OUT_OF_RANGE_PRICE_SCORE = 20.0

OUT_OF_STOCK_PENALTY = 25.0
RETURN_RATE_THRESHOLD = 5.0
RETURN_RATE_PENALTY = 1.0  # per percentage point above threshold
COMPLAINT_THRESHOLD = 10
COMPLAINT_PENALTY = 0.2  # per complaint above threshold
MAX_PENALTY = 30.0

COLOR_BOOST = 15.0
STORAGE_MATCH_BOOST = 15.0
STORAGE_512_BOOST = 15.0
STORAGE_256_BOOST = 10.0
BRAND_BOOST = 10.0
CATEGORY_BOOST = 10.0
LATEST_BOOST = 10.0
MAX_INTENT_BOOST = COLOR_BOOST + STORAGE_MATCH_BOOST + BRAND_BOOST + CATEGORY_BOOST + LATEST_BOOST

REPEAT_PURCHASE_BASE_BOOST = 10.0
REPEAT_PURCHASE_STEP_BOOST = 5.0
MAX_PERSONALIZATION_BOOST = 20.0

# Post-ranking placement of out-of-stock items.
IN_STOCK_HEAD_SIZE = 10
BACKFILL_TARGET = 20
RELEVANT_OUT_OF_STOCK_SCORE = 70.0
