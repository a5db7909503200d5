"""Pydantic models for catalog records, query intents and API payloads."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .config import settings

_STORAGE_RE = re.compile(r"(\d+)\s*(gb|tb)?", re.IGNORECASE)

SortBy = Literal["relevance", "price_asc", "price_desc", "rating", "newest", "popularity", "discount"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InvalidQueryError(TypeError):
    """Raised when the query handed to the interpreter is not text."""


class InvalidCandidateError(TypeError):
    """Raised when the ranker is handed something other than a Product."""


class ProductMetadata(BaseModel):
    """Open attribute bag with typed access to the keys ranking reads.

    Only ``brand``, ``model``, ``category``, ``color``, ``storage`` and ``ram``
    are declared; anything else a scraper or generator attaches (``screenSize``,
    ``battery``, ...) is kept as an extra field.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    brand: str | None = None
    model: str | None = None
    category: str | None = None
    color: str | None = None
    storage: str | None = None
    ram: str | None = None

    def get(self, key: str, default: str | None = None) -> str | None:
        if key in type(self).model_fields:
            value = getattr(self, key)
        else:
            value = (self.model_extra or {}).get(key)
        return default if value is None else value

    def storage_value(self) -> int | None:
        """Storage in GB, or ``None`` when absent or unparsable."""
        if not self.storage:
            return None
        match = _STORAGE_RE.search(self.storage)
        if not match:
            return None
        amount = int(match.group(1))
        if (match.group(2) or "").lower() == "tb":
            amount *= 1024
        return amount


class Product(BaseModel):
    """Catalog record. Read-only to the ranking pipeline."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    product_id: int
    title: str
    description: str = ""
    rating: float = Field(default=0.0, ge=0, le=5)
    rating_count: int = Field(default=0, ge=0)
    price: float = Field(ge=0)
    mrp: float = Field(ge=0)
    currency: str = "INR"
    stock: int = Field(default=0, ge=0)
    units_sold: int = Field(default=0, ge=0)
    return_rate: float = Field(default=0.0, ge=0)
    complaints: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=_utcnow)
    metadata: ProductMetadata = Field(default_factory=ProductMetadata)

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps in catalog files are UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _price_not_above_mrp(self) -> "Product":
        if self.price > self.mrp:
            raise ValueError(f"price {self.price} exceeds mrp {self.mrp}")
        return self

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    @property
    def discount_percent(self) -> float:
        if self.mrp <= 0:
            return 0.0
        return (self.mrp - self.price) / self.mrp * 100


class PriceRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float | None = None
    max: float | None = None


class Intents(BaseModel):
    """Structured signals pulled out of the query text."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    is_cheap: bool = False
    is_expensive: bool = False
    is_latest: bool = False
    price_range: PriceRange | None = None
    color: str | None = None
    # Literal size such as "256GB", or "high" for "more storage" style asks.
    storage_tier: str | None = None
    brand: str | None = None
    category: str | None = None


class QueryIntent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    original_query: str
    processed_query: str
    tokens: tuple[str, ...] = ()
    intents: Intents = Field(default_factory=Intents)


@dataclass(frozen=True)
class ScoredCandidate:
    product: Product
    score: float
    text_similarity: float


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    query: str = ""
    category: str | None = None
    brand: str | None = None
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    min_rating: float | None = Field(default=None, ge=0, le=5)
    in_stock: bool = False
    sort_by: SortBy = "relevance"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=settings.default_page_size, ge=1, le=settings.max_page_size)
    user_id: str | None = None


class SearchResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    product_id: int
    title: str
    description: str
    mrp: float
    selling_price: float
    metadata: dict[str, Any]
    stock: int
    rating: float
    rating_count: int
    score: float | None = None
    repeat_purchase_count: int | None = None


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    page: int
    limit: int
    total: int
    total_pages: int


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    data: list[SearchResult]
    pagination: Pagination
    query_info: QueryIntent
    latency_ms: float


class PurchaseRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    user_id: str = Field(min_length=1)
    product_id: int
