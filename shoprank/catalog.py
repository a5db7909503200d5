"""In-memory product catalog and purchase history.

These are the collaborators the ranking core reads from: a catalog that hands
out immutable snapshots and a per-user purchase counter. Both guard their
state with a lock so API workers can share one instance.
"""
from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .models import Product

logger = logging.getLogger(__name__)


def load_products(path: str | Path) -> List[Product]:
    """Read a JSON array of product records; invalid records raise."""

    file_path = Path(path)
    if not file_path.exists():
        logger.warning("Catalog file %s is missing", file_path)
        return []
    with file_path.open("r", encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, list):
        raise ValueError(f"Catalog file {file_path} must contain a JSON array")
    return [Product.model_validate(item) for item in raw]


class ProductStore:
    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products: Dict[int, Product] = {}
        self._lock = threading.Lock()
        for product in products:
            self.add(product)

    @classmethod
    def from_json(cls, path: str | Path) -> "ProductStore":
        store = cls(load_products(path))
        logger.info("Loaded %s products from %s", len(store), path)
        return store

    def __len__(self) -> int:
        return len(self._products)

    def add(self, product: Product) -> Product:
        with self._lock:
            self._products[product.product_id] = product
        return product

    def get(self, product_id: int) -> Optional[Product]:
        return self._products.get(product_id)

    def snapshot(self) -> Tuple[Product, ...]:
        """Point-in-time view safe to rank while the store keeps changing."""
        with self._lock:
            return tuple(self._products.values())


@dataclass
class PurchaseRecord:
    product_id: int
    purchase_count: int
    last_purchased_at: datetime


class PurchaseHistory:
    def __init__(self) -> None:
        self._history: Dict[str, Dict[int, PurchaseRecord]] = defaultdict(dict)
        self._lock = threading.Lock()

    def add_purchase(self, user_id: str, product_id: int) -> PurchaseRecord:
        now = datetime.now(timezone.utc)
        with self._lock:
            user_history = self._history[user_id]
            record = user_history.get(product_id)
            if record is None:
                record = PurchaseRecord(product_id=product_id, purchase_count=0, last_purchased_at=now)
                user_history[product_id] = record
            record.purchase_count += 1
            record.last_purchased_at = now
            return record

    def purchase_count(self, user_id: str, product_id: int) -> int:
        with self._lock:
            record = self._history.get(user_id, {}).get(product_id)
            return record.purchase_count if record else 0

    def user_purchases(self, user_id: str) -> List[PurchaseRecord]:
        with self._lock:
            return list(self._history.get(user_id, {}).values())

    def clear_user(self, user_id: str) -> None:
        with self._lock:
            self._history.pop(user_id, None)
