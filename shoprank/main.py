"""FastAPI application wiring the search service."""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query

from .catalog import ProductStore, PurchaseHistory
from .config import settings
from .models import PurchaseRequest, SearchRequest, SearchResponse, SearchResult, SortBy
from .search import build_response, by_category, search, suggestions, trending

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = logging.getLevelName(settings.log_level.upper())

# ``force=True`` replaces uvicorn's default handlers so interpreter and
# ranking debug lines show up under the same format.
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, force=True)
for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(name).setLevel(LOG_LEVEL)

logger = logging.getLogger(__name__)
logger.info("Logging configured at %s", settings.log_level.upper())

app = FastAPI(title="Product Search Service")


@lru_cache(maxsize=1)
def get_store() -> ProductStore:
    if not settings.load_on_startup:
        return ProductStore()
    return ProductStore.from_json(settings.catalog_path)


@lru_cache(maxsize=1)
def get_purchases() -> PurchaseHistory:
    return PurchaseHistory()


@lru_cache(maxsize=1)
def get_executor() -> Optional[ThreadPoolExecutor]:
    if settings.scoring_workers <= 0:
        return None
    logger.info("Scoring with %s worker threads", settings.scoring_workers)
    return ThreadPoolExecutor(max_workers=settings.scoring_workers, thread_name_prefix="score")


@app.on_event("startup")
async def startup_event() -> None:
    store = get_store()
    logger.info("Catalog ready with %s products", len(store))


@app.get("/health")
async def health(store: ProductStore = Depends(get_store)) -> dict:
    return {"status": "ok", "products": len(store)}


@app.get("/api/v1/search/product", response_model=SearchResponse)
async def search_products(
    query: str = Query("", description="Search query"),
    category: Optional[str] = None,
    brand: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    min_rating: Optional[float] = Query(None, alias="minRating", ge=0, le=5),
    in_stock: bool = Query(False, alias="inStock"),
    sort_by: SortBy = Query("relevance", alias="sortBy"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    user_id: Optional[str] = Query(None, alias="userId"),
    store: ProductStore = Depends(get_store),
    purchases: PurchaseHistory = Depends(get_purchases),
) -> SearchResponse:
    if not query.strip():
        raise HTTPException(status_code=400, detail="Search query is required")
    request = SearchRequest(
        query=query,
        category=category,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        min_rating=min_rating,
        in_stock=in_stock,
        sort_by=sort_by,
        page=page,
        limit=limit,
        user_id=user_id,
    )
    outcome = await asyncio.to_thread(search, request, store, purchases, executor=get_executor())
    return build_response(outcome, request)


@app.get("/api/v1/search/suggestions")
async def search_suggestions(
    query: str = "",
    limit: int = Query(10, ge=1, le=50),
    store: ProductStore = Depends(get_store),
) -> dict:
    if len(query.strip()) < 2:
        return {"suggestions": []}
    return {"suggestions": suggestions(query, store, limit)}


@app.get("/api/v1/search/trending")
async def search_trending(
    limit: int = Query(10, ge=1, le=50),
    store: ProductStore = Depends(get_store),
) -> dict:
    data: list[SearchResult] = trending(store, limit)
    return {"data": [item.model_dump(by_alias=True, exclude_none=True) for item in data]}


@app.get("/api/v1/search/category/{category}")
async def search_category(
    category: str,
    limit: int = Query(20, ge=1, le=100),
    store: ProductStore = Depends(get_store),
) -> dict:
    data = by_category(category, store, limit)
    return {"data": [item.model_dump(by_alias=True, exclude_none=True) for item in data]}


@app.post("/api/v1/purchase")
async def record_purchase(
    payload: PurchaseRequest,
    store: ProductStore = Depends(get_store),
    purchases: PurchaseHistory = Depends(get_purchases),
) -> dict:
    if store.get(payload.product_id) is None:
        raise HTTPException(status_code=404, detail=f"Product {payload.product_id} not found")
    record = purchases.add_purchase(payload.user_id, payload.product_id)
    return {
        "userId": payload.user_id,
        "productId": payload.product_id,
        "purchaseCount": record.purchase_count,
    }
