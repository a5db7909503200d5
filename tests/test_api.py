"""HTTP surface tests using FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from shoprank.catalog import ProductStore, PurchaseHistory
from shoprank.main import app, get_purchases, get_store


@pytest.fixture
def client(make_product):
    store = ProductStore(
        [
            make_product(1, title="Apple iPhone 15 (128GB)", metadata={"brand": "Apple", "category": "phone"}),
            make_product(2, title="Redmi Note 13 5G", metadata={"brand": "Redmi", "category": "phone"}),
            make_product(3, title="Anker USB-C Charger", metadata={"brand": "Anker", "category": "accessory"}),
        ]
    )
    purchases = PurchaseHistory()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_purchases] = lambda: purchases
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_reports_catalog_size(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "products": 3}


def test_empty_query_is_rejected(client):
    response = client.get("/api/v1/search/product", params={"query": "   "})
    assert response.status_code == 400


def test_search_returns_ranked_page_with_query_info(client):
    response = client.get("/api/v1/search/product", params={"query": "ifone"})
    assert response.status_code == 200
    body = response.json()
    assert body["data"][0]["productId"] == 1
    assert body["queryInfo"]["processedQuery"] == "iphone"
    assert body["queryInfo"]["intents"]["brand"] == "Apple"
    assert body["pagination"]["total"] == len(body["data"])
    assert body["pagination"]["page"] == 1


def test_invalid_sort_is_a_validation_error(client):
    response = client.get("/api/v1/search/product", params={"query": "phone", "sortBy": "alphabetical"})
    assert response.status_code == 422


def test_purchase_then_search_reports_repeat_count(client):
    assert client.post("/api/v1/purchase", json={"userId": "u1", "productId": 404}).status_code == 404

    response = client.post("/api/v1/purchase", json={"userId": "u1", "productId": 1})
    assert response.status_code == 200
    assert response.json()["purchaseCount"] == 1

    body = client.get("/api/v1/search/product", params={"query": "iphone", "userId": "u1"}).json()
    assert body["data"][0]["repeatPurchaseCount"] == 1


def test_suggestions_trending_and_category(client):
    assert client.get("/api/v1/search/suggestions", params={"query": "r"}).json() == {"suggestions": []}
    assert client.get("/api/v1/search/suggestions", params={"query": "redmi"}).json() == {
        "suggestions": ["Redmi Note 13 5G", "Redmi"]
    }

    trending = client.get("/api/v1/search/trending").json()["data"]
    assert [item["productId"] for item in trending] == [1, 2, 3]

    accessories = client.get("/api/v1/search/category/accessory").json()["data"]
    assert [item["productId"] for item in accessories] == [3]
