"""Hard and soft filtering ahead of ranking."""

from shoprank.filters import apply_filters
from shoprank.models import Intents, PriceRange, QueryIntent, SearchRequest


def _intent(**intents) -> QueryIntent:
    return QueryIntent(original_query="q", processed_query="q", intents=Intents(**intents))


def _ids(products):
    return [p.product_id for p in products]


def test_explicit_filters_are_hard_excludes(make_product):
    products = [
        make_product(1, metadata={"brand": "Apple", "category": "phone"}, rating=4.5),
        make_product(2, metadata={"brand": "Samsung", "category": "phone"}, rating=4.5),
        make_product(3, metadata={"brand": "Apple", "category": "laptop"}, rating=4.5),
        make_product(4, metadata={"brand": "Apple", "category": "phone"}, rating=3.0),
        make_product(5, metadata={"brand": "Apple", "category": "phone"}, rating=4.5, stock=0),
    ]
    request = SearchRequest(query="q", category="PHONE", brand="apple", min_rating=4, in_stock=True)
    assert _ids(apply_filters(products, request, _intent())) == [1]


def test_intent_price_range_applies_without_explicit_override(make_product):
    products = [make_product(1, price=10_000, mrp=12_000), make_product(2, price=70_000, mrp=80_000)]
    intent = _intent(price_range=PriceRange(max=60_000))

    assert _ids(apply_filters(products, SearchRequest(query="q"), intent)) == [1]
    overridden = SearchRequest(query="q", max_price=100_000)
    assert _ids(apply_filters(products, overridden, intent)) == [1, 2]


def test_intent_price_band_lower_bound(make_product):
    products = [make_product(1, price=10_000, mrp=12_000), make_product(2, price=20_000, mrp=25_000)]
    intent = _intent(price_range=PriceRange(min=16_000, max=24_000))
    assert _ids(apply_filters(products, SearchRequest(query="q"), intent)) == [2]
    assert _ids(apply_filters(products, SearchRequest(query="q", min_price=0), intent)) == [1, 2]


def test_accessory_intent_is_a_hard_exclude(make_product):
    products = [
        make_product(1, metadata={"category": "phone"}),
        make_product(2, metadata={"category": "accessory"}),
    ]
    intent = _intent(category="accessory")
    assert _ids(apply_filters(products, SearchRequest(query="q"), intent)) == [2]
    # Other derived categories only boost.
    assert _ids(apply_filters(products, SearchRequest(query="q"), _intent(category="phone"))) == [1, 2]


def test_color_intent_reorders_without_dropping(make_product):
    products = [
        make_product(1, metadata={"color": "black"}),
        make_product(2, metadata={"color": "red"}),
        make_product(3, title="Phone in Red finish", metadata={}),
    ]
    filtered = apply_filters(products, SearchRequest(query="q"), _intent(color="red"))
    assert _ids(filtered) == [2, 3, 1]
