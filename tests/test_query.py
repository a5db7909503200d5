"""Query interpreter behaviour on noisy, mixed-language queries."""

import pytest

from shoprank.models import Intents, InvalidQueryError, PriceRange
from shoprank.query import INTENT_RULES, interpret, tokenize
from shoprank.vocabulary import INTENT_WORDS, STOP_WORDS


def test_misspelled_brand_with_storage_and_budget():
    intent = interpret("ifone 128gb under 60000")

    assert "iphone" in intent.processed_query
    assert intent.intents.brand == "Apple"
    assert intent.intents.storage_tier == "128GB"
    assert intent.intents.price_range == PriceRange(max=60000)
    assert "60000" not in intent.tokens
    assert "under" not in intent.tokens
    assert intent.tokens == ("iphone", "128gb")


def test_hinglish_query_becomes_cheap_phone_intent():
    intent = interpret("sasta accha phone")

    assert intent.intents.is_cheap is True
    assert "cheap" in intent.processed_query
    assert "good" in intent.processed_query
    assert intent.intents.category == "phone"
    assert intent.tokens == ("phone",)


def test_empty_query_yields_neutral_intent():
    intent = interpret("   ")

    assert intent.processed_query == ""
    assert intent.tokens == ()
    assert intent.intents == Intents()
    assert intent.original_query == "   "


def test_interpret_is_idempotent():
    query = "sasta iphone under 50k red"
    assert interpret(query).model_dump_json() == interpret(query).model_dump_json()


def test_non_text_query_is_rejected():
    with pytest.raises(InvalidQueryError):
        interpret(12345)


def test_k_suffix_multiplies_small_numbers():
    intent = interpret("sasta iphone under 50k red")

    assert intent.intents.price_range == PriceRange(max=50000)
    assert intent.intents.color == "red"
    assert intent.intents.is_cheap is True
    assert "50k" not in intent.tokens


def test_around_price_yields_twenty_percent_band():
    price_range = interpret("phone 20000 rupees").intents.price_range

    assert price_range.min == pytest.approx(16000)
    assert price_range.max == pytest.approx(24000)


def test_first_price_pattern_wins():
    price_range = interpret("under 30000 budget 40000").intents.price_range
    assert price_range == PriceRange(max=30000)


def test_hinglish_price_ceiling():
    intent = interpret("50k ke andar phone")

    assert intent.intents.price_range == PriceRange(max=50000)
    assert intent.tokens == ("phone",)


def test_accessory_keywords_win_over_phone_keywords():
    intent = interpret("iphone 15 cover")

    assert intent.intents.category == "accessory"
    assert intent.intents.brand == "Apple"


def test_high_storage_phrase_sets_sentinel():
    intent = interpret("samsung phone with more storage 128gb")

    assert intent.intents.storage_tier == "high"
    assert "more" not in intent.tokens
    assert "storage" not in intent.tokens


def test_hindi_colour_and_latest_flag():
    intent = interpret("lal naya phone")

    assert intent.intents.color == "red"
    assert intent.intents.is_latest is True
    assert "latest" in intent.processed_query


def test_grey_is_canonicalised_to_gray():
    assert interpret("grey galaxy").intents.color == "gray"
    assert interpret("grey galaxy").intents.brand == "Samsung"


def test_keywords_do_not_match_inside_words():
    laptop = interpret("gaming laptop")
    assert laptop.intents.is_expensive is False
    assert laptop.intents.category == "laptop"

    redmi = interpret("redmi note 13")
    assert redmi.intents.color is None
    assert redmi.intents.brand == "Redmi"


def test_brand_alias_nicknames():
    assert interpret("pixel 8").intents.brand == "Google"
    assert interpret("moto g84").intents.brand == "Motorola"


def test_tokens_never_contain_stop_or_intent_words():
    intent = interpret("please show me the best cheap phone for gaming under 20k")
    for token in intent.tokens:
        assert token not in STOP_WORDS
        assert token not in INTENT_WORDS
    assert intent.tokens == ("phone", "gaming")


def test_tokenize_drops_short_and_numeric_tokens():
    assert tokenize("a x 15 50k 128gb pro") == ("128gb", "pro")


def test_intent_rule_order_is_explicit():
    assert [rule.name for rule in INTENT_RULES] == [
        "price_flags",
        "price_range",
        "color",
        "storage",
        "brand",
        "category",
    ]


def test_decimal_k_price_ceiling():
    intent = interpret("phone under 1.5k")

    assert intent.processed_query == "phone under 1.5k"
    assert intent.intents.price_range == PriceRange(max=1500)
    assert intent.tokens == ("phone",)


def test_rupee_sign_prices_become_intents():
    intent = interpret("phone under ₹50000")

    assert intent.intents.price_range == PriceRange(max=50000)
    assert intent.tokens == ("phone",)

    price_range = interpret("rs 20000 phone").intents.price_range
    assert price_range.min == pytest.approx(16000)
    assert price_range.max == pytest.approx(24000)


def test_brand_glued_to_model_number():
    assert interpret("iphone15 pro").intents.brand == "Apple"
    assert interpret("galaxys24").intents.brand == "Samsung"
    assert interpret("pixel8").intents.brand == "Google"


def test_common_words_do_not_become_brands():
    cell = interpret("cell phone cover")
    assert cell.processed_query == "cell phone cover"
    assert cell.intents.brand is None
    assert cell.intents.category == "accessory"

    assert interpret("song player").intents.brand is None
    assert interpret("beat headphone").intents.brand is None
