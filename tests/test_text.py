"""Regression tests for the lexical normalization helpers."""

from shoprank.text import (
    apply_spelling_corrections,
    clean_text,
    closest_brand,
    contains_phrase,
    correct_brand_typos,
    normalize_colors,
    translate_colloquial,
)


def test_clean_text_lowercases_and_strips_punctuation():
    assert clean_text("  Sasta   iPhone!!  ") == "sasta iphone"
    assert clean_text("Café, crème") == "cafe creme"
    assert clean_text("") == ""


def test_spelling_dictionary_is_whole_word():
    assert apply_spelling_corrections("ifone case") == "iphone case"
    assert apply_spelling_corrections("one plus nord") == "oneplus nord"
    # "mi" maps to xiaomi but must not touch "redmi"
    assert apply_spelling_corrections("redmi note") == "redmi note"


def test_closest_brand_requires_single_edit_and_similar_length():
    assert closest_brand("samsong") == "samsung"
    assert closest_brand("nokla") == "nokia"
    assert closest_brand("lenovoo") == "lenovo"
    assert closest_brand("samsnug") is None  # transposition costs two edits
    assert closest_brand("laptop") is None


def test_brand_typos_leave_protected_words_alone():
    assert correct_brand_typos("samsong phone") == "samsung phone"
    assert correct_brand_typos("sell gold black") == "sell gold black"
    assert correct_brand_typos("128gb 5000") == "128gb 5000"


def test_colloquial_translation_uses_first_synonym_and_drops_fillers():
    assert translate_colloquial("sasta wala phone") == "cheap phone"
    assert translate_colloquial("naya accha mobile") == "latest good phone"


def test_color_normalization():
    assert normalize_colors("lal grey kaala") == "red gray black"


def test_contains_phrase_matches_whole_words_only():
    assert contains_phrase("gaming laptop", "laptop")
    assert not contains_phrase("gaming laptop", "top")
    assert contains_phrase("tempered glass for iphone", "tempered glass")


def test_clean_text_keeps_decimal_points_inside_numbers():
    assert clean_text("Phone under 1.5k.") == "phone under 1.5k"
    assert clean_text("v. good...") == "v good"


def test_clean_text_splits_rupee_prefix_from_amount():
    assert clean_text("under ₹50000") == "under rs 50000"
    assert clean_text("Rs.999 earbuds") == "rs 999 earbuds"
    assert clean_text("rs500") == "rs 500"


def test_contains_phrase_accepts_glued_model_codes():
    assert contains_phrase("iphone15 pro", "iphone")
    assert contains_phrase("galaxys24", "galaxy")
    assert contains_phrase("pixel8", "pixel")
    assert not contains_phrase("redmi note", "red")
    assert not contains_phrase("vivobook", "vivo")


def test_everyday_words_are_not_snapped_to_brands():
    text = "cell song base beat well goggle"
    assert correct_brand_typos(text) == text
