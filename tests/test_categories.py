import pytest

from spend_insights.categories import (
    CANONICAL_CATEGORIES,
    CATEGORY_COLORS,
    category_color,
    normalize_category,
)


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("Restaurant-Bar & Café", "Restaurant"),
        ("Restaurants", "Restaurant"),
        ("Fast Food", "Restaurant"),
        ("Merchandise & Supplies-Groceries", "Groceries"),
        ("Transportation-Fuel", "Gas & Fuel"),
        ("Transportation-Auto Services", "Gas & Fuel"),
        ("Merchandise & Supplies-Clothing Stores", "Shopping"),
        ("Entertainment-Theatrical Events", "Entertainment"),
        ("Business Services-Computer Services", "Subscriptions"),
        ("Communications-Telecommunications", "Subscriptions"),
        ("Travel-Airline", "Travel"),
        ("Travel-Lodging", "Travel"),
        ("Drug Stores", "Health"),
        ("Health Care", "Health"),
        ("Fees & Adjustments-Fees & Adjustments", "Fees"),
        ("Interest Charge", "Fees"),
        ("Other", "Other"),
        ("Transportation-Taxis & Coach", "Other"),
        ("", "Other"),
    ],
)
def test_normalize_category_examples(label: str, expected: str):
    assert normalize_category(label) == expected


def test_normalize_category_is_case_insensitive():
    variants = ["RESTAURANTS", "restaurants", "ReStAuRaNtS"]
    assert {normalize_category(v) for v in variants} == {"Restaurant"}


def test_first_matching_group_wins():
    # Contains both a Restaurant and a Fees keyword; group order breaks the tie.
    assert normalize_category("restaurant service fee") == "Restaurant"
    # "Merchandise & Supplies-Groceries" contains a Shopping keyword too.
    assert normalize_category("merchandise groceries") == "Groceries"


def test_normalize_category_none_is_other():
    assert normalize_category(None) == "Other"


def test_normalize_category_result_is_always_canonical():
    labels = ["", "???", "gas station", "pharmacy", "a" * 200, "Airline fee", "ÉLECTRONICS"]
    for label in labels:
        assert normalize_category(label) in CANONICAL_CATEGORIES


def test_canonical_set_has_ten_categories_with_other_last():
    assert len(CANONICAL_CATEGORIES) == 10
    assert CANONICAL_CATEGORIES[-1] == "Other"
    assert set(CATEGORY_COLORS) == set(CANONICAL_CATEGORIES)


def test_category_color_lookup_and_fallback():
    assert category_color("Restaurant") == "#ef4444"
    assert category_color("Fees") == "#6b7280"
    assert category_color("Not A Category") == category_color("Other") == "#a3a3a3"


def test_color_table_is_read_only():
    with pytest.raises(TypeError):
        CATEGORY_COLORS["Other"] = "#000000"  # type: ignore[index]
