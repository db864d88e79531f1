from decimal import Decimal
import pytest
from shopping_list_engine.categorizer import (
    CATEGORIES, KeywordCategorizer, categorize_name, coerce_category, order_sections,
)
from shopping_list_engine.models import AggregatedRequirement, NormalizedKey, ShoppingListItem


@pytest.mark.parametrize("name,category", [
    ("onion", "Produce"),
    ("juice of 1 lemon", "Produce"),
    ("black bean", "Canned/Packaged"),
    ("chicken breast", "Meat & Seafood"),
    ("chicken broth", "Meat & Seafood"),
    ("salmon fillet", "Meat & Seafood"),
    ("cheddar cheese", "Dairy & Eggs"),
    ("egg", "Dairy & Eggs"),
    ("spaghetti", "Grains & Bakery"),
    ("corn tortilla", "Grains & Bakery"),
    ("olive oil", "Pantry Staples"),
    ("black pepper", "Pantry Staples"),
    ("soy sauce", "Pantry Staples"),
    ("vegetable broth", "Canned/Packaged"),
    ("eggplant", "Produce"),
    ("red bell pepper", "Produce"),
    ("peanut butter", "Pantry Staples"),
    ("coconut milk", "Canned/Packaged"),
    ("garlic powder", "Pantry Staples"),
    ("green bean", "Produce"),
    ("red pepper", "Produce"),
    ("yellow bell pepper", "Produce"),
    ("orange pepper", "Produce"),
    ("red pepper flake", "Pantry Staples"),
    ("snap pea", "Produce"),
    ("dragon's breath", "Other"),
])
def test_categorize_name(name, category):
    assert categorize_name(name) == category


def test_categorize_is_case_insensitive():
    assert categorize_name("Chicken Thigh") == "Meat & Seafood"


def test_keyword_categorizer_keys_by_requirement():
    requirements = [
        AggregatedRequirement(key=NormalizedKey("onion", "cup"), quantity=Decimal(2), display_name="onions"),
        AggregatedRequirement(key=NormalizedKey("rice", "cup"), quantity=Decimal(1), display_name="rice"),
    ]
    result = KeywordCategorizer().categorize(requirements)
    assert result == {
        NormalizedKey("onion", "cup"): "Produce",
        NormalizedKey("rice", "cup"): "Grains & Bakery",
    }


def test_coerce_category_maps_unknown_labels_to_other():
    assert coerce_category("Frozen") == "Other"
    assert coerce_category(None) == "Other"
    assert coerce_category("Produce") == "Produce"


def _item(name: str, category: str) -> ShoppingListItem:
    return ShoppingListItem(quantity=Decimal(1), name=name, category=category, text=f"1 {name}")


def test_sections_follow_aisle_order_and_skip_empty():
    sections = order_sections([
        _item("rice", "Grains & Bakery"),
        _item("onion", "Produce"),
        _item("mystery", "Other"),
        _item("apple", "Produce"),
    ])
    assert [s.category for s in sections] == ["Produce", "Grains & Bakery", "Other"]
    assert [i.name for i in sections[0].items] == ["apple", "onion"]
    assert all(s.items for s in sections)


def test_sections_only_use_known_categories():
    sections = order_sections([_item("ice cream", "Frozen")])
    assert [s.category for s in sections] == ["Other"]
    assert all(s.category in CATEGORIES for s in sections)


def test_category_order():
    assert CATEGORIES == (
        "Produce", "Meat & Seafood", "Dairy & Eggs", "Grains & Bakery",
        "Pantry Staples", "Canned/Packaged", "Other",
    )
