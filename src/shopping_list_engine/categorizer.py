from __future__ import annotations
from collections import defaultdict
from typing import Iterable, Protocol
from shopping_list_engine.models import AggregatedRequirement, CategorizedSection, NormalizedKey, ShoppingListItem

PRODUCE = "Produce"
MEAT_SEAFOOD = "Meat & Seafood"
DAIRY_EGGS = "Dairy & Eggs"
GRAINS_BAKERY = "Grains & Bakery"
PANTRY_STAPLES = "Pantry Staples"
CANNED_PACKAGED = "Canned/Packaged"
OTHER = "Other"

# Conventional walk through the store.
CATEGORIES: tuple[str, ...] = (
    PRODUCE,
    MEAT_SEAFOOD,
    DAIRY_EGGS,
    GRAINS_BAKERY,
    PANTRY_STAPLES,
    CANNED_PACKAGED,
    OTHER,
)

# Phrases whose keywords would otherwise point at the wrong aisle.
PHRASE_OVERRIDES: tuple[tuple[str, str], ...] = (
    ("eggplant", PRODUCE),
    ("butternut", PRODUCE),
    ("bell pepper", PRODUCE),
    ("jalapeno", PRODUCE),
    ("jalapeño", PRODUCE),
    ("chili pepper", PRODUCE),
    ("green pepper", PRODUCE),
    ("red pepper flake", PANTRY_STAPLES),
    ("red pepper", PRODUCE),
    ("yellow pepper", PRODUCE),
    ("orange pepper", PRODUCE),
    ("sweet pepper", PRODUCE),
    ("poblano", PRODUCE),
    ("serrano", PRODUCE),
    ("green bean", PRODUCE),
    ("string bean", PRODUCE),
    ("snap pea", PRODUCE),
    ("bean sprout", PRODUCE),
    ("peanut butter", PANTRY_STAPLES),
    ("almond butter", PANTRY_STAPLES),
    ("garlic powder", PANTRY_STAPLES),
    ("onion powder", PANTRY_STAPLES),
    ("vegetable oil", PANTRY_STAPLES),
    ("fish sauce", PANTRY_STAPLES),
    ("oyster sauce", PANTRY_STAPLES),
    ("cornstarch", PANTRY_STAPLES),
    ("cream of tartar", PANTRY_STAPLES),
    ("cream of", CANNED_PACKAGED),
    ("coconut milk", CANNED_PACKAGED),
    ("coconut cream", CANNED_PACKAGED),
    ("vegetable broth", CANNED_PACKAGED),
    ("vegetable stock", CANNED_PACKAGED),
    ("veggie broth", CANNED_PACKAGED),
    ("tomato paste", CANNED_PACKAGED),
    ("tomato sauce", CANNED_PACKAGED),
    ("canned tomato", CANNED_PACKAGED),
    ("veggie", PRODUCE),
)

# Checked in this order; the first category with a matching keyword wins.
KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (MEAT_SEAFOOD, (
        "chicken", "beef", "pork", "lamb", "turkey", "bacon", "sausage", "steak", "veal",
        "prosciutto", "chorizo", "pancetta", "duck", "fish", "salmon", "tuna", "shrimp",
        "prawn", "cod", "tilapia", "halibut", "crab", "lobster", "scallop", "mussel",
        "clam", "anchov",
    )),
    (DAIRY_EGGS, (
        "milk", "cheese", "yogurt", "yoghurt", "butter", "cream", "egg", "parmesan",
        "mozzarella", "cheddar", "feta", "ricotta", "ghee",
    )),
    (PRODUCE, (
        "vegetable", "fruit", "onion", "garlic", "potato", "carrot", "broccoli", "spinach",
        "lettuce", "tomato", "avocado", "lemon", "lime", "apple", "banana", "berry",
        "cucumber", "greens", "zucchini", "squash", "mushroom", "celery", "kale", "cabbage",
        "cauliflower", "asparagus", "cilantro", "parsley", "basil", "mint", "ginger",
        "scallion", "shallot", "leek", "orange", "mango", "pear", "peach", "grape",
        "arugula", "radish", "beet",
    )),
    (GRAINS_BAKERY, (
        "bread", "pasta", "rice", "tortilla", "noodle", "spaghetti", "penne", "macaroni",
        "bun", "bagel", "pita", "baguette", "quinoa", "oat", "couscous", "cracker", "cereal",
    )),
    (CANNED_PACKAGED, (
        "canned", "bean", "broth", "stock", "soup", "chickpea", "lentil", "salsa",
    )),
    (PANTRY_STAPLES, (
        "oil", "salt", "pepper", "seasoning", "mustard", "mayonnaise", "flour", "sugar",
        "vinegar", "spice", "sauce", "honey", "syrup", "baking", "yeast", "cumin",
        "paprika", "oregano", "cinnamon", "powder", "vanilla", "ketchup", "herb",
    )),
)


class Categorizer(Protocol):
    def categorize(self, requirements: Iterable[AggregatedRequirement]) -> dict[NormalizedKey, str]:
        ...


def categorize_name(name: str) -> str:
    lowered = name.lower()
    for phrase, category in PHRASE_OVERRIDES:
        if phrase in lowered:
            return category
    for category, keywords in KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return OTHER


class KeywordCategorizer:
    def categorize(self, requirements: Iterable[AggregatedRequirement]) -> dict[NormalizedKey, str]:
        return {r.key: categorize_name(r.name) for r in requirements}


def coerce_category(label: str | None) -> str:
    return label if label in CATEGORIES else OTHER


def order_sections(items: Iterable[ShoppingListItem]) -> list[CategorizedSection]:
    by_category: dict[str, list[ShoppingListItem]] = defaultdict(list)
    for item in items:
        by_category[coerce_category(item.category)].append(item)

    return [
        CategorizedSection(
            category=category,
            items=sorted(by_category[category], key=lambda i: (i.name, i.unit)),
        )
        for category in CATEGORIES
        if by_category.get(category)
    ]
