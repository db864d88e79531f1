"""Name and unit normalization used to build aggregation keys.

The singularizer is a heuristic, not a stemmer. What matters is that the same
input always produces the same key and that normalizing a key again leaves it
unchanged.
"""
from __future__ import annotations
import re

UNIT_ALIASES: dict[str, str] = {
    "cup": "cup", "cups": "cup", "c": "cup",
    "tablespoon": "tbsp", "tablespoons": "tbsp", "tbsp": "tbsp", "tbsps": "tbsp", "tbs": "tbsp", "tbl": "tbsp",
    "teaspoon": "tsp", "teaspoons": "tsp", "tsp": "tsp", "tsps": "tsp",
    "pound": "lb", "pounds": "lb", "lb": "lb", "lbs": "lb",
    "ounce": "oz", "ounces": "oz", "oz": "oz",
    "gram": "g", "grams": "g", "g": "g",
    "kilogram": "kg", "kilograms": "kg", "kg": "kg", "kgs": "kg",
    "milliliter": "ml", "milliliters": "ml", "millilitre": "ml", "millilitres": "ml", "ml": "ml",
    "liter": "l", "liters": "l", "litre": "l", "litres": "l", "l": "l",
    "quart": "qt", "quarts": "qt", "qt": "qt",
    "pint": "pt", "pints": "pt", "pt": "pt",
    "gallon": "gal", "gallons": "gal", "gal": "gal",
    "clove": "clove", "cloves": "clove",
    "can": "can", "cans": "can",
    "jar": "jar", "jars": "jar",
    "package": "package", "packages": "package", "pkg": "package", "pkgs": "package",
    "packet": "package", "packets": "package",
    "bag": "bag", "bags": "bag",
    "box": "box", "boxes": "box",
    "bottle": "bottle", "bottles": "bottle",
    "slice": "slice", "slices": "slice",
    "bunch": "bunch", "bunches": "bunch",
    "head": "head", "heads": "head",
    "piece": "piece", "pieces": "piece",
    "stalk": "stalk", "stalks": "stalk",
    "sprig": "sprig", "sprigs": "sprig",
    "stick": "stick", "sticks": "stick",
    "pinch": "pinch", "pinches": "pinch",
    "dash": "dash", "dashes": "dash",
    "handful": "handful", "handfuls": "handful",
}

# Preparation and size descriptors, plus measure words that leak into descriptions.
STOP_WORDS: frozenset[str] = frozenset({
    "chopped", "diced", "minced", "sliced", "grated", "shredded", "crushed", "cubed",
    "julienned", "peeled", "seeded", "halved", "quartered", "trimmed", "rinsed",
    "drained", "softened", "melted", "beaten", "packed", "heaping", "level",
    "fresh", "freshly", "dried", "large", "medium", "small", "whole", "finely",
    "thinly", "roughly", "coarsely", "boneless", "skinless", "ripe", "organic",
    "cup", "cups", "tablespoon", "tablespoons", "tbsp", "teaspoon", "teaspoons", "tsp",
    "ounce", "ounces", "oz", "pound", "pounds", "lb", "lbs", "gram", "grams",
})

# Words that end in "s" but are already singular.
SINGULAR_EXCEPTIONS: frozenset[str] = frozenset({
    "hummus", "asparagus", "couscous", "molasses", "swiss", "citrus", "octopus",
    "bass", "grits", "schnapps", "series", "species", "chips",
})

IRREGULAR_PLURALS: dict[str, str] = {
    "leaves": "leaf",
    "loaves": "loaf",
    "halves": "half",
    "knives": "knife",
    "cookies": "cookie",
    "brownies": "brownie",
    "geese": "goose",
}

_PARENS = re.compile(r"\([^)]*\)")
_POSSESSIVE = re.compile(r"(?:'s)+$")
_PUNCT = re.compile(r"[^\w\s'-]")
_SIBILANT_ENDINGS = ("ss", "x", "z", "ch", "sh")


def normalize_unit(unit: str | None) -> str:
    if not unit:
        return ""
    token = unit.strip().lower().rstrip(".")
    return UNIT_ALIASES.get(token, token)


def singularize(word: str) -> str:
    if word in SINGULAR_EXCEPTIONS:
        return word
    if word in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[word]
    if word.endswith("oes") and len(word) > 4:
        return word[:-2]
    if word.endswith("ies") and len(word) > 5:
        return word[:-3] + "y"
    if word.endswith("es") and len(word) - 2 > 3 and word[:-2].endswith(_SIBILANT_ENDINGS):
        return word[:-2]
    if word.endswith("s") and len(word) - 1 > 2 and not word.endswith(("ss", "us", "is")):
        return word[:-1]
    return word


def _is_stop_word(word: str) -> bool:
    return word in STOP_WORDS or singularize(word) in STOP_WORDS


def _normalize_once(text: str) -> str:
    cleaned = _PUNCT.sub(" ", _PARENS.sub(" ", text.lower()))
    words = [_POSSESSIVE.sub("", w.strip("-'")).strip("-'") for w in cleaned.split()]
    words = [w for w in words if any(ch.isalnum() for ch in w)]
    kept = [w for w in words if not _is_stop_word(w)] or words
    if not kept:
        return ""
    kept[-1] = singularize(kept[-1])
    return " ".join(kept)


def normalize(text: str) -> str:
    # Every pass that changes the text shortens it, so this stops.
    result = _normalize_once(text)
    while True:
        again = _normalize_once(result)
        if again == result:
            return result
        result = again
