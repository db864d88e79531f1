"""Rough USD cost estimates for a shopping list.

Prices are order-of-magnitude guesses per purchase unit. There is no catalog
behind them.
"""
from __future__ import annotations
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Protocol
from shopping_list_engine.categorizer import (
    CANNED_PACKAGED, DAIRY_EGGS, GRAINS_BAKERY, MEAT_SEAFOOD, OTHER, PANTRY_STAPLES, PRODUCE,
)
from shopping_list_engine.models import AggregatedRequirement, NormalizedKey

CENT = Decimal("0.01")
DEFAULT_PRICE = Decimal("2.00")

# First matching keyword wins, so specific names come before generic ones.
UNIT_PRICES: tuple[tuple[str, Decimal], ...] = (
    ("chicken", Decimal("4.00")),
    ("salmon", Decimal("4.00")),
    ("shrimp", Decimal("6.00")),
    ("beef", Decimal("5.00")),
    ("steak", Decimal("8.00")),
    ("pork", Decimal("4.00")),
    ("bacon", Decimal("5.00")),
    ("avocado", Decimal("1.50")),
    ("onion", Decimal("0.75")),
    ("garlic", Decimal("0.50")),
    ("lemon", Decimal("0.60")),
    ("lime", Decimal("0.40")),
    ("potato", Decimal("0.80")),
    ("tomato", Decimal("1.00")),
    ("bread", Decimal("2.50")),
    ("tortilla", Decimal("3.00")),
    ("cheese", Decimal("3.00")),
    ("butter", Decimal("4.00")),
    ("milk", Decimal("3.50")),
    ("eggplant", Decimal("1.50")),
    ("egg", Decimal("0.25")),
    ("pasta", Decimal("1.50")),
    ("rice", Decimal("2.00")),
    ("bean", Decimal("1.20")),
    ("broth", Decimal("2.50")),
)

CATEGORY_PRICES: dict[str, Decimal] = {
    PRODUCE: Decimal("1.00"),
    MEAT_SEAFOOD: Decimal("4.00"),
    DAIRY_EGGS: Decimal("2.50"),
    GRAINS_BAKERY: Decimal("2.00"),
    PANTRY_STAPLES: Decimal("2.00"),
    CANNED_PACKAGED: Decimal("1.50"),
    OTHER: DEFAULT_PRICE,
}

# Small measures come out of one bottle, jar or bag.
SINGLE_PURCHASE_UNITS = frozenset({
    "tsp", "tbsp", "pinch", "dash", "g", "ml", "oz", "clove", "sprig", "handful",
})


class CostEstimator(Protocol):
    def estimate(
        self,
        requirements: Iterable[AggregatedRequirement],
        categories: Mapping[NormalizedKey, str],
    ) -> dict[NormalizedKey, Decimal]:
        ...


def to_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def billable_quantity(quantity: Decimal, unit: str) -> Decimal:
    if unit in SINGLE_PURCHASE_UNITS:
        return Decimal(1)
    return quantity


class HeuristicCostEstimator:
    def __init__(self, price_hints: Mapping[str, float] | None = None):
        self._hints: tuple[tuple[str, Decimal], ...] = tuple(
            (keyword.lower(), Decimal(str(price))) for keyword, price in (price_hints or {}).items()
        )

    def unit_price(self, name: str, category: str = OTHER) -> Decimal:
        lowered = name.lower()
        for keyword, price in self._hints + UNIT_PRICES:
            if keyword in lowered:
                return price
        return CATEGORY_PRICES.get(category, DEFAULT_PRICE)

    def price(self, requirement: AggregatedRequirement, category: str = OTHER) -> Decimal:
        quantity = billable_quantity(requirement.quantity, requirement.unit)
        return to_cents(self.unit_price(requirement.name, category) * quantity)

    def estimate(
        self,
        requirements: Iterable[AggregatedRequirement],
        categories: Mapping[NormalizedKey, str],
    ) -> dict[NormalizedKey, Decimal]:
        return {r.key: self.price(r, categories.get(r.key, OTHER)) for r in requirements}


def total_cost(prices: Iterable[Decimal]) -> Decimal:
    return to_cents(sum(prices, Decimal(0)))
