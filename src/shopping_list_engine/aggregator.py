from __future__ import annotations
from decimal import Decimal
from typing import Iterable
from shopping_list_engine.models import AggregatedRequirement, NormalizedKey, ParsedIngredient
from shopping_list_engine.normalizer import normalize, normalize_unit

Aggregate = dict[NormalizedKey, AggregatedRequirement]


def key_for(description: str, unit: str | None) -> NormalizedKey:
    return NormalizedKey(name=normalize(description), unit=normalize_unit(unit))


def aggregate(ingredients: Iterable[ParsedIngredient], scale: Decimal = Decimal(1)) -> Aggregate:
    """Sum parsed lines that share a normalized (name, unit) key.

    A missing quantity counts as one. The first description seen for a key is
    kept for display.
    """
    result: Aggregate = {}
    for ingredient in ingredients:
        key = key_for(ingredient.description, ingredient.unit)
        if not key.name:
            continue
        quantity = ingredient.quantity * scale if ingredient.quantity is not None else Decimal(1)
        existing = result.get(key)
        if existing is None:
            result[key] = AggregatedRequirement(
                key=key,
                quantity=quantity,
                display_name=ingredient.description,
                sources=[ingredient.raw or ingredient.description],
            )
        else:
            existing.quantity += quantity
            existing.sources.append(ingredient.raw or ingredient.description)
    return result


def merge(*aggregates: Aggregate) -> Aggregate:
    result: Aggregate = {}
    for part in aggregates:
        for key, requirement in part.items():
            existing = result.get(key)
            if existing is None:
                result[key] = requirement.model_copy(deep=True)
            else:
                existing.quantity += requirement.quantity
                existing.sources.extend(requirement.sources)
    return result
