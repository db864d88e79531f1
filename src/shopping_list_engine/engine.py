from __future__ import annotations
import logging
from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal
from pydantic import ValidationError
from shopping_list_engine.aggregator import aggregate, merge
from shopping_list_engine.categorizer import OTHER, Categorizer, KeywordCategorizer, coerce_category, order_sections
from shopping_list_engine.formatter import format_item_line
from shopping_list_engine.models import PantryEntry, RecipeIngredientBlock, ShoppingList, ShoppingListItem
from shopping_list_engine.pantry import build_pantry_map, reconcile
from shopping_list_engine.parser import parse_block
from shopping_list_engine.pricing import CostEstimator, HeuristicCostEstimator, total_cost

logger = logging.getLogger(__name__)


class EngineInputError(ValueError):
    pass


def _as_list(value, what: str) -> list:
    if value is None:
        return []
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        raise EngineInputError(f"{what} must be a list, got {type(value).__name__}")
    return list(value)


def _coerce_recipes(recipes) -> list[RecipeIngredientBlock]:
    blocks = []
    for i, recipe in enumerate(_as_list(recipes, "recipes")):
        if isinstance(recipe, RecipeIngredientBlock):
            blocks.append(recipe)
        elif isinstance(recipe, str):
            blocks.append(RecipeIngredientBlock(ingredients=recipe))
        elif isinstance(recipe, Mapping):
            try:
                blocks.append(RecipeIngredientBlock.model_validate(recipe))
            except ValidationError as e:
                raise EngineInputError(f"recipes[{i}] is not a valid recipe: {e}") from e
        else:
            raise EngineInputError(
                f"recipes[{i}] must be a recipe, mapping or ingredient text, got {type(recipe).__name__}"
            )
    return blocks


def _coerce_pantry(pantry) -> list[PantryEntry]:
    entries = []
    for i, entry in enumerate(_as_list(pantry, "pantry")):
        if isinstance(entry, PantryEntry):
            entries.append(entry)
        elif isinstance(entry, Mapping):
            try:
                entries.append(PantryEntry.model_validate(entry))
            except ValidationError as e:
                raise EngineInputError(f"pantry[{i}] is not a valid pantry entry: {e}") from e
        else:
            raise EngineInputError(
                f"pantry[{i}] must be a pantry entry or mapping, got {type(entry).__name__}"
            )
    return entries


def compute_shopping_list(
    recipes,
    pantry=(),
    *,
    categorizer: Categorizer | None = None,
    estimator: CostEstimator | None = None,
    as_of: date | None = None,
) -> ShoppingList:
    """Turn a week of recipes and the pantry into a categorized, priced list.

    Args:
        recipes: RecipeIngredientBlock instances, raw ingredient blocks or
            mappings with an ``ingredients`` field.
        pantry: PantryEntry instances or mappings with ``name`` and optional
            ``quantity`` / ``expires_on``.
        categorizer: Strategy assigning aisle categories. Keyword matching by
            default.
        estimator: Strategy pricing each item. Heuristic table by default.
        as_of: When given, pantry entries that expired before this date are
            ignored.

    Raises:
        EngineInputError: if the inputs are not shaped like recipes/pantry
            entries. Odd ingredient text never raises.
    """
    blocks = _coerce_recipes(recipes)
    entries = _coerce_pantry(pantry)

    required = merge(*(
        aggregate(parse_block(block.ingredients), scale=Decimal(str(block.scale)))
        for block in blocks
    ))
    if not required:
        return ShoppingList()

    remaining = reconcile(required, build_pantry_map(entries, as_of=as_of))
    requirements = list(remaining.values())
    logger.debug(
        "%d ingredients required across %d recipes, %d left after pantry",
        len(required), len(blocks), len(requirements),
    )

    categorizer = categorizer or KeywordCategorizer()
    fallback_estimator = HeuristicCostEstimator()
    estimator = estimator or fallback_estimator

    found = categorizer.categorize(requirements)
    categories = {r.key: coerce_category(found.get(r.key, OTHER)) for r in requirements}
    prices = dict(estimator.estimate(requirements, categories))

    items = []
    for r in requirements:
        price = prices.get(r.key)
        if price is None:
            price = fallback_estimator.price(r, categories[r.key])
            prices[r.key] = price
        items.append(ShoppingListItem(
            quantity=r.quantity,
            unit=r.unit,
            name=r.name,
            category=categories[r.key],
            estimated_price=float(price),
            display_name=r.display_name,
            text=format_item_line(r.quantity, r.unit, r.name),
        ))

    return ShoppingList(
        sections=order_sections(items),
        estimated_total_cost=float(total_cost(prices[r.key] for r in requirements)),
    )
