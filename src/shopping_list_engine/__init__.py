from shopping_list_engine.engine import EngineInputError, compute_shopping_list
from shopping_list_engine.models import (
    CategorizedSection,
    PantryEntry,
    ParsedIngredient,
    RecipeIngredientBlock,
    ShoppingList,
    ShoppingListItem,
)

__all__ = [
    "CategorizedSection",
    "EngineInputError",
    "PantryEntry",
    "ParsedIngredient",
    "RecipeIngredientBlock",
    "ShoppingList",
    "ShoppingListItem",
    "compute_shopping_list",
]
