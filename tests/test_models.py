from datetime import date
from decimal import Decimal
import pytest
from pydantic import ValidationError
from shopping_list_engine.models import (
    CategorizedSection, NormalizedKey, PantryEntry, ParsedIngredient, RecipeIngredientBlock,
    ShoppingList, ShoppingListItem,
)


def test_recipe_block_lines():
    recipe = RecipeIngredientBlock(title="Pasta", ingredients="- 1 lb spaghetti\n- 2 cloves garlic")
    assert recipe.lines() == ["- 1 lb spaghetti", "- 2 cloves garlic"]
    assert recipe.scale == 1.0


def test_recipe_block_is_immutable():
    recipe = RecipeIngredientBlock(ingredients="1 egg")
    with pytest.raises(ValidationError):
        recipe.ingredients = "2 eggs"


@pytest.mark.parametrize("scale", [0, -1.5])
def test_recipe_block_scale_must_be_positive(scale):
    with pytest.raises(ValidationError, match="greater than zero"):
        RecipeIngredientBlock(ingredients="1 egg", scale=scale)


def test_parsed_ingredient_amount_defaults_to_one():
    assert ParsedIngredient(description="salt").amount == Decimal(1)
    assert ParsedIngredient(quantity=Decimal("0.5"), unit="cup", description="rice").amount == Decimal("0.5")


def test_pantry_entry_defaults():
    entry = PantryEntry(name=" olive oil ")
    assert entry.name == "olive oil"
    assert entry.quantity == ""
    assert entry.expires_on is None


def test_pantry_entry_numeric_quantity_becomes_text():
    assert PantryEntry.model_validate({"name": "eggs", "quantity": 6}).quantity == "6"


def test_pantry_entry_expiry():
    entry = PantryEntry(name="milk", expires_on=date(2026, 10, 1))
    assert entry.is_expired(date(2026, 10, 2))
    assert not entry.is_expired(date(2026, 10, 1))
    assert not PantryEntry(name="salt").is_expired(date(2026, 10, 2))


def test_shopping_list_items_and_by_category():
    item = ShoppingListItem(quantity=Decimal(2), unit="cup", name="onion", category="Produce", text="2 cup onion")
    shopping_list = ShoppingList(sections=[CategorizedSection(category="Produce", items=[item])])
    assert shopping_list.items == [item]
    assert shopping_list.by_category() == {"Produce": ["2 cup onion"]}


def test_shopping_list_json_roundtrip():
    item = ShoppingListItem(
        quantity=Decimal("0.333"), unit="cup", name="olive oil", category="Pantry Staples",
        estimated_price=0.67, text="0.33 cup olive oil",
    )
    shopping_list = ShoppingList(
        sections=[CategorizedSection(category="Pantry Staples", items=[item])],
        estimated_total_cost=0.67,
    )
    loaded = ShoppingList.model_validate_json(shopping_list.model_dump_json())
    assert loaded == shopping_list


def test_normalized_key_is_a_tuple():
    key = NormalizedKey("onion", "cup")
    assert key == ("onion", "cup")
    assert key.name == "onion"
