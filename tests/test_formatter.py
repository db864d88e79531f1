from decimal import Decimal
import pytest
from shopping_list_engine.config import Config
from shopping_list_engine.formatter import format_item_line, format_quantity, format_shopping_list
from shopping_list_engine.models import CategorizedSection, ShoppingList, ShoppingListItem


def _item(text: str, category: str) -> ShoppingListItem:
    quantity, _, name = text.partition(" ")
    return ShoppingListItem(quantity=Decimal(quantity), name=name, category=category, text=text)


def _list(*sections: tuple[str, list[str]], total: float = 0.0) -> ShoppingList:
    return ShoppingList(
        sections=[
            CategorizedSection(category=category, items=[_item(t, category) for t in texts])
            for category, texts in sections
        ],
        estimated_total_cost=total,
    )


@pytest.fixture
def config():
    return Config(_env_file=None)


@pytest.mark.parametrize("quantity,expected", [
    (Decimal(2), "2"),
    (Decimal("2.000"), "2"),
    (Decimal("0.5"), "0.5"),
    (Decimal("0.333"), "0.33"),
    (Decimal("1.25"), "1.25"),
    (None, ""),
])
def test_format_quantity(quantity, expected):
    assert format_quantity(quantity) == expected


def test_format_item_line():
    assert format_item_line(Decimal(2), "cup", "onion") == "2 cup onion"
    assert format_item_line(Decimal(3), "", "lemon") == "3 lemon"
    assert format_item_line(None, "", "salt") == "salt"


def test_format_groups_by_section(config):
    output = format_shopping_list(
        _list(("Produce", ["5 garlic clove", "1 spinach"]), ("Pantry Staples", ["2 flour"])), config
    )
    produce_pos = output.index("Produce")
    pantry_pos = output.index("Pantry Staples")
    assert produce_pos < output.index("garlic") < pantry_pos
    assert pantry_pos < output.index("flour")


def test_format_uses_checkbox_style(config):
    output = format_shopping_list(_list(("Produce", ["5 garlic clove"])), config)
    assert "[ ] 5 garlic clove" in output


def test_format_respects_section_order(config):
    output = format_shopping_list(
        _list(("Meat & Seafood", ["1 chicken breast"]), ("Produce", ["5 garlic clove"])), config
    )
    assert output.index("Produce") < output.index("Meat & Seafood")


def test_format_skips_empty_sections_and_shows_total(config):
    output = format_shopping_list(_list(("Produce", ["5 garlic clove"]), total=2.5), config)
    assert "Dairy & Eggs" not in output
    assert "🥦 Produce" in output
    assert output.endswith("Estimated total: $2.50")


def test_format_empty_list(config):
    assert format_shopping_list(ShoppingList(), config) == ""
