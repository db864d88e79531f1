import json
from pathlib import Path
from unittest.mock import MagicMock, patch
import httpx
import pytest
from pytest_httpx import HTTPXMock
from shopping_list_engine.models import RecipeIngredientBlock
from shopping_list_engine.sources import (
    FetchError, MealPlanError, ScrapeError, fetch, import_recipe, load_meal_plan,
    recipes_from_meal_plan, scrape_recipe,
)

FIXTURE_DIR = Path(__file__).parent / "fixtures"

MEAL_PLAN = {
    "meal_plan": [
        {
            "day": "Monday",
            "main_dish": {"name": "Chili", "ingredients": "1 lb ground beef\n1 can black beans"},
            "side_dish": {"name": "Cornbread", "ingredients": ["1 cup cornmeal", "1 egg"]},
        },
        {
            "day": "Tuesday",
            "main_dish": {"title": "Tacos", "ingredients": "8 corn tortillas", "cook_time": "20 min"},
        },
    ],
    "shopping_list": {"ignored": True},
}


def test_fetch_returns_html(httpx_mock: HTTPXMock):
    httpx_mock.add_response(url="https://www.example.com/chili", text="<html>recipe</html>")
    assert fetch("https://www.example.com/chili") == "<html>recipe</html>"


def test_fetch_paywall_raises_fetch_error(httpx_mock: HTTPXMock):
    httpx_mock.add_response(url="https://cooking.example.com/recipe", status_code=403)
    with pytest.raises(FetchError, match="paywall"):
        fetch("https://cooking.example.com/recipe")


def test_fetch_404_raises_fetch_error(httpx_mock: HTTPXMock):
    httpx_mock.add_response(url="https://example.com/gone", status_code=404)
    with pytest.raises(FetchError, match="not found"):
        fetch("https://example.com/gone")


def test_fetch_server_error_raises_fetch_error(httpx_mock: HTTPXMock):
    httpx_mock.add_response(url="https://example.com/broken", status_code=500)
    with pytest.raises(FetchError, match="HTTP 500"):
        fetch("https://example.com/broken")


def test_fetch_network_error_raises_fetch_error(httpx_mock: HTTPXMock):
    httpx_mock.add_exception(httpx.ConnectError("failed"))
    with pytest.raises(FetchError, match="Could not connect"):
        fetch("https://example.com/recipe")


def test_fetch_timeout_raises_fetch_error(httpx_mock: HTTPXMock):
    httpx_mock.add_exception(httpx.ReadTimeout("slow"))
    with pytest.raises(FetchError, match="timed out"):
        fetch("https://example.com/recipe")


def test_fetch_sends_browser_headers(httpx_mock: HTTPXMock):
    httpx_mock.add_response(url="https://example.com/recipe", text="<html></html>")
    fetch("https://example.com/recipe")
    request = httpx_mock.get_requests()[0]
    assert "Mozilla" in request.headers["user-agent"]


def test_scrape_recipe_from_schema_markup():
    html = (FIXTURE_DIR / "weeknight_chili.html").read_text()
    recipe = scrape_recipe(html, url="https://www.example.com/chili", scale=2)
    assert isinstance(recipe, RecipeIngredientBlock)
    assert recipe.title == "Weeknight Chili"
    assert recipe.url == "https://www.example.com/chili"
    assert recipe.scale == 2
    assert recipe.lines()[1] == "2 cups chopped onions"
    assert len(recipe.lines()) == 4


def test_scrape_recipe_without_recipe_raises():
    with pytest.raises(ScrapeError):
        scrape_recipe("<html><body>no recipe here</body></html>", url="https://example.com")


def test_scrape_recipe_without_ingredients_raises():
    scraper = MagicMock()
    scraper.ingredients.return_value = []
    with patch("shopping_list_engine.sources.scrape_html", return_value=scraper):
        with pytest.raises(ScrapeError, match="No ingredients"):
            scrape_recipe("<html></html>", url="https://example.com/empty")


def test_scrape_recipe_falls_back_to_url_for_title():
    scraper = MagicMock()
    scraper.ingredients.return_value = ["1 egg"]
    scraper.title.return_value = ""
    with patch("shopping_list_engine.sources.scrape_html", return_value=scraper):
        recipe = scrape_recipe("<html></html>", url="https://example.com/eggs")
    assert recipe.title == "https://example.com/eggs"


def test_import_recipe_fetches_then_scrapes(httpx_mock: HTTPXMock):
    html = (FIXTURE_DIR / "weeknight_chili.html").read_text()
    httpx_mock.add_response(url="https://www.example.com/chili", text=html)
    recipe = import_recipe("https://www.example.com/chili")
    assert recipe.title == "Weeknight Chili"


def test_meal_plan_maps_main_and_side_dishes():
    recipes = recipes_from_meal_plan(MEAL_PLAN)
    assert [r.title for r in recipes] == ["Chili", "Cornbread", "Tacos"]
    assert recipes[1].ingredients == "1 cup cornmeal\n1 egg"


def test_meal_plan_accepts_json_text():
    recipes = recipes_from_meal_plan(json.dumps(MEAL_PLAN))
    assert len(recipes) == 3


@pytest.mark.parametrize("payload", [
    {},
    {"meal_plan": "monday: chili"},
    {"meal_plan": [{"day": "Monday"}]},
    {"meal_plan": [{"main_dish": {"name": "Chili", "ingredients": [1, 2]}}]},
    "not json",
])
def test_meal_plan_rejects_malformed_payloads(payload):
    with pytest.raises(MealPlanError):
        recipes_from_meal_plan(payload)


def test_load_meal_plan_accepts_recipe_list():
    text = json.dumps([{"title": "Soup", "ingredients": "1 onion"}, {"ingredients": "2 eggs", "scale": 2}])
    recipes = load_meal_plan(text)
    assert [r.title for r in recipes] == ["Soup", ""]
    assert recipes[1].scale == 2


def test_load_meal_plan_accepts_meal_plan_object():
    assert len(load_meal_plan(json.dumps(MEAL_PLAN))) == 3


def test_load_meal_plan_rejects_bad_json():
    with pytest.raises(MealPlanError, match="not valid JSON"):
        load_meal_plan("{oops")


def test_load_meal_plan_rejects_bad_recipe_list():
    with pytest.raises(MealPlanError, match="Recipe list"):
        load_meal_plan(json.dumps([{"title": "no ingredients"}]))
