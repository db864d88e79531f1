"""Recipe sources: web pages and model-generated weekly meal plans."""
from __future__ import annotations
import json
import logging
from typing import Any, Optional, Union
import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from recipe_scrapers import scrape_html
from recipe_scrapers._exceptions import WebsiteNotImplementedError, NoSchemaFoundInWildMode
from shopping_list_engine.models import RecipeIngredientBlock

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/121.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


class FetchError(Exception):
    pass


class ScrapeError(Exception):
    pass


class MealPlanError(Exception):
    pass


def fetch(url: str, timeout: float = 15) -> str:
    try:
        response = httpx.get(url, headers=HEADERS, follow_redirects=True, timeout=timeout)
    except httpx.ConnectError as e:
        raise FetchError(f"Could not connect to {url}. Check your internet connection.") from e
    except httpx.TimeoutException as e:
        raise FetchError(f"Request to {url} timed out.") from e

    if response.status_code in (401, 403):
        raise FetchError(
            f"This page appears to be behind a paywall or requires login ({response.status_code}). "
            "Save the page HTML from your browser and run: shoplist recipe add --html path/to/saved.html"
        )
    if response.status_code == 404:
        raise FetchError(f"Page not found (404): {url}")
    if response.status_code >= 400:
        raise FetchError(f"HTTP {response.status_code} error fetching {url}")
    return response.text


def scrape_recipe(html: str, url: str, scale: float = 1.0) -> RecipeIngredientBlock:
    try:
        scraper = scrape_html(html, org_url=url, supported_only=False)
        ingredients = scraper.ingredients()
        if not ingredients:
            raise ScrapeError(f"No ingredients found at {url}. The page may not contain a recipe.")
        title = scraper.title() or url
    except (WebsiteNotImplementedError, NoSchemaFoundInWildMode) as e:
        raise ScrapeError(
            f"Could not find a recipe on {url}. "
            "Try saving the page HTML and using: shoplist recipe add --html path/to/saved.html"
        ) from e
    except ScrapeError:
        raise
    except Exception as e:
        raise ScrapeError(f"Unexpected error scraping {url}: {e}") from e
    return RecipeIngredientBlock(title=title, url=url, ingredients="\n".join(ingredients), scale=scale)


def import_recipe(url: str, scale: float = 1.0) -> RecipeIngredientBlock:
    return scrape_recipe(fetch(url), url, scale=scale)


class PlannedDish(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = Field(validation_alias=AliasChoices("title", "name"))
    ingredients: str

    @field_validator("ingredients", mode="before")
    @classmethod
    def join_ingredient_list(cls, v: Any) -> Any:
        # Models return either one newline-joined string or a list of lines.
        if isinstance(v, list):
            if not all(isinstance(line, str) for line in v):
                raise ValueError("ingredient lines must be strings")
            return "\n".join(v)
        return v


class PlannedDay(BaseModel):
    model_config = ConfigDict(extra="ignore")

    day: str = ""
    main_dish: PlannedDish
    side_dish: Optional[PlannedDish] = None

    def dishes(self) -> list[PlannedDish]:
        return [d for d in (self.main_dish, self.side_dish) if d is not None]


class MealPlanPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    meal_plan: list[PlannedDay]


def recipes_from_meal_plan(payload: Union[str, bytes, dict]) -> list[RecipeIngredientBlock]:
    """Map a generated meal plan into recipe blocks, rejecting malformed payloads."""
    try:
        if isinstance(payload, (str, bytes)):
            plan = MealPlanPayload.model_validate_json(payload)
        else:
            plan = MealPlanPayload.model_validate(payload)
    except ValidationError as e:
        raise MealPlanError(f"Meal plan payload is not in the expected format: {e}") from e

    recipes = [
        RecipeIngredientBlock(title=dish.title, ingredients=dish.ingredients)
        for day in plan.meal_plan
        for dish in day.dishes()
    ]
    logger.debug("Meal plan with %d days mapped to %d recipes", len(plan.meal_plan), len(recipes))
    return recipes


def load_meal_plan(text: str) -> list[RecipeIngredientBlock]:
    """Accept either a meal plan object or a bare list of recipes."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MealPlanError(f"Meal plan file is not valid JSON: {e}") from e
    if isinstance(data, list):
        try:
            return [RecipeIngredientBlock.model_validate(r) for r in data]
        except ValidationError as e:
            raise MealPlanError(f"Recipe list is not in the expected format: {e}") from e
    return recipes_from_meal_plan(data)
