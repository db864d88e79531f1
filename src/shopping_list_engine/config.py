from __future__ import annotations
from pathlib import Path
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from shopping_list_engine.categorizer import CATEGORIES


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5"
    shopping_lists_dir: Path = Path.home() / ".shopping_lists"
    store_sections: list[str] = list(CATEGORIES)
    section_emoji: dict[str, str] = {
        "Produce": "🥦",
        "Meat & Seafood": "🥩",
        "Dairy & Eggs": "🥚",
        "Grains & Bakery": "🍞",
        "Pantry Staples": "🧂",
        "Canned/Packaged": "🥫",
        "Other": "🛒",
    }
    price_hints: dict[str, float] = {}
    system_prompt: str = (
        "You are a grocery shopping assistant that tidies up a weekly shopping list. "
        "You receive ingredients that have already been parsed, merged across recipes "
        "and checked against the user's pantry. For each ingredient you must:\n"
        "1. Assign exactly one store category from the provided list\n"
        "2. Estimate a realistic US grocery store price in USD for the quantity given\n\n"
        "Return ONLY a JSON array. Each object must have:\n"
        "  name: string (copied exactly from the input, do not rename)\n"
        "  category: string (must be one of the provided categories)\n"
        "  estimated_price: number (USD for the whole quantity)\n\n"
        "Rules:\n"
        "- Return one object per input ingredient, in any order\n"
        "- Do not add, drop or merge ingredients"
    )

    @field_validator("store_sections", mode="after")
    @classmethod
    def known_sections(cls, v: list[str]) -> list[str]:
        unknown = [s for s in v if s not in CATEGORIES]
        if unknown:
            raise ValueError(f"Unknown store sections: {', '.join(unknown)}")
        return v

    @property
    def ai_available(self) -> bool:
        return bool(self.anthropic_api_key)
