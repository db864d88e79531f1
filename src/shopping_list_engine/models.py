from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal
from typing import NamedTuple, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class NormalizedKey(NamedTuple):
    name: str
    unit: str


class RecipeIngredientBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    ingredients: str
    title: str = ""
    url: str = ""
    scale: float = 1.0

    @field_validator("scale")
    @classmethod
    def positive_scale(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("scale must be greater than zero")
        return v

    def lines(self) -> list[str]:
        return self.ingredients.splitlines()


class ParsedIngredient(BaseModel):
    model_config = ConfigDict(frozen=True)

    quantity: Optional[Decimal] = None
    unit: str = ""
    description: str
    raw: str = ""

    @property
    def amount(self) -> Decimal:
        """Quantity with the implicit 1 filled in for "to taste" lines."""
        return self.quantity if self.quantity is not None else Decimal(1)


class AggregatedRequirement(BaseModel):
    key: NormalizedKey
    quantity: Decimal
    display_name: str
    sources: list[str] = Field(default_factory=list)

    @property
    def name(self) -> str:
        return self.key.name

    @property
    def unit(self) -> str:
        return self.key.unit


class PantryEntry(BaseModel):
    name: str = Field(validation_alias=AliasChoices("name", "ingredient_name"))
    quantity: str = ""
    expires_on: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("expires_on", "expiry_date")
    )

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("pantry entry name must not be blank")
        return v.strip()

    @field_validator("quantity", mode="before")
    @classmethod
    def quantity_as_text(cls, v):
        if v is None:
            return ""
        if isinstance(v, (int, float, Decimal)):
            return str(v)
        return v

    def is_expired(self, as_of: date) -> bool:
        return self.expires_on is not None and self.expires_on < as_of


class ShoppingListItem(BaseModel):
    quantity: Decimal
    unit: str = ""
    name: str
    category: str
    estimated_price: float = 0.0
    display_name: str = ""
    text: str


class CategorizedSection(BaseModel):
    category: str
    items: list[ShoppingListItem] = Field(default_factory=list)


class ShoppingList(BaseModel):
    sections: list[CategorizedSection] = Field(default_factory=list)
    estimated_total_cost: float = 0.0

    @property
    def items(self) -> list[ShoppingListItem]:
        return [item for section in self.sections for item in section.items]

    def by_category(self) -> dict[str, list[str]]:
        """Shape consumed by the print and PDF renderers: category -> item lines."""
        return {s.category: [item.text for item in s.items] for s in self.sections}


class WeeklyPlan(BaseModel):
    version: int = 1
    id: str
    name: Optional[str] = None
    week_start: date
    created_at: datetime
    updated_at: datetime
    recipes: list[RecipeIngredientBlock] = Field(default_factory=list)
    shopping_list: Optional[ShoppingList] = None
    finalized: bool = False
    output_path: Optional[str] = None
