from __future__ import annotations
import json
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, Mapping, Optional
import anthropic
from pydantic import BaseModel, ValidationError
from shopping_list_engine.categorizer import CATEGORIES, Categorizer, KeywordCategorizer
from shopping_list_engine.config import Config
from shopping_list_engine.formatter import format_item_line
from shopping_list_engine.models import AggregatedRequirement, NormalizedKey
from shopping_list_engine.pricing import CostEstimator, HeuristicCostEstimator, to_cents

logger = logging.getLogger(__name__)


class ProcessorError(Exception):
    pass


class EnrichedItem(BaseModel):
    name: str
    category: Optional[str] = None
    estimated_price: Optional[float] = None


def _line(requirement: AggregatedRequirement) -> str:
    return format_item_line(requirement.quantity, requirement.unit, requirement.name)


def _extract_json(text: str) -> str:
    """Extract JSON array from text that may contain extra prose."""
    match = re.search(r"\[.*\]", text, re.DOTALL)
    if match:
        return match.group(0)
    return text


def enrich(requirements: list[AggregatedRequirement], config: Config, client=None) -> list[EnrichedItem]:
    client = client or anthropic.Anthropic(api_key=config.anthropic_api_key)

    categories_list = "\n".join(f"  - {c}" for c in CATEGORIES)
    ingredient_lines = "\n".join(f"- {_line(r)}" for r in requirements)
    user_content = (
        f"Store categories to use:\n{categories_list}\n\n"
        f"Ingredients to categorize and price:\n{ingredient_lines}"
    )

    response = client.messages.create(
        model=config.anthropic_model,
        max_tokens=4096,
        system=config.system_prompt,
        messages=[{"role": "user", "content": user_content}],
    )

    raw_text = next((block.text for block in response.content or [] if getattr(block, "text", None)), None)
    if raw_text is None:
        raise ProcessorError("LLM response contained no text")
    try:
        data = json.loads(_extract_json(raw_text))
    except (json.JSONDecodeError, AttributeError) as e:
        raise ProcessorError(
            f"Failed to parse LLM response as JSON: {e}\n\nRaw response:\n{raw_text}"
        ) from e

    try:
        return [EnrichedItem.model_validate(item) for item in data]
    except (ValidationError, TypeError) as e:
        raise ProcessorError(f"LLM returned unexpected ingredient format: {e}") from e


class AIEnricher:
    """Categorizes and prices items with one model call per item set.

    Falls back to the keyword heuristics for the whole batch when the call is
    unavailable or fails, and per item when an answer is missing or unusable.
    """

    def __init__(
        self,
        config: Config,
        fallback_categorizer: Categorizer | None = None,
        fallback_estimator: CostEstimator | None = None,
        client=None,
    ):
        self.config = config
        self.fallback_categorizer = fallback_categorizer or KeywordCategorizer()
        self.fallback_estimator = fallback_estimator or HeuristicCostEstimator(config.price_hints)
        self._client = client
        self._answers: dict[frozenset, Optional[dict[str, EnrichedItem]]] = {}

    def _lookup(self, requirements: list[AggregatedRequirement]) -> Optional[dict[str, EnrichedItem]]:
        batch = frozenset((r.key, r.quantity) for r in requirements)
        if batch in self._answers:
            return self._answers[batch]

        answers: Optional[dict[str, EnrichedItem]] = None
        if not requirements:
            answers = {}
        elif not self.config.ai_available and self._client is None:
            logger.warning("ANTHROPIC_API_KEY is not set; using keyword categories and prices")
        else:
            try:
                items = enrich(requirements, self.config, client=self._client)
                answers = {item.name.strip().lower(): item for item in items}
            except (ProcessorError, anthropic.APIError) as e:
                logger.warning("Shopping list enrichment failed, using heuristics: %s", e)
        self._answers[batch] = answers
        return answers

    def categorize(self, requirements: Iterable[AggregatedRequirement]) -> dict[NormalizedKey, str]:
        requirements = list(requirements)
        fallback = self.fallback_categorizer.categorize(requirements)
        answers = self._lookup(requirements)
        if answers is None:
            return fallback

        result = {}
        for r in requirements:
            answer = answers.get(_line(r).lower())
            if answer is not None and answer.category in CATEGORIES:
                result[r.key] = answer.category
            else:
                result[r.key] = fallback[r.key]
        return result

    def estimate(
        self,
        requirements: Iterable[AggregatedRequirement],
        categories: Mapping[NormalizedKey, str],
    ) -> dict[NormalizedKey, Decimal]:
        requirements = list(requirements)
        fallback = self.fallback_estimator.estimate(requirements, categories)
        answers = self._lookup(requirements)
        if answers is None:
            return fallback

        result = {}
        for r in requirements:
            answer = answers.get(_line(r).lower())
            price = _as_price(answer.estimated_price) if answer is not None else None
            result[r.key] = price if price is not None else fallback[r.key]
        return result


def _as_price(value: Optional[float]) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        return None
    if not price.is_finite() or price < 0:
        return None
    return to_cents(price)
