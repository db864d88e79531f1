"""Best-effort parser for free-text ingredient lines.

Lines come from recipe text written by people or generated by a model, so the
parser never raises on odd phrasing. Anything it cannot split into
quantity/unit/description is kept whole as the description.
"""
from __future__ import annotations
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Optional
from shopping_list_engine.models import ParsedIngredient
from shopping_list_engine.normalizer import UNIT_ALIASES

logger = logging.getLogger(__name__)

_QUANTUM = Decimal("0.001")
# Larger amounts are typos or pasted IDs, not quantities.
MAX_QUANTITY = Decimal(100000)

VULGAR_FRACTIONS: dict[str, str] = {
    "½": "1/2", "⅓": "1/3", "⅔": "2/3", "¼": "1/4", "¾": "3/4",
    "⅕": "1/5", "⅖": "2/5", "⅗": "3/5", "⅘": "4/5", "⅙": "1/6", "⅚": "5/6",
    "⅛": "1/8", "⅜": "3/8", "⅝": "5/8", "⅞": "7/8",
}

_BULLET = re.compile(r"^\s*(?:[-*•–—+·]+|\d+[.)](?=\s))\s*")
_MARKDOWN = re.compile(r"\*\*|__|`")
_PARENS = re.compile(r"\s*\([^)]*\)")
_NUMBER = r"\d+(?:\s+\d+/\d+|/\d+|\.\d+)?|\.\d+"
_QUANTITY = re.compile(
    rf"^(?P<qty>{_NUMBER})(?:\s*(?:-|–|to)\s*(?:{_NUMBER}))?(?=[\s.a-zA-Z]|$)\s*"
)
_UNIT = re.compile(r"^(?P<unit>[a-zA-Z]+)\.?(?=\s|$)\s*")
_LEADING_OF = re.compile(r"^of\s+", re.IGNORECASE)
_TRAILING_NOTES = re.compile(
    r"\s*\b(?:to taste|as needed|for serving|for garnish|optional|divided)\b\.?\s*$",
    re.IGNORECASE,
)


def _expand_vulgar(text: str) -> str:
    for glyph, fraction in VULGAR_FRACTIONS.items():
        # "1½" -> "1 1/2", "½" -> "1/2"
        text = re.sub(rf"(\d)\s*{glyph}", rf"\1 {fraction}", text)
        text = text.replace(glyph, fraction)
    return text


def _to_decimal(token: str) -> Optional[Decimal]:
    try:
        parts = token.split()
        total = Decimal(0)
        for part in parts:
            if "/" in part:
                num, den = part.split("/")
                if Decimal(den) == 0:
                    return None
                total += Decimal(num) / Decimal(den)
            else:
                total += Decimal(part)
        if total > MAX_QUANTITY:
            return None
        if total == total.to_integral_value():
            return total.quantize(Decimal(1))
        return total.quantize(_QUANTUM)
    except (InvalidOperation, ValueError):
        return None


def clean_line(line: str) -> str:
    """Strip bullets, markdown emphasis and parenthetical asides."""
    text = _MARKDOWN.sub("", line)
    text = _BULLET.sub("", text, count=1)
    text = _PARENS.sub("", text)
    return _expand_vulgar(" ".join(text.split()))


def _split_quantity(text: str) -> tuple[Optional[Decimal], str, str]:
    """Return (quantity, canonical unit, remainder) for a cleaned line."""
    match = _QUANTITY.match(text)
    if not match:
        return None, "", text
    quantity = _to_decimal(match.group("qty"))
    if quantity is None:
        return None, "", text
    rest = text[match.end():]
    unit = ""
    unit_match = _UNIT.match(rest)
    if unit_match and unit_match.group("unit").lower() in UNIT_ALIASES:
        unit = UNIT_ALIASES[unit_match.group("unit").lower()]
        rest = rest[unit_match.end():]
    return quantity, unit, rest


def _describe(rest: str) -> str:
    rest = _LEADING_OF.sub("", rest)
    description = rest.split(",")[0]
    description = _TRAILING_NOTES.sub("", description)
    return description.strip(" .;:-")


def parse_line(line: str) -> Optional[ParsedIngredient]:
    text = clean_line(line)
    if not text:
        return None

    quantity, unit, rest = _split_quantity(text)
    description = _describe(rest)
    if not description:
        logger.debug("No description left after quantity in %r; keeping the whole line", line)
        return ParsedIngredient(quantity=None, unit="", description=_describe(text) or text, raw=line)
    if quantity is None:
        logger.debug("No leading quantity in %r; treating as an implicit single item", line)
    return ParsedIngredient(quantity=quantity, unit=unit, description=description, raw=line)


def parse_block(block: str) -> list[ParsedIngredient]:
    parsed = []
    for line in block.splitlines():
        ingredient = parse_line(line)
        if ingredient is not None:
            parsed.append(ingredient)
    return parsed


def parse_quantity(text: str) -> tuple[Optional[Decimal], str]:
    """Parse a free-text amount such as "2 lbs" or "1/2 cup".

    Anything without a leading number ("some", "a bag") gives (None, "").
    """
    cleaned = clean_line(text or "")
    quantity, unit, rest = _split_quantity(cleaned)
    if quantity is None:
        return None, ""
    if not unit and rest:
        unit = UNIT_ALIASES.get(rest.split()[0].lower().rstrip(".,"), "")
    return quantity, unit
