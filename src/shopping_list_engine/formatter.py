from __future__ import annotations
from decimal import Decimal
from shopping_list_engine.models import ShoppingList
from shopping_list_engine.config import Config


def format_quantity(quantity: Decimal | None) -> str:
    if quantity is None:
        return ""
    if quantity == quantity.to_integral_value():
        return str(quantity.quantize(Decimal(1)))
    return f"{quantity:.2f}".rstrip("0").rstrip(".")


def format_item_line(quantity: Decimal | None, unit: str, name: str) -> str:
    return " ".join(f"{format_quantity(quantity)} {unit or ''} {name}".split())


def format_shopping_list(shopping_list: ShoppingList, config: Config) -> str:
    lines: list[str] = []
    order = config.store_sections
    sections = sorted(
        shopping_list.sections,
        key=lambda s: order.index(s.category) if s.category in order else len(order),
    )
    for section in sections:
        emoji = config.section_emoji.get(section.category, "")
        heading = f"{emoji} {section.category}".strip()
        lines.append(f"\n{heading}")
        lines.append("-" * len(heading))
        for item in section.items:
            lines.append(f"[ ] {item.text}")

    if lines:
        lines.append(f"\nEstimated total: ${shopping_list.estimated_total_cost:.2f}")
    return "\n".join(lines).strip()
