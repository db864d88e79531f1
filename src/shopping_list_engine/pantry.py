from __future__ import annotations
import json
import logging
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Optional
from shopping_list_engine.aggregator import Aggregate, key_for
from shopping_list_engine.models import NormalizedKey, PantryEntry
from shopping_list_engine.normalizer import normalize
from shopping_list_engine.parser import parse_quantity

logger = logging.getLogger(__name__)

# None means "on hand, amount unknown" and covers any requirement for that key.
PantryMap = dict[NormalizedKey, Optional[Decimal]]


class PantryManager:
    def __init__(self, base_dir: Path | None = None):
        self._path = (base_dir or (Path.home() / ".shopping_lists")) / "pantry.json"

    def list(self) -> list[PantryEntry]:
        if not self._path.exists():
            return []
        return [PantryEntry.model_validate(p) for p in json.loads(self._path.read_text())]

    def add(self, name: str, quantity: str = "", expires_on: date | None = None) -> PantryEntry:
        entry = PantryEntry(name=name, quantity=quantity, expires_on=expires_on)
        key = normalize(entry.name)
        items = [p for p in self.list() if normalize(p.name) != key]
        items.append(entry)
        self._save(items)
        return entry

    def remove(self, name: str) -> bool:
        items = self.list()
        key = normalize(name)
        kept = [p for p in items if normalize(p.name) != key]
        self._save(kept)
        return len(kept) != len(items)

    def _save(self, items: list[PantryEntry]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps([p.model_dump(mode="json") for p in items], indent=2))


def build_pantry_map(entries: Iterable[PantryEntry], as_of: date | None = None) -> PantryMap:
    pantry: PantryMap = {}
    for entry in entries:
        if as_of is not None and entry.is_expired(as_of):
            logger.debug("Ignoring expired pantry entry %r (expired %s)", entry.name, entry.expires_on)
            continue
        quantity, unit = parse_quantity(entry.quantity)
        key = key_for(entry.name, unit)
        if not key.name:
            continue
        if key in pantry and (pantry[key] is None or quantity is None):
            pantry[key] = None
        elif key in pantry:
            pantry[key] += quantity
        else:
            pantry[key] = quantity
    return pantry


def reconcile(required: Aggregate, pantry: PantryMap) -> Aggregate:
    """Subtract on-hand stock from the required quantities.

    Units are compared as-is; "2 lb" of stock never covers "1 kg" of need.
    An entry without a readable amount covers every unit of that ingredient.
    """
    fully_stocked = {key.name for key, quantity in pantry.items() if quantity is None}
    remaining: Aggregate = {}
    for key, requirement in required.items():
        if key.name in fully_stocked:
            continue
        on_hand = pantry.get(key)
        if on_hand is None:
            remaining[key] = requirement
            continue
        left = requirement.quantity - on_hand
        if left <= 0:
            continue
        remaining[key] = requirement.model_copy(update={"quantity": left})
    return remaining
