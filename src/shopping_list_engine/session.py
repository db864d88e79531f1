from __future__ import annotations
import json
import logging
import re
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from pydantic import ValidationError
from shopping_list_engine.models import WeeklyPlan

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def week_start(day: date) -> date:
    """Sunday on or before the given day."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _make_id(start: date, name: str | None) -> str:
    suffix = re.sub(r"[^\w-]", "", name.replace(" ", "-")).lower() if name else "week"
    return f"{start.isoformat()}-{suffix}"


class PlanManager:
    """Stores one JSON record per planned week. The last save wins."""

    def __init__(self, base_dir: Path | None = None):
        self.base_dir = base_dir or (Path.home() / ".shopping_lists")
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._current_pointer = self.base_dir / "current.json"

    def _plan_path(self, plan_id: str) -> Path:
        return self.base_dir / f"{plan_id}.json"

    def new(self, week_of: date | None = None, name: str | None = None) -> WeeklyPlan:
        now = _now()
        start = week_start(week_of or now.date())
        plan = WeeklyPlan(
            id=_make_id(start, name), name=name, week_start=start, created_at=now, updated_at=now
        )
        self.save(plan)
        self._set_current(plan.id)
        return plan

    def save(self, plan: WeeklyPlan) -> None:
        plan.updated_at = _now()
        self._plan_path(plan.id).write_text(plan.model_dump_json(indent=2))

    def load(self, plan_id: str) -> WeeklyPlan:
        path = self._plan_path(plan_id)
        if not path.exists():
            raise FileNotFoundError(f"Plan '{plan_id}' not found.")
        return WeeklyPlan.model_validate_json(path.read_text())

    def load_current(self) -> WeeklyPlan:
        if not self._current_pointer.exists():
            raise FileNotFoundError("No active plan. Run: shoplist new")
        plan_id = json.loads(self._current_pointer.read_text())["id"]
        return self.load(plan_id)

    def _set_current(self, plan_id: str) -> None:
        self._current_pointer.write_text(json.dumps({"id": plan_id}))

    def finalize(self, plan: WeeklyPlan, output_path: Path) -> None:
        plan.finalized = True
        plan.output_path = str(output_path)
        self.save(plan)

    def list_plans(self) -> list[WeeklyPlan]:
        plans = []
        for path in sorted(self.base_dir.glob("*.json")):
            if path.name in ("current.json", "pantry.json"):
                continue
            try:
                plans.append(WeeklyPlan.model_validate_json(path.read_text()))
            except (ValidationError, OSError):
                logger.warning("Could not read plan file %s", path.name)
        return plans

    def open_plan(self, plan_id: str) -> WeeklyPlan:
        plan = self.load(plan_id)
        plan.finalized = False
        self.save(plan)
        self._set_current(plan.id)
        return plan
