from __future__ import annotations
import json
import logging
from datetime import date
from pathlib import Path
import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from shopping_list_engine.config import Config
from shopping_list_engine.engine import EngineInputError, compute_shopping_list
from shopping_list_engine.formatter import format_shopping_list
from shopping_list_engine.models import RecipeIngredientBlock
from shopping_list_engine.pantry import PantryManager
from shopping_list_engine.pricing import HeuristicCostEstimator
from shopping_list_engine.processor import AIEnricher
from shopping_list_engine.session import PlanManager
from shopping_list_engine.sources import (
    FetchError, MealPlanError, ScrapeError, import_recipe, load_meal_plan, scrape_recipe,
)

console = Console()
err_console = Console(stderr=True)

DATE = click.DateTime(formats=["%Y-%m-%d"])


def _load_config() -> Config:
    try:
        return Config()
    except ValidationError as e:
        err_console.print(f"[red]Error:[/red] Invalid configuration: {e}")
        raise SystemExit(1)


def _load_current(manager: PlanManager):
    try:
        return manager.load_current()
    except FileNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


def _strategies(config: Config, use_ai: bool) -> dict:
    if use_ai and config.ai_available:
        enricher = AIEnricher(config)
        return {"categorizer": enricher, "estimator": enricher}
    if use_ai:
        console.print(
            "[yellow]ANTHROPIC_API_KEY is not set; using keyword categories and prices.[/yellow]"
        )
    return {"estimator": HeuristicCostEstimator(config.price_hints)}


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def cli(verbose: bool):
    """Shopping list engine: turn a week of recipes into a pantry-aware shopping list."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )


@cli.command()
@click.option("--name", default=None, help="Optional name for this week's plan")
@click.option("--week", "week_of", default=None, type=DATE, help="Any day in the planned week (YYYY-MM-DD)")
def new(name: str | None, week_of):
    """Start a new weekly plan."""
    config = _load_config()
    manager = PlanManager(base_dir=config.shopping_lists_dir)
    plan = manager.new(week_of=week_of.date() if week_of else None, name=name)
    label = f"'{plan.name}'" if plan.name else plan.id
    console.print(f"\n[green]✓[/green] Started plan: [bold]{label}[/bold] (week of {plan.week_start})")
    console.print("Run [bold]shoplist recipe add[/bold] or [bold]shoplist recipe import[/bold] to add recipes.\n")


@cli.group("recipe")
def recipe():
    """Manage recipes in the current plan."""
    pass


@recipe.command("add")
@click.argument("urls", nargs=-1)
@click.option("--html", "html_path", default=None, type=click.Path(exists=True, dir_okay=False),
              help="Path to saved recipe HTML (for paywalled pages)")
@click.option("--scale", default=1.0, type=float, show_default=True,
              help="Scale factor for recipe ingredients (e.g. 2 doubles all quantities)")
def recipe_add(urls: tuple[str, ...], html_path: str | None, scale: float):
    """Add recipes from web pages to the current plan."""
    config = _load_config()
    manager = PlanManager(base_dir=config.shopping_lists_dir)
    plan = _load_current(manager)

    if html_path:
        url = click.prompt("  URL for this page (for reference)", default="https://unknown").strip()
        try:
            block = scrape_recipe(Path(html_path).read_text(), url, scale=scale)
        except ScrapeError as e:
            err_console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)
        plan.recipes.append(block)
        manager.save(plan)
        console.print(f"  [green]✓[/green] {block.title} ({len(block.lines())} ingredients)")
        return

    pending = list(urls)
    if not pending:
        console.print("\n[bold]Add recipes[/bold] (press Enter with no URL to finish)\n")
    added = 0
    while True:
        if pending:
            url = pending.pop(0)
        elif urls:
            break
        else:
            url = click.prompt("  Recipe URL", default="", show_default=False).strip()
            if not url:
                break
        try:
            block = import_recipe(url, scale=scale)
        except (FetchError, ScrapeError) as e:
            console.print(f"  [red]✗[/red] {e}")
            continue
        plan.recipes.append(block)
        added += 1
        console.print(f"  [green]✓[/green] {block.title} ({len(block.lines())} ingredients)")

    if added == 0:
        console.print("\nNo recipes added.")
        return
    manager.save(plan)
    console.print(f"\n{len(plan.recipes)} recipe(s) in this plan. Run [bold]shoplist done[/bold] to build the list.")


@recipe.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def recipe_import(path: str):
    """Import recipes from a generated meal plan JSON file."""
    config = _load_config()
    manager = PlanManager(base_dir=config.shopping_lists_dir)
    plan = _load_current(manager)
    try:
        blocks = load_meal_plan(Path(path).read_text())
    except MealPlanError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    plan.recipes.extend(blocks)
    manager.save(plan)
    console.print(f"[green]✓[/green] Imported {len(blocks)} recipe(s).")


@recipe.command("paste")
@click.option("--title", default="", help="Recipe title")
@click.option("--scale", default=1.0, type=float, show_default=True)
def recipe_paste(title: str, scale: float):
    """Add a recipe from an ingredient list on stdin, one ingredient per line."""
    config = _load_config()
    manager = PlanManager(base_dir=config.shopping_lists_dir)
    plan = _load_current(manager)
    text = click.get_text_stream("stdin").read()
    if not text.strip():
        err_console.print("[red]Error:[/red] No ingredients given on stdin.")
        raise SystemExit(1)
    block = RecipeIngredientBlock(title=title or "Pasted recipe", ingredients=text, scale=scale)
    plan.recipes.append(block)
    manager.save(plan)
    console.print(f"[green]✓[/green] {block.title} ({len([l for l in block.lines() if l.strip()])} ingredients)")


@recipe.command("list")
def recipe_list():
    """Show recipes in the current plan."""
    config = _load_config()
    plan = _load_current(PlanManager(base_dir=config.shopping_lists_dir))

    if not plan.recipes:
        console.print("No recipes in this plan. Run [bold]shoplist recipe add[/bold] to add some.")
        return

    console.print("\n[bold]Recipes in current plan[/bold]\n")
    for i, r in enumerate(plan.recipes, start=1):
        count = len([l for l in r.lines() if l.strip()])
        console.print(f"  {i}. {r.title or 'Untitled'} ({count} ingredients, ×{r.scale:g})")
    console.print()


@recipe.command("remove")
@click.argument("index", type=int)
def recipe_remove(index: int):
    """Remove a recipe from the current plan by its index (from 'recipe list')."""
    config = _load_config()
    manager = PlanManager(base_dir=config.shopping_lists_dir)
    plan = _load_current(manager)

    if index < 1 or index > len(plan.recipes):
        err_console.print(
            f"[red]Error:[/red] Index {index} is out of range. Use 'shoplist recipe list' to see valid indices."
        )
        raise SystemExit(1)

    removed = plan.recipes.pop(index - 1)
    plan.shopping_list = None
    manager.save(plan)
    console.print(f"[green]✓[/green] Removed: {removed.title or 'Untitled'}")


@cli.group("pantry")
def pantry():
    """Manage what you already have at home."""
    pass


@pantry.command("add")
@click.argument("name")
@click.argument("quantity", default="")
@click.option("--expires", default=None, type=DATE, help="Expiry date (YYYY-MM-DD)")
def pantry_add(name: str, quantity: str, expires):
    """Add an item to your pantry (replaces an existing entry for it)."""
    config = _load_config()
    PantryManager(base_dir=config.shopping_lists_dir).add(
        name, quantity, expires_on=expires.date() if expires else None
    )
    label = f"{quantity} {name}".strip()
    console.print(f"[green]✓[/green] Added to pantry: [bold]{label}[/bold]")


@pantry.command("remove")
@click.argument("name")
def pantry_remove(name: str):
    """Remove an item from your pantry."""
    config = _load_config()
    if PantryManager(base_dir=config.shopping_lists_dir).remove(name):
        console.print(f"[green]✓[/green] Removed from pantry: [bold]{name}[/bold]")
    else:
        console.print(f"[yellow]Not in pantry:[/yellow] {name}")


@pantry.command("list")
def pantry_list():
    """Show all items in your pantry."""
    config = _load_config()
    items = PantryManager(base_dir=config.shopping_lists_dir).list()
    if not items:
        console.print("No pantry items. Use [bold]shoplist pantry add[/bold] to add some.")
        return

    today = date.today()
    table = Table(title="Pantry")
    table.add_column("Item", style="cyan")
    table.add_column("Quantity")
    table.add_column("Expires")
    for p in items:
        expires = str(p.expires_on) if p.expires_on else "—"
        if p.is_expired(today):
            expires = f"[red]{expires} (expired)[/red]"
        table.add_row(p.name, p.quantity or "—", expires)
    console.print(table)


@cli.command()
@click.option("--ai", "use_ai", is_flag=True, help="Categorize and price with the language model.")
def done(use_ai: bool):
    """Build the shopping list for the current plan and save it."""
    config = _load_config()
    manager = PlanManager(base_dir=config.shopping_lists_dir)
    plan = _load_current(manager)

    if not plan.recipes:
        console.print(
            "[yellow]No recipes found. Run[/yellow] [bold]shoplist recipe add[/bold] [yellow]first.[/yellow]"
        )
        return

    entries = PantryManager(base_dir=config.shopping_lists_dir).list()
    shopping_list = compute_shopping_list(
        plan.recipes, entries, as_of=date.today(), **_strategies(config, use_ai)
    )
    count = len(shopping_list.items)
    console.print(f"\n[bold]{count}[/bold] items to buy.\n")

    output = format_shopping_list(shopping_list, config)
    console.print(output, markup=False, highlight=False)

    output_path = manager.base_dir / f"{plan.id}.txt"
    output_path.write_text(output)
    plan.shopping_list = shopping_list
    manager.finalize(plan, output_path=output_path)
    console.print(f"\n[dim]Saved to {output_path}[/dim]")


@cli.command()
@click.argument("recipes_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--pantry", "pantry_path", default=None, type=click.Path(exists=True, dir_okay=False),
              help="JSON list of pantry entries")
@click.option("--ai", "use_ai", is_flag=True, help="Categorize and price with the language model.")
def compute(recipes_path: str, pantry_path: str | None, use_ai: bool):
    """Print the shopping list for a recipes/meal-plan JSON file as JSON."""
    config = _load_config()
    try:
        recipes = load_meal_plan(Path(recipes_path).read_text())
        pantry_data = json.loads(Path(pantry_path).read_text()) if pantry_path else []
        shopping_list = compute_shopping_list(recipes, pantry_data, **_strategies(config, use_ai))
    except (MealPlanError, EngineInputError, json.JSONDecodeError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    click.echo(shopping_list.model_dump_json(indent=2))


@cli.command("list")
def list_plans():
    """Show all weekly plans."""
    config = _load_config()
    plans = PlanManager(base_dir=config.shopping_lists_dir).list_plans()
    if not plans:
        console.print("No plans found. Run [bold]shoplist new[/bold] to start.")
        return

    table = Table(title="Weekly Plans")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Week of")
    table.add_column("Recipes", justify="right")
    table.add_column("Status")

    for p in plans:
        status = "[green]Finalized[/green]" if p.finalized else "[yellow]In progress[/yellow]"
        table.add_row(p.id, p.name or "—", str(p.week_start), str(len(p.recipes)), status)

    console.print(table)


@cli.command("open")
@click.argument("plan_id", required=False)
def open_plan(plan_id: str | None):
    """Re-open a past plan to add recipes or rebuild its list."""
    config = _load_config()
    manager = PlanManager(base_dir=config.shopping_lists_dir)
    if not plan_id:
        plans = manager.list_plans()
        if not plans:
            console.print("No plans found.")
            return
        console.print("Available plans:")
        for p in plans:
            console.print(f"  {p.id}")
        plan_id = click.prompt("Plan ID to open").strip()

    try:
        plan = manager.open_plan(plan_id)
    except FileNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    console.print(f"[green]✓[/green] Opened plan: [bold]{plan.id}[/bold]")
    console.print(
        "Run [bold]shoplist recipe add[/bold] to add more recipes, "
        "or [bold]shoplist done[/bold] to rebuild the list."
    )
