#!/usr/bin/env python3
"""Ad hoc query runner for Recipe Matcher.

Match ingredients directly without starting the HTTP server.

Usage:
    python query.py tomato onion garlic
    python query.py "spring onion" rice          # Quote multi-word ingredients
    python query.py --json tomato basil          # Print the raw ranked payload
    python query.py --local tomato               # Skip the remote search path
    python query.py --ingredients                # List known ingredient names
    python query.py                              # No ingredients: catalog by rating

Features:
- Direct RecipeMatcher execution (same pipeline as POST /api/match)
- Rich table output with match percentage and matched ingredients
- JSON mode for the full payload
- Clean exit after completion
"""

import asyncio
import sys

from rich.console import Console
from rich.table import Table

from src.matching.matcher import RecipeMatcher, build_matcher
from src.models.models import RankedRecipe
from src.utils.config import config
from src.utils.errors import CatalogUnavailableError
from src.utils.logger import logger

console = Console()

USAGE = 'Usage: python query.py [--json] [--local] [--ingredients] [ingredient ...]'


def render_table(ingredients: list[str], results: list[RankedRecipe], limit: int = 20) -> Table:
    """Build a rich table for the top results."""
    title = f"Recipes for: {', '.join(ingredients)}" if ingredients else "All recipes by rating"
    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Recipe", style="bold")
    table.add_column("Match", justify="right", style="green")
    table.add_column("Matched", style="cyan")
    table.add_column("Rating", justify="right")
    table.add_column("Time", justify="right")

    for position, recipe in enumerate(results[:limit], start=1):
        table.add_row(
            str(position),
            recipe.title,
            f"{recipe.match_percentage}%",
            ", ".join(recipe.matched),
            f"{recipe.rating:.1f}" if recipe.rating is not None else "-",
            f"{recipe.time_min} min" if recipe.time_min is not None else "-",
        )
    return table


async def run_match(matcher: RecipeMatcher, ingredients: list[str], as_json: bool = False) -> None:
    results = await matcher.match_recipes(ingredients)

    if as_json:
        console.print_json(data={
            "results": [recipe.model_dump(by_alias=True) for recipe in results],
            "total": len(results),
        })
        return

    if not results:
        console.print("[yellow]No matching recipes found[/yellow]")
        return

    console.print(render_table(ingredients, results))
    if len(results) > 20:
        console.print(f"[dim]... {len(results) - 20} more (use --json for all)[/dim]")


async def run_ingredients(matcher: RecipeMatcher, as_json: bool = False) -> None:
    names = await matcher.get_all_ingredients()
    if as_json:
        console.print_json(data={"ingredients": names, "total": len(names)})
        return
    console.print(f"[bold cyan]{len(names)} known ingredients[/bold cyan]")
    console.print(", ".join(names))


def main(argv: list[str]) -> int:
    as_json = False
    local_only = False
    list_ingredients = False
    argv_start = 0

    while argv_start < len(argv) and argv[argv_start].startswith("--"):
        flag = argv[argv_start]
        if flag == "--json":
            as_json = True
        elif flag == "--local":
            local_only = True
        elif flag == "--ingredients":
            list_ingredients = True
        elif flag == "--help":
            print(USAGE)
            return 0
        else:
            print(f"Unknown flag: {flag}")
            print(USAGE)
            return 1
        argv_start += 1

    ingredients = argv[argv_start:]

    matcher = build_matcher(config)
    if local_only:
        matcher.remote = None

    try:
        if list_ingredients:
            asyncio.run(run_ingredients(matcher, as_json=as_json))
        else:
            asyncio.run(run_match(matcher, ingredients, as_json=as_json))
    except CatalogUnavailableError as e:
        logger.debug(f"Catalog unavailable: {e}")
        console.print("[red]✗ No results, retrieval unavailable[/red]")
        return 1
    except KeyboardInterrupt:
        logger.info("Query interrupted by user.")
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
