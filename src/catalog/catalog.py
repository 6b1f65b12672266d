"""Recipe catalog collaborators (read-only).

Every catalog exposes two async read operations:
- get_all_recipes(): the full recipe collection, best rated first
- get_all_ingredients(): known ingredient names for autocomplete

Implementations:
- InMemoryRecipeCatalog: recipes held in memory (tests, embedding)
- JsonFileRecipeCatalog: the bundled static data/recipes.json
- SupabaseRecipeCatalog: hosted PostgREST `recipes` / `ingredients` tables via aiohttp
- FallbackRecipeCatalog: hosted store first, bundled data when it is unreachable or empty

Failures to read are raised as CatalogUnavailableError. Nothing here writes.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Iterable, Optional

import aiohttp

from src.matching.normalize import normalize_ingredient
from src.models.models import Recipe
from src.utils.errors import CatalogUnavailableError, safe_execute_sync
from src.utils.logger import logger


PROJECT_ROOT = Path(__file__).resolve().parents[2]


def sort_by_rating(recipes: Iterable[Recipe]) -> list[Recipe]:
    """Best rated first; missing ratings count as 0; ties keep catalog order."""
    return sorted(recipes, key=lambda recipe: -(recipe.rating or 0.0))


def ingredient_names_from_recipes(recipes: Iterable[Recipe]) -> list[str]:
    """Sorted unique normalized ingredient names longer than one character."""
    names = {
        key
        for recipe in recipes
        for key in (normalize_ingredient(ingredient) for ingredient in recipe.ingredients)
        if len(key) > 1
    }
    return sorted(names)


def recipe_from_store_row(row: dict[str, Any]) -> Recipe:
    """Convert a hosted store row (`ingredients_arr`, `image_url`, `time_min`)."""
    return Recipe(
        id=row.get("id"),
        title=row.get("title"),
        description=row.get("description"),
        image_url=row.get("image_url"),
        ingredients=row.get("ingredients_arr") or [],
        steps=row.get("steps") or [],
        time_min=row.get("time_min"),
        difficulty=row.get("difficulty"),
        rating=row.get("rating") or None,
        servings=row.get("servings"),
        cuisine=row.get("cuisine"),
        tags=row.get("tags") or [],
        nutrition=row.get("nutrition"),
    )


def recipe_from_static_entry(entry: dict[str, Any]) -> Recipe:
    """Convert a bundled JSON entry (`ingredients`, `image`, `time`)."""
    return Recipe(
        id=entry.get("id"),
        title=entry.get("title"),
        description=entry.get("description"),
        image_url=entry.get("image"),
        ingredients=entry.get("ingredients") or [],
        steps=entry.get("steps") or [],
        time_min=entry.get("time") or None,
        difficulty=entry.get("difficulty"),
        rating=entry.get("rating") or None,
        servings=entry.get("servings") or None,
        cuisine=entry.get("cuisine"),
        tags=entry.get("tags") or [],
        nutrition=entry.get("nutrition"),
    )


def _convert_rows(rows: Iterable[dict[str, Any]], converter, source: str) -> list[Recipe]:
    """Convert raw rows, skipping (and logging) rows that fail validation."""
    recipes = []
    for row in rows:
        recipe = safe_execute_sync(
            lambda: converter(row),
            f"Skipping invalid recipe row from {source} (id={row.get('id') if isinstance(row, dict) else None})",
            log_level="warning",
            default_return=None,
        )
        if recipe is not None:
            recipes.append(recipe)
    return recipes


class RecipeCatalog:
    """Read-only recipe store interface."""

    name = "catalog"

    async def get_all_recipes(self) -> list[Recipe]:
        raise NotImplementedError

    async def get_all_ingredients(self) -> list[str]:
        return ingredient_names_from_recipes(await self.get_all_recipes())


class InMemoryRecipeCatalog(RecipeCatalog):
    """Catalog backed by a list of recipes already in memory."""

    name = "memory"

    def __init__(self, recipes: Iterable[Recipe]) -> None:
        self._recipes = list(recipes)

    async def get_all_recipes(self) -> list[Recipe]:
        return sort_by_rating(self._recipes)


class JsonFileRecipeCatalog(RecipeCatalog):
    """Catalog read from a static JSON file (a list of recipe entries).

    Args:
        path: JSON file path. Relative paths resolve against the project root.
    """

    name = "static"

    def __init__(self, path: str | Path) -> None:
        path = Path(path)
        self.path = path if path.is_absolute() else PROJECT_ROOT / path

    def _read(self) -> list[Recipe]:
        if not self.path.exists():
            raise CatalogUnavailableError(f"Recipe file not found: {self.path}")
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogUnavailableError(f"Recipe file unreadable: {self.path}: {e}") from e
        if not isinstance(data, list):
            raise CatalogUnavailableError(f"Recipe file must contain a JSON list: {self.path}")
        return _convert_rows(data, recipe_from_static_entry, str(self.path))

    async def get_all_recipes(self) -> list[Recipe]:
        recipes = await asyncio.to_thread(self._read)
        logger.debug(f"Loaded {len(recipes)} recipes from {self.path}")
        return sort_by_rating(recipes)


class SupabaseRecipeCatalog(RecipeCatalog):
    """Catalog read from a hosted PostgREST API (Supabase `rest/v1`).

    Args:
        base_url: Project URL, e.g. "https://xyz.supabase.co".
        api_key: Anon/publishable key, sent as `apikey` and bearer token.
        timeout: Total request timeout in seconds (default: 5).
    """

    name = "supabase"

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 5.0) -> None:
        if not base_url:
            raise ValueError("base_url is required")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            return {}
        return {"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"}

    async def _select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        url = f"{self.base_url}/rest/v1/{table}"
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.get(url, params=params, headers=self._headers()) as response:
                    if response.status >= 400:
                        body = await response.text()
                        raise CatalogUnavailableError(
                            f"Hosted catalog returned {response.status} for {table}: {body[:200]}"
                        )
                    data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, json.JSONDecodeError) as e:
            raise CatalogUnavailableError(f"Hosted catalog unreachable ({table}): {e}") from e

        if not isinstance(data, list):
            raise CatalogUnavailableError(f"Hosted catalog returned unexpected payload for {table}")
        return data

    async def get_all_recipes(self) -> list[Recipe]:
        rows = await self._select("recipes", {"select": "*", "order": "rating.desc.nullslast"})
        recipes = _convert_rows(rows, recipe_from_store_row, "hosted catalog")
        logger.debug(f"Loaded {len(recipes)} recipes from hosted catalog")
        return recipes

    async def get_all_ingredients(self) -> list[str]:
        rows = await self._select("ingredients", {"select": "name", "order": "name.asc"})
        return sorted(row["name"] for row in rows if isinstance(row, dict) and row.get("name"))


class FallbackRecipeCatalog(RecipeCatalog):
    """Try the primary catalog, fall back when it fails or comes back empty.

    Raises CatalogUnavailableError only when both catalogs fail.
    """

    name = "fallback"

    def __init__(self, primary: RecipeCatalog, fallback: RecipeCatalog) -> None:
        self.primary = primary
        self.fallback = fallback

    async def get_all_recipes(self) -> list[Recipe]:
        try:
            recipes = await self.primary.get_all_recipes()
        except CatalogUnavailableError as e:
            logger.warning(f"Failed to fetch recipes from {self.primary.name}, using {self.fallback.name} data: {e}")
            return await self.fallback.get_all_recipes()

        if not recipes:
            logger.warning(f"No recipes found in {self.primary.name}, using {self.fallback.name} data")
            return await self.fallback.get_all_recipes()
        return recipes

    async def get_all_ingredients(self) -> list[str]:
        try:
            names = await self.primary.get_all_ingredients()
        except CatalogUnavailableError as e:
            logger.warning(f"Failed to fetch ingredients from {self.primary.name}: {e}")
            names = []
        return names or await self.fallback.get_all_ingredients()


def build_catalog(config) -> RecipeCatalog:
    """Build the configured catalog: hosted store with bundled fallback, or bundled only."""
    static = JsonFileRecipeCatalog(config.RECIPES_FILE)
    if not config.SUPABASE_URL:
        logger.info(f"Using bundled recipe catalog: {static.path}")
        return static

    logger.info("Using hosted recipe catalog with bundled fallback")
    hosted = SupabaseRecipeCatalog(
        config.SUPABASE_URL,
        api_key=config.SUPABASE_ANON_KEY,
        timeout=config.REMOTE_REQUEST_TIMEOUT,
    )
    return FallbackRecipeCatalog(hosted, static)


def load_static_recipes(path: Optional[str | Path] = None) -> list[Recipe]:
    """Read the bundled catalog synchronously (scripts and tests)."""
    return JsonFileRecipeCatalog(path or "data/recipes.json")._read()
