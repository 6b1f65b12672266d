"""Read-through cache of the recipe catalog.

The catalog is loaded lazily on first use and shared by every local-path
query until invalidated (e.g. after an upstream bulk reload). Lifecycle:

    empty -> warming -> warm -> (invalidate) -> empty

Concurrent callers that arrive while the cache is warming share a single
in-flight load (singleflight) instead of each fetching the full catalog.
A failed load is not remembered: the next caller starts a fresh one.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Optional

from src.catalog.catalog import RecipeCatalog
from src.matching.retrieval import CandidateRetriever
from src.models.models import Recipe
from src.utils.logger import logger


@dataclass(frozen=True)
class CatalogSnapshot:
    """Recipes of one cache warm-up plus the inverted index built over them."""

    recipes: list[Recipe]
    retriever: CandidateRetriever = field(repr=False)

    @classmethod
    def build(cls, recipes: list[Recipe]) -> "CatalogSnapshot":
        return cls(recipes=list(recipes), retriever=CandidateRetriever(recipes))


class RecipeCatalogCache:
    """Explicit, resettable cache object around a RecipeCatalog.

    Args:
        catalog: Collaborator to load recipes from.
        on_invalidate: Optional hook called (with no arguments) on every invalidate().
    """

    EMPTY = "empty"
    WARMING = "warming"
    WARM = "warm"

    def __init__(self, catalog: RecipeCatalog, on_invalidate: Optional[Callable[[], None]] = None) -> None:
        self.catalog = catalog
        self._snapshot: Optional[CatalogSnapshot] = None
        self._load_task: Optional[asyncio.Task] = None
        self._generation = 0
        self._hooks: list[Callable[[], None]] = []
        self.load_count = 0
        if on_invalidate is not None:
            self._hooks.append(on_invalidate)

    @property
    def state(self) -> str:
        if self._snapshot is not None:
            return self.WARM
        if self._load_task is not None and not self._load_task.done():
            return self.WARMING
        return self.EMPTY

    def add_invalidation_hook(self, hook: Callable[[], None]) -> None:
        self._hooks.append(hook)

    async def get(self) -> CatalogSnapshot:
        """Return the cached snapshot, loading it (once) if needed.

        Raises:
            CatalogUnavailableError: If the catalog cannot be read.
        """
        if self._snapshot is not None:
            return self._snapshot

        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._load(self._generation))
        task = self._load_task

        # Shield: one caller being cancelled must not cancel the shared load
        return await asyncio.shield(task)

    async def get_recipes(self) -> list[Recipe]:
        return (await self.get()).recipes

    async def _load(self, generation: int) -> CatalogSnapshot:
        self.load_count += 1
        logger.info(f"Warming recipe cache from {self.catalog.name} catalog...")
        try:
            recipes = await self.catalog.get_all_recipes()
            snapshot = CatalogSnapshot.build(recipes)
        except BaseException:
            if generation == self._generation:
                self._load_task = None
            raise

        if generation == self._generation:
            self._snapshot = snapshot
            self._load_task = None
            logger.info(f"Recipe cache warm: {len(recipes)} recipes, {len(snapshot.retriever.vocabulary)} ingredients")
        else:
            logger.debug("Recipe cache invalidated during load, discarding loaded snapshot")
        return snapshot

    def invalidate(self) -> None:
        """Drop the cached snapshot and any load in flight, then run invalidation hooks."""
        self._generation += 1
        self._snapshot = None
        self._load_task = None
        logger.info("Recipe cache invalidated")
        for hook in self._hooks:
            hook()
