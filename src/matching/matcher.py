"""Query orchestrator: remote search first, local matching as fallback.

match_recipes() is the single public entry point for ingredient queries:
- Empty query: the whole cached catalog, best rated first, scores 0
- Otherwise: try the remote search service within a bounded wait. If it
  fails, times out or returns nothing, run the local pipeline against the
  cached catalog (normalize -> expand -> retrieve -> score -> assemble).

Only one path's result ever reaches the caller. Remote failures are logged
at debug level and never surfaced; the only user-visible failure is an
unreadable catalog (CatalogUnavailableError).
"""

import asyncio
import uuid
from typing import Optional, Sequence

from src.catalog.cache import RecipeCatalogCache
from src.catalog.catalog import build_catalog, ingredient_names_from_recipes, sort_by_rating
from src.matching.normalize import normalize_query
from src.matching.results import assemble_results
from src.matching.scoring import ScoreFormula, match_percentage, score_recipe
from src.matching.substitutions import DEFAULT_GRAPH, SubstitutionGraph, get_substitution_graph
from src.models.models import MAX_LIMIT, RankedRecipe, Recipe, ScoredCandidate, SearchResult
from src.search.client import RemoteSearchClient
from src.utils.errors import safe_execute_async, safe_execute_sync
from src.utils.logger import logger


def rank_unscored(recipe: Recipe) -> RankedRecipe:
    """Annotate a recipe with a zero score (empty query)."""
    return RankedRecipe(**recipe.model_dump(), match_score=0.0, match_percentage=0, matched=[])


def rank_scored(candidate: ScoredCandidate) -> RankedRecipe:
    """Annotate a locally scored recipe."""
    return RankedRecipe(
        **candidate.recipe.model_dump(),
        match_score=candidate.score,
        match_percentage=match_percentage(candidate.score),
        matched=candidate.matched_names,
        total_ingredients=candidate.total_ingredients,
    )


def rank_remote(result: SearchResult) -> RankedRecipe:
    """Annotate a remote search result. Remote results carry no ingredient list."""
    return RankedRecipe(
        id=result.recipe_id,
        title=result.title,
        image_url=result.image_url,
        time_min=result.time_min,
        difficulty=result.difficulty,
        rating=result.rating,
        cuisine=result.cuisine,
        match_score=result.score,
        match_percentage=match_percentage(result.score),
        matched=result.matched,
        total_ingredients=result.total_ingredients,
    )


class RecipeMatcher:
    """Match user ingredients against the recipe catalog.

    Args:
        cache: Catalog cache for the local path.
        remote: Remote search client; None disables the remote path.
        graph: Substitution graph (default: built-in table, one-hop).
        remote_timeout: Seconds to wait for the remote path before falling back.
        local_formula: Score denominator used by the local path.
        max_results: Ranked results returned per query (1-100).
        retrieve_partial_matches: Retrieve recipes reachable only by substring match.
    """

    def __init__(
        self,
        cache: RecipeCatalogCache,
        remote: Optional[RemoteSearchClient] = None,
        graph: Optional[SubstitutionGraph] = None,
        remote_timeout: float = 3.0,
        local_formula: ScoreFormula = ScoreFormula.QUERY_INGREDIENTS,
        max_results: int = MAX_LIMIT,
        retrieve_partial_matches: bool = True,
    ) -> None:
        self.cache = cache
        self.remote = remote
        self.graph = graph or DEFAULT_GRAPH
        self.remote_timeout = remote_timeout
        self.local_formula = ScoreFormula(local_formula)
        self.max_results = max(1, min(max_results, MAX_LIMIT))
        self.retrieve_partial_matches = retrieve_partial_matches

    async def match_recipes(self, ingredients: Sequence[str]) -> list[RankedRecipe]:
        """Rank catalog recipes for the given ingredients.

        Args:
            ingredients: Raw ingredient names as selected by the user.

        Returns:
            Ranked recipes, best match first. Empty query returns the full
            catalog sorted by rating with zero scores.

        Raises:
            CatalogUnavailableError: If the local path is needed and the catalog cannot be read.
        """
        query_id = uuid.uuid4().hex[:8]
        ingredients = list(ingredients or [])

        if not ingredients:
            snapshot = await self.cache.get()
            logger.info(
                f"Empty query, returning {len(snapshot.recipes)} recipes by rating",
                extra={"query_id": query_id, "match_path": "catalog"},
            )
            return [rank_unscored(recipe) for recipe in sort_by_rating(snapshot.recipes)]

        query_keys = normalize_query(ingredients)

        if self.remote is not None and query_keys:
            remote_results = await self._match_remote(query_keys, query_id)
            if remote_results:
                return remote_results

        return await self._match_local(ingredients, query_keys, query_id)

    async def _match_remote(self, query_keys: list[str], query_id: str) -> list[RankedRecipe]:
        """Remote attempt bounded by remote_timeout; any failure yields []."""
        response = await safe_execute_async(
            asyncio.wait_for(self.remote.search(query_keys, limit=self.max_results), timeout=self.remote_timeout),
            "Remote recipe search unavailable, using local matching",
            log_level="debug",
            default_return=None,
        )
        if response is None or not response.results:
            logger.debug(
                "Remote search produced no results, using local matching",
                extra={"query_id": query_id, "match_path": "remote"},
            )
            return []

        ranked = safe_execute_sync(
            lambda: [rank_remote(result) for result in response.results],
            "Remote search returned unusable results, using local matching",
            log_level="debug",
            default_return=[],
        )
        if ranked:
            logger.info(
                f"Remote search matched {response.total} recipes for {len(query_keys)} ingredients",
                extra={"query_id": query_id, "match_path": "remote"},
            )
        return ranked

    async def _match_local(self, ingredients: list, query_keys: list[str], query_id: str) -> list[RankedRecipe]:
        snapshot = await self.cache.get()

        expanded = self.graph.expand_all(query_keys)
        if self.retrieve_partial_matches:
            expanded |= snapshot.retriever.partial_keys(query_keys)
        candidates = snapshot.retriever.retrieve(expanded)

        scored = []
        for recipe in candidates:
            result = score_recipe(recipe, ingredients, graph=self.graph, formula=self.local_formula)
            scored.append(
                ScoredCandidate(
                    recipe=recipe,
                    score=result.score,
                    matched_names=result.matched_names,
                    matched_count=result.matched_count,
                    partial_count=result.partial_count,
                    total_ingredients=result.total_ingredients,
                )
            )

        page = assemble_results(scored, limit=self.max_results)
        logger.info(
            f"Local matching scored {len(candidates)} of {len(snapshot.recipes)} recipes, {page.total} matched",
            extra={"query_id": query_id, "match_path": "local"},
        )
        return [rank_scored(candidate) for candidate in page.items]

    async def get_all_ingredients(self) -> list[str]:
        """Known ingredient names for autocomplete.

        Asks the catalog collaborator first, then falls back to the normalized
        names found in the cached recipes.
        """
        names = await safe_execute_async(
            self.cache.catalog.get_all_ingredients(),
            "Failed to fetch ingredient names from catalog",
            log_level="warning",
            default_return=None,
        )
        if names:
            return names
        return ingredient_names_from_recipes(await self.cache.get_recipes())

    def invalidate_cache(self) -> None:
        """Drop the cached catalog (e.g. after an upstream bulk reload)."""
        self.cache.invalidate()


def build_matcher(config, cache: Optional[RecipeCatalogCache] = None) -> RecipeMatcher:
    """Wire a RecipeMatcher from configuration."""
    cache = cache or RecipeCatalogCache(build_catalog(config))

    remote = None
    if config.USE_REMOTE_SEARCH and config.remote_search_url:
        remote = RemoteSearchClient(
            config.remote_search_url,
            api_key=config.SUPABASE_ANON_KEY,
            timeout=config.REMOTE_REQUEST_TIMEOUT,
        )
        logger.info(f"Remote search enabled: {config.remote_search_url}")
    else:
        logger.info("Remote search disabled, using local matching only")

    return RecipeMatcher(
        cache,
        remote=remote,
        graph=get_substitution_graph(config.SYNONYM_EXPANSION),
        remote_timeout=config.REMOTE_SEARCH_TIMEOUT,
        local_formula=ScoreFormula(config.LOCAL_SCORE_FORMULA),
        max_results=config.MAX_RESULTS,
        retrieve_partial_matches=config.RETRIEVE_PARTIAL_MATCHES,
    )
