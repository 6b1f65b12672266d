"""Unit tests for the query orchestrator (remote first, local fallback)."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.catalog.cache import RecipeCatalogCache
from src.catalog.catalog import InMemoryRecipeCatalog, RecipeCatalog
from src.matching.matcher import RecipeMatcher, build_matcher
from src.matching.scoring import ScoreFormula
from src.models.models import SearchResponse, SearchResult
from src.search.client import RemoteSearchClient
from src.utils.config import Config
from src.utils.errors import CatalogUnavailableError, RemoteSearchUnavailableError


def remote_returning(*results, total=None):
    remote = MagicMock(spec=RemoteSearchClient)
    remote.search = AsyncMock(
        return_value=SearchResponse(results=list(results), total=len(results) if total is None else total)
    )
    return remote


def remote_raising(exc):
    remote = MagicMock(spec=RemoteSearchClient)
    remote.search = AsyncMock(side_effect=exc)
    return remote


REMOTE_SOUP = SearchResult(
    recipe_id="r-1",
    title="Remote Tomato Soup",
    score=0.5,
    matched=["tomato", "onion"],
    total_ingredients=4,
    rating=4.5,
    difficulty="Easy",
)


class TestEmptyQuery:
    """Test the empty-query path."""

    @pytest.mark.asyncio
    async def test_returns_full_catalog_by_rating(self, local_matcher, sample_recipes):
        """Test that every recipe is returned, best rated first, with zero scores."""
        results = await local_matcher.match_recipes([])

        assert len(results) == len(sample_recipes)
        assert [r.id for r in results] == ["6", "1", "2", "4", "3", "5"]
        assert all(r.match_score == 0 and r.match_percentage == 0 and r.matched == [] for r in results)

    @pytest.mark.asyncio
    async def test_skips_remote(self, cache):
        """Test that the remote service is not called for an empty query."""
        remote = remote_returning(REMOTE_SOUP)
        await RecipeMatcher(cache, remote=remote).match_recipes([])
        remote.search.assert_not_called()


class TestLocalPath:
    """Test local matching against the cached catalog."""

    @pytest.mark.asyncio
    async def test_exact_match_query_formula(self, local_matcher):
        """Test Tomato Soup under the default query-ingredient denominator."""
        results = await local_matcher.match_recipes(["tomato", "onion"])

        top = results[0]
        assert top.title == "Tomato Soup"
        assert top.match_score == 1.0
        assert top.match_percentage == 100
        assert top.matched == ["tomato", "onion"]
        assert top.total_ingredients == 4

    @pytest.mark.asyncio
    async def test_exact_match_recipe_formula(self, cache):
        """Test Tomato Soup under the recipe-ingredient denominator."""
        matcher = RecipeMatcher(cache, local_formula=ScoreFormula.RECIPE_INGREDIENTS)
        top = (await matcher.match_recipes(["tomato", "onion"]))[0]
        assert top.match_score == 0.5
        assert top.match_percentage == 50

    @pytest.mark.asyncio
    async def test_synonym_match(self, local_matcher):
        """Test that "spring onion" ranks the scallion recipe first."""
        results = await local_matcher.match_recipes(["spring onion"])
        assert results[0].title == "Scallion Fried Rice"
        assert results[0].matched == ["scallion"]

    @pytest.mark.asyncio
    async def test_partial_match(self, local_matcher):
        """Test that a truncated name scores as a partial match."""
        results = await local_matcher.match_recipes(["tomat"])
        assert {r.title for r in results} == {"Tomato Soup", "Cherry Tomato Salad"}
        assert all(r.match_score == 0.5 and r.matched == [] for r in results)

    @pytest.mark.asyncio
    async def test_no_match(self, local_matcher):
        """Test that unknown ingredients return no recipes."""
        assert await local_matcher.match_recipes(["saffron"]) == []

    @pytest.mark.asyncio
    async def test_blank_ingredients(self, local_matcher):
        """Test that a query of blank names matches nothing."""
        assert await local_matcher.match_recipes(["", "  ", "!!"]) == []

    @pytest.mark.asyncio
    async def test_every_selected_name_counts(self, local_matcher):
        """Test that repeated and unknown names stay in the query denominator."""
        results = await local_matcher.match_recipes(["rice", "Rice", "saffron"])
        plain = next(r for r in results if r.title == "Plain Rice")

        assert plain.match_score == pytest.approx(2 / 3)
        assert plain.match_percentage == 67
        assert plain.matched == ["rice", "rice"]

    @pytest.mark.asyncio
    async def test_max_results(self, cache):
        """Test that max_results bounds the result list."""
        results = await RecipeMatcher(cache, max_results=1).match_recipes(["garlic"])
        assert len(results) == 1

    @pytest.mark.asyncio
    async def test_serialization_aliases(self, local_matcher):
        """Test camelCase match fields in the public payload."""
        payload = (await local_matcher.match_recipes(["tomato"]))[0].model_dump(by_alias=True)
        assert {"matchScore", "matchPercentage", "matched", "totalIngredients"} <= payload.keys()

    @pytest.mark.asyncio
    async def test_catalog_unavailable(self):
        """Test that an unreadable catalog surfaces CatalogUnavailableError."""
        catalog = MagicMock(spec=RecipeCatalog)
        catalog.name = "broken"
        catalog.get_all_recipes = AsyncMock(side_effect=CatalogUnavailableError())
        matcher = RecipeMatcher(RecipeCatalogCache(catalog))

        with pytest.raises(CatalogUnavailableError):
            await matcher.match_recipes(["tomato"])


class TestRemotePath:
    """Test remote-first orchestration."""

    @pytest.mark.asyncio
    async def test_remote_results_returned(self, cache):
        """Test that remote results are annotated and the catalog is not loaded."""
        remote = remote_returning(REMOTE_SOUP)
        results = await RecipeMatcher(cache, remote=remote).match_recipes(["Tomato", "onion", "tomato "])

        remote.search.assert_awaited_once_with(["tomato", "onion"], limit=100)
        assert len(results) == 1
        assert results[0].id == "r-1"
        assert results[0].match_score == 0.5
        assert results[0].match_percentage == 50
        assert results[0].matched == ["tomato", "onion"]
        assert results[0].ingredients == []
        assert cache.load_count == 0

    @pytest.mark.asyncio
    async def test_remote_error_falls_back(self, cache, local_matcher):
        """Test that a remote failure silently falls back to local matching."""
        remote = remote_raising(RemoteSearchUnavailableError("down", status=502))
        results = await RecipeMatcher(cache, remote=remote).match_recipes(["tomato", "onion"])

        expected = await local_matcher.match_recipes(["tomato", "onion"])
        assert [r.id for r in results] == [r.id for r in expected]

    @pytest.mark.asyncio
    async def test_remote_empty_falls_back(self, cache):
        """Test that zero remote results fall through to local matching."""
        remote = remote_returning()
        results = await RecipeMatcher(cache, remote=remote).match_recipes(["garlic"])
        assert {r.title for r in results} == {"Tomato Soup", "Garlic Bread"}

    @pytest.mark.asyncio
    async def test_remote_timeout_falls_back_consistently(self, sample_recipes):
        """Test that a slow remote is abandoned and the local result matches a direct local run."""
        cancelled = asyncio.Event()

        async def slow_search(*args, **kwargs):
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return SearchResponse(results=[REMOTE_SOUP], total=1)

        remote = MagicMock(spec=RemoteSearchClient)
        remote.search = slow_search

        cache = RecipeCatalogCache(InMemoryRecipeCatalog(sample_recipes))
        matcher = RecipeMatcher(cache, remote=remote, remote_timeout=0.05)
        results = await matcher.match_recipes(["tomato", "garlic"])

        direct = await RecipeMatcher(RecipeCatalogCache(InMemoryRecipeCatalog(sample_recipes))).match_recipes(
            ["tomato", "garlic"]
        )
        assert cancelled.is_set()
        assert [r.model_dump() for r in results] == [r.model_dump() for r in direct]
        assert all(r.id != "r-1" for r in results)

    @pytest.mark.asyncio
    async def test_unusable_remote_results_fall_back(self, cache):
        """Test that remote results failing recipe validation fall back to local matching."""
        bad = SearchResult(recipe_id="r-9", title="Odd", score=0.9, rating=7.5)
        results = await RecipeMatcher(cache, remote=remote_returning(bad)).match_recipes(["garlic"])
        assert {r.title for r in results} == {"Tomato Soup", "Garlic Bread"}

    @pytest.mark.asyncio
    async def test_blank_query_skips_remote(self, cache):
        """Test that the remote is not called when nothing normalizes to a key."""
        remote = remote_returning(REMOTE_SOUP)
        assert await RecipeMatcher(cache, remote=remote).match_recipes(["!!", " "]) == []
        remote.search.assert_not_called()


class TestIngredientsAndInvalidation:
    """Test autocomplete names and cache invalidation."""

    @pytest.mark.asyncio
    async def test_get_all_ingredients(self, local_matcher):
        """Test names from the catalog collaborator."""
        names = await local_matcher.get_all_ingredients()
        assert "scallion" in names
        assert names == sorted(names)

    @pytest.mark.asyncio
    async def test_get_all_ingredients_falls_back_to_cache(self, cache):
        """Test that a failing collaborator falls back to cached recipe names."""
        await cache.get()
        cache.catalog.get_all_ingredients = AsyncMock(side_effect=CatalogUnavailableError("down"))

        names = await RecipeMatcher(cache).get_all_ingredients()
        assert "garlic" in names

    @pytest.mark.asyncio
    async def test_invalidate_cache(self, local_matcher):
        """Test that invalidation forces a reload."""
        await local_matcher.match_recipes(["rice"])
        local_matcher.invalidate_cache()
        await local_matcher.match_recipes(["rice"])
        assert local_matcher.cache.load_count == 2


class TestBuildMatcher:
    """Test wiring from configuration."""

    def test_local_only_without_store(self, monkeypatch):
        """Test that the remote path is disabled without SUPABASE_URL."""
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        matcher = build_matcher(Config())
        assert matcher.remote is None
        assert matcher.local_formula is ScoreFormula.QUERY_INGREDIENTS

    def test_remote_enabled(self, monkeypatch):
        """Test remote client wiring from configuration."""
        monkeypatch.setenv("SUPABASE_URL", "https://xyz.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
        monkeypatch.setenv("USE_REMOTE_SEARCH", "true")
        monkeypatch.setenv("REMOTE_SEARCH_TIMEOUT", "1.5")
        monkeypatch.setenv("SYNONYM_EXPANSION", "transitive")

        matcher = build_matcher(Config())
        assert matcher.remote.url == "https://xyz.supabase.co/functions/v1/search-by-ingredients"
        assert matcher.remote.api_key == "anon"
        assert matcher.remote_timeout == 1.5
        assert matcher.graph.expansion == "transitive"

    def test_remote_disabled_by_flag(self, monkeypatch):
        """Test USE_REMOTE_SEARCH=false."""
        monkeypatch.setenv("SUPABASE_URL", "https://xyz.supabase.co")
        monkeypatch.setenv("USE_REMOTE_SEARCH", "false")
        assert build_matcher(Config()).remote is None
