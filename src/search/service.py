"""Search-by-ingredients service: retrieval and scoring behind the remote path.

Pipeline for one request:
1. Normalize the requested ingredients and expand them with synonyms
2. Retrieve candidates whose ingredient keys overlap the expanded set
3. Score each candidate (recipe-ingredient denominator by default)
4. Rank, paginate, and shape the `{results, total, limit, offset}` response
"""

from typing import Optional

from src.catalog.cache import RecipeCatalogCache
from src.matching.normalize import normalize_query
from src.matching.results import assemble_results
from src.matching.scoring import ScoreFormula, score_recipe
from src.matching.substitutions import DEFAULT_GRAPH, SubstitutionGraph
from src.models.models import ScoredCandidate, SearchRequest, SearchResponse, SearchResult
from src.utils.errors import InvalidSearchRequestError
from src.utils.logger import logger


class SearchService:
    """Score catalog recipes for a SearchRequest.

    Args:
        cache: Catalog cache providing the recipe snapshot and inverted index.
        graph: Substitution graph (default: built-in table, one-hop).
        formula: Score denominator (default: recipe ingredient count).
        retrieve_partial_matches: Also retrieve recipes reachable only by substring match.
    """

    def __init__(
        self,
        cache: RecipeCatalogCache,
        graph: Optional[SubstitutionGraph] = None,
        formula: ScoreFormula = ScoreFormula.RECIPE_INGREDIENTS,
        retrieve_partial_matches: bool = True,
    ) -> None:
        self.cache = cache
        self.graph = graph or DEFAULT_GRAPH
        self.formula = ScoreFormula(formula)
        self.retrieve_partial_matches = retrieve_partial_matches

    async def search(self, request: SearchRequest) -> SearchResponse:
        """Run one search.

        Raises:
            InvalidSearchRequestError: If the request has no ingredients.
            CatalogUnavailableError: If the catalog cannot be read.
        """
        if not request.ingredients:
            raise InvalidSearchRequestError("Ingredients array is required and cannot be empty")

        logger.info(f"Searching recipes for ingredients: {', '.join(request.ingredients)}")
        snapshot = await self.cache.get()

        query_keys = normalize_query(request.ingredients)
        expanded = self.graph.expand_all(query_keys)
        if self.retrieve_partial_matches:
            expanded |= snapshot.retriever.partial_keys(query_keys)
        candidates = snapshot.retriever.retrieve(expanded)

        scored = []
        for recipe in candidates:
            result = score_recipe(recipe, request.ingredients, graph=self.graph, formula=self.formula)
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

        page = assemble_results(scored, limit=request.limit, offset=request.offset)
        logger.info(f"Found {page.total} matching recipes, returning {len(page.items)}")

        return SearchResponse(
            results=[
                SearchResult(
                    recipe_id=item.recipe.id,
                    title=item.recipe.title,
                    image_url=item.recipe.image_url,
                    score=item.score,
                    matched=item.matched_names,
                    total_ingredients=item.total_ingredients,
                    cuisine=item.recipe.cuisine,
                    difficulty=item.recipe.difficulty,
                    time_min=item.recipe.time_min,
                    rating=item.recipe.rating,
                )
                for item in page.items
            ],
            total=page.total,
            limit=page.limit,
            offset=page.offset,
        )
