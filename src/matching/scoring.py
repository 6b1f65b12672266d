"""Match scoring: how well a recipe is covered by the query.

Per query ingredient, the first rule that applies wins:
1. exact: normalized query key equals a normalized recipe ingredient -> matched
2. synonym: their substitution expansions intersect -> matched
3. partial: one key is a substring of the other -> partial
4. otherwise the query ingredient contributes nothing

Matched ingredients weigh 2, partial ones 1. Two denominators exist and are
kept apart on purpose because they rank the same input differently:
- score_by_recipe_ingredients: divides by the recipe's ingredient count (search service)
- score_by_query_ingredients: divides by the query's ingredient count (local fallback)
"""

from enum import Enum
from typing import Optional, Sequence

from src.matching.normalize import normalize_ingredient
from src.matching.substitutions import DEFAULT_GRAPH, SubstitutionGraph
from src.models.models import MatchResult, Recipe


class ScoreFormula(str, Enum):
    """Which count the match weight is normalized by."""

    RECIPE_INGREDIENTS = "recipe"
    QUERY_INGREDIENTS = "query"


def score_by_recipe_ingredients(matched_count: int, partial_count: int, total_recipe_ingredients: int) -> float:
    """min(1, (2m + p) / (2 * recipe ingredient count)); 0 for a recipe without ingredients."""
    if total_recipe_ingredients <= 0:
        return 0.0
    return min(1.0, (matched_count * 2 + partial_count) / (total_recipe_ingredients * 2))


def score_by_query_ingredients(matched_count: int, partial_count: int, query_ingredient_count: int) -> float:
    """min(1, (2m + p) / (2 * query ingredient count)); 0 for an empty query."""
    if query_ingredient_count <= 0:
        return 0.0
    return min(1.0, (matched_count * 2 + partial_count) / (query_ingredient_count * 2))


def match_percentage(score: float) -> int:
    """Score as a whole percentage, halves rounded up (0.125 -> 13)."""
    return int(score * 100 + 0.5)


def score_recipe(
    recipe: Recipe,
    query_ingredients: Sequence[str],
    graph: Optional[SubstitutionGraph] = None,
    formula: ScoreFormula = ScoreFormula.QUERY_INGREDIENTS,
) -> MatchResult:
    """Score one recipe against a query.

    Iterates query ingredients (not recipe ingredients), so the query side
    decides what is counted. Empty keys on either side never match.

    Args:
        recipe: Catalog recipe to score.
        query_ingredients: Raw query ingredient names.
        graph: Substitution graph for synonym matches. Default: built-in table.
        formula: Denominator to normalize by.

    Returns:
        MatchResult with matched/partial counts, the score in [0, 1], and for
        every exact or synonym match the first recipe ingredient that satisfied it.
    """
    graph = graph or DEFAULT_GRAPH
    recipe_entries = [
        (ingredient, key)
        for ingredient, key in ((ing, normalize_ingredient(ing)) for ing in recipe.ingredients)
        if key
    ]

    matched_count = 0
    partial_count = 0
    matched_names: list[str] = []

    for query_ingredient in query_ingredients:
        query_key = normalize_ingredient(query_ingredient)
        if not query_key:
            continue

        exact = next((name for name, key in recipe_entries if key == query_key), None)
        if exact is not None:
            matched_count += 1
            matched_names.append(exact)
            continue

        query_synonyms = graph.expand(query_key)
        synonym = next(
            (name for name, key in recipe_entries if not query_synonyms.isdisjoint(graph.expand(key))),
            None,
        )
        if synonym is not None:
            matched_count += 1
            matched_names.append(synonym)
            continue

        if any(query_key in key or key in query_key for _, key in recipe_entries):
            partial_count += 1

    total_ingredients = len(recipe.ingredients)
    if ScoreFormula(formula) is ScoreFormula.RECIPE_INGREDIENTS:
        score = score_by_recipe_ingredients(matched_count, partial_count, total_ingredients)
    else:
        score = score_by_query_ingredients(matched_count, partial_count, len(query_ingredients))

    return MatchResult(
        matched_count=matched_count,
        partial_count=partial_count,
        score=score,
        matched_names=matched_names,
        total_ingredients=total_ingredients,
    )
