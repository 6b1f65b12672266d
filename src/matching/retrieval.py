"""Candidate retrieval over an inverted ingredient index.

Narrows the recipe universe before scoring: a recipe is a candidate when at
least one of its normalized ingredients is among the expanded query keys.
This is a coarse overlap filter, not a ranking step. A candidate may share a
single ingredient with the query and still score low.

The index maps ingredient key -> positions in the catalog, so retrieval only
touches the posting lists of the requested keys instead of scanning every
recipe. It is built once per catalog snapshot.
"""

from collections import defaultdict
from typing import Iterable, Sequence

from src.matching.normalize import normalize_ingredient
from src.models.models import Recipe


class CandidateRetriever:
    """Inverted index from ingredient key to recipes.

    Args:
        recipes: Catalog recipes in their canonical order. Recipes with an
            empty (or all-blank) ingredient list are never indexed.
    """

    def __init__(self, recipes: Sequence[Recipe]) -> None:
        self._recipes = list(recipes)
        self._postings: dict[str, list[int]] = defaultdict(list)

        for position, recipe in enumerate(self._recipes):
            keys = {normalize_ingredient(ingredient) for ingredient in recipe.ingredients} - {""}
            for key in keys:
                self._postings[key].append(position)

        self._postings = dict(self._postings)

    def __len__(self) -> int:
        return len(self._recipes)

    @property
    def recipes(self) -> list[Recipe]:
        return list(self._recipes)

    @property
    def vocabulary(self) -> frozenset[str]:
        """Distinct normalized ingredient keys present in the catalog."""
        return frozenset(self._postings)

    def recipe_ids_for(self, key: str) -> list[str]:
        """Ids of recipes containing the given normalized key, in catalog order."""
        return [self._recipes[position].id for position in self._postings.get(key, ())]

    def retrieve(self, expanded_keys: Iterable[str]) -> list[Recipe]:
        """Return every recipe whose ingredient keys intersect expanded_keys.

        Args:
            expanded_keys: Normalized query keys, already expanded with synonyms.

        Returns:
            Matching recipes in catalog order (the order later used as the final
            ranking tie-break). Empty when no key is indexed.
        """
        positions: set[int] = set()
        for key in expanded_keys:
            positions.update(self._postings.get(key, ()))
        return [self._recipes[position] for position in sorted(positions)]

    def partial_keys(self, query_keys: Iterable[str]) -> set[str]:
        """Vocabulary keys that contain, or are contained in, a query key.

        Lets recipes that can only score a partial (substring) match pass the
        overlap filter, e.g. "tomat" -> "tomato", "cherry tomato". Scans the
        vocabulary of distinct ingredient names, never the recipe list.
        """
        keys = [key for key in query_keys if key]
        if not keys:
            return set()
        return {
            candidate
            for candidate in self._postings
            if any(key in candidate or candidate in key for key in keys)
        }
