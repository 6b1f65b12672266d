"""Shared fixtures: a small in-memory catalog and fresh caches per test."""

import pytest

from src.catalog.cache import RecipeCatalogCache
from src.catalog.catalog import InMemoryRecipeCatalog
from src.matching.matcher import RecipeMatcher
from src.models.models import Recipe


def make_recipe(recipe_id, title, ingredients, rating=None, **fields) -> Recipe:
    return Recipe(id=recipe_id, title=title, ingredients=ingredients, rating=rating, **fields)


@pytest.fixture
def sample_recipes() -> list[Recipe]:
    """Catalog covering exact, synonym and partial matches."""
    return [
        make_recipe("1", "Tomato Soup", ["tomato", "onion", "garlic", "cream"], rating=4.5, cuisine="Italian"),
        make_recipe("2", "Scallion Fried Rice", ["rice", "egg", "scallion", "soy sauce"], rating=4.3),
        make_recipe("3", "Garlic Bread", ["bread", "garlic", "butter"], rating=3.8),
        make_recipe("4", "Cherry Tomato Salad", ["cherry tomatoes", "basil", "olive oil"], rating=4.0),
        make_recipe("5", "Plain Rice", ["rice"]),
        make_recipe("6", "Mystery Dish", [], rating=5.0),
    ]


@pytest.fixture
def catalog(sample_recipes) -> InMemoryRecipeCatalog:
    return InMemoryRecipeCatalog(sample_recipes)


@pytest.fixture
def cache(catalog) -> RecipeCatalogCache:
    return RecipeCatalogCache(catalog)


@pytest.fixture
def local_matcher(cache) -> RecipeMatcher:
    """Matcher without a remote client."""
    return RecipeMatcher(cache)
