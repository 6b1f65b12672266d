"""Pytest configuration and fixtures for integration tests.

Integration tests run the full stack (bundled catalog, cache, matcher, search
service and HTTP app) without any hosted store: SUPABASE_URL is cleared so the
remote path is skipped and data/recipes.json is the only catalog.
"""

import os

import pytest
from aiohttp.test_utils import TestClient, TestServer

from src.catalog.cache import RecipeCatalogCache
from src.catalog.catalog import JsonFileRecipeCatalog


def pytest_configure(config):
    """Force the bundled catalog for every integration test."""
    os.environ["SUPABASE_URL"] = ""
    os.environ["USE_REMOTE_SEARCH"] = "false"


@pytest.fixture
def bundled_cache():
    return RecipeCatalogCache(JsonFileRecipeCatalog("data/recipes.json"))


@pytest.fixture
def app_client():
    """Factory for a TestClient around the application wired by app.build_app()."""
    from app import build_app

    def factory():
        return TestClient(TestServer(build_app()))

    return factory
